"""Render resolved fragments into HTML snippets.

Literal fragments are author HTML and are emitted verbatim. Shortcode
fragments are rendered with the Jinja templates under
``union_pages/templates/fragments``, one per kind plus shared loading,
not-found, error and unsupported states. Embedded iframes in the final
document get the sandbox and permission attributes social players need.
"""

from __future__ import annotations

import datetime as dt
import typing as typ
from pathlib import Path

from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, select_autoescape

from .models import Fragment, FragmentState, ShortcodeKind

if typ.TYPE_CHECKING:
    import collections.abc as cabc

REQUIRED_SANDBOX = (
    "allow-scripts",
    "allow-popups",
    "allow-popups-to-escape-sandbox",
    "allow-same-origin",
)
DEFAULT_IFRAME_ALLOW = "fullscreen; payment; clipboard-write"
DEFAULT_REFERRER_POLICY = "no-referrer-when-downgrade"

_KIND_TEMPLATES = {
    ShortcodeKind.GALLERY: "fragments/gallery.jinja",
    ShortcodeKind.FILE: "fragments/file.jinja",
    ShortcodeKind.EBOOK: "fragments/ebook.jinja",
    ShortcodeKind.SOCIAL_EMBED: "fragments/social_embed.jinja",
}
_STATE_TEMPLATES = {
    FragmentState.LOADING: "fragments/loading.jinja",
    FragmentState.NOT_FOUND: "fragments/not_found.jinja",
    FragmentState.ERROR: "fragments/error.jinja",
    FragmentState.UNSUPPORTED: "fragments/unsupported.jinja",
}


class FragmentRenderer:
    """Render fragments to HTML with consistent markup per shortcode kind."""

    def __init__(
        self, *, templates_dir: Path | None = None, harden_iframes: bool = True
    ) -> None:
        """Initialise the renderer and its Jinja environment.

        Parameters
        ----------
        templates_dir : Path, optional
            Directory containing the ``fragments/*.jinja`` templates. Defaults
            to ``union_pages/templates``.
        harden_iframes : bool, optional
            Normalise sandbox/allow/referrerpolicy attributes on iframes in
            the rendered document. Defaults to ``True``.
        """
        self.templates_dir = (
            templates_dir or Path(__file__).resolve().parents[1] / "templates"
        )
        self.harden_iframes = harden_iframes
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["date_pl"] = _format_date_pl

    def render(self, fragments: cabc.Iterable[Fragment]) -> str:
        """Render every fragment in order inside a ``content-renderer`` wrapper."""
        body = "".join(self.render_fragment(fragment) for fragment in fragments)
        html = f'<div class="content-renderer">{body}</div>'
        if self.harden_iframes and "<iframe" in html:
            html = harden_iframes(html)
        return html

    def render_fragment(self, fragment: Fragment) -> str:
        """Render a single fragment; literals are returned untouched."""
        if fragment.is_literal:
            return fragment.html or ""
        kind = fragment.kind
        if fragment.state is FragmentState.RESOLVED and kind is not None:
            template_name = _KIND_TEMPLATES[kind]
        else:
            template_name = _STATE_TEMPLATES[fragment.state]
        template = self.env.get_template(template_name)
        return template.render(
            fragment=fragment,
            entity=fragment.entity,
            reference=fragment.reference,
            kind=kind.value if kind else None,
        )


def harden_iframes(html: str) -> str:
    """Grant embedded iframes the sandbox permissions social players need.

    Missing ``sandbox`` values are filled with :data:`REQUIRED_SANDBOX`,
    existing ones are extended, and ``allowfullscreen``, ``allow`` and
    ``referrerpolicy`` are added when absent.
    """
    soup = BeautifulSoup(html, "html.parser")
    for iframe in soup.find_all("iframe"):
        sandbox = [token for token in iframe.get_attribute_list("sandbox") if token]
        for permission in REQUIRED_SANDBOX:
            if permission not in sandbox:
                sandbox.append(permission)
        iframe["sandbox"] = " ".join(sandbox)
        if not iframe.has_attr("allowfullscreen"):
            iframe["allowfullscreen"] = "true"
        allow = str(iframe.get("allow") or "")
        if not allow:
            iframe["allow"] = DEFAULT_IFRAME_ALLOW
        elif "fullscreen" not in allow:
            iframe["allow"] = f"{allow}; {DEFAULT_IFRAME_ALLOW}"
        if not iframe.has_attr("referrerpolicy"):
            iframe["referrerpolicy"] = DEFAULT_REFERRER_POLICY
    return str(soup)


def _format_date_pl(value: dt.datetime | None) -> str:
    if value is None:
        return ""
    return value.strftime("%d.%m.%Y")


__all__ = ["FragmentRenderer", "harden_iframes"]
