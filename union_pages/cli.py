"""Cyclopts CLI entrypoint for rendering union pages and managing the sidebar.

The ``union-pages`` console script defined here resolves shortcodes in
author HTML against the hosted backend and prints or reorders the sidebar
menu. Typical usage is ``union-pages render article.html`` to preview an
article with its galleries and file cards, and ``union-pages move page-42
up`` to nudge a static page in the navigation.

Examples
--------
Print the reconciled menu for the default configuration:

>>> from union_pages.cli import app
>>> app.run(["menu"])  # doctest: +SKIP

Render a single article to a file:

>>> app.run(["render", "article.html", "--output", "out.html"])  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import sys
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import API_KEY_ENV
from .backend import BackendClient
from .config import load_site_config
from .content import EntityRepository, FragmentRenderer, ShortcodeResolver
from .menu import Direction, MenuEditor, MenuService
from .notifications import ConsoleNotifier

if typ.TYPE_CHECKING:
    from .config import SiteConfig

DEFAULT_CONFIG = Path("config/site.yaml")

app = App(
    name="union-pages",
    config=cyclopts.config.Env("UNION_PAGES_", command=False),  # type: ignore[unknown-argument]
)

ConfigOption = typ.Annotated[
    Path, Parameter(help="Path to site config", env_var="UNION_PAGES_CONFIG")
]
ApiKeyOption = typ.Annotated[
    str | None,
    Parameter(help="Backend API key (overrides the config file)", env_var=API_KEY_ENV),
]
VerboseOption = typ.Annotated[
    bool, Parameter(help="Log debug output to stderr", negative="")
]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load(config: Path, api_key: str | None) -> tuple[SiteConfig, BackendClient]:
    site = load_site_config(config)
    if api_key:
        site.backend = dc.replace(site.backend, api_key=api_key)
    return site, BackendClient.from_config(site.backend)


def _editor(site: SiteConfig, client: BackendClient) -> MenuEditor:
    editor = MenuEditor(MenuService.from_config(client, site), ConsoleNotifier())
    if not editor.reload():
        raise SystemExit(1)
    return editor


def _index_of(editor: MenuEditor, item_id: str) -> int:
    for index, item in enumerate(editor.draft):
        if item.id == item_id:
            return index
    msg = f"Unknown menu item '{item_id}'."
    raise ValueError(msg)


def _print_menu(editor: MenuEditor) -> None:
    width = max((len(item.id) for item in editor.draft), default=0)
    for item in editor.draft:
        print(
            f"{item.position:>3}. {item.id:<{width}}  {item.title}  "
            f"{item.path}  [{item.icon}]"
        )


@app.command(help="Resolve shortcodes in an HTML file and render the result.")
def render(
    source: typ.Annotated[Path, Parameter(help="HTML or text file to render")],
    *,
    output: typ.Annotated[
        Path | None, Parameter(help="Write the rendered HTML here instead of stdout")
    ] = None,
    config: ConfigOption = DEFAULT_CONFIG,
    api_key: ApiKeyOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Render author content with its galleries, files, ebooks and embeds.

    Parameters
    ----------
    source : Path
        File holding the rich-text content, shortcodes included.
    output : Path or None, optional
        Destination for the rendered HTML; printed to stdout when ``None``.
    config : Path, optional
        Path to the ``site.yaml`` configuration file.
    api_key : str or None, optional
        Backend key; defaults to ``UNION_PAGES_API_KEY`` or the config file.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    FileNotFoundError
        If ``source`` does not exist.
    """
    _configure_logging(verbose=verbose)
    if not source.exists():
        msg = f"Content file '{source}' not found."
        raise FileNotFoundError(msg)
    site, client = _load(config, api_key)
    resolver = ShortcodeResolver(
        EntityRepository(client),
        max_workers=site.content.max_workers,
        batch_lookups=site.content.batch_lookups,
    )
    renderer = FragmentRenderer(harden_iframes=site.content.harden_iframes)
    fragments = resolver.resolve(source.read_text(encoding="utf-8"))
    html = renderer.render(fragments)
    if output is None:
        print(html)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")
    print(f"wrote {_format_path(output)}")


@app.command(help="Print the reconciled sidebar menu.")
def menu(
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    api_key: ApiKeyOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print every sidebar entry with its position, id, title, path and icon."""
    _configure_logging(verbose=verbose)
    site, client = _load(config, api_key)
    _print_menu(_editor(site, client))


@app.command(help="Move a sidebar entry one step up or down and save the order.")
def move(
    item_id: typ.Annotated[str, Parameter(help="Menu item id, e.g. page-42")],
    direction: typ.Annotated[Direction, Parameter(help="up or down")],
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    api_key: ApiKeyOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Move ``item_id`` and persist the new order.

    Moving the first entry up or the last entry down changes nothing, but the
    order is still saved so stale overrides are cleaned up.

    Raises
    ------
    ValueError
        If ``item_id`` is not part of the menu.
    SystemExit
        If the menu cannot be loaded or saved.
    """
    _configure_logging(verbose=verbose)
    site, client = _load(config, api_key)
    editor = _editor(site, client)
    if not editor.move(_index_of(editor, item_id), direction):
        raise SystemExit(1)
    if not editor.save():
        raise SystemExit(1)
    _print_menu(editor)


@app.command(help="Change the icon of a sidebar entry.")
def icon(
    item_id: typ.Annotated[str, Parameter(help="Menu item id, e.g. home")],
    name: typ.Annotated[str, Parameter(help="Icon name from the allow-list")],
    *,
    config: ConfigOption = DEFAULT_CONFIG,
    api_key: ApiKeyOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Validate ``name`` against the icon allow-list and persist it."""
    _configure_logging(verbose=verbose)
    site, client = _load(config, api_key)
    editor = _editor(site, client)
    if not editor.update_icon(item_id, name):
        raise SystemExit(1)


def main() -> None:
    """Invoke the Cyclopts application behind the ``union-pages`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
