"""Split author content into literal spans and shortcode references.

All shortcode grammars are matched by one combined pattern, so a single
left-to-right scan yields the token stream in source order no matter how the
kinds are interleaved.
"""

from __future__ import annotations

import re
from html import unescape

from .models import (
    LiteralToken,
    ShortcodeKind,
    ShortcodeReference,
    ShortcodeToken,
    Token,
)

SHORTCODE_PATTERN = re.compile(
    r'\[(?P<kind>gallery|file|ebook) id="(?P<id>[^"]+)"\]'
    r'|\[social-embed platform="(?P<platform>[^"]+)" url="(?P<url>[^"]+)"\]'
)
TAG_PATTERN = re.compile(r"<[^>]+>")
WHITESPACE_PATTERN = re.compile(r"\s+")


def tokenize(content: str) -> list[Token]:
    """Return the literal and shortcode tokens of ``content`` in source order.

    Empty literal spans (between adjacent shortcodes, or at either end) are
    dropped; concatenating the literal tokens reproduces every character of
    ``content`` that is not part of a shortcode marker.

    Examples
    --------
    >>> [type(t).__name__ for t in tokenize('a [file id="f1"] b')]
    ['LiteralToken', 'ShortcodeToken', 'LiteralToken']
    """
    tokens: list[Token] = []
    cursor = 0
    for match in SHORTCODE_PATTERN.finditer(content):
        if match.start() > cursor:
            tokens.append(LiteralToken(content[cursor : match.start()], cursor))
        tokens.append(
            ShortcodeToken(_reference_from_match(match), match.group(0), match.start())
        )
        cursor = match.end()
    if cursor < len(content):
        tokens.append(LiteralToken(content[cursor:], cursor))
    return tokens


def _reference_from_match(match: re.Match[str]) -> ShortcodeReference:
    if match.group("kind"):
        return ShortcodeReference(
            kind=ShortcodeKind(match.group("kind")), id=match.group("id")
        )
    return ShortcodeReference(
        kind=ShortcodeKind.SOCIAL_EMBED,
        platform=match.group("platform"),
        url=unescape(match.group("url")),
    )


def build_shortcode(kind: ShortcodeKind, entity_id: str) -> str:
    """Return the marker the editor inserts for ``entity_id``.

    Social embeds take a platform and URL rather than an id; use
    :func:`build_social_embed` for those.
    """
    if kind is ShortcodeKind.SOCIAL_EMBED:
        msg = "Social embeds are built with build_social_embed()"
        raise ValueError(msg)
    if not entity_id or '"' in entity_id:
        msg = f"Invalid shortcode id {entity_id!r}"
        raise ValueError(msg)
    return f'[{kind.value} id="{entity_id}"]'


def build_social_embed(platform: str, url: str) -> str:
    """Return the marker for a social-media embed."""
    if '"' in platform or '"' in url:
        msg = "Social embed platform and url cannot contain double quotes"
        raise ValueError(msg)
    return f'[social-embed platform="{platform}" url="{url}"]'


def strip_shortcodes(content: str) -> str:
    """Remove every shortcode marker from ``content``."""
    return SHORTCODE_PATTERN.sub("", content)


def build_preview(content: str, length: int = 200) -> str:
    """Return a plain-text teaser of ``content`` for news listings.

    Shortcodes and tags are removed, whitespace collapsed, and the text cut
    at ``length`` characters with an ellipsis when it was longer.
    """
    text = unescape(TAG_PATTERN.sub(" ", strip_shortcodes(content)))
    text = WHITESPACE_PATTERN.sub(" ", text).strip()
    if len(text) <= length:
        return text
    return f"{text[:length].rstrip()}..."


__all__ = [
    "SHORTCODE_PATTERN",
    "build_preview",
    "build_shortcode",
    "build_social_embed",
    "strip_shortcodes",
    "tokenize",
]
