"""Unit tests for shortcode tokenisation and preview helpers."""

from __future__ import annotations

import pytest

from union_pages.content import (
    LiteralToken,
    ShortcodeKind,
    ShortcodeToken,
    build_preview,
    build_shortcode,
    build_social_embed,
    strip_shortcodes,
    tokenize,
)


def test_tokenize_keeps_source_order_across_kinds() -> None:
    """Interleaved shortcode kinds should come out in the order they appear."""
    content = (
        'Intro [file id="f1"] mid [gallery id="g1"][ebook id="e1"] '
        '[social-embed platform="youtube" url="https://youtu.be/x"] end'
    )
    tokens = tokenize(content)

    kinds = [
        token.reference.kind for token in tokens if isinstance(token, ShortcodeToken)
    ]
    assert kinds == [
        ShortcodeKind.FILE,
        ShortcodeKind.GALLERY,
        ShortcodeKind.EBOOK,
        ShortcodeKind.SOCIAL_EMBED,
    ], f"expected kinds in source order, got {kinds!r}"
    starts = [token.start for token in tokens]
    assert starts == sorted(starts), "expected tokens to be ordered by offset"


def test_tokenize_drops_empty_literals_between_adjacent_shortcodes() -> None:
    """Adjacent markers should not produce empty literal tokens."""
    tokens = tokenize('[gallery id="g1"][gallery id="g2"]')

    assert len(tokens) == 2, f"expected two shortcode tokens, got {tokens!r}"
    assert all(isinstance(token, ShortcodeToken) for token in tokens), (
        "expected only shortcode tokens"
    )


def test_tokenize_reproduces_literal_text() -> None:
    """Literal tokens plus raw markers should rebuild the original content."""
    content = '<p>Zebranie</p>[file id="abc-123"]<p>Do zobaczenia</p>'
    tokens = tokenize(content)

    rebuilt = "".join(
        token.text if isinstance(token, LiteralToken) else token.raw
        for token in tokens
    )
    assert rebuilt == content, "expected literal and raw tokens to rebuild input"
    shortcode = tokens[1]
    assert isinstance(shortcode, ShortcodeToken)
    assert shortcode.reference.id == "abc-123", (
        f"expected id 'abc-123', got {shortcode.reference.id!r}"
    )


def test_tokenize_ignores_malformed_markers() -> None:
    """Markers that do not match the grammar stay literal text."""
    content = "[gallery id=g1] [file id=\"\"] [video id=\"v1\"]"
    tokens = tokenize(content)

    assert tokens == [LiteralToken(content, 0)], (
        f"expected a single literal token, got {tokens!r}"
    )


def test_tokenize_unescapes_social_embed_url() -> None:
    """Editors store URLs HTML-escaped inside the attribute."""
    (token,) = tokenize(
        '[social-embed platform="twitter" url="https://x.com/a?b=1&amp;c=2"]'
    )

    assert isinstance(token, ShortcodeToken)
    assert token.reference.url == "https://x.com/a?b=1&c=2", (
        f"expected unescaped url, got {token.reference.url!r}"
    )
    assert token.reference.platform == "twitter"


def test_build_shortcode_formats_markers() -> None:
    """The editor insertion helpers should emit parseable markers."""
    marker = build_shortcode(ShortcodeKind.EBOOK, "e-42")
    assert marker == '[ebook id="e-42"]', f"unexpected marker {marker!r}"

    embed = build_social_embed("youtube", "https://youtu.be/abc")
    (token,) = tokenize(embed)
    assert isinstance(token, ShortcodeToken), "expected embed to tokenise"
    assert token.reference.url == "https://youtu.be/abc"


@pytest.mark.parametrize(
    ("kind", "entity_id"),
    [
        (ShortcodeKind.SOCIAL_EMBED, "x"),
        (ShortcodeKind.FILE, ""),
        (ShortcodeKind.FILE, 'bad"id'),
    ],
)
def test_build_shortcode_rejects_invalid_input(
    kind: ShortcodeKind, entity_id: str
) -> None:
    """Ids that cannot round-trip through the grammar are refused."""
    with pytest.raises(ValueError, match=r"(?i)social embeds|invalid shortcode id"):
        build_shortcode(kind, entity_id)


def test_strip_shortcodes_and_preview() -> None:
    """News previews should drop markers and tags and truncate long text."""
    content = '<p>Nowa   umowa</p>[gallery id="g1"]<p>podpisana &amp; gotowa</p>'

    assert strip_shortcodes(content) == "<p>Nowa   umowa</p><p>podpisana &amp; gotowa</p>"
    preview = build_preview(content)
    assert preview == "Nowa umowa podpisana & gotowa", f"unexpected preview {preview!r}"

    truncated = build_preview("słowo " * 50, length=20)
    assert truncated.endswith("..."), "expected ellipsis on truncated preview"
    assert len(truncated) <= 23, f"expected at most 23 chars, got {len(truncated)}"
