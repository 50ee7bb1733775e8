"""Unit tests for site configuration loading.

These tests write small ``site.yaml`` files into ``tmp_path`` and check the
typed dataclasses produced by :func:`union_pages.config.load_site_config`,
including secret lookup from the environment and validation errors.

Usage
-----
Run ``pytest tests/test_config.py -v``. Only pytest's built-in ``tmp_path``
and ``monkeypatch`` fixtures are used.
"""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

from union_pages.config import SiteConfigError, load_site_config
from union_pages.config.helpers import DEFAULT_ICONS

if typ.TYPE_CHECKING:
    from pathlib import Path


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "site.yaml"
    path.write_text(dedent(body).strip() + "\n", encoding="utf-8")
    return path


def test_minimal_config_uses_built_in_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Only the backend URL is required; everything else has defaults."""
    monkeypatch.delenv("UNION_PAGES_API_KEY", raising=False)
    monkeypatch.delenv("UNION_PAGES_MAP_TOKEN", raising=False)
    site = load_site_config(
        _write(
            tmp_path,
            """
            backend:
              url: https://demo.supabase.co/
            """,
        )
    )

    assert site.backend.rest_url == "https://demo.supabase.co/rest/v1", (
        f"unexpected REST root {site.backend.rest_url!r}"
    )
    assert site.backend.api_key is None
    assert site.backend.timeout == 10.0
    assert [item.id for item in site.menu.defaults] == [
        "home",
        "struktury",
        "downloads",
        "ebooks",
        "about",
    ], "expected the built-in sidebar entries"
    assert site.menu.icons == DEFAULT_ICONS
    assert site.content.max_workers == 8
    assert site.content.harden_iframes is True
    assert site.map.token is None


def test_secrets_prefer_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keys in the environment override literals in the file."""
    monkeypatch.setenv("UNION_PAGES_API_KEY", "env-key")
    monkeypatch.setenv("UNION_PAGES_MAP_TOKEN", "pk.env")
    site = load_site_config(
        _write(
            tmp_path,
            """
            backend:
              url: https://demo.supabase.co
              api_key: file-key
              replace_overrides_rpc: replace_menu_positions
            map:
              token: pk.file
            """,
        )
    )

    assert site.backend.api_key == "env-key", "expected env API key to win"
    assert site.map.token == "pk.env", "expected env map token to win"
    assert site.backend.replace_overrides_rpc == "replace_menu_positions"


def test_menu_and_content_sections_are_parsed(tmp_path: Path) -> None:
    site = load_site_config(
        _write(
            tmp_path,
            """
            site_name: Związek
            backend:
              url: https://demo.supabase.co
              timeout: 2.5
            menu:
              sync_page_positions: "no"
              defaults:
                - id: home
                  title: Start
                  path: /
                  icon: home
                - id: kontakt
                  title: Kontakt
                  path: /kontakt
              icons:
                extend: [briefcase]
            content:
              batch_lookups: true
              max_workers: 2
            """,
        )
    )

    assert site.site_name == "Związek"
    assert site.backend.timeout == 2.5
    assert [(item.id, item.icon) for item in site.menu.defaults] == [
        ("home", "home"),
        ("kontakt", "link"),
    ], "expected missing default icon to fall back to 'link'"
    assert "briefcase" in site.menu.icons
    assert DEFAULT_ICONS <= site.menu.icons, "expected built-in icons to be kept"
    assert site.menu.sync_page_positions is False
    assert site.content.batch_lookups is True
    assert site.content.max_workers == 2


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("site_name: x", "Missing 'backend' section"),
        ("backend: {timeout: 3}", "'backend.url' is required"),
        (
            "backend: {url: 'https://x', timeout: soon}",
            "'backend.timeout' must be a number",
        ),
        (
            "backend: {url: 'https://x'}\ncontent: {max_workers: 0}",
            "'content.max_workers' must be at least 1",
        ),
        (
            "backend: {url: 'https://x'}\nmenu: {icons: [home]}",
            "unknown icon 'newspaper'",
        ),
        (
            "backend: {url: 'https://x'}\n"
            "menu: {defaults: [{id: a, title: A, path: /a}, "
            "{id: a, title: B, path: /b}]}",
            "Duplicate default menu item id 'a'",
        ),
    ],
)
def test_invalid_config_raises(tmp_path: Path, body: str, message: str) -> None:
    """Every malformed section is reported with the offending field."""
    with pytest.raises(SiteConfigError, match=message):
        load_site_config(_write(tmp_path, body))


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="not found"):
        load_site_config(tmp_path / "absent.yaml")
