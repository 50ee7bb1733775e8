"""Tests for the ``union-pages`` command functions."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

from union_pages import cli
from union_pages.config import DefaultMenuItemConfig, MenuConfig
from union_pages.config.helpers import DEFAULT_ICONS
from union_pages.content import DownloadFile, ShortcodeKind
from union_pages.errors import PersistenceFailure
from union_pages.menu import Direction, MenuService, StaticPage, build_menu

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture

DEFAULTS = [
    DefaultMenuItemConfig("home", "Aktualności", "/", "newspaper"),
    DefaultMenuItemConfig("about", "O nas", "/o-nas", "info"),
]


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "site.yaml"
    path.write_text(
        dedent(
            """
            backend:
              url: https://demo.supabase.co
              api_key: file-key
            """
        ).strip()
        + "\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def service(mocker: MockerFixture) -> typ.Any:  # noqa: ANN401
    """Patch the menu service the CLI builds with a mock over a fixed menu."""
    mock = mocker.Mock(spec=MenuService)
    mock.config = MenuConfig(defaults=list(DEFAULTS), icons=DEFAULT_ICONS)
    mock.load_menu.return_value = build_menu(
        DEFAULTS, [StaticPage("p1", "Kontakt", "kontakt", True)], [], []
    )
    mock.save_order.side_effect = lambda items: list(items)
    mocker.patch.object(cli.MenuService, "from_config", return_value=mock)
    return mock


def test_render_writes_resolved_html(
    tmp_path: Path, config_path: Path, mocker: MockerFixture
) -> None:
    """Shortcodes are resolved through the repository and written out."""
    repository = mocker.patch.object(cli, "EntityRepository").return_value
    repository.get_by_id.return_value = DownloadFile(
        id="f1", name="Statut.pdf", url="https://cdn/statut.pdf", created_at=None
    )
    source = tmp_path / "article.html"
    source.write_text('<p>Statut:</p>[file id="f1"]', encoding="utf-8")
    output = tmp_path / "out" / "article.html"

    cli.render(source, output=output, config=config_path, api_key="cli-key")

    html = output.read_text(encoding="utf-8")
    assert html.startswith('<div class="content-renderer"><p>Statut:</p>'), (
        f"expected literal HTML first, got {html[:80]!r}"
    )
    assert 'href="https://cdn/statut.pdf"' in html, "expected a download link"
    repository.get_by_id.assert_called_once_with(ShortcodeKind.FILE, "f1")
    client = cli.EntityRepository.call_args.args[0]
    assert client._headers["apikey"] == "cli-key", "expected CLI key to win"


def test_render_rejects_missing_source(tmp_path: Path, config_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="not found"):
        cli.render(tmp_path / "missing.html", config=config_path)


def test_menu_prints_every_entry(
    config_path: Path, service: typ.Any, capsys: pytest.CaptureFixture[str]
) -> None:
    cli.menu(config=config_path)

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3, f"expected three menu lines, got {lines!r}"
    assert lines[0].split()[:2] == ["1.", "home"]
    assert "page-p1" in lines[2]
    assert "[file]" in lines[2], "expected page icon in the listing"
    service.load_menu.assert_called_once_with()


def test_move_saves_new_order(config_path: Path, service: typ.Any) -> None:
    """Moving an entry persists the full reordered menu."""
    cli.move("page-p1", Direction.UP, config=config_path)

    (saved,) = service.save_order.call_args.args
    assert [item.id for item in saved] == ["home", "page-p1", "about"], (
        f"unexpected saved order {[item.id for item in saved]!r}"
    )


def test_move_unknown_item_raises(config_path: Path, service: typ.Any) -> None:
    with pytest.raises(ValueError, match="Unknown menu item 'nope'"):
        cli.move("nope", Direction.DOWN, config=config_path)
    service.save_order.assert_not_called()


def test_failed_save_exits_non_zero(config_path: Path, service: typ.Any) -> None:
    service.save_order.side_effect = PersistenceFailure("rejected")

    with pytest.raises(SystemExit) as excinfo:
        cli.move("about", Direction.UP, config=config_path)
    assert excinfo.value.code == 1


def test_icon_rejects_unknown_names(
    config_path: Path, service: typ.Any, capsys: pytest.CaptureFixture[str]
) -> None:
    """Invalid icons are reported on stderr and never sent."""
    with pytest.raises(SystemExit):
        cli.icon("home", "skull", config=config_path)

    assert "error: Nieprawidłowa nazwa ikony: skull" in capsys.readouterr().err
    service.update_icon.assert_not_called()
