"""Behaviour tests for sidebar menu reconciliation using pytest-bdd.

The scenarios build menus from in-memory sources, reorder them, and save the
result through :class:`union_pages.menu.MenuService` backed by a small
dictionary store standing in for the hosted database.

Usage
-----
Run ``pytest tests/bdd/test_menu_reconciliation.py -v``.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from union_pages.config import DefaultMenuItemConfig, MenuConfig
from union_pages.config.helpers import DEFAULT_ICONS
from union_pages.menu import (
    MenuItem,
    MenuPositionOverride,
    MenuService,
    StaticPage,
    build_menu,
    move_item,
)

FEATURE_FILE = (
    Path(__file__).resolve().parents[2] / "features" / "menu_reconciliation.feature"
)
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]


class TableStore:
    """Dictionary-backed stand-in for the few client calls the service makes."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, typ.Any]]] = {}

    def select(self, table: str, **_kwargs: object) -> list[dict[str, typ.Any]]:
        return [dict(row) for row in self.tables.get(table, [])]

    def insert(self, table: str, rows: list[dict[str, typ.Any]]) -> None:
        self.tables.setdefault(table, []).extend(dict(row) for row in rows)

    def delete(self, table: str, *, filters: dict[str, str]) -> None:
        if filters == {"id": "not.is.null"}:
            self.tables[table] = []
            return
        wanted = filters["id"].removeprefix("eq.")
        self.tables[table] = [
            row for row in self.tables.get(table, []) if row["id"] != wanted
        ]

    def update(
        self, table: str, values: dict[str, typ.Any], *, filters: dict[str, str]
    ) -> None:
        wanted = filters["id"].removeprefix("eq.")
        for row in self.tables.get(table, []):
            if row["id"] == wanted:
                row.update(values)


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps."""
    return {"pages": [], "overrides": [], "store": TableStore()}


@given(parsers.parse('the default entries "{first}" and "{second}"'))
def given_defaults(scenario_state: ScenarioState, first: str, second: str) -> None:
    scenario_state["defaults"] = [
        DefaultMenuItemConfig(first, first.title(), f"/{first}", "home"),
        DefaultMenuItemConfig(second, second.title(), f"/{second}", "download"),
    ]


@given(parsers.parse('a visible page "{page_id}" without a sidebar position'))
def given_page(scenario_state: ScenarioState, page_id: str) -> None:
    scenario_state["pages"].append(
        StaticPage(page_id, page_id.upper(), page_id, show_in_sidebar=True)
    )


@given(parsers.parse('an override placing "{item_id}" at position {position:d}'))
def given_override(scenario_state: ScenarioState, item_id: str, position: int) -> None:
    scenario_state["overrides"].append(
        MenuPositionOverride(item_id, "static_page", position)
    )


@given(parsers.parse('stale overrides are stored for "{item_id}"'))
def given_stale_override(scenario_state: ScenarioState, item_id: str) -> None:
    store = typ.cast("TableStore", scenario_state["store"])
    store.insert(
        "menu_positions",
        [MenuPositionOverride(item_id, "static_page", 9).to_row()],
    )


@when("the menu is reconciled")
def when_reconciled(scenario_state: ScenarioState) -> None:
    scenario_state["menu"] = build_menu(
        scenario_state["defaults"],
        scenario_state["pages"],
        [],
        scenario_state["overrides"],
    )


@when(parsers.parse("entry {index:d} is moved up"))
def when_moved_up(scenario_state: ScenarioState, index: int) -> None:
    scenario_state["menu"] = move_item(scenario_state["menu"], index, "up")


@when("the order is saved")
def when_saved(scenario_state: ScenarioState) -> None:
    store = typ.cast("TableStore", scenario_state["store"])
    service = MenuService(
        store,  # type: ignore[arg-type]
        MenuConfig(defaults=scenario_state["defaults"], icons=DEFAULT_ICONS),
    )
    scenario_state["menu"] = service.save_order(scenario_state["menu"])


@then(parsers.parse('the menu order is "{expected}"'))
def then_menu_order(scenario_state: ScenarioState, expected: str) -> None:
    menu = typ.cast("list[MenuItem]", scenario_state["menu"])
    ids = [item.id for item in menu]
    assert ids == [part.strip() for part in expected.split(",")], (
        f"unexpected menu order {ids!r}"
    )


@then("the positions are dense")
def then_dense(scenario_state: ScenarioState) -> None:
    menu = typ.cast("list[MenuItem]", scenario_state["menu"])
    positions = [item.position for item in menu]
    assert positions == list(range(1, len(menu) + 1)), (
        f"expected positions 1..N, got {positions!r}"
    )


@then(parsers.parse("exactly {count:d} override rows are written"))
def then_row_count(scenario_state: ScenarioState, count: int) -> None:
    store = typ.cast("TableStore", scenario_state["store"])
    rows = store.tables["menu_positions"]
    assert len(rows) == count, f"expected {count} rows, got {rows!r}"
    assert sorted(row["position"] for row in rows) == list(range(1, count + 1))


@then(parsers.parse('the stored overrides no longer mention "{item_id}"'))
def then_stale_removed(scenario_state: ScenarioState, item_id: str) -> None:
    store = typ.cast("TableStore", scenario_state["store"])
    ids = {row["id"] for row in store.tables["menu_positions"]}
    assert item_id not in ids, f"expected stale override to be dropped, got {ids!r}"
