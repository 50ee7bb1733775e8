"""Typed dataclasses describing sidebar menu entries and their sources."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ


class MenuItemType(enum.StrEnum):
    """Where a sidebar entry comes from."""

    REGULAR = "regular"
    STATIC_PAGE = "static_page"
    CATEGORY = "category"
    CUSTOM = "custom"


class Direction(enum.StrEnum):
    UP = "up"
    DOWN = "down"


@dc.dataclass(frozen=True, slots=True)
class MenuItem:
    """A single sidebar entry.

    Attributes
    ----------
    id : str
        Globally unique key: a fixed literal for regular items, otherwise
        ``page-<uuid>``, ``category-<uuid>`` or ``custom-<uuid>``.
    title : str
        Label shown in the sidebar.
    path : str
        Route the entry links to.
    icon : str
        Icon name from the configured allow-list.
    position : int | None
        1-based position. ``None`` marks an item without a stored position;
        it only occurs before compaction.
    type : MenuItemType
        Source of the entry.
    original_id : str | None
        Id of the backing page, category or custom row.
    """

    id: str
    title: str
    path: str
    icon: str
    position: int | None
    type: MenuItemType
    original_id: str | None = None


@dc.dataclass(frozen=True, slots=True)
class MenuPositionOverride:
    """A persisted custom position (and optionally icon) for one menu entry."""

    id: str
    type: str
    position: int
    resource_id: str | None = None
    icon: str | None = None

    @classmethod
    def from_row(cls, row: typ.Mapping[str, typ.Any]) -> MenuPositionOverride:
        return cls(
            id=str(row["id"]),
            type=str(row.get("type") or ""),
            position=int(row["position"]),
            resource_id=row.get("resource_id") or None,
            icon=row.get("icon") or None,
        )

    @classmethod
    def from_item(cls, item: MenuItem) -> MenuPositionOverride:
        if item.position is None:
            msg = f"Menu item '{item.id}' has no position to persist"
            raise ValueError(msg)
        return cls(
            id=item.id,
            type=item.type.value,
            position=item.position,
            resource_id=item.original_id,
            icon=item.icon or None,
        )

    def to_row(self) -> dict[str, typ.Any]:
        return dc.asdict(self)


@dc.dataclass(frozen=True, slots=True)
class StaticPage:
    id: str
    title: str
    slug: str
    show_in_sidebar: bool = False
    sidebar_position: int | None = None

    @classmethod
    def from_row(cls, row: typ.Mapping[str, typ.Any]) -> StaticPage:
        position = row.get("sidebar_position")
        return cls(
            id=str(row["id"]),
            title=str(row.get("title") or ""),
            slug=str(row.get("slug") or ""),
            show_in_sidebar=bool(row.get("show_in_sidebar")),
            sidebar_position=int(position) if position is not None else None,
        )


@dc.dataclass(frozen=True, slots=True)
class Category:
    id: str
    name: str
    slug: str
    show_in_menu: bool = False

    @classmethod
    def from_row(cls, row: typ.Mapping[str, typ.Any]) -> Category:
        return cls(
            id=str(row["id"]),
            name=str(row.get("name") or ""),
            slug=str(row.get("slug") or ""),
            show_in_menu=bool(row.get("show_in_menu")),
        )


@dc.dataclass(frozen=True, slots=True)
class CustomMenuItem:
    """An admin-defined link stored in the ``menu_items`` table."""

    id: str
    title: str
    path: str
    icon: str | None = None
    position: int | None = None

    @classmethod
    def from_row(cls, row: typ.Mapping[str, typ.Any]) -> CustomMenuItem:
        position = row.get("position")
        return cls(
            id=str(row["id"]),
            title=str(row.get("title") or ""),
            path=str(row.get("path") or ""),
            icon=row.get("icon") or None,
            position=int(position) if position is not None else None,
        )


__all__ = [
    "Category",
    "CustomMenuItem",
    "Direction",
    "MenuItem",
    "MenuItemType",
    "MenuPositionOverride",
    "StaticPage",
]
