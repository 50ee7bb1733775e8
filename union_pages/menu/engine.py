"""Reconcile sidebar sources into one ordered menu and reorder it.

Every function here is pure: inputs are never mutated and each returns a new
list. Whatever goes in, the list that comes out has positions exactly
``1..N`` in list order.

Examples
--------
>>> from union_pages.config.helpers import DEFAULT_MENU_ITEMS
>>> menu = build_menu(DEFAULT_MENU_ITEMS[:2], [], [], [])
>>> [(item.id, item.position) for item in menu]
[('home', 1), ('struktury', 2)]
>>> [item.id for item in move_item(menu, 1, "up")]
['struktury', 'home']
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from union_pages._constants import (
    CATEGORY_ID_PREFIX,
    CUSTOM_ID_PREFIX,
    PAGE_ID_PREFIX,
)
from union_pages.config.helpers import DEFAULT_ICONS
from union_pages.errors import ValidationFailure

from .icons import DEFAULT_TYPE_ICONS, is_valid_icon_name, normalize_icon_name
from .models import (
    Category,
    CustomMenuItem,
    Direction,
    MenuItem,
    MenuItemType,
    MenuPositionOverride,
    StaticPage,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from union_pages.config import DefaultMenuItemConfig

logger = logging.getLogger(__name__)


def build_menu(
    defaults: cabc.Sequence[DefaultMenuItemConfig],
    static_pages: cabc.Iterable[StaticPage],
    categories: cabc.Iterable[Category],
    overrides: cabc.Iterable[MenuPositionOverride],
    *,
    custom_items: cabc.Iterable[CustomMenuItem] = (),
    icons: cabc.Collection[str] = DEFAULT_ICONS,
) -> list[MenuItem]:
    """Merge the sidebar sources into one densely positioned list.

    Parameters
    ----------
    defaults : Sequence[DefaultMenuItemConfig]
        Hardcoded entries; they take positions ``1..k`` in the given order.
    static_pages : Iterable[StaticPage]
        Pages; only those with ``show_in_sidebar`` are included, at their
        stored ``sidebar_position`` when set.
    categories : Iterable[Category]
        Categories; only those with ``show_in_menu`` are included.
    overrides : Iterable[MenuPositionOverride]
        Persisted positions and icons. An override always wins over the
        synthesized default of the item with the same id; overrides for
        unknown ids are ignored.
    custom_items : Iterable[CustomMenuItem], optional
        Admin-defined links, included at their stored position.
    icons : Collection[str], optional
        Icon allow-list; override icons outside it are ignored.

    Returns
    -------
    list[MenuItem]
        Items sorted by position with positions reassigned to ``1..N``.
        Items without any position sort after all positioned ones; ties keep
        source order (defaults, pages, categories, custom items).
    """
    items = [
        MenuItem(
            id=entry.id,
            title=entry.title,
            path=entry.path,
            icon=entry.icon,
            position=index,
            type=MenuItemType.REGULAR,
        )
        for index, entry in enumerate(defaults, start=1)
    ]
    items.extend(
        MenuItem(
            id=f"{PAGE_ID_PREFIX}{page.id}",
            title=page.title,
            path=f"/{page.slug}",
            icon=DEFAULT_TYPE_ICONS[MenuItemType.STATIC_PAGE],
            position=page.sidebar_position,
            type=MenuItemType.STATIC_PAGE,
            original_id=page.id,
        )
        for page in static_pages
        if page.show_in_sidebar
    )
    items.extend(
        MenuItem(
            id=f"{CATEGORY_ID_PREFIX}{category.id}",
            title=category.name,
            path=f"/category/{category.slug}",
            icon=DEFAULT_TYPE_ICONS[MenuItemType.CATEGORY],
            position=None,
            type=MenuItemType.CATEGORY,
            original_id=category.id,
        )
        for category in categories
        if category.show_in_menu
    )
    items.extend(
        MenuItem(
            id=f"{CUSTOM_ID_PREFIX}{custom.id}",
            title=custom.title,
            path=custom.path,
            icon=custom.icon or "link",
            position=custom.position,
            type=MenuItemType.CUSTOM,
            original_id=custom.id,
        )
        for custom in custom_items
    )
    _check_unique_ids(items)
    merged = apply_overrides(items, overrides, icons=icons)
    return assign_sequential_positions(sort_menu_items(merged))


def apply_overrides(
    items: cabc.Iterable[MenuItem],
    overrides: cabc.Iterable[MenuPositionOverride],
    *,
    icons: cabc.Collection[str] = DEFAULT_ICONS,
) -> list[MenuItem]:
    """Overwrite position (and a valid icon) of items that have an override."""
    by_id = {override.id: override for override in overrides}
    result: list[MenuItem] = []
    for item in items:
        override = by_id.get(item.id)
        if override is None:
            result.append(item)
            continue
        icon = item.icon
        if override.icon and is_valid_icon_name(override.icon, icons):
            icon = normalize_icon_name(override.icon)
        result.append(dc.replace(item, position=override.position, icon=icon))
    if by_id:
        logger.debug("applied %d position overrides to %d items", len(by_id), len(result))
    return result


def sort_menu_items(items: cabc.Iterable[MenuItem]) -> list[MenuItem]:
    """Stable sort by position, unpositioned items last."""
    return sorted(
        items, key=lambda item: (item.position is None, item.position or 0)
    )


def assign_sequential_positions(items: cabc.Iterable[MenuItem]) -> list[MenuItem]:
    """Reassign positions ``1..N`` in list order."""
    return [
        item if item.position == index else dc.replace(item, position=index)
        for index, item in enumerate(items, start=1)
    ]


def ensure_unique_positions(items: cabc.Iterable[MenuItem]) -> list[MenuItem]:
    """Resolve duplicate positions by bumping later items, then compact."""
    used: set[int] = set()
    bumped: list[MenuItem] = []
    for item in sort_menu_items(items):
        if item.position is None:
            bumped.append(item)
            continue
        position = item.position
        while position in used:
            position += 1
        used.add(position)
        bumped.append(dc.replace(item, position=position))
    return assign_sequential_positions(sort_menu_items(bumped))


def move_item(
    items: cabc.Sequence[MenuItem], index: int, direction: Direction | str
) -> list[MenuItem]:
    """Swap the item at ``index`` with its neighbour in ``direction``.

    Moving the first item up or the last item down leaves the list as it is;
    the list never wraps around.
    """
    try:
        step = -1 if Direction(direction) is Direction.UP else 1
    except ValueError as exc:
        msg = f"Unknown direction '{direction}'; expected up or down"
        raise ValidationFailure(msg) from exc
    _check_index(items, index)
    target = index + step
    if not 0 <= target < len(items):
        return assign_sequential_positions(items)
    reordered = list(items)
    reordered[index], reordered[target] = reordered[target], reordered[index]
    return assign_sequential_positions(reordered)


def reorder_item(
    items: cabc.Sequence[MenuItem], source: int, destination: int | None
) -> list[MenuItem]:
    """Move the item at ``source`` to ``destination`` (drag and drop).

    ``destination`` of ``None`` means the item was dropped outside the list;
    the order is left unchanged.
    """
    _check_index(items, source)
    if destination is None:
        return assign_sequential_positions(items)
    if not 0 <= destination < len(items):
        msg = f"Drop index {destination} is outside a menu of {len(items)} items"
        raise ValidationFailure(msg)
    reordered = list(items)
    moved = reordered.pop(source)
    reordered.insert(destination, moved)
    return assign_sequential_positions(reordered)


def _check_index(items: cabc.Sized, index: int) -> None:
    if not 0 <= index < len(items):
        msg = f"Index {index} is outside a menu of {len(items)} items"
        raise ValidationFailure(msg)


def _check_unique_ids(items: cabc.Iterable[MenuItem]) -> None:
    seen: set[str] = set()
    for item in items:
        if item.id in seen:
            msg = f"Duplicate menu item id '{item.id}'"
            raise ValidationFailure(msg)
        seen.add(item.id)


__all__ = [
    "apply_overrides",
    "assign_sequential_positions",
    "build_menu",
    "ensure_unique_positions",
    "move_item",
    "reorder_item",
    "sort_menu_items",
]
