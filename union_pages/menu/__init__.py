"""Sidebar menu reconciliation, reordering and persistence.

The sidebar merges hardcoded entries, visible static pages, visible
categories and admin-defined links, applies persisted position overrides,
and always ends up densely positioned ``1..N``.
"""

from .editor import MenuEditor
from .engine import (
    apply_overrides,
    assign_sequential_positions,
    build_menu,
    ensure_unique_positions,
    move_item,
    reorder_item,
    sort_menu_items,
)
from .icons import (
    DEFAULT_TYPE_ICONS,
    ensure_default_icons,
    is_valid_icon_name,
    normalize_icon_name,
)
from .models import (
    Category,
    CustomMenuItem,
    Direction,
    MenuItem,
    MenuItemType,
    MenuPositionOverride,
    StaticPage,
)
from .service import MenuService

__all__ = [
    "DEFAULT_TYPE_ICONS",
    "Category",
    "CustomMenuItem",
    "Direction",
    "MenuEditor",
    "MenuItem",
    "MenuItemType",
    "MenuPositionOverride",
    "MenuService",
    "StaticPage",
    "apply_overrides",
    "assign_sequential_positions",
    "build_menu",
    "ensure_default_icons",
    "ensure_unique_positions",
    "is_valid_icon_name",
    "move_item",
    "normalize_icon_name",
    "reorder_item",
    "sort_menu_items",
]
