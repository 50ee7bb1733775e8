"""Icon-name validation for sidebar entries."""

from __future__ import annotations

import dataclasses as dc
import logging
import re
import typing as typ

from union_pages.config.helpers import DEFAULT_ICONS

from .models import MenuItem, MenuItemType

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

DEFAULT_TYPE_ICONS: dict[MenuItemType, str] = {
    MenuItemType.STATIC_PAGE: "file",
    MenuItemType.CATEGORY: "book-open",
}


def normalize_icon_name(name: str) -> str:
    """Return the kebab-case form of an icon name.

    Older rows store component names such as ``BookOpen``.

    >>> normalize_icon_name("BookOpen")
    'book-open'
    """
    return _CAMEL_BOUNDARY.sub("-", name.strip()).replace("_", "-").lower()


def is_valid_icon_name(
    name: str | None, allowed: cabc.Collection[str] = DEFAULT_ICONS
) -> bool:
    """Return whether ``name`` (after normalisation) is on the allow-list."""
    if not name:
        return False
    valid = normalize_icon_name(name) in allowed
    if not valid:
        logger.info("invalid icon name: %s", name)
    return valid


def ensure_default_icons(items: cabc.Iterable[MenuItem]) -> list[MenuItem]:
    """Give every item without an icon a default based on its type."""
    return [
        item
        if item.icon
        else dc.replace(item, icon=DEFAULT_TYPE_ICONS.get(item.type, "link"))
        for item in items
    ]


__all__ = [
    "DEFAULT_TYPE_ICONS",
    "ensure_default_icons",
    "is_valid_icon_name",
    "normalize_icon_name",
]
