"""Utility helpers shared by the union_pages configuration loader."""

from __future__ import annotations

import os

from .models import DefaultMenuItemConfig, SiteConfigError

DEFAULT_MENU_ITEMS: tuple[DefaultMenuItemConfig, ...] = (
    DefaultMenuItemConfig("home", "Aktualności", "/", "newspaper"),
    DefaultMenuItemConfig("struktury", "Struktury", "/struktury", "map"),
    DefaultMenuItemConfig("downloads", "Pliki do pobrania", "/downloads", "download"),
    DefaultMenuItemConfig("ebooks", "Publikacje", "/ebooks", "book-open"),
    DefaultMenuItemConfig("about", "O nas", "/o-nas", "info"),
)

DEFAULT_ICONS: frozenset[str] = frozenset(
    {
        "book",
        "book-open",
        "calendar",
        "download",
        "file",
        "file-text",
        "folder",
        "globe",
        "heart",
        "home",
        "image",
        "info",
        "link",
        "mail",
        "map",
        "map-pin",
        "megaphone",
        "newspaper",
        "phone",
        "scale",
        "shield",
        "star",
        "users",
    }
)


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_env(value: object | None, env_var: str) -> str | None:
    """Prefer the environment variable over the configured literal."""
    return _optional_str(os.getenv(env_var)) or _optional_str(value)


def _coerce_bool(value: object | None, *, default: bool) -> bool:
    """Interpret YAML scalars as booleans, falling back to ``default``."""
    match value:
        case None:
            return default
        case bool():
            return value
        case str() as text:
            return text.strip().lower() in {"1", "true", "yes", "on"}
        case _:
            return bool(value)


def _coerce_positive_int(value: object | None, *, default: int, field: str) -> int:
    """Return ``value`` as a positive integer or raise SiteConfigError."""
    if value is None:
        return default
    try:
        number = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        msg = f"'{field}' must be an integer, got {value!r}."
        raise SiteConfigError(msg) from exc
    if number < 1:
        msg = f"'{field}' must be at least 1, got {number}."
        raise SiteConfigError(msg)
    return number


def _build_default_items(
    payload: object | None,
) -> list[DefaultMenuItemConfig]:
    """Build the hardcoded menu entries, falling back to the built-in set."""
    if payload is None:
        return list(DEFAULT_MENU_ITEMS)
    if not isinstance(payload, list):
        msg = "'menu.defaults' must be a list of mappings."
        raise SiteConfigError(msg)

    items: list[DefaultMenuItemConfig] = []
    seen: set[str] = set()
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            continue
        item_id = _optional_str(entry.get("id"))
        title = _optional_str(entry.get("title"))
        path = _optional_str(entry.get("path"))
        if not (item_id and title and path):
            msg = f"Default menu item #{index + 1} needs 'id', 'title' and 'path'."
            raise SiteConfigError(msg)
        if item_id in seen:
            msg = f"Duplicate default menu item id '{item_id}'."
            raise SiteConfigError(msg)
        seen.add(item_id)
        icon = _optional_str(entry.get("icon")) or "link"
        items.append(DefaultMenuItemConfig(item_id, title, path, icon))
    return items


def _build_icon_set(payload: object | None) -> frozenset[str]:
    """Return the icon allow-list, extending the built-in names when asked."""
    match payload:
        case None:
            return DEFAULT_ICONS
        case list():
            return frozenset(
                name for name in (_optional_str(item) for item in payload) if name
            )
        case {"extend": list() as extra}:
            return DEFAULT_ICONS | {
                name for name in (_optional_str(item) for item in extra) if name
            }
        case _:
            msg = "'menu.icons' must be a list or a mapping with 'extend'."
            raise SiteConfigError(msg)


__all__ = [
    "DEFAULT_ICONS",
    "DEFAULT_MENU_ITEMS",
    "_build_default_items",
    "_build_icon_set",
    "_coerce_bool",
    "_coerce_positive_int",
    "_optional_env",
    "_optional_str",
]
