"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from union_pages._constants import API_KEY_ENV, MAP_TOKEN_ENV

from .helpers import (
    _build_default_items,
    _build_icon_set,
    _coerce_bool,
    _coerce_positive_int,
    _optional_env,
    _optional_str,
)
from .models import (
    BackendConfig,
    ContentConfig,
    MapConfig,
    MenuConfig,
    SiteConfig,
    SiteConfigError,
)


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the backend, menu and content.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``config/site.yaml``).

    Returns
    -------
    SiteConfig
        Parsed site configuration. Secrets such as the API key and the map
        token are read once here, preferring ``UNION_PAGES_API_KEY`` and
        ``UNION_PAGES_MAP_TOKEN`` over the file.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    SiteConfigError
        If required sections or fields are missing or invalid.

    Examples
    --------
    >>> from pathlib import Path
    >>> from union_pages.config import load_site_config
    >>> config = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
    >>> [item.id for item in config.menu.defaults][:1]  # doctest: +SKIP
    ['home']
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):  # pragma: no cover - config error guard
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    return SiteConfig(
        site_name=_optional_str(raw.get("site_name")) or "union-pages",
        backend=_build_backend_config(raw.get("backend")),
        menu=_build_menu_config(raw.get("menu") or {}),
        content=_build_content_config(raw.get("content") or {}),
        map=_build_map_config(raw.get("map") or {}),
    )


def _build_backend_config(payload: object | None) -> BackendConfig:
    """Build the BackendConfig, requiring at least the service URL."""
    if not isinstance(payload, dict):
        msg = "Missing 'backend' section in site configuration."
        raise SiteConfigError(msg)
    url = _optional_str(payload.get("url"))
    if not url:
        msg = "'backend.url' is required."
        raise SiteConfigError(msg)
    timeout_raw = payload.get("timeout", 10.0)
    try:
        timeout = float(timeout_raw)
    except (TypeError, ValueError) as exc:
        msg = f"'backend.timeout' must be a number, got {timeout_raw!r}."
        raise SiteConfigError(msg) from exc
    return BackendConfig(
        url=url,
        api_key=_optional_env(payload.get("api_key"), API_KEY_ENV),
        timeout=timeout,
        replace_overrides_rpc=_optional_str(payload.get("replace_overrides_rpc")),
    )


def _build_menu_config(payload: typ.Mapping[str, typ.Any]) -> MenuConfig:
    """Build the MenuConfig, defaulting to the built-in sidebar entries."""
    defaults = _build_default_items(payload.get("defaults"))
    icons = _build_icon_set(payload.get("icons"))
    for item in defaults:
        if item.icon not in icons:
            msg = f"Default menu item '{item.id}' uses unknown icon '{item.icon}'."
            raise SiteConfigError(msg)
    return MenuConfig(
        defaults=defaults,
        icons=icons,
        sync_page_positions=_coerce_bool(
            payload.get("sync_page_positions"), default=True
        ),
    )


def _build_content_config(payload: typ.Mapping[str, typ.Any]) -> ContentConfig:
    base = ContentConfig()
    return ContentConfig(
        harden_iframes=_coerce_bool(
            payload.get("harden_iframes"), default=base.harden_iframes
        ),
        batch_lookups=_coerce_bool(
            payload.get("batch_lookups"), default=base.batch_lookups
        ),
        max_workers=_coerce_positive_int(
            payload.get("max_workers"),
            default=base.max_workers,
            field="content.max_workers",
        ),
    )


def _build_map_config(payload: typ.Mapping[str, typ.Any]) -> MapConfig:
    return MapConfig(
        token=_optional_env(payload.get("token"), MAP_TOKEN_ENV),
        style_url=_optional_str(payload.get("style_url")),
    )


__all__ = ["load_site_config"]
