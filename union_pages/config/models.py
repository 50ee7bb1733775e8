"""Typed dataclasses describing union_pages site configuration structures."""

from __future__ import annotations

import dataclasses as dc


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class BackendConfig:
    """Connection settings for the hosted PostgREST-style backend."""

    url: str
    api_key: str | None = None
    timeout: float = 10.0
    replace_overrides_rpc: str | None = None

    @property
    def rest_url(self) -> str:
        """Return the REST root under which tables are exposed."""
        return f"{self.url.rstrip('/')}/rest/v1"


@dc.dataclass(slots=True)
class DefaultMenuItemConfig:
    """A hardcoded navigation entry that is always present in the sidebar."""

    id: str
    title: str
    path: str
    icon: str


@dc.dataclass(slots=True)
class MenuConfig:
    """Sidebar menu defaults and the icon allow-list."""

    defaults: list[DefaultMenuItemConfig]
    icons: frozenset[str]
    sync_page_positions: bool = True


@dc.dataclass(slots=True)
class ContentConfig:
    """Knobs for shortcode resolution and fragment rendering."""

    harden_iframes: bool = True
    batch_lookups: bool = False
    max_workers: int = 8


@dc.dataclass(slots=True)
class MapConfig:
    """Settings for the union-location map widget."""

    token: str | None = None
    style_url: str | None = None


@dc.dataclass(slots=True)
class SiteConfig:
    """Collection of backend, menu, content, and map settings."""

    site_name: str
    backend: BackendConfig
    menu: MenuConfig
    content: ContentConfig = dc.field(default_factory=ContentConfig)
    map: MapConfig = dc.field(default_factory=MapConfig)


__all__ = [
    "BackendConfig",
    "ContentConfig",
    "DefaultMenuItemConfig",
    "MapConfig",
    "MenuConfig",
    "SiteConfig",
    "SiteConfigError",
]
