"""Load and validate site configuration YAML for union_pages.

This subpackage parses the project's ``site.yaml`` file, applies defaults for
the sidebar menu and icon allow-list, reads secrets from the environment, and
produces strongly typed dataclasses (:class:`SiteConfig`,
:class:`BackendConfig`, etc.) that the resolver, the menu service and the CLI
consume. The primary entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from union_pages.config import load_site_config
>>> site = load_site_config(Path("config/site.yaml"))  # doctest: +SKIP
>>> site.backend.rest_url  # doctest: +SKIP
'https://example.supabase.co/rest/v1'
"""

from .loader import load_site_config
from .models import (
    BackendConfig,
    ContentConfig,
    DefaultMenuItemConfig,
    MapConfig,
    MenuConfig,
    SiteConfig,
    SiteConfigError,
)

__all__ = [
    "BackendConfig",
    "ContentConfig",
    "DefaultMenuItemConfig",
    "MapConfig",
    "MenuConfig",
    "SiteConfig",
    "SiteConfigError",
    "load_site_config",
]
