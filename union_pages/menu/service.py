"""Load and persist the sidebar menu against the hosted backend.

:class:`MenuService` reads the three navigation sources plus the override
table, reconciles them with :func:`~union_pages.menu.engine.build_menu`, and
writes a new order back by replacing every override row at once.

Example
-------
>>> from union_pages.backend import BackendClient
>>> client = BackendClient.from_config(site.backend)  # doctest: +SKIP
>>> service = MenuService.from_config(client, site)  # doctest: +SKIP
>>> [item.id for item in service.load_menu()][:2]  # doctest: +SKIP
['home', 'struktury']
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from union_pages._constants import (
    CATEGORIES_TABLE,
    CATEGORY_ID_PREFIX,
    CUSTOM_ID_PREFIX,
    MENU_ITEMS_TABLE,
    MENU_POSITIONS_TABLE,
    PAGE_ID_PREFIX,
    STATIC_PAGES_TABLE,
)
from union_pages.backend import eq
from union_pages.errors import BackendError, PersistenceFailure, ValidationFailure

from .engine import assign_sequential_positions, build_menu
from .icons import DEFAULT_TYPE_ICONS, is_valid_icon_name, normalize_icon_name
from .models import (
    Category,
    CustomMenuItem,
    MenuItem,
    MenuItemType,
    MenuPositionOverride,
    StaticPage,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from union_pages.backend import BackendClient, Row
    from union_pages.config import DefaultMenuItemConfig, MenuConfig, SiteConfig

logger = logging.getLogger(__name__)

# PostgREST refuses an unfiltered DELETE; this matches every row.
CLEAR_ALL_FILTER = {"id": "not.is.null"}


class MenuService:
    """Read the menu sources and persist order and icon changes."""

    def __init__(
        self,
        client: BackendClient,
        config: MenuConfig,
        *,
        replace_overrides_rpc: str | None = None,
    ) -> None:
        """Bind the service to a backend client.

        Parameters
        ----------
        client : BackendClient
            Client used for every read and write.
        config : MenuConfig
            Default entries, icon allow-list and page-position syncing.
        replace_overrides_rpc : str, optional
            Name of a stored procedure that swaps all override rows in one
            transaction. Without it, saving deletes then re-inserts.
        """
        self._client = client
        self.config = config
        self.replace_overrides_rpc = replace_overrides_rpc

    @classmethod
    def from_config(cls, client: BackendClient, site: SiteConfig) -> MenuService:
        return cls(
            client,
            site.menu,
            replace_overrides_rpc=site.backend.replace_overrides_rpc,
        )

    def fetch_static_pages(self) -> list[StaticPage]:
        """Return pages flagged for the sidebar, by stored sidebar position."""
        rows = self._client.select(
            STATIC_PAGES_TABLE,
            columns="id,title,slug,show_in_sidebar,sidebar_position",
            filters={"show_in_sidebar": eq("true")},
            order="sidebar_position.asc.nullslast",
        )
        return [StaticPage.from_row(row) for row in rows]

    def fetch_categories(self) -> list[Category]:
        """Return categories flagged for the menu, by name."""
        rows = self._client.select(
            CATEGORIES_TABLE,
            columns="id,name,slug,show_in_menu",
            filters={"show_in_menu": eq("true")},
            order="name.asc",
        )
        return [Category.from_row(row) for row in rows]

    def fetch_overrides(self) -> list[MenuPositionOverride]:
        """Return every persisted override row, by position."""
        rows = self._client.select(MENU_POSITIONS_TABLE, order="position.asc")
        return [MenuPositionOverride.from_row(row) for row in rows]

    def fetch_custom_items(self) -> list[CustomMenuItem]:
        """Return admin-defined links from ``menu_items``."""
        return [
            CustomMenuItem.from_row(row)
            for row in self._fetch_item_rows()
            if row.get("type") == MenuItemType.CUSTOM.value
        ]

    def load_menu(self) -> list[MenuItem]:
        """Fetch all sources and return the reconciled menu.

        Rows of ``menu_items`` whose id matches a default entry supply that
        entry's icon; rows of type ``custom`` become custom items.

        Raises
        ------
        BackendError
            If any of the sources cannot be read.
        """
        item_rows = self._fetch_item_rows()
        custom_items = [
            CustomMenuItem.from_row(row)
            for row in item_rows
            if row.get("type") == MenuItemType.CUSTOM.value
        ]
        menu = build_menu(
            self._defaults_with_stored_icons(item_rows),
            self.fetch_static_pages(),
            self.fetch_categories(),
            self.fetch_overrides(),
            custom_items=custom_items,
            icons=self.config.icons,
        )
        logger.debug("reconciled menu with %d items", len(menu))
        return menu

    def save_order(self, items: cabc.Sequence[MenuItem]) -> list[MenuItem]:
        """Persist ``items`` as the menu order and return the saved list.

        Positions are recompacted first. All override rows are then replaced
        with exactly one row per item, and static pages get their
        ``sidebar_position`` updated when ``sync_page_positions`` is set.

        Raises
        ------
        PersistenceFailure
            If any write is rejected or the backend is unreachable.
        """
        ordered = assign_sequential_positions(items)
        rows = [MenuPositionOverride.from_item(item).to_row() for item in ordered]
        logger.info("saving menu order for %d items", len(rows))
        try:
            self._replace_overrides(rows)
            if self.config.sync_page_positions:
                self._sync_page_positions(ordered)
        except BackendError as exc:
            msg = f"Failed to save menu order: {exc}"
            raise PersistenceFailure(msg) from exc
        return ordered

    def update_icon(self, item_id: str, icon: str) -> str:
        """Persist a new icon for ``item_id`` and return the normalised name.

        Regular and custom entries are updated in ``menu_items``; page and
        category entries in ``menu_positions``.

        Raises
        ------
        ValidationFailure
            If ``icon`` is not on the allow-list; nothing is sent.
        PersistenceFailure
            If the backend rejects the update or no stored row matches
            ``item_id``.
        """
        if not is_valid_icon_name(icon, self.config.icons):
            msg = f"Unknown icon '{icon}'"
            raise ValidationFailure(msg)
        name = normalize_icon_name(icon)
        try:
            if item_id.startswith(PAGE_ID_PREFIX):
                updated = self._update_override_icon(
                    item_id, name, MenuItemType.STATIC_PAGE
                )
            elif item_id.startswith(CATEGORY_ID_PREFIX):
                updated = self._update_override_icon(
                    item_id, name, MenuItemType.CATEGORY
                )
            else:
                row_id = item_id.removeprefix(CUSTOM_ID_PREFIX)
                updated = self._client.update(
                    MENU_ITEMS_TABLE, {"icon": name}, filters={"id": eq(row_id)}
                )
        except BackendError as exc:
            msg = f"Failed to update icon for '{item_id}': {exc}"
            raise PersistenceFailure(msg) from exc
        if not updated:
            msg = f"No stored menu entry for '{item_id}'; save the menu order first"
            raise PersistenceFailure(msg)
        logger.info("updated icon for %s to %s", item_id, name)
        return name

    def add_category_item(self, category: Category) -> MenuPositionOverride:
        """Append a category after the last override row."""
        try:
            last = self._client.select(
                MENU_POSITIONS_TABLE,
                columns="position",
                order="position.desc",
                limit=1,
            )
            position = int(last[0]["position"]) + 1 if last else 1
            override = MenuPositionOverride(
                id=f"{CATEGORY_ID_PREFIX}{category.id}",
                type=MenuItemType.CATEGORY.value,
                position=position,
                resource_id=category.id,
                icon=DEFAULT_TYPE_ICONS[MenuItemType.CATEGORY],
            )
            self._client.insert(MENU_POSITIONS_TABLE, [override.to_row()])
        except BackendError as exc:
            msg = f"Failed to add category '{category.name}' to the menu: {exc}"
            raise PersistenceFailure(msg) from exc
        logger.info("added category %s at position %d", category.id, position)
        return override

    def remove_category_item(self, category_id: str) -> None:
        """Drop a category's override row."""
        try:
            self._client.delete(
                MENU_POSITIONS_TABLE,
                filters={"id": eq(f"{CATEGORY_ID_PREFIX}{category_id}")},
            )
        except BackendError as exc:
            msg = f"Failed to remove category '{category_id}' from the menu: {exc}"
            raise PersistenceFailure(msg) from exc
        logger.info("removed category %s from the menu", category_id)

    def _fetch_item_rows(self) -> list[Row]:
        return self._client.select(MENU_ITEMS_TABLE, order="position.asc")

    def _update_override_icon(
        self, item_id: str, icon: str, item_type: MenuItemType
    ) -> list[Row]:
        return self._client.update(
            MENU_POSITIONS_TABLE,
            {"icon": icon, "type": item_type.value},
            filters={"id": eq(item_id)},
        )

    def _replace_overrides(self, rows: list[Row]) -> None:
        """Replace every override row with ``rows``.

        The configured stored procedure performs the swap in one
        transaction. Without one the table is cleared and bulk-inserted,
        which briefly leaves it empty.
        """
        if self.replace_overrides_rpc:
            self._client.rpc(self.replace_overrides_rpc, {"rows": rows})
            return
        self._client.delete(MENU_POSITIONS_TABLE, filters=CLEAR_ALL_FILTER)
        self._client.insert(MENU_POSITIONS_TABLE, rows)

    def _sync_page_positions(self, items: cabc.Iterable[MenuItem]) -> None:
        for item in items:
            if item.type is MenuItemType.STATIC_PAGE and item.original_id:
                self._client.update(
                    STATIC_PAGES_TABLE,
                    {"sidebar_position": item.position},
                    filters={"id": eq(item.original_id)},
                )

    def _defaults_with_stored_icons(
        self, item_rows: cabc.Iterable[Row]
    ) -> list[DefaultMenuItemConfig]:
        stored = {
            str(row["id"]): row.get("icon")
            for row in item_rows
            if row.get("type") != MenuItemType.CUSTOM.value
        }
        defaults: list[DefaultMenuItemConfig] = []
        for entry in self.config.defaults:
            icon = stored.get(entry.id)
            if icon and is_valid_icon_name(icon, self.config.icons):
                defaults.append(dc.replace(entry, icon=normalize_icon_name(icon)))
            else:
                defaults.append(entry)
        return defaults


__all__ = ["CLEAR_ALL_FILTER", "MenuService"]
