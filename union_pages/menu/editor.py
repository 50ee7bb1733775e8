"""Interactive menu editing with an explicit draft."""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from union_pages.errors import BackendError, PersistenceFailure, ValidationFailure
from union_pages.notifications import LogNotifier

from .engine import move_item, reorder_item
from .icons import is_valid_icon_name, normalize_icon_name

if typ.TYPE_CHECKING:
    from union_pages.notifications import Notifier

    from .models import Direction, MenuItem
    from .service import MenuService

logger = logging.getLogger(__name__)


class MenuEditor:
    """Hold a persisted menu and a locally edited draft of it.

    ``persisted`` is the menu as last reconciled from (or saved to) the
    backend and ``draft`` the locally edited copy. Moves, drags and icon
    changes apply to the draft straight away. A failed save or icon update
    is reported through the notifier and leaves the draft as it is; only
    :meth:`reload` goes back to the backend's state.
    """

    def __init__(self, service: MenuService, notifier: Notifier | None = None) -> None:
        self.service = service
        self.notifier: Notifier = notifier or LogNotifier()
        self.persisted: list[MenuItem] = []
        self.draft: list[MenuItem] = []

    @property
    def dirty(self) -> bool:
        """Return whether the draft differs from the persisted menu."""
        return self.draft != self.persisted

    def reload(self) -> bool:
        """Reconcile from the backend, replacing both persisted and draft.

        Returns
        -------
        bool
            ``False`` when the backend could not be read; the editor then
            keeps its previous state.
        """
        try:
            items = self.service.load_menu()
        except BackendError as exc:
            logger.error("failed to load menu: %s", exc)
            self.notifier.error("Nie udało się wczytać menu")
            return False
        self.persisted = items
        self.draft = list(items)
        return True

    def move(self, index: int, direction: Direction | str) -> bool:
        """Move the draft item at ``index`` one step up or down.

        An out-of-range index or unknown direction is reported through the
        notifier and leaves the draft unchanged.
        """
        try:
            self.draft = move_item(self.draft, index, direction)
        except ValidationFailure as exc:
            logger.warning("%s", exc)
            self.notifier.error("Nie można przesunąć pozycji menu")
            return False
        return True

    def drag(self, source: int, destination: int | None) -> bool:
        """Apply a drag-and-drop from ``source`` to ``destination``."""
        try:
            self.draft = reorder_item(self.draft, source, destination)
        except ValidationFailure as exc:
            logger.warning("%s", exc)
            self.notifier.error("Nie można przesunąć pozycji menu")
            return False
        return True

    def find(self, item_id: str) -> MenuItem | None:
        return next((item for item in self.draft if item.id == item_id), None)

    def save(self) -> bool:
        """Persist the draft order, notifying the user of the outcome."""
        try:
            saved = self.service.save_order(self.draft)
        except PersistenceFailure as exc:
            logger.error("%s", exc)
            self.notifier.error("Nie udało się zaktualizować kolejności menu")
            return False
        self.draft = saved
        self.persisted = list(saved)
        self.notifier.success("Kolejność menu została zaktualizowana")
        return True

    def update_icon(self, item_id: str, icon: str) -> bool:
        """Change an item's icon in the draft and persist it.

        Invalid icon names and unknown ids are rejected before anything is
        sent to the backend.
        """
        if not is_valid_icon_name(icon, self.service.config.icons):
            logger.warning("rejected icon '%s' for %s", icon, item_id)
            self.notifier.error(f"Nieprawidłowa nazwa ikony: {icon}")
            return False
        if self.find(item_id) is None:
            self.notifier.error(f"Nie znaleziono pozycji menu: {item_id}")
            return False
        name = normalize_icon_name(icon)
        self.draft = _with_icon(self.draft, item_id, name)
        try:
            self.service.update_icon(item_id, name)
        except PersistenceFailure as exc:
            logger.error("%s", exc)
            self.notifier.error("Nie udało się zaktualizować ikony")
            return False
        self.persisted = _with_icon(self.persisted, item_id, name)
        self.notifier.success("Ikona została zaktualizowana")
        return True


def _with_icon(items: list[MenuItem], item_id: str, icon: str) -> list[MenuItem]:
    return [dc.replace(item, icon=icon) if item.id == item_id else item for item in items]


__all__ = ["MenuEditor"]
