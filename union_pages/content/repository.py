"""Entity lookups for shortcode resolution backed by the hosted database."""

from __future__ import annotations

import datetime as dt
import logging
import typing as typ

from union_pages._constants import (
    DOWNLOADS_TABLE,
    EBOOKS_TABLE,
    GALLERIES_TABLE,
    GALLERY_IMAGES_TABLE,
)
from union_pages.backend import eq, in_
from union_pages.errors import BackendError, LookupFailure

from .models import (
    DownloadFile,
    Ebook,
    Entity,
    Gallery,
    GalleryImage,
    ShortcodeKind,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from union_pages.backend import BackendClient, Row

logger = logging.getLogger(__name__)

_TABLES: dict[ShortcodeKind, tuple[str, str]] = {
    ShortcodeKind.GALLERY: (GALLERIES_TABLE, f"*,{GALLERY_IMAGES_TABLE}(*)"),
    ShortcodeKind.FILE: (DOWNLOADS_TABLE, "*"),
    ShortcodeKind.EBOOK: (EBOOKS_TABLE, "*"),
}


class EntityRepository:
    """Fetch galleries, downloadable files and ebooks by id.

    Missing rows are reported as ``None`` (or left out of the mapping returned
    by :meth:`get_many`); transport and HTTP failures are raised as
    :class:`~union_pages.errors.LookupFailure`.
    """

    def __init__(self, client: BackendClient) -> None:
        self._client = client

    def get_by_id(self, kind: ShortcodeKind, entity_id: str) -> Entity | None:
        """Return the entity referenced by ``[kind id="entity_id"]``."""
        table, columns = self._table_for(kind)
        try:
            row = self._client.select_one(
                table, columns=columns, filters={"id": eq(entity_id)}
            )
        except BackendError as exc:
            msg = f"Failed to fetch {kind.value} {entity_id}: {exc}"
            raise LookupFailure(msg) from exc
        if row is None:
            logger.info("%s %s not found", kind.value, entity_id)
            return None
        return _build_entity(kind, row)

    def get_many(
        self, kind: ShortcodeKind, entity_ids: cabc.Collection[str]
    ) -> dict[str, Entity]:
        """Return every entity of ``kind`` in ``entity_ids`` in one round trip."""
        if not entity_ids:
            return {}
        table, columns = self._table_for(kind)
        try:
            rows = self._client.select(
                table, columns=columns, filters={"id": in_(sorted(set(entity_ids)))}
            )
        except BackendError as exc:
            msg = f"Failed to fetch {len(entity_ids)} {kind.value} entities: {exc}"
            raise LookupFailure(msg) from exc
        return {str(row["id"]): _build_entity(kind, row) for row in rows}

    @staticmethod
    def _table_for(kind: ShortcodeKind) -> tuple[str, str]:
        try:
            return _TABLES[kind]
        except KeyError as exc:
            msg = f"Shortcodes of kind '{kind.value}' are not backed by a table"
            raise ValueError(msg) from exc


def _build_entity(kind: ShortcodeKind, row: Row) -> Entity:
    match kind:
        case ShortcodeKind.GALLERY:
            return _build_gallery(row)
        case ShortcodeKind.FILE:
            return DownloadFile(
                id=str(row["id"]),
                name=str(row.get("name") or ""),
                url=str(row.get("url") or ""),
                created_at=_parse_timestamp(row.get("created_at")),
            )
        case ShortcodeKind.EBOOK:
            return Ebook(
                id=str(row["id"]),
                title=str(row.get("title") or ""),
                file_url=str(row.get("file_url") or ""),
                cover_url=row.get("cover_url") or None,
                publication_year=_optional_int(row.get("publication_year")),
                created_at=_parse_timestamp(row.get("created_at")),
            )
        case _:  # pragma: no cover - guarded by _table_for
            msg = f"Unsupported kind {kind!r}"
            raise ValueError(msg)


def _build_gallery(row: Row) -> Gallery:
    images_raw = row.get(GALLERY_IMAGES_TABLE) or []
    images = [
        GalleryImage(
            id=str(image["id"]),
            url=str(image.get("url") or ""),
            caption=image.get("caption") or None,
            position=_optional_int(image.get("position")) or 0,
        )
        for image in images_raw
        if isinstance(image, dict)
    ]
    images.sort(key=lambda image: image.position)
    return Gallery(
        id=str(row["id"]),
        title=str(row.get("title") or ""),
        description=row.get("description") or None,
        images=images,
    )


def _optional_int(value: object | None) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return None


def _parse_timestamp(value: object | None) -> dt.datetime | None:
    """Return a timezone-aware UTC datetime parsed from ``value``, or None."""
    match value:
        case dt.datetime():
            parsed = value
        case str() as text:
            sanitized = text.strip()
            if not sanitized:
                return None
            if sanitized.endswith("Z"):
                sanitized = sanitized[:-1] + "+00:00"
            try:
                parsed = dt.datetime.fromisoformat(sanitized)
            except ValueError:
                return None
        case _:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


__all__ = ["EntityRepository"]
