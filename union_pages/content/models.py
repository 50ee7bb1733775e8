"""Shared dataclasses used by the shortcode resolution pipeline."""

from __future__ import annotations

import dataclasses as dc
import datetime as dt  # noqa: TC003 - used for runtime type metadata
import enum
import typing as typ


class ShortcodeKind(enum.StrEnum):
    """The embeddable widgets an author can reference from rich text."""

    GALLERY = "gallery"
    FILE = "file"
    EBOOK = "ebook"
    SOCIAL_EMBED = "social-embed"


class FragmentState(enum.StrEnum):
    """Lifecycle of a single rendered fragment.

    Shortcode fragments start in ``LOADING`` and settle exactly once into one
    of the terminal states. Literal and social-embed fragments are created
    already terminal.
    """

    LOADING = "loading"
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    ERROR = "error"
    UNSUPPORTED = "unsupported"

    @property
    def terminal(self) -> bool:
        return self is not FragmentState.LOADING


@dc.dataclass(frozen=True, slots=True)
class ShortcodeReference:
    """A shortcode marker extracted from content.

    ``id`` is set for gallery, file and ebook references; ``platform`` and
    ``url`` are set for social embeds.
    """

    kind: ShortcodeKind
    id: str | None = None
    platform: str | None = None
    url: str | None = None


@dc.dataclass(frozen=True, slots=True)
class LiteralToken:
    """A span of author HTML between shortcodes."""

    text: str
    start: int


@dc.dataclass(frozen=True, slots=True)
class ShortcodeToken:
    """A shortcode occurrence and the raw marker it was parsed from."""

    reference: ShortcodeReference
    raw: str
    start: int


Token = LiteralToken | ShortcodeToken


@dc.dataclass(slots=True)
class GalleryImage:
    id: str
    url: str
    caption: str | None
    position: int


@dc.dataclass(slots=True)
class Gallery:
    """A gallery and its images ordered by ``position``."""

    id: str
    title: str
    description: str | None
    images: list[GalleryImage]


@dc.dataclass(slots=True)
class DownloadFile:
    """Metadata for a file listed on the downloads page."""

    id: str
    name: str
    url: str
    created_at: dt.datetime | None


@dc.dataclass(slots=True)
class Ebook:
    """Metadata for a published ebook."""

    id: str
    title: str
    file_url: str
    cover_url: str | None
    publication_year: int | None
    created_at: dt.datetime | None


@dc.dataclass(slots=True)
class SocialEmbed:
    """A resolved social-media embed."""

    platform: str
    url: str


Entity = Gallery | DownloadFile | Ebook | SocialEmbed


@dc.dataclass(slots=True)
class Fragment:
    """One segment of resolved render output.

    Attributes
    ----------
    index : int
        Position of the fragment in the content's token stream.
    state : FragmentState
        Current lifecycle state.
    html : str | None
        Literal author HTML; set only for literal fragments.
    reference : ShortcodeReference | None
        The shortcode this fragment stands for; ``None`` for literals.
    entity : Entity | None
        Backing data once the fragment is ``RESOLVED``.
    error : str | None
        Human-readable reason for ``NOT_FOUND``, ``ERROR`` or ``UNSUPPORTED``.
    """

    index: int
    state: FragmentState
    html: str | None = None
    reference: ShortcodeReference | None = None
    entity: Entity | None = None
    error: str | None = None

    @property
    def is_literal(self) -> bool:
        return self.reference is None

    @property
    def kind(self) -> ShortcodeKind | None:
        return self.reference.kind if self.reference else None


class EntityLookup(typ.Protocol):
    """Read-only access to the entities shortcodes refer to."""

    def get_by_id(self, kind: ShortcodeKind, entity_id: str) -> Entity | None: ...

    def get_many(
        self, kind: ShortcodeKind, entity_ids: typ.Collection[str]
    ) -> dict[str, Entity]: ...


__all__ = [
    "DownloadFile",
    "Ebook",
    "Entity",
    "EntityLookup",
    "Fragment",
    "FragmentState",
    "Gallery",
    "GalleryImage",
    "LiteralToken",
    "ShortcodeKind",
    "ShortcodeReference",
    "ShortcodeToken",
    "SocialEmbed",
    "Token",
]
