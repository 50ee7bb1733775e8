"""Resolve shortcode references in author content into render fragments.

:class:`ShortcodeResolver` tokenises a content string, looks up every
distinct ``(kind, id)`` it references exactly once, and returns the fragments
in the order they appear in the source. Lookups run concurrently on a small
thread pool; each occurrence settles on its own, so a slow gallery never holds
back a file card rendered further down the page.

Example
-------
>>> from union_pages.content import ShortcodeResolver
>>> resolver = ShortcodeResolver(repository)  # doctest: +SKIP
>>> [f.state for f in resolver.resolve('Hi [file id="f1"]')]  # doctest: +SKIP
[<FragmentState.RESOLVED: 'resolved'>, <FragmentState.RESOLVED: 'resolved'>]

Progressive rendering uses a session, which also ties in-flight lookups to
the lifetime of the view consuming them:

>>> with resolver.start(content) as session:  # doctest: +SKIP
...     for fragment in session.iter_updates():
...         redraw(fragment)
"""

from __future__ import annotations

import collections
import dataclasses as dc
import logging
import typing as typ
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from .models import (
    Entity,
    Fragment,
    FragmentState,
    LiteralToken,
    ShortcodeKind,
    ShortcodeReference,
    SocialEmbed,
)
from .tokenizer import tokenize

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from types import TracebackType

    from .models import EntityLookup

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = frozenset(
    {"twitter", "facebook", "instagram", "linkedin", "youtube", "tiktok"}
)
_KIND_LABELS = {
    ShortcodeKind.GALLERY: "Gallery",
    ShortcodeKind.FILE: "File",
    ShortcodeKind.EBOOK: "Ebook",
}

LookupKey = tuple[ShortcodeKind, str]


@dc.dataclass(slots=True)
class _Outcome:
    state: FragmentState
    entity: Entity | None = None
    error: str | None = None


class ShortcodeResolver:
    """Turn a content string into an ordered list of resolved fragments."""

    def __init__(
        self,
        lookup: EntityLookup,
        *,
        max_workers: int = 8,
        batch_lookups: bool = False,
    ) -> None:
        """Initialise the resolver.

        Parameters
        ----------
        lookup : EntityLookup
            Read-only collaborator used to fetch galleries, files and ebooks.
        max_workers : int, optional
            Upper bound on concurrent lookups per session. Defaults to ``8``.
        batch_lookups : bool, optional
            When ``True`` each kind's ids are fetched in a single round trip
            via ``lookup.get_many``; otherwise every distinct id is fetched on
            its own. Defaults to ``False``.
        """
        self._lookup = lookup
        self._max_workers = max_workers
        self._batch_lookups = batch_lookups

    def resolve(self, content: str) -> list[Fragment]:
        """Resolve every shortcode in ``content`` and return all fragments.

        Blocks until each lookup has settled. A missing entity yields a
        ``NOT_FOUND`` fragment and a failed lookup an ``ERROR`` fragment at
        that occurrence's position; neither aborts the render.
        """
        with self.start(content) as session:
            session.wait()
            return session.fragments

    def start(self, content: str) -> ResolutionSession:
        """Tokenise ``content`` and begin resolving its shortcodes.

        The returned session exposes the fragments immediately, with every
        gallery, file and ebook occurrence in the ``LOADING`` state.
        """
        fragments: list[Fragment] = []
        for index, token in enumerate(tokenize(content)):
            if isinstance(token, LiteralToken):
                fragments.append(
                    Fragment(index, FragmentState.RESOLVED, html=token.text)
                )
            elif token.reference.kind is ShortcodeKind.SOCIAL_EMBED:
                fragments.append(_social_fragment(index, token.reference))
            else:
                fragments.append(
                    Fragment(index, FragmentState.LOADING, reference=token.reference)
                )
        session = ResolutionSession(fragments, self._max_workers)
        session._submit(self._lookup, batch=self._batch_lookups)
        return session


class ResolutionSession:
    """In-flight resolution of one content string.

    Fragments are mutated only from the thread consuming
    :meth:`iter_updates`; worker threads merely perform lookups. Once the
    session is cancelled or closed, lookups that complete later are ignored.
    """

    def __init__(self, fragments: list[Fragment], max_workers: int) -> None:
        self.fragments = fragments
        self._max_workers = max_workers
        self._executor: ThreadPoolExecutor | None = None
        self._futures: dict[
            Future[dict[str, _Outcome]], tuple[ShortcodeKind, list[str]]
        ] = {}
        self._cancelled = False
        self._waiting: dict[LookupKey, list[Fragment]] = collections.defaultdict(
            list
        )
        for fragment in fragments:
            if fragment.state is FragmentState.LOADING and fragment.reference:
                self._waiting[_lookup_key(fragment.reference)].append(fragment)

    def __enter__(self) -> ResolutionSession:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.cancel()

    @property
    def pending(self) -> list[Fragment]:
        """Return the fragments still waiting on a lookup."""
        return [f for f in self.fragments if f.state is FragmentState.LOADING]

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def iter_updates(self) -> cabc.Iterator[Fragment]:
        """Yield each shortcode fragment as soon as its own lookup settles.

        Fragments are yielded in completion order, not source order; their
        ``index`` gives the position to update. Nothing is yielded once the
        session has been cancelled.
        """
        if self._cancelled:
            return
        for future in as_completed(list(self._futures)):
            if self._cancelled:
                return
            kind, ids = self._futures[future]
            outcomes = self._collect(future, kind, ids)
            for entity_id, outcome in outcomes.items():
                if self._cancelled:
                    return
                settled = self._waiting.pop((kind, entity_id), [])
                # Every occurrence settles before the consumer sees the first.
                for fragment in settled:
                    fragment.state = outcome.state
                    fragment.entity = outcome.entity
                    fragment.error = outcome.error
                yield from settled

    def wait(self) -> list[Fragment]:
        """Block until every lookup has settled and return all fragments."""
        for _fragment in self.iter_updates():
            pass
        return self.fragments

    def cancel(self) -> None:
        """Abort pending lookups; fragments still loading stay ``LOADING``."""
        if self._cancelled:
            return
        self._cancelled = True
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        if self._waiting:
            logger.debug("cancelled %d pending shortcode lookups", len(self._waiting))

    def _submit(self, lookup: EntityLookup, *, batch: bool) -> None:
        if not self._waiting:
            return
        self._executor = ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="shortcode-lookup"
        )
        if batch:
            by_kind: dict[ShortcodeKind, list[str]] = collections.defaultdict(list)
            for kind, entity_id in self._waiting:
                by_kind[kind].append(entity_id)
            for kind, ids in by_kind.items():
                future = self._executor.submit(_lookup_many, lookup, kind, ids)
                self._futures[future] = (kind, ids)
            return
        for kind, entity_id in self._waiting:
            future = self._executor.submit(_lookup_one, lookup, kind, entity_id)
            self._futures[future] = (kind, [entity_id])

    def _collect(
        self,
        future: Future[dict[str, _Outcome]],
        kind: ShortcodeKind,
        ids: list[str],
    ) -> dict[str, _Outcome]:
        """Return the future's outcomes, turning a failure into error outcomes."""
        try:
            return future.result()
        except Exception:
            logger.exception("lookup of %s %s failed", kind.value, ", ".join(ids))
            failure = _Outcome(
                FragmentState.ERROR, error=f"Failed to load {_label(kind).lower()} data"
            )
            return dict.fromkeys(ids, failure)


def _lookup_one(
    lookup: EntityLookup, kind: ShortcodeKind, entity_id: str
) -> dict[str, _Outcome]:
    entity = lookup.get_by_id(kind, entity_id)
    return {entity_id: _outcome_for(kind, entity_id, entity)}


def _lookup_many(
    lookup: EntityLookup, kind: ShortcodeKind, entity_ids: list[str]
) -> dict[str, _Outcome]:
    found = lookup.get_many(kind, entity_ids)
    return {
        entity_id: _outcome_for(kind, entity_id, found.get(entity_id))
        for entity_id in entity_ids
    }


def _outcome_for(
    kind: ShortcodeKind, entity_id: str, entity: Entity | None
) -> _Outcome:
    if entity is None:
        return _Outcome(
            FragmentState.NOT_FOUND,
            error=f"{_label(kind)} with ID {entity_id} not found",
        )
    return _Outcome(FragmentState.RESOLVED, entity=entity)


def _social_fragment(index: int, reference: ShortcodeReference) -> Fragment:
    platform = (reference.platform or "").lower()
    url = reference.url or ""
    if platform not in SUPPORTED_PLATFORMS:
        return Fragment(
            index,
            FragmentState.UNSUPPORTED,
            reference=reference,
            error=f"Unsupported platform: {reference.platform}",
        )
    return Fragment(
        index,
        FragmentState.RESOLVED,
        reference=reference,
        entity=SocialEmbed(platform=platform, url=url),
    )


def _lookup_key(reference: ShortcodeReference) -> LookupKey:
    return (reference.kind, reference.id or "")


def _label(kind: ShortcodeKind) -> str:
    return _KIND_LABELS.get(kind, kind.value.title())


__all__ = ["SUPPORTED_PLATFORMS", "ResolutionSession", "ShortcodeResolver"]
