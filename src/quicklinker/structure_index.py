"""In-memory index of books, chapters and verse counts.

The index maps ``book -> chapter -> max verse``. It is never mutated in place:
``StructuralIndex.rebuild`` assembles a complete ``IndexSnapshot`` from a
source of chapters and swaps it in under a lock, so readers see either the
old or the new index, never a mix.

A max verse of 0 means the verse count could not be discovered for that
chapter. It is reported as a ``DiscoveryWarning`` and the chapter does not
``exist`` for validation.

Typical usage::

    index = StructuralIndex()
    result = index.rebuild(iter_chapter_sources(vault, "Bible"))
    for w in result.warnings:
        print(w.message)
    index.lookup_max_verse("Genesis", 1)   # -> 31
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol

log = logging.getLogger(__name__)

# "Genesis 1", "1 John 3", "Song of Solomon 2", "Psalms119"
_CHAPTER_NAME_RE = re.compile(r"^((?:\d\s)?[A-Za-z]+(?:\s[A-Za-z]+)*)\s?(\d{1,6})$")
_INTEGER_RE = re.compile(r"(?<!\d)\d{1,6}(?!\d)")


# ---------------------------------------------------------------------------
# Rebuild inputs / outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Heading:
    """A heading of a chapter document. ``level`` is None when unknown."""

    text: str
    level: int | None = None


@dataclass(frozen=True, slots=True)
class ChapterSource:
    """One chapter as seen by the external source."""

    book: str
    chapter: int
    headings: tuple[Heading, ...] = ()

    @classmethod
    def from_file_name(
        cls, name: str, headings: Iterable[Heading | str] = (),
    ) -> ChapterSource | None:
        """Build a source from a ``"<Book> <Chapter>"`` name, None if it is not one."""
        parsed = parse_chapter_name(name)
        if parsed is None:
            return None
        book, chapter = parsed
        return cls(book, chapter, _coerce_headings(headings))


@dataclass(frozen=True, slots=True)
class DiscoveryWarning:
    """Verse count for a chapter could not be found (non-fatal)."""

    book: str
    chapter: int

    @property
    def message(self) -> str:
        return f"Could not find how many verses were in {self.book} {self.chapter}."


@dataclass(frozen=True, slots=True)
class RebuildResult:
    """Outcome of ``StructuralIndex.rebuild``.

    ``applied`` is False when a newer rebuild started before this one finished;
    its snapshot was then discarded.
    """

    generation: int
    applied: bool
    book_count: int
    chapter_count: int
    warnings: tuple[DiscoveryWarning, ...] = ()


type SourceItem = ChapterSource | tuple[str, int, Sequence[Heading | str]]


# ---------------------------------------------------------------------------
# Name recognition and verse-count discovery
# ---------------------------------------------------------------------------

def parse_chapter_name(name: str) -> tuple[str, int] | None:
    """Split a chapter document name into ``(book, chapter)``.

    >>> parse_chapter_name("1 John 3")
    ('1 John', 3)
    >>> parse_chapter_name("Notes") is None
    True
    """
    m = _CHAPTER_NAME_RE.match(name.strip())
    if m is None:
        return None
    return m.group(1), int(m.group(2))


def discover_verse_count(
    headings: Sequence[Heading], verse_heading_level: int | None = None,
) -> int:
    """Return the verse number of the last numbered heading, or 0.

    Headings are scanned from the end. When ``verse_heading_level`` is set,
    only headings of exactly that level are considered. The first integer in
    the heading text is the verse number, so ``"31"``, ``"v31"`` and
    ``"Verse 31"`` all count as verse 31. Digit runs longer than six
    digits are ignored.
    """
    for heading in reversed(headings):
        if verse_heading_level is not None and heading.level != verse_heading_level:
            continue
        m = _INTEGER_RE.search(heading.text)
        if m:
            return int(m.group())
    return 0


def _coerce_headings(headings: Iterable[Heading | str]) -> tuple[Heading, ...]:
    return tuple(h if isinstance(h, Heading) else Heading(str(h)) for h in headings)


def _coerce_source(item: SourceItem) -> ChapterSource:
    if isinstance(item, ChapterSource):
        return item
    book, chapter, headings = item
    return ChapterSource(book, int(chapter), _coerce_headings(headings))


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------

class IndexView(Protocol):
    """Read operations shared by ``StructuralIndex`` and ``IndexSnapshot``."""

    def snapshot(self) -> IndexSnapshot: ...

    def lookup_max_verse(self, book: str, chapter: int) -> int | None: ...

    def exists(self, book: str, chapter: int) -> bool: ...

    def has_book(self, book: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class IndexSnapshot:
    """Immutable ``book -> chapter -> max verse`` mapping."""

    books: Mapping[str, Mapping[int, int]] = field(
        default_factory=lambda: MappingProxyType({}),
    )

    @classmethod
    def from_mapping(cls, books: Mapping[str, Mapping[int, int]]) -> IndexSnapshot:
        return cls(MappingProxyType({
            book: MappingProxyType({int(c): int(v) for c, v in chapters.items()})
            for book, chapters in books.items()
        }))

    def snapshot(self) -> IndexSnapshot:
        return self

    def lookup_max_verse(self, book: str, chapter: int) -> int | None:
        chapters = self.books.get(book)
        if chapters is None:
            return None
        return chapters.get(chapter)

    def exists(self, book: str, chapter: int) -> bool:
        """True when the chapter is indexed with a known (non-zero) verse count."""
        return bool(self.lookup_max_verse(book, chapter))

    def has_book(self, book: str) -> bool:
        return book in self.books

    def chapters(self, book: str) -> list[int]:
        return sorted(self.books.get(book, {}))

    def chapter_count(self) -> int:
        return sum(len(chapters) for chapters in self.books.values())

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Plain nested dict with string chapter keys (JSON-ready)."""
        return {
            book: {str(c): v for c, v in sorted(chapters.items())}
            for book, chapters in sorted(self.books.items())
        }


# ---------------------------------------------------------------------------
# StructuralIndex
# ---------------------------------------------------------------------------

class StructuralIndex:
    """Owner of the current ``IndexSnapshot``; rebuild is the only writer."""

    def __init__(self, snapshot: IndexSnapshot | None = None) -> None:
        self._snapshot = snapshot if snapshot is not None else IndexSnapshot()
        self._lock = threading.Lock()
        self._generation = 0
        self._applied_generation = 0

    @classmethod
    def from_mapping(cls, books: Mapping[str, Mapping[int, int]]) -> StructuralIndex:
        return cls(IndexSnapshot.from_mapping(books))

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def rebuild(
        self,
        source: Iterable[SourceItem],
        *,
        verse_heading_level: int | None = None,
    ) -> RebuildResult:
        """Replace the whole index with one built from ``source``.

        The new mapping is assembled without holding the lock; only the final
        swap is locked. Among rebuilds that complete, the one started last
        wins: a rebuild is not applied when a later-started one has already
        been swapped in. A rebuild whose source raises swaps nothing and does
        not block older rebuilds still running.

        A chapter listed twice keeps its first verse count; later copies are
        skipped with a warning.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation

        books: dict[str, dict[int, int]] = {}
        warnings: list[DiscoveryWarning] = []
        for item in source:
            chapter_source = _coerce_source(item)
            chapters = books.setdefault(chapter_source.book, {})
            if chapter_source.chapter in chapters:
                log.warning(
                    "Duplicate chapter %s %d ignored",
                    chapter_source.book, chapter_source.chapter,
                )
                continue
            max_verse = discover_verse_count(
                chapter_source.headings, verse_heading_level,
            )
            if max_verse == 0:
                warning = DiscoveryWarning(chapter_source.book, chapter_source.chapter)
                log.warning("%s", warning.message)
                warnings.append(warning)
            chapters[chapter_source.chapter] = max_verse

        snapshot = IndexSnapshot.from_mapping(books)
        with self._lock:
            applied = generation > self._applied_generation
            if applied:
                self._snapshot = snapshot
                self._applied_generation = generation
            current = self._applied_generation

        if applied:
            log.info(
                "Indexed %d chapters across %d books (%d warnings)",
                snapshot.chapter_count(), len(books), len(warnings),
            )
        else:
            log.debug("Discarding rebuild %d: superseded by %d", generation, current)

        return RebuildResult(
            generation=generation,
            applied=applied,
            book_count=len(books),
            chapter_count=snapshot.chapter_count(),
            warnings=tuple(warnings),
        )

    # ------------------------------------------------------------------
    # Read side (delegates to the current snapshot)
    # ------------------------------------------------------------------

    def snapshot(self) -> IndexSnapshot:
        return self._snapshot

    def lookup_max_verse(self, book: str, chapter: int) -> int | None:
        return self._snapshot.lookup_max_verse(book, chapter)

    def exists(self, book: str, chapter: int) -> bool:
        return self._snapshot.exists(book, chapter)

    def has_book(self, book: str) -> bool:
        return self._snapshot.has_book(book)

    def books(self) -> list[str]:
        return sorted(self._snapshot.books)

    def chapters(self, book: str) -> list[int]:
        return self._snapshot.chapters(book)

    def to_dict(self) -> dict[str, dict[str, int]]:
        return self._snapshot.to_dict()
