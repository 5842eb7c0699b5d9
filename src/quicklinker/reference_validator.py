"""Bounds checks of references against the structural index."""
from __future__ import annotations

from quicklinker.reference_types import (
    Locus,
    ParseOutcome,
    Range,
    Reference,
    structural_error,
)
from quicklinker.structure_index import IndexView


def is_valid_locus(
    book: str, chapter: int, verse: int | None, index: IndexView,
) -> bool:
    """True if the chapter is indexed and ``verse`` (if given) is within it."""
    max_verse = index.lookup_max_verse(book, chapter)
    if not max_verse:
        return False
    return verse is None or 1 <= verse <= max_verse


def validate_reference(candidate: Reference, index: IndexView) -> ParseOutcome:
    """Return ``candidate`` if it fits the index, else a structural error.

    For a range only the two endpoints are checked; chapters in between are
    checked when the range is expanded.
    """
    view = index.snapshot()
    match candidate:
        case Locus(book=book, chapter=chapter, verse=verse):
            ok = is_valid_locus(book, chapter, verse, view)
        case Range(
            book=book,
            chapter=chapter,
            verse=verse,
            end_chapter=end_chapter,
            end_verse=end_verse,
        ):
            ok = (
                is_valid_locus(book, chapter, verse, view)
                and is_valid_locus(book, end_chapter, end_verse, view)
            )
    if not ok:
        return structural_error(candidate.text)
    return candidate
