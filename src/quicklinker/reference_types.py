"""Core value types shared by the grammar, validator and link generator.

Type hierarchy:
  Locus            — book + chapter + optional verse (whole chapter if None)
  Range            — span between two verses, possibly across chapters
  NoMatch          — the text does not contain a reference (not an error)
  InvalidReference — typed failure with a user-facing message
  ParseOutcome     — NoMatch | InvalidReference | Locus | Range
  Reference        — Locus | Range

Match metadata (``text``, ``start``, ``end``) records where a reference was
found in the parsed input. It is excluded from equality so that two
references to the same verse compare equal wherever they were found.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

type ErrorKind = Literal["range_shape", "structural", "expansion_gap"]

RANGE_SHAPE_MESSAGE = "The scriptural reference range isn't valid"
STRUCTURAL_MESSAGE = "Invalid Scripture reference"


@dataclass(frozen=True, slots=True)
class Locus:
    """A single chapter or verse.

    ``verse=None`` refers to the whole chapter.
    """

    book: str
    chapter: int
    verse: int | None = None
    text: str = field(default="", compare=False)
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)

    @property
    def label(self) -> str:
        """Canonical ``Book C`` / ``Book C:V`` spelling."""
        if self.verse is None:
            return f"{self.book} {self.chapter}"
        return f"{self.book} {self.chapter}:{self.verse}"


@dataclass(frozen=True, slots=True)
class Range:
    """A verse span from ``chapter:verse`` to ``end_chapter:end_verse``.

    Once validated, ``chapter <= end_chapter`` and a same-chapter range has
    ``verse < end_verse``.
    """

    book: str
    chapter: int
    verse: int
    end_chapter: int
    end_verse: int
    text: str = field(default="", compare=False)
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)

    @property
    def same_chapter(self) -> bool:
        return self.chapter == self.end_chapter

    @property
    def start_locus(self) -> Locus:
        return Locus(self.book, self.chapter, self.verse)

    @property
    def end_locus(self) -> Locus:
        return Locus(self.book, self.end_chapter, self.end_verse)

    @property
    def label(self) -> str:
        if self.same_chapter:
            return f"{self.book} {self.chapter}:{self.verse}-{self.end_verse}"
        return (
            f"{self.book} {self.chapter}:{self.verse}"
            f"-{self.end_chapter}:{self.end_verse}"
        )


@dataclass(frozen=True, slots=True)
class NoMatch:
    """The input holds nothing that looks like a reference."""


NO_MATCH = NoMatch()


@dataclass(frozen=True, slots=True)
class InvalidReference:
    """Something reference-shaped that cannot be used.

    ``kind`` separates a malformed range (``range_shape``) from one that names
    chapters or verses the index does not know (``structural``) and from a
    range whose expansion runs into a chapter missing from the index
    (``expansion_gap``).
    """

    kind: ErrorKind
    message: str
    text: str = ""


type Reference = Locus | Range
type ParseOutcome = NoMatch | InvalidReference | Locus | Range


def range_shape_error(text: str = "") -> InvalidReference:
    return InvalidReference(kind="range_shape", message=RANGE_SHAPE_MESSAGE, text=text)


def structural_error(text: str = "") -> InvalidReference:
    return InvalidReference(kind="structural", message=STRUCTURAL_MESSAGE, text=text)


def reference_to_dict(ref: Reference) -> dict[str, object]:
    """JSON-friendly view of a reference (used by the scripts)."""
    match ref:
        case Locus(book=book, chapter=chapter, verse=verse):
            return {
                "type": "locus",
                "book": book,
                "chapter": chapter,
                "verse": verse,
                "label": ref.label,
            }
        case Range(
            book=book,
            chapter=chapter,
            verse=verse,
            end_chapter=end_chapter,
            end_verse=end_verse,
        ):
            return {
                "type": "range",
                "book": book,
                "chapter": chapter,
                "verse": verse,
                "end_chapter": end_chapter,
                "end_verse": end_verse,
                "label": ref.label,
            }
