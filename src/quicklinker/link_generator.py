"""Render validated references as wiki links and embeds.

Links use the ``[[Book C#V|label]]`` form; labels come from user templates
with ``{book}``, ``{chapter}``, ``{verse}``, ``{endChapter}`` and
``{endVerse}`` placeholders (``{unit}``, ``{subUnit}``, ``{leaf}``,
``{endSubUnit}`` and ``{endLeaf}`` are accepted as aliases). In range
templates, ``[[...]]`` marks the parts that become links: the first one links
to the start verse, the second one to the end verse, and the text between
them is copied as is.

Embeds use ``![[Book C#V]]``. A range embed lists every verse from start to
end, with a ``> Book C`` marker line whenever it enters a new chapter.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from quicklinker.reference_types import (
    InvalidReference,
    Locus,
    Range,
    Reference,
    structural_error,
)
from quicklinker.structure_index import IndexView

log = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(
    r"\{(book|chapter|verse|endChapter|endVerse"
    r"|unit|subUnit|leaf|endSubUnit|endLeaf)\}"
)
_LINK_SPAN_RE = re.compile(r"\[\[(.*?)\]\]")

_ALIASES: dict[str, str] = {
    "unit": "book",
    "subUnit": "chapter",
    "leaf": "verse",
    "endSubUnit": "endChapter",
    "endLeaf": "endVerse",
}


@dataclass(frozen=True, slots=True)
class LinkTemplates:
    """Label templates for single verses and verse ranges."""

    single_verse: str = "{book} {chapter}:{verse}"
    same_chapter: str = "[[{book} {chapter}:{verse}]]-[[{endVerse}]]"
    diff_chapter: str = "[[{book} {chapter}:{verse}]]-[[{endChapter}:{endVerse}]]"


DEFAULT_TEMPLATES = LinkTemplates()


def substitute(template: str, values: dict[str, object]) -> str:
    """Fill known placeholders. A value of None renders empty; other braces stay."""
    def _replace(m: re.Match[str]) -> str:
        key = _ALIASES.get(m.group(1), m.group(1))
        value = values.get(key)
        return "" if value is None else str(value)

    return _PLACEHOLDER_RE.sub(_replace, template)


def _values(
    book: str, chapter: int, verse: int | None,
    end_chapter: int | None = None, end_verse: int | None = None,
) -> dict[str, object]:
    return {
        "book": book,
        "chapter": chapter,
        "verse": verse,
        "endChapter": end_chapter,
        "endVerse": end_verse,
    }


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

def render_label(ref: Locus, templates: LinkTemplates = DEFAULT_TEMPLATES) -> str:
    """Visible text of a single-verse or whole-chapter link."""
    if ref.verse is None:
        return f"{ref.book} {ref.chapter}"
    return substitute(templates.single_verse, _values(ref.book, ref.chapter, ref.verse))


def _render_range(ref: Range, templates: LinkTemplates) -> str:
    template = templates.same_chapter if ref.same_chapter else templates.diff_chapter
    spans = list(_LINK_SPAN_RE.finditer(template))
    if not spans:
        log.warning("Range template has no [[...]] part, using it verbatim: %r", template)
        return template

    first = spans[0]
    start_values = _values(
        ref.book, ref.chapter, ref.verse, ref.end_chapter, ref.end_verse,
    )
    first_text = substitute(first.group(1), start_values)
    first_link = f"[[{ref.book} {ref.chapter}#{ref.verse}|{first_text}]]"
    if len(spans) == 1:
        return first_link

    second = spans[1]
    end_values = _values(
        ref.book, ref.end_chapter, ref.end_verse, ref.end_chapter, ref.end_verse,
    )
    middle = template[first.end():second.start()]
    last_text = substitute(second.group(1), end_values)
    last_link = f"[[{ref.book} {ref.end_chapter}#{ref.end_verse}|{last_text}]]"
    return f"{first_link}{middle}{last_link}"


def render_link(ref: Reference, templates: LinkTemplates = DEFAULT_TEMPLATES) -> str:
    """Render a reference as one or two wiki links.

    A range template without any ``[[...]]`` part is returned unchanged.
    """
    match ref:
        case Locus(verse=None):
            return f"[[{ref.book} {ref.chapter}]]"
        case Locus():
            return f"[[{ref.book} {ref.chapter}#{ref.verse}|{render_label(ref, templates)}]]"
        case Range():
            return _render_range(ref, templates)


# ---------------------------------------------------------------------------
# Embeds
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class EmbedVerse:
    book: str
    chapter: int
    verse: int


@dataclass(frozen=True, slots=True)
class ChapterMarker:
    """Emitted when a range expansion enters ``chapter``."""

    book: str
    chapter: int


type EmbedLine = EmbedVerse | ChapterMarker


def expand_range(ref: Range, index: IndexView) -> list[EmbedLine] | InvalidReference:
    """List every verse of ``ref`` in order, with chapter markers in between.

    Each chapter passed through must be indexed with a verse count; a gap
    yields an ``expansion_gap`` error instead of a guessed expansion.
    """
    view = index.snapshot()
    chapter, verse = ref.chapter, ref.verse
    lines: list[EmbedLine] = []
    while True:
        lines.append(EmbedVerse(ref.book, chapter, verse))
        if chapter == ref.end_chapter and verse == ref.end_verse:
            return lines

        max_verse = view.lookup_max_verse(ref.book, chapter)
        if not max_verse:
            return _gap_error(ref, chapter)
        if verse < max_verse:
            verse += 1
            continue

        chapter += 1
        verse = 1
        if chapter > ref.end_chapter:
            # end verse lies beyond the indexed end of its chapter
            return structural_error(ref.text)
        if not view.exists(ref.book, chapter):
            return _gap_error(ref, chapter)
        lines.append(ChapterMarker(ref.book, chapter))


def _gap_error(ref: Range, chapter: int) -> InvalidReference:
    message = (
        f"Cannot expand {ref.label}: {ref.book} {chapter} "
        "is missing from the Bible folder index"
    )
    log.warning("%s", message)
    return InvalidReference(kind="expansion_gap", message=message, text=ref.text)


def render_embed(ref: Reference, index: IndexView) -> str | InvalidReference:
    """Render embed markup for a chapter, a verse or a verse range."""
    match ref:
        case Locus(verse=None):
            return f"![[{ref.book} {ref.chapter}]]"
        case Locus():
            return f"![[{ref.book} {ref.chapter}#{ref.verse}]]"
        case Range():
            lines = expand_range(ref, index)
            if isinstance(lines, InvalidReference):
                return lines
            out: list[str] = []
            for line in lines:
                match line:
                    case EmbedVerse(book=book, chapter=chapter, verse=verse):
                        out.append(f"![[{book} {chapter}#{verse}]]\n")
                    case ChapterMarker(book=book, chapter=chapter):
                        out.append(f"> {book} {chapter}\n")
            return "".join(out)
