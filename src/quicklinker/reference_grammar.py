"""Reference grammar: tokenizer and recursive-descent parser.

Recognizes ``Book C``, ``Book C:V``, ``Book C:V-W`` and ``Book C:V-D:W``
references and turns them into validated ``Locus`` / ``Range`` values.

Grammar (PEG-flavoured)::

    reference    := TRIGGER? book WS? NUMBER tail
    book         := (DIGIT ' ')? WORD (' ' WORD)*
    single_tail  := (WS? ':' WS? NUMBER)?
    range_tail   := WS? ':' WS? NUMBER WS? DASH WS? NUMBER (WS? ':' WS? NUMBER)?
    WORD         := [A-Za-z]+
    NUMBER       := [0-9]+
    DASH         := '-' | '–'
    WS           := inline whitespace (no line breaks)

A range with one number after the dash stays in the same chapter (the number
is the end verse); two numbers name the end chapter and end verse.

Where the grammar may match is decided by a ``ReferencePattern``:

* ``anchor="full"`` — the whole input is one reference (editor selections).
* ``anchor="suffix"`` — the reference ends the input (text before the cursor).
* ``trigger`` — a literal prefix such as ``@``; located with ``str.find`` and
  never compiled into a regular expression.
* ``trailing_whitespace`` — ``"any"``, ``"optional"`` (at most one character)
  or ``"required"`` (exactly one character).

Public API:

* ``parse_reference(text, single, multi, index)`` — range pattern first, then
  single; returns a ``ParseOutcome``.
* ``instant_patterns(trigger)`` — the ``(single, multi)`` pair for instant
  linking.
* ``SELECTION_SINGLE`` / ``SELECTION_RANGE`` / ``SUGGEST_SINGLE`` /
  ``SUGGEST_RANGE`` — ready-made patterns.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from quicklinker.reference_types import (
    NO_MATCH,
    Locus,
    ParseOutcome,
    Range,
    range_shape_error,
)
from quicklinker.reference_validator import validate_reference
from quicklinker.structure_index import IndexSnapshot, IndexView

type Form = Literal["single", "range"]
type Anchor = Literal["full", "suffix"]
type TrailingWhitespace = Literal["any", "optional", "required"]


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ReferencePattern:
    """Where and how the grammar is allowed to match."""

    form: Form
    anchor: Anchor = "full"
    trigger: str = ""
    trailing_whitespace: TrailingWhitespace = "any"

    def __post_init__(self) -> None:
        if any(ch.isspace() for ch in self.trigger):
            raise ValueError(f"Trigger must not contain whitespace: {self.trigger!r}")


SELECTION_SINGLE = ReferencePattern("single", "full")
SELECTION_RANGE = ReferencePattern("range", "full")
SUGGEST_SINGLE = ReferencePattern("single", "suffix", trailing_whitespace="optional")
SUGGEST_RANGE = ReferencePattern("range", "suffix", trailing_whitespace="optional")


def instant_patterns(trigger: str) -> tuple[ReferencePattern, ReferencePattern]:
    """Return ``(single, multi)`` for ``<trigger>Book C:V`` typed before a space."""
    if not trigger:
        raise ValueError("Instant linking trigger must not be empty")
    return (
        ReferencePattern("single", "suffix", trigger, "required"),
        ReferencePattern("range", "suffix", trigger, "required"),
    )


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class _Token:
    """A single lexical token; ``pos`` is an offset into the full input."""

    kind: str  # see _TOKEN_PATTERNS keys + "OTHER" + "EOF"
    value: str
    pos: int


# Order matters (first match wins)
_TOKEN_PATTERNS: list[tuple[str, str]] = [
    ("WHITESPACE", r"\s+"),
    ("WORD", r"[A-Za-z]+"),
    ("NUMBER", r"[0-9]+"),
    ("COLON", r":"),
    ("DASH", r"[-–]"),
]

_COMPILED_PATTERNS = [(name, re.compile(pat)) for name, pat in _TOKEN_PATTERNS]

# Longer digit runs are never chapter or verse numbers
_MAX_DIGITS = 6


def _tokenize(text: str, start: int = 0) -> list[_Token]:
    """Tokenize ``text[start:]``; anything unrecognised becomes an OTHER token."""
    tokens: list[_Token] = []
    pos = start
    while pos < len(text):
        for name, pattern in _COMPILED_PATTERNS:
            m = pattern.match(text, pos)
            if m:
                tokens.append(_Token(kind=name, value=m.group(), pos=pos))
                pos = m.end()
                break
        else:
            tokens.append(_Token(kind="OTHER", value=text[pos], pos=pos))
            pos += 1
    tokens.append(_Token(kind="EOF", value="", pos=pos))
    return tokens


def _is_inline_ws(tok: _Token) -> bool:
    return tok.kind == "WHITESPACE" and "\n" not in tok.value and "\r" not in tok.value


def _can_start_book(tokens: list[_Token], i: int) -> bool:
    tok = tokens[i]
    if tok.kind == "WORD":
        return True
    return (
        tok.kind == "NUMBER"
        and len(tok.value) == 1
        and tokens[i + 1].value == " "
        and tokens[i + 2].kind == "WORD"
    )


# ---------------------------------------------------------------------------
# Recursive descent parser
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class _Match:
    """Syntactic match before shape checks and validation."""

    book: str
    numbers: tuple[int, ...]
    start: int
    end: int


class _Parser:
    """Parses one reference starting at a given token."""

    def __init__(self, tokens: list[_Token], pos: int = 0) -> None:
        self._tokens = tokens
        self._pos = pos

    def _peek(self, offset: int = 0) -> _Token:
        return self._tokens[min(self._pos + offset, len(self._tokens) - 1)]

    def _advance(self) -> _Token:
        tok = self._tokens[self._pos]
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return tok

    def _accept(self, kind: str) -> _Token | None:
        if self._peek().kind == kind:
            return self._advance()
        return None

    def _skip_inline_ws(self) -> None:
        if _is_inline_ws(self._peek()):
            self._advance()

    # ─── Productions ───────────────────────────────────────────────

    def parse_book(self) -> str | None:
        """book := (DIGIT ' ')? WORD (' ' WORD)*"""
        parts: list[str] = []
        tok = self._peek()
        if (
            tok.kind == "NUMBER"
            and len(tok.value) == 1
            and self._peek(1).value == " "
            and self._peek(2).kind == "WORD"
        ):
            parts.append(self._advance().value)
            self._advance()
        word = self._accept("WORD")
        if word is None:
            return None
        parts.append(word.value)
        while self._peek().value == " " and self._peek(1).kind == "WORD":
            self._advance()
            parts.append(self._advance().value)
        return " ".join(parts)

    def parse_number(self) -> int | None:
        tok = self._peek()
        if tok.kind != "NUMBER" or len(tok.value) > _MAX_DIGITS:
            return None
        return int(self._advance().value)

    def parse_colon_number(self) -> int | None:
        """WS? ':' WS? NUMBER; restores the position when absent."""
        saved = self._pos
        self._skip_inline_ws()
        if self._accept("COLON") is not None:
            self._skip_inline_ws()
            number = self.parse_number()
            if number is not None:
                return number
        self._pos = saved
        return None

    def parse_reference(self, form: Form) -> tuple[str, tuple[int, ...]] | None:
        """reference := book WS? NUMBER (single_tail | range_tail)"""
        book = self.parse_book()
        if book is None:
            return None
        self._skip_inline_ws()
        chapter = self.parse_number()
        if chapter is None:
            return None

        if form == "single":
            verse = self.parse_colon_number()
            return book, (chapter,) if verse is None else (chapter, verse)

        verse = self.parse_colon_number()
        if verse is None:
            return None
        self._skip_inline_ws()
        if self._accept("DASH") is None:
            return None
        self._skip_inline_ws()
        third = self.parse_number()
        if third is None:
            return None
        fourth = self.parse_colon_number()
        if fourth is None:
            return book, (chapter, verse, third)
        return book, (chapter, verse, third, fourth)

    def match_end(self, trailing: TrailingWhitespace) -> int | None:
        """Offset where the match ends, or None if input remains."""
        tok = self._peek()
        if tok.kind == "EOF":
            return None if trailing == "required" else tok.pos
        if tok.kind == "WHITESPACE" and self._peek(1).kind == "EOF":
            if trailing == "any" or len(tok.value) == 1:
                return self._peek(1).pos
        return None


def _match_at(
    tokens: list[_Token], i: int, pattern: ReferencePattern, start: int,
) -> _Match | None:
    parser = _Parser(tokens, i)
    parsed = parser.parse_reference(pattern.form)
    if parsed is None:
        return None
    end = parser.match_end(pattern.trailing_whitespace)
    if end is None:
        return None
    book, numbers = parsed
    return _Match(book=book, numbers=numbers, start=start, end=end)


def _candidates(text: str, pattern: ReferencePattern) -> list[_Match]:
    """All syntactic matches of ``pattern`` in ``text``, leftmost first."""
    if pattern.anchor == "full":
        begin = len(text) - len(text.lstrip())
        if pattern.trigger:
            if not text.startswith(pattern.trigger, begin):
                return []
            begin += len(pattern.trigger)
        tokens = _tokenize(text, begin)
        m = _match_at(tokens, 0, pattern, 0)
        return [m] if m is not None else []

    found: list[_Match] = []
    if pattern.trigger:
        at = text.find(pattern.trigger)
        while at != -1:
            tokens = _tokenize(text, at + len(pattern.trigger))
            m = _match_at(tokens, 0, pattern, at)
            if m is not None:
                found.append(m)
            at = text.find(pattern.trigger, at + 1)
        return found

    tokens = _tokenize(text)
    for i, tok in enumerate(tokens[:-1]):
        if _can_start_book(tokens, i):
            m = _match_at(tokens, i, pattern, tok.pos)
            if m is not None:
                found.append(m)
    return found


def _find_match(
    text: str, pattern: ReferencePattern, view: IndexSnapshot,
) -> _Match | None:
    """Leftmost match whose book is indexed, else the leftmost match."""
    found = _candidates(text, pattern)
    for m in found:
        if view.has_book(m.book):
            return m
    return found[0] if found else None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_reference(
    text: str,
    single: ReferencePattern,
    multi: ReferencePattern,
    index: IndexView,
) -> ParseOutcome:
    """Find a reference in ``text`` and validate it against ``index``.

    The range pattern is tried first; the single pattern only when the range
    pattern has no syntactic match. Range shape errors (end before start,
    one-verse ranges) are reported before the index is consulted.
    """
    if single.form != "single" or multi.form != "range":
        raise ValueError("parse_reference expects a single and a range pattern")
    view = index.snapshot()

    m = _find_match(text, multi, view)
    if m is not None:
        matched = text[m.start:m.end]
        chapter, verse, third, *rest = m.numbers
        if rest:
            end_chapter, end_verse = third, rest[0]
        else:
            end_chapter, end_verse = chapter, third
        if end_chapter < chapter or (end_chapter == chapter and verse >= end_verse):
            return range_shape_error(matched)
        return validate_reference(
            Range(
                m.book, chapter, verse, end_chapter, end_verse,
                text=matched, start=m.start, end=m.end,
            ),
            view,
        )

    m = _find_match(text, single, view)
    if m is None:
        return NO_MATCH
    verse = m.numbers[1] if len(m.numbers) > 1 else None
    return validate_reference(
        Locus(
            m.book, m.numbers[0], verse,
            text=text[m.start:m.end], start=m.start, end=m.end,
        ),
        view,
    )
