"""Tests for quicklinker.reference_grammar — reference tokenizer and parser."""
from __future__ import annotations

import pytest

from quicklinker.reference_grammar import (
    SELECTION_RANGE,
    SELECTION_SINGLE,
    SUGGEST_RANGE,
    SUGGEST_SINGLE,
    ReferencePattern,
    _tokenize,
    instant_patterns,
    parse_reference,
)
from quicklinker.reference_types import (
    NO_MATCH,
    RANGE_SHAPE_MESSAGE,
    STRUCTURAL_MESSAGE,
    InvalidReference,
    Locus,
    NoMatch,
    Range,
)
from quicklinker.structure_index import StructuralIndex


def _index() -> StructuralIndex:
    return StructuralIndex.from_mapping({
        "Genesis": {1: 31, 2: 25, 3: 24},
        "John": {3: 36},
        "1 John": {3: 24},
        "Song of Solomon": {2: 17},
    })


def _select(text: str, index: StructuralIndex | None = None):
    return parse_reference(text, SELECTION_SINGLE, SELECTION_RANGE, index or _index())


def _suggest(text: str, index: StructuralIndex | None = None):
    return parse_reference(text, SUGGEST_SINGLE, SUGGEST_RANGE, index or _index())


def _instant(text: str, trigger: str = "@"):
    single, multi = instant_patterns(trigger)
    return parse_reference(text, single, multi, _index())


# ───────────────────────────── Tokenizer ─────────────────────────────


class TestTokenizer:
    def test_reference_tokens(self) -> None:
        kinds = [t.kind for t in _tokenize("1 John 3:16-18")]
        assert kinds == [
            "NUMBER", "WHITESPACE", "WORD", "WHITESPACE",
            "NUMBER", "COLON", "NUMBER", "DASH", "NUMBER", "EOF",
        ]

    def test_en_dash_is_dash(self) -> None:
        tokens = _tokenize("1–2")
        assert [t.kind for t in tokens] == ["NUMBER", "DASH", "NUMBER", "EOF"]

    def test_other_characters(self) -> None:
        tokens = _tokenize("@(")
        assert [t.kind for t in tokens] == ["OTHER", "OTHER", "EOF"]

    def test_offsets_are_global(self) -> None:
        tokens = _tokenize("see @Genesis", 5)
        assert tokens[0].kind == "WORD"
        assert tokens[0].value == "Genesis"
        assert tokens[0].pos == 5


# ───────────────────────────── Single references ─────────────────────


class TestSelectionSingle:
    def test_verse(self) -> None:
        result = _select("Genesis 1:1")
        assert result == Locus("Genesis", 1, 1)
        assert isinstance(result, Locus)
        assert result.text == "Genesis 1:1"

    def test_whole_chapter(self) -> None:
        result = _select("Genesis 1")
        assert result == Locus("Genesis", 1, None)

    def test_flexible_whitespace(self) -> None:
        assert _select("  John 3 : 16  ") == Locus("John", 3, 16)

    def test_no_space_before_chapter(self) -> None:
        assert _select("Genesis1:1") == Locus("Genesis", 1, 1)

    def test_numbered_book(self) -> None:
        assert _select("1 John 3:16") == Locus("1 John", 3, 16)

    def test_multi_word_book(self) -> None:
        assert _select("Song of Solomon 2:1") == Locus("Song of Solomon", 2, 1)

    def test_trailing_text_is_no_match(self) -> None:
        assert _select("Genesis 1:1 extra") is NO_MATCH

    def test_plain_words_are_no_match(self) -> None:
        assert isinstance(_select("hello there"), NoMatch)

    def test_empty_is_no_match(self) -> None:
        assert _select("") is NO_MATCH

    def test_dangling_colon_is_no_match(self) -> None:
        assert _select("Genesis 1:") is NO_MATCH


class TestStructuralErrors:
    def test_missing_chapter(self) -> None:
        result = _select("Genesis 5:1")
        assert isinstance(result, InvalidReference)
        assert result.kind == "structural"
        assert result.message == STRUCTURAL_MESSAGE

    def test_verse_past_end(self) -> None:
        result = _select("Genesis 1:32")
        assert isinstance(result, InvalidReference)
        assert result.kind == "structural"

    def test_verse_zero(self) -> None:
        result = _select("Genesis 1:0")
        assert isinstance(result, InvalidReference)
        assert result.kind == "structural"

    def test_unknown_book(self) -> None:
        result = _select("Exodus 1:1")
        assert isinstance(result, InvalidReference)
        assert result.kind == "structural"

    def test_last_verse_is_valid(self) -> None:
        assert _select("Genesis 1:31") == Locus("Genesis", 1, 31)


# ───────────────────────────── Ranges ────────────────────────────────


class TestSelectionRange:
    def test_same_chapter(self) -> None:
        result = _select("Genesis 1:3-5")
        assert result == Range("Genesis", 1, 3, 1, 5)

    def test_cross_chapter(self) -> None:
        result = _select("Genesis 1:30-2:3")
        assert result == Range("Genesis", 1, 30, 2, 3)
        assert isinstance(result, Range)
        assert result.text == "Genesis 1:30-2:3"

    def test_en_dash_and_spaces(self) -> None:
        assert _select("Genesis 1:30 – 2:3") == Range("Genesis", 1, 30, 2, 3)

    def test_explicit_same_chapter_end(self) -> None:
        assert _select("Genesis 1:3-1:5") == Range("Genesis", 1, 3, 1, 5)

    def test_equal_endpoints_is_shape_error(self) -> None:
        result = _select("Genesis 1:31-1:31")
        assert isinstance(result, InvalidReference)
        assert result.kind == "range_shape"
        assert result.message == RANGE_SHAPE_MESSAGE

    def test_reversed_verses_is_shape_error(self) -> None:
        result = _select("Genesis 1:5-3")
        assert isinstance(result, InvalidReference)
        assert result.kind == "range_shape"

    def test_reversed_chapters_is_shape_error(self) -> None:
        result = _select("Genesis 2:1-1:5")
        assert isinstance(result, InvalidReference)
        assert result.kind == "range_shape"

    def test_shape_checked_before_index(self) -> None:
        result = _select("Genesis 9:5-9:1")
        assert isinstance(result, InvalidReference)
        assert result.kind == "range_shape"

    def test_end_outside_index(self) -> None:
        result = _select("Genesis 1:30-9:1")
        assert isinstance(result, InvalidReference)
        assert result.kind == "structural"

    def test_intermediate_chapters_not_checked(self) -> None:
        index = StructuralIndex.from_mapping({"Genesis": {1: 31, 3: 24}})
        assert _select("Genesis 1:30-3:2", index) == Range("Genesis", 1, 30, 3, 2)

    def test_messages_differ(self) -> None:
        assert RANGE_SHAPE_MESSAGE != STRUCTURAL_MESSAGE

    @pytest.mark.parametrize("end_verse", [1, 2, 3])
    def test_same_chapter_requires_increasing_verse(self, end_verse: int) -> None:
        result = _select(f"Genesis 1:3-{end_verse}")
        assert isinstance(result, InvalidReference)
        assert result.kind == "range_shape"


# ───────────────────────────── Suffix matching ───────────────────────


class TestSuggestPatterns:
    def test_reference_at_end_of_line(self) -> None:
        result = _suggest("I read Genesis 1:1")
        assert result == Locus("Genesis", 1, 1)
        assert isinstance(result, Locus)
        assert result.start == 7
        assert result.text == "Genesis 1:1"

    def test_one_trailing_space_allowed(self) -> None:
        result = _suggest("see Genesis 1:1 ")
        assert isinstance(result, Locus)
        assert result.text == "Genesis 1:1 "

    def test_two_trailing_spaces_rejected(self) -> None:
        assert _suggest("see Genesis 1:1  ") is NO_MATCH

    def test_numbered_book_preferred_when_indexed(self) -> None:
        result = _suggest("read 1 John 3:16")
        assert result == Locus("1 John", 3, 16)
        assert isinstance(result, Locus)
        assert result.start == 5

    def test_text_after_reference(self) -> None:
        assert _suggest("Genesis 1:1 and more") is NO_MATCH

    def test_range_wins_over_single(self) -> None:
        assert _suggest("see Genesis 1:30-2:3") == Range("Genesis", 1, 30, 2, 3)

    def test_unknown_book_uses_leftmost_match(self) -> None:
        result = _suggest("I saw Exodus 1:1")
        assert isinstance(result, InvalidReference)
        assert result.kind == "structural"
        assert result.text == "I saw Exodus 1:1"

    def test_incomplete_range(self) -> None:
        assert _suggest("Genesis 1:30-") is NO_MATCH


class TestInstantPatterns:
    def test_trigger_then_space(self) -> None:
        result = _instant("text @Genesis 1:1 ")
        assert result == Locus("Genesis", 1, 1)
        assert isinstance(result, Locus)
        assert result.start == 5
        assert result.text == "@Genesis 1:1 "

    def test_requires_trailing_whitespace(self) -> None:
        assert _instant("text @Genesis 1:1") is NO_MATCH

    def test_newline_counts_as_whitespace(self) -> None:
        assert _instant("@Genesis 1:1-3\n") == Range("Genesis", 1, 1, 1, 3)

    def test_requires_trigger(self) -> None:
        assert _instant("Genesis 1:1 ") is NO_MATCH

    def test_regex_metacharacter_trigger(self) -> None:
        assert _instant("cost $John 3:16 ", trigger="$") == Locus("John", 3, 16)

    def test_letter_trigger(self) -> None:
        assert _instant("xJohn 3:16 ", trigger="x") == Locus("John", 3, 16)

    def test_later_trigger_matches(self) -> None:
        result = _instant("@John 3:16 then @Genesis 1:1 ")
        assert result == Locus("Genesis", 1, 1)

    def test_empty_trigger_rejected(self) -> None:
        with pytest.raises(ValueError):
            instant_patterns("")

    def test_whitespace_trigger_rejected(self) -> None:
        with pytest.raises(ValueError):
            ReferencePattern("single", "suffix", trigger="a b")


class TestPatternForms:
    def test_swapped_patterns_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_reference("Genesis 1:1", SELECTION_RANGE, SELECTION_SINGLE, _index())


class TestLongNumbers:
    @pytest.mark.parametrize(
        "text",
        [
            "Genesis 1:" + "9" * 5000,
            "Genesis " + "9" * 5000,
            "Genesis 1:1-" + "9" * 5000,
            "Genesis 1:1-2:" + "9" * 5000,
            "Genesis 1234567",
        ],
    )
    def test_selection_is_no_match(self, text: str) -> None:
        assert _select(text) is NO_MATCH

    def test_suggest_is_no_match(self) -> None:
        assert _suggest("see Genesis 1:" + "9" * 5000) is NO_MATCH

    def test_instant_is_no_match(self) -> None:
        assert _instant("@John 3:" + "1" * 5000 + " ") is NO_MATCH

    def test_six_digits_still_parse(self) -> None:
        result = _select("Genesis 1:999999")
        assert isinstance(result, InvalidReference)
        assert result.message == STRUCTURAL_MESSAGE
