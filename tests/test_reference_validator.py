"""Tests for quicklinker.reference_validator."""
from __future__ import annotations

from quicklinker.reference_types import STRUCTURAL_MESSAGE, InvalidReference, Locus, Range
from quicklinker.reference_validator import is_valid_locus, validate_reference
from quicklinker.structure_index import IndexSnapshot, StructuralIndex


def _index() -> StructuralIndex:
    return StructuralIndex.from_mapping({
        "Genesis": {1: 31, 2: 25, 4: 26, 5: 0},
    })


class TestIsValidLocus:
    def test_verse_bounds(self) -> None:
        index = _index()
        for verse in range(-1, 34):
            assert is_valid_locus("Genesis", 1, verse, index) == (1 <= verse <= 31)

    def test_whole_chapter(self) -> None:
        assert is_valid_locus("Genesis", 2, None, _index())

    def test_missing_chapter(self) -> None:
        assert not is_valid_locus("Genesis", 3, None, _index())

    def test_chapter_without_verse_count(self) -> None:
        assert not is_valid_locus("Genesis", 5, None, _index())

    def test_unknown_book(self) -> None:
        assert not is_valid_locus("Exodus", 1, 1, _index())

    def test_book_is_case_sensitive(self) -> None:
        assert not is_valid_locus("genesis", 1, 1, _index())


class TestValidateReference:
    def test_valid_locus_returned_unchanged(self) -> None:
        locus = Locus("Genesis", 1, 1, text="Genesis 1:1")
        assert validate_reference(locus, _index()) is locus

    def test_invalid_locus(self) -> None:
        result = validate_reference(Locus("Genesis", 1, 40, text="Genesis 1:40"), _index())
        assert isinstance(result, InvalidReference)
        assert result.kind == "structural"
        assert result.message == STRUCTURAL_MESSAGE
        assert result.text == "Genesis 1:40"

    def test_range_endpoints_checked(self) -> None:
        assert isinstance(
            validate_reference(Range("Genesis", 1, 30, 2, 26), _index()),
            InvalidReference,
        )
        assert isinstance(
            validate_reference(Range("Genesis", 1, 32, 2, 1), _index()),
            InvalidReference,
        )

    def test_range_intermediate_chapters_not_checked(self) -> None:
        ref = Range("Genesis", 2, 1, 4, 3)
        assert validate_reference(ref, _index()) is ref

    def test_accepts_snapshot(self) -> None:
        snapshot = IndexSnapshot.from_mapping({"John": {3: 36}})
        assert validate_reference(Locus("John", 3, 16), snapshot) == Locus("John", 3, 16)
