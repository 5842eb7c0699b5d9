"""Bible quick-linking: recognize, validate and render verse references."""

from quicklinker.link_generator import (
    DEFAULT_TEMPLATES,
    ChapterMarker,
    EmbedVerse,
    LinkTemplates,
    expand_range,
    render_embed,
    render_label,
    render_link,
)
from quicklinker.reference_grammar import (
    SELECTION_RANGE,
    SELECTION_SINGLE,
    SUGGEST_RANGE,
    SUGGEST_SINGLE,
    ReferencePattern,
    instant_patterns,
    parse_reference,
)
from quicklinker.reference_types import (
    NO_MATCH,
    InvalidReference,
    Locus,
    NoMatch,
    ParseOutcome,
    Range,
    Reference,
)
from quicklinker.reference_validator import is_valid_locus, validate_reference
from quicklinker.structure_index import (
    ChapterSource,
    DiscoveryWarning,
    Heading,
    IndexSnapshot,
    RebuildResult,
    StructuralIndex,
    discover_verse_count,
    parse_chapter_name,
)

__all__ = [
    "DEFAULT_TEMPLATES",
    "NO_MATCH",
    "SELECTION_RANGE",
    "SELECTION_SINGLE",
    "SUGGEST_RANGE",
    "SUGGEST_SINGLE",
    "ChapterMarker",
    "ChapterSource",
    "DiscoveryWarning",
    "EmbedVerse",
    "Heading",
    "IndexSnapshot",
    "InvalidReference",
    "LinkTemplates",
    "Locus",
    "NoMatch",
    "ParseOutcome",
    "Range",
    "RebuildResult",
    "Reference",
    "ReferencePattern",
    "StructuralIndex",
    "discover_verse_count",
    "expand_range",
    "instant_patterns",
    "is_valid_locus",
    "parse_chapter_name",
    "parse_reference",
    "render_embed",
    "render_label",
    "render_link",
    "validate_reference",
]
