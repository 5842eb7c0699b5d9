"""Editor-facing entry points: selection command, suggestions, instant linking.

These functions hold no editor state. The caller passes the relevant text and
applies the returned ``Replacement`` (offsets relative to the text it passed)
or shows the ``Notice``. They may be called from deferred editor callbacks;
every call reads one index snapshot.
"""
from __future__ import annotations

from dataclasses import dataclass

from quicklinker.link_generator import render_embed, render_link
from quicklinker.reference_grammar import (
    SELECTION_RANGE,
    SELECTION_SINGLE,
    SUGGEST_RANGE,
    SUGGEST_SINGLE,
    instant_patterns,
    parse_reference,
)
from quicklinker.reference_types import (
    InvalidReference,
    Locus,
    NoMatch,
    Range,
    Reference,
)
from quicklinker.settings import Settings
from quicklinker.structure_index import IndexView

NO_SELECTION_MATCH_MESSAGE = "Cannot make a scriptural reference link out of this selection"


@dataclass(frozen=True, slots=True)
class Replacement:
    """Replace ``text[start:end]`` of the caller's text with ``text``."""

    start: int
    end: int
    text: str


@dataclass(frozen=True, slots=True)
class Notice:
    """Message for the user; nothing is replaced."""

    message: str


@dataclass(frozen=True, slots=True)
class SuggestionContext:
    """A reference found before the cursor, with the options to offer."""

    reference: Reference
    start: int
    end: int
    options: tuple[str, str]


def link_selection(
    selection: str, settings: Settings, index: IndexView,
) -> Replacement | Notice:
    """Turn a whole selection into a link (the "Make Bible link" command)."""
    outcome = parse_reference(selection, SELECTION_SINGLE, SELECTION_RANGE, index)
    match outcome:
        case NoMatch():
            return Notice(NO_SELECTION_MATCH_MESSAGE)
        case InvalidReference(message=message):
            return Notice(message)
        case Locus() | Range():
            return Replacement(0, len(selection), render_link(outcome, settings.templates))


def _options(ref: Reference) -> tuple[str, str]:
    match ref:
        case Locus(verse=None):
            return "Link chapter", "Embed chapter"
        case Locus():
            return "Link verse", "Embed verse"
        case Range():
            return "Link verses", "Embed verses"


def suggest(line_before_cursor: str, index: IndexView) -> SuggestionContext | None:
    """Offer link/embed options for a reference ending at the cursor.

    Invalid references offer nothing. The replaced span stops before a single
    trailing whitespace character, which stays in the text.
    """
    outcome = parse_reference(line_before_cursor, SUGGEST_SINGLE, SUGGEST_RANGE, index)
    if not isinstance(outcome, Locus | Range):
        return None
    end = outcome.end
    if outcome.text and outcome.text[-1].isspace():
        end -= 1
    return SuggestionContext(
        reference=outcome,
        start=outcome.start,
        end=end,
        options=_options(outcome),
    )


def apply_suggestion(
    context: SuggestionContext,
    option: str,
    settings: Settings,
    index: IndexView,
) -> Replacement | Notice:
    """Build the replacement for the option the user picked."""
    if option.startswith("Link"):
        text = render_link(context.reference, settings.templates)
    elif option.startswith("Embed"):
        embed = render_embed(context.reference, index)
        if isinstance(embed, InvalidReference):
            return Notice(embed.message)
        text = embed
    else:
        raise ValueError(f"Unknown suggestion option: {option!r}")
    return Replacement(context.start, context.end, text)


def instant_link(
    text_before_cursor: str, settings: Settings, index: IndexView,
) -> Replacement | None:
    """Link ``<trigger>Book C:V`` as soon as a whitespace character follows it.

    The replacement covers the trigger and the reference and leaves the
    whitespace character that was just typed.
    """
    if not settings.enable_instant_linking:
        return None
    single, multi = instant_patterns(settings.instant_linking_char)
    outcome = parse_reference(text_before_cursor, single, multi, index)
    if not isinstance(outcome, Locus | Range):
        return None
    return Replacement(outcome.start, outcome.end - 1, render_link(outcome, settings.templates))
