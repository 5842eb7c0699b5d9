"""Plugin settings and their JSON data file.

The data file uses the plugin's camelCase keys::

    {
      "pathToBibleFolder": "Bible",
      "verseHeadingLevel": 3,
      "singleVerseFormat": "{book} {chapter}:{verse}",
      "sameChapterMultiVerseFormat": "[[{book} {chapter}:{verse}]]-[[{endVerse}]]",
      "diffChapterMultiVerseFormat": "[[{book} {chapter}:{verse}]]-[[{endChapter}:{endVerse}]]",
      "enableInstantLinking": false,
      "instantLinkingChar": "@"
    }

Missing keys fall back to the defaults below; unknown keys are ignored.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import orjson

from quicklinker.link_generator import DEFAULT_TEMPLATES, LinkTemplates

DEFAULT_TRIGGER = "@"

# camelCase data-file key -> dataclass field
_KEY_MAP: dict[str, str] = {
    "pathToBibleFolder": "path_to_bible_folder",
    "verseHeadingLevel": "verse_heading_level",
    "singleVerseFormat": "single_verse_format",
    "sameChapterMultiVerseFormat": "same_chapter_multi_verse_format",
    "diffChapterMultiVerseFormat": "diff_chapter_multi_verse_format",
    "enableInstantLinking": "enable_instant_linking",
    "instantLinkingChar": "instant_linking_char",
}

_TEMPLATE_FIELDS = (
    "single_verse_format",
    "same_chapter_multi_verse_format",
    "diff_chapter_multi_verse_format",
)


class SettingsError(ValueError):
    """Raised when the settings data file cannot be used."""


def normalize_folder(value: str) -> str:
    """Trim whitespace and one trailing slash: ``" Bible/ "`` -> ``"Bible"``."""
    value = value.strip()
    if value.endswith("/"):
        value = value[:-1]
    return value


def coerce_heading_level(value: Any) -> int | None:
    """Heading level from an int or numeric string; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        level = int(value)
    except (TypeError, ValueError):
        return None
    return level if level > 0 else None


@dataclass(frozen=True, slots=True)
class Settings:
    path_to_bible_folder: str = "Bible"
    verse_heading_level: int | None = None

    single_verse_format: str = DEFAULT_TEMPLATES.single_verse
    same_chapter_multi_verse_format: str = DEFAULT_TEMPLATES.same_chapter
    diff_chapter_multi_verse_format: str = DEFAULT_TEMPLATES.diff_chapter

    enable_instant_linking: bool = False
    instant_linking_char: str = DEFAULT_TRIGGER

    @property
    def templates(self) -> LinkTemplates:
        return LinkTemplates(
            single_verse=self.single_verse_format,
            same_chapter=self.same_chapter_multi_verse_format,
            diff_chapter=self.diff_chapter_multi_verse_format,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Build settings from camelCase or snake_case keys.

        A template set to null keeps its default; any other non-string
        template raises ``SettingsError``.
        """
        field_names = {f.name for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = _KEY_MAP.get(key, key)
            if name in field_names:
                kwargs[name] = value

        if "path_to_bible_folder" in kwargs:
            kwargs["path_to_bible_folder"] = normalize_folder(
                str(kwargs["path_to_bible_folder"])
            )
        if "verse_heading_level" in kwargs:
            kwargs["verse_heading_level"] = coerce_heading_level(
                kwargs["verse_heading_level"]
            )
        if "enable_instant_linking" in kwargs:
            kwargs["enable_instant_linking"] = bool(kwargs["enable_instant_linking"])
        for name in _TEMPLATE_FIELDS:
            if name not in kwargs:
                continue
            if kwargs[name] is None:
                del kwargs[name]
            elif not isinstance(kwargs[name], str):
                raise SettingsError(
                    f"{name} must be a string, got {type(kwargs[name]).__name__}"
                )
        if "instant_linking_char" in kwargs:
            trigger = "".join(str(kwargs["instant_linking_char"] or "").split())
            kwargs["instant_linking_char"] = trigger or DEFAULT_TRIGGER
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """camelCase mapping as stored in the data file."""
        return {key: getattr(self, name) for key, name in _KEY_MAP.items()}


def load_settings(path: Path) -> Settings:
    """Load settings from ``path``; a missing file gives the defaults."""
    if not path.exists():
        return Settings()
    try:
        data = orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as exc:
        raise SettingsError(f"Malformed settings file {path}: {exc}") from exc
    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise SettingsError(
            f"Settings file {path} must hold a JSON object, got {type(data).__name__}"
        )
    return Settings.from_dict(data)


def save_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(
        orjson.dumps(settings.to_dict(), option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)
    )
