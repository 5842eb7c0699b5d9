"""Scan a folder of Markdown chapter notes into chapter sources.

Each note named ``<Book> <Chapter>.md`` (``Genesis 1.md``, ``1 John 3.md``)
is one chapter; its ATX headings (``### 31``) carry the verse numbers.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from pathlib import Path

from quicklinker.settings import Settings
from quicklinker.structure_index import (
    ChapterSource,
    Heading,
    RebuildResult,
    StructuralIndex,
)

log = logging.getLogger(__name__)

_ATX_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")


def extract_headings(markdown: str) -> list[Heading]:
    """ATX headings of a note, outside fenced code blocks."""
    headings: list[Heading] = []
    fence: str | None = None
    for line in markdown.splitlines():
        fm = _FENCE_RE.match(line)
        if fm:
            marker = fm.group(1)
            if fence is None:
                fence = marker[0] * 3
            elif marker.startswith(fence):
                fence = None
            continue
        if fence is not None:
            continue
        m = _ATX_HEADING_RE.match(line)
        if m:
            headings.append(Heading(text=(m.group(2) or "").strip(), level=len(m.group(1))))
    return headings


def iter_chapter_sources(vault_root: Path, folder: str) -> Iterator[ChapterSource]:
    """Yield a ``ChapterSource`` per chapter note under ``vault_root/folder``.

    Notes with no headings at all are skipped. An empty ``folder`` scans the
    whole vault.
    """
    base = vault_root / folder if folder else vault_root
    if not base.is_dir():
        raise FileNotFoundError(f"Bible folder not found: {base}")

    for path in sorted(base.rglob("*.md")):
        source = ChapterSource.from_file_name(path.stem)
        if source is None:
            log.debug("Skipping %s: not a chapter note", path)
            continue
        headings = extract_headings(path.read_text(encoding="utf-8"))
        if not headings:
            log.debug("Skipping %s: no headings", path)
            continue
        yield ChapterSource(source.book, source.chapter, tuple(headings))


def scan_vault(
    index: StructuralIndex, vault_root: Path, settings: Settings,
) -> RebuildResult:
    """Rebuild ``index`` from the Bible folder named in ``settings``."""
    log.info("Scanning %s", vault_root / settings.path_to_bible_folder)
    return index.rebuild(
        iter_chapter_sources(vault_root, settings.path_to_bible_folder),
        verse_heading_level=settings.verse_heading_level,
    )
