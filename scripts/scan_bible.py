#!/usr/bin/env python3
"""Scan a vault's Bible folder and report the chapter/verse index.

Reads every ``<Book> <Chapter>.md`` note under the Bible folder, counts verses
from the headings and prints the index as JSON. Chapters whose verse count
could not be found are listed under ``warnings``.

Usage:
    # Default folder ("Bible") and settings
    python3 scripts/scan_bible.py --vault ~/Notes

    # Plugin data file, verse headings at level 3
    python3 scripts/scan_bible.py --vault ~/Notes \
      --settings ~/Notes/.obsidian/plugins/bible-quicklinker/data.json \
      --heading-level 3
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

import orjson

from quicklinker.settings import (
    Settings,
    SettingsError,
    coerce_heading_level,
    load_settings,
    normalize_folder,
)
from quicklinker.structure_index import StructuralIndex
from quicklinker.vault import scan_vault

log = logging.getLogger("scan_bible")


def dump_json(obj: object) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scan a Bible folder of chapter notes and print the verse index."
    )
    parser.add_argument("--vault", required=True, type=Path, help="Vault root directory")
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Plugin settings JSON (data.json). Defaults apply when omitted.",
    )
    parser.add_argument(
        "--folder",
        default=None,
        help="Bible folder relative to the vault (overrides settings).",
    )
    parser.add_argument(
        "--heading-level",
        default=None,
        help="Only count headings of this level as verses (overrides settings).",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main() -> int:
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        settings = load_settings(args.settings) if args.settings else Settings()
    except SettingsError as exc:
        log.error("%s", exc)
        return 1
    if args.folder is not None:
        settings = dataclasses.replace(settings, path_to_bible_folder=normalize_folder(args.folder))
    if args.heading_level is not None:
        settings = dataclasses.replace(
            settings, verse_heading_level=coerce_heading_level(args.heading_level),
        )

    index = StructuralIndex()
    try:
        result = scan_vault(index, args.vault, settings)
    except FileNotFoundError as exc:
        log.error("%s", exc)
        return 1

    dump_json({
        "status": "ok",
        "folder": settings.path_to_bible_folder,
        "book_count": result.book_count,
        "chapter_count": result.chapter_count,
        "books": index.to_dict(),
        "warnings": [
            {"book": w.book, "chapter": w.chapter, "message": w.message}
            for w in result.warnings
        ],
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
