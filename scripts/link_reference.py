#!/usr/bin/env python3
"""Turn a verse reference into link or embed markup.

Builds the verse index from the vault's Bible folder, parses TEXT the way the
"Make Bible link" command parses a selection and prints the result as JSON.
Exit status is 1 when TEXT is not a reference or is not valid.

Usage:
    python3 scripts/link_reference.py --vault ~/Notes "John 3:16"
    python3 scripts/link_reference.py --vault ~/Notes --embed "Genesis 1:30-2:3"
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import orjson

from quicklinker.link_generator import render_embed, render_link
from quicklinker.reference_grammar import SELECTION_RANGE, SELECTION_SINGLE, parse_reference
from quicklinker.reference_types import (
    InvalidReference,
    Locus,
    NoMatch,
    Range,
    reference_to_dict,
)
from quicklinker.settings import Settings, SettingsError, load_settings
from quicklinker.structure_index import StructuralIndex
from quicklinker.vault import scan_vault

log = logging.getLogger("link_reference")


def dump_json(obj: object) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a verse reference as a link or embed."
    )
    parser.add_argument("text", help="Reference text, e.g. 'John 3:16' or 'Genesis 1:30-2:3'")
    parser.add_argument("--vault", required=True, type=Path, help="Vault root directory")
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Plugin settings JSON (data.json). Defaults apply when omitted.",
    )
    parser.add_argument(
        "--embed",
        action="store_true",
        help="Print embed markup instead of a link.",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main() -> int:
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        settings = load_settings(args.settings) if args.settings else Settings()
    except SettingsError as exc:
        log.error("%s", exc)
        return 1

    index = StructuralIndex()
    try:
        scan_vault(index, args.vault, settings)
    except FileNotFoundError as exc:
        log.error("%s", exc)
        return 1

    outcome = parse_reference(args.text, SELECTION_SINGLE, SELECTION_RANGE, index)
    match outcome:
        case NoMatch():
            dump_json({"status": "no_match", "text": args.text})
            return 1
        case InvalidReference(kind=kind, message=message):
            dump_json({"status": "error", "kind": kind, "message": message})
            return 1
        case Locus() | Range():
            pass

    if args.embed:
        output = render_embed(outcome, index)
        if isinstance(output, InvalidReference):
            dump_json({"status": "error", "kind": output.kind, "message": output.message})
            return 1
    else:
        output = render_link(outcome, settings.templates)

    dump_json({
        "status": "ok",
        "reference": reference_to_dict(outcome),
        "output": output,
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
