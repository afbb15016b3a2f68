#!/usr/bin/env python3
"""Parse the rulebook text file into the published rules.json.

Usage:
    # Try the default rulebook file names in the current directory
    python3 scripts/parse_rules.py

    # Explicit input/output, reject duplicate identifiers
    python3 scripts/parse_rules.py \
      --input "Riftbound Core Rules v.1.2.txt" \
      --output public/data/rules.json --strict

    # Machine-readable build summary on stdout
    python3 scripts/parse_rules.py --input rules.txt --json

Structured JSON output goes to stdout; human messages go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

import orjson

from rulebound.config import DEFAULT_CONFIG, ParserConfig, parser_config_to_dict
from rulebound.document_builder import build_rule_document_from_file
from rulebound.io_utils import save_rule_document
from rulebound.rule_types import (
    BuildDiagnostics,
    DuplicateIdentifierError,
    RuleDocument,
    build_diagnostics_to_dict,
)

DEFAULT_INPUT_CANDIDATES: tuple[str, ...] = (
    "Riftbound Core Rules v.1.2.txt",
    "Riftbound Core Rules v1.2.txt",
    "Riftbound Core Rules.txt",
)
DEFAULT_OUTPUT = Path("public/data/rules.json")


def log(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


def resolve_input(candidates: list[Path]) -> Path | None:
    """First candidate that exists and is non-empty."""
    for candidate in candidates:
        if candidate.is_file() and candidate.stat().st_size > 0:
            return candidate
    return None


def build_summary(
    document: RuleDocument,
    diagnostics: BuildDiagnostics,
    *,
    input_path: Path,
    output_path: Path,
    config: ParserConfig,
) -> dict[str, Any]:
    first = document.sections[0] if document.sections else None
    last = document.sections[-1] if document.sections else None
    return {
        "input": str(input_path),
        "output": str(output_path),
        "version": document.version,
        "last_updated": document.last_updated,
        "rule_count": len(document.sections),
        "first_rule": f"{first.number} {first.title}" if first else "",
        "last_rule": f"{last.number} {last.title}" if last else "",
        "diagnostics": build_diagnostics_to_dict(diagnostics),
        "config": parser_config_to_dict(config),
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Parse the rulebook text file into rules.json.",
    )
    parser.add_argument(
        "--input", type=Path, action="append", default=None,
        help="Rulebook text file (repeatable; first non-empty file wins)",
    )
    parser.add_argument(
        "--output", type=Path, default=DEFAULT_OUTPUT,
        help=f"Output JSON path (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="Parser config JSON (header prefixes, default version...)",
    )
    parser.add_argument(
        "--strict", action="store_true",
        help="Fail on duplicate rule identifiers",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Write the build summary as JSON to stdout",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    config = ParserConfig.from_json(args.config) if args.config else DEFAULT_CONFIG
    if args.strict and not config.strict_duplicates:
        config = replace(config, strict_duplicates=True)

    candidates = args.input or [Path(name) for name in DEFAULT_INPUT_CANDIDATES]
    input_path = resolve_input(candidates)
    if input_path is None:
        log("ERROR: rulebook file not found or is empty.")
        log("Please ensure one of these files exists and is saved:")
        for candidate in candidates:
            log(f"  - {candidate}")
        return 1

    log(f"Parsing {input_path}...")
    try:
        document, diagnostics = build_rule_document_from_file(input_path, config=config)
    except (OSError, UnicodeDecodeError) as exc:
        log(f"ERROR: could not read {input_path}: {exc}")
        return 1
    except DuplicateIdentifierError as exc:
        log(f"ERROR: {exc}")
        return 1

    save_rule_document(document, args.output)

    summary = build_summary(
        document,
        diagnostics,
        input_path=input_path,
        output_path=args.output,
        config=config,
    )
    log(f"Parsed {summary['rule_count']} rules")
    log(f"Version: {document.version}")
    log(f"Last Updated: {document.last_updated}")
    if document.sections:
        log(f"First rule: {summary['first_rule']}")
        log(f"Last rule: {summary['last_rule']}")
    if diagnostics.duplicate_ids:
        log(f"Duplicate identifiers skipped: {', '.join(diagnostics.duplicate_ids)}")
    log(f"Output written to {args.output}")

    if args.json:
        dump_json(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
