#!/usr/bin/env python3
"""Show how the line classifier sees the first lines of a rulebook file.

Usage:
    python3 scripts/classify_lines.py --input "Riftbound Core Rules v.1.2.txt"
    python3 scripts/classify_lines.py --input rules.txt --head 80 --json

Useful when a new edition changes its numbering and rules stop nesting.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import orjson

from rulebound.document_builder import split_lines
from rulebound.line_classifier import classify_line


def log(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def classify_rows(lines: list[str]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for line_number, line in enumerate(lines, start=1):
        result = classify_line(line)
        rows.append({
            "line": line_number,
            "text": line.strip()[:60],
            "level": result.level,
            "identifier": result.identifier,
        })
    return rows


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dump per-line classifier output.")
    parser.add_argument("--input", type=Path, required=True, help="Rulebook text file")
    parser.add_argument(
        "--head", type=int, default=30,
        help="Number of lines to classify (0 = all, default: 30)",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON rows on stdout")
    args = parser.parse_args(argv)

    try:
        text = args.input.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log(f"ERROR: could not read {args.input}: {exc}")
        return 1

    lines = split_lines(text)
    if args.head > 0:
        lines = lines[: args.head]
    rows = classify_rows(lines)

    if args.json:
        sys.stdout.buffer.write(orjson.dumps(rows, option=orjson.OPT_INDENT_2))
        sys.stdout.buffer.write(b"\n")
    else:
        for row in rows:
            ident = row["identifier"] or "-"
            print(f"{row['line']:>5} | level {row['level']:>2} | {ident:<14} | {row['text']!r}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
