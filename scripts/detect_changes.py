#!/usr/bin/env python3
"""Compare two saved rules.json editions and report rule changes.

Typical upgrade flow:
    cp public/data/rules.json public/data/versions/v1.2.json
    python3 scripts/parse_rules.py --input "Riftbound Core Rules v.1.3.txt"
    python3 scripts/detect_changes.py \
      --old public/data/versions/v1.2.json \
      --new public/data/rules.json --json

Exit codes:
    0  compared successfully
    1  an input file is missing or is not a rules document
    2  --fail-on-change was given and changes were found

Structured JSON output goes to stdout; human messages go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import orjson

from rulebound.io_utils import load_rule_document
from rulebound.rule_types import RuleDocumentFormatError, version_diff_to_dict
from rulebound.version_diff import compare_versions, detect_version, summarize_changes


def log(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


def _print_human(summary: dict[str, Any]) -> None:
    counts = summary["counts"]
    log("Change Detection")
    log("================")
    log(f"Old version: {summary['old_version']} ({counts['old_total']} rules)")
    log(f"New version: {summary['new_version']} ({counts['new_total']} rules)")
    log(f"  Added:     {counts['added']}")
    log(f"  Modified:  {counts['modified']}")
    log(f"  Removed:   {counts['removed']}")
    log(f"  Unchanged: {counts['unchanged']}")
    for label, key in (("Added", "added_samples"), ("Removed", "removed_samples")):
        rows = summary[key]
        if rows:
            log(f"\n{label} (first {len(rows)}):")
            for row in rows:
                log(f"  {row['id']}. {row['title']}")
    if summary["modified_samples"]:
        log(f"\nModified (first {len(summary['modified_samples'])}):")
        for row in summary["modified_samples"]:
            log(f"  {row['id']}. {row['title']}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compare two rules.json editions.",
    )
    parser.add_argument("--old", type=Path, required=True, help="Previous rules.json")
    parser.add_argument("--new", type=Path, required=True, help="Current rules.json")
    parser.add_argument(
        "--samples", type=int, default=10,
        help="Sample rows per change category (default: 10)",
    )
    parser.add_argument(
        "--fail-on-change", action="store_true",
        help="Exit with status 2 when any rule changed",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Write the diff and summary as JSON to stdout",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    for path in (args.old, args.new):
        if not path.is_file():
            log(f"ERROR: rules file not found: {path}")
            log("Run scripts/parse_rules.py first to generate it.")
            return 1

    try:
        old = load_rule_document(args.old)
        new = load_rule_document(args.new)
    except (orjson.JSONDecodeError, RuleDocumentFormatError) as exc:
        log(f"ERROR: invalid rules document: {exc}")
        return 1

    diff = compare_versions(old, new)
    summary = summarize_changes(diff, old, new, samples=max(0, args.samples))
    summary["old_label"] = detect_version(args.old, old)
    summary["new_label"] = detect_version(args.new, new)

    _print_human(summary)
    if args.json:
        dump_json({"diff": version_diff_to_dict(diff), "summary": summary})

    if args.fail_on_change and diff.has_changes:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
