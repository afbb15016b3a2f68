"""Hierarchical document builder.

Streams the rulebook text through the line classifier and assembles
``RuleNode`` records in one linear scan:

    1. Accumulate each rule's body (heading text + continuation lines,
       blank lines kept as paragraph breaks).
    2. Link each new rule to its nearest ancestor already seen in the
       text, by stripping identifier segments right to left.
    3. After the scan, fill ``children`` in document order and build the
       id index.

Malformed lines never abort a build: they become continuation text of
the rule being accumulated (or are ignored before the first rule). The
only error that escapes is the initial file read, plus
``DuplicateIdentifierError`` when strict duplicate checking is enabled.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from rulebound.config import DEFAULT_CONFIG, ParserConfig
from rulebound.identifiers import ancestor_prefixes
from rulebound.line_classifier import classify_line, extract_cross_references
from rulebound.rule_types import (
    BuildDiagnostics,
    DuplicateIdentifierError,
    RuleDocument,
    RuleNode,
)

log = logging.getLogger(__name__)

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_VERSION_FROM_NAME_RE = re.compile(r"v\.?(\d+\.\d+)")
_LAST_UPDATED_RE = re.compile(r"Last Updated: (.+)")


@dataclass(slots=True)
class _NodeDraft:
    """A rule node while its body is still being accumulated."""

    identifier: str
    level: int
    parent_id: str | None
    line_number: int
    body_lines: list[str]
    content: str = ""
    title: str = ""
    cross_refs: tuple[str, ...] = ()
    children: list[str] = field(default_factory=list[str])

    def finalize(self) -> None:
        self.content = "\n".join(self.body_lines).strip()
        self.title = self.content.split("\n", 1)[0]
        self.cross_refs = tuple(extract_cross_references(self.content))


# ---------------------------------------------------------------------------
# Source metadata
# ---------------------------------------------------------------------------


def extract_version(source_name: str, default: str = DEFAULT_CONFIG.default_version) -> str:
    """Edition tag from a file name ("Core Rules v.1.2.txt" -> "1.2")."""
    m = _VERSION_FROM_NAME_RE.search(source_name or "")
    return m.group(1) if m else default


def extract_last_updated(text: str) -> str:
    """Value of the first "Last Updated: ..." line, or "" when absent."""
    m = _LAST_UPDATED_RE.search(text)
    return m.group(1).strip() if m else ""


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


def find_parent_id(identifier: str, number_to_id: Mapping[str, str]) -> str | None:
    """Nearest ancestor of ``identifier`` that already appeared in the text.

    Missing intermediate tiers are skipped, so "103.1.a" attaches to
    "103" when no "103.1" rule exists.
    """
    for prefix in ancestor_prefixes(identifier):
        parent_id = number_to_id.get(prefix)
        if parent_id is not None:
            return parent_id
    return None


def split_lines(text: str) -> list[str]:
    """Physical lines as the builder numbers them: split on LF or CRLF only."""
    return _LINE_SPLIT_RE.split(text) if text else []


def _is_header_line(line_index: int, trimmed: str, config: ParserConfig) -> bool:
    if line_index >= config.header_scan_lines:
        return False
    return any(trimmed.startswith(prefix) for prefix in config.header_prefixes)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_rule_document(
    text: str,
    *,
    source_name: str = "",
    config: ParserConfig | None = None,
) -> tuple[RuleDocument, BuildDiagnostics]:
    """Build a RuleDocument plus diagnostics from raw rulebook text.

    Args:
        text: Full rulebook text.
        source_name: Originating file name; its "v1.2" tag sets the edition.
        config: Parser configuration (defaults to ``DEFAULT_CONFIG``).

    Returns:
        (document, diagnostics)

    Raises:
        DuplicateIdentifierError: only when ``config.strict_duplicates``.
    """
    config = config or DEFAULT_CONFIG
    version = extract_version(source_name, config.default_version)
    last_updated = extract_last_updated(text)

    lines = split_lines(text)
    drafts: list[_NodeDraft] = []
    number_to_id: dict[str, str] = {}
    current: _NodeDraft | None = None
    duplicate_ids: list[str] = []
    warnings: list[str] = []
    counts = {
        "line_count": len(lines),
        "blank_line_count": 0,
        "header_line_count": 0,
        "rule_line_count": 0,
        "continuation_line_count": 0,
        "dropped_line_count": 0,
    }

    for line_index, line in enumerate(lines):
        trimmed = line.strip()

        if not trimmed:
            counts["blank_line_count"] += 1
            if current is not None:
                current.body_lines.append("")
            continue

        if _is_header_line(line_index, trimmed, config):
            counts["header_line_count"] += 1
            continue

        classification = classify_line(trimmed)
        if not classification.is_rule_start or classification.identifier is None:
            if current is None:
                counts["dropped_line_count"] += 1
            else:
                counts["continuation_line_count"] += 1
                current.body_lines.append(trimmed)
            continue

        counts["rule_line_count"] += 1
        if current is not None:
            current.finalize()
            drafts.append(current)
            current = None

        identifier = classification.identifier
        line_number = line_index + 1
        if identifier in number_to_id:
            if config.strict_duplicates:
                raise DuplicateIdentifierError(identifier, line_number)
            log.warning(
                "Duplicate rule identifier %s at line %d; keeping the first occurrence",
                identifier,
                line_number,
            )
            duplicate_ids.append(identifier)
            warnings.append(f"duplicate_identifier:{identifier}:line_{line_number}")
            # current stays None so the duplicate's body is discarded too
            continue

        current = _NodeDraft(
            identifier=identifier,
            level=classification.level,
            parent_id=find_parent_id(identifier, number_to_id),
            line_number=line_number,
            body_lines=[classification.heading],
        )
        number_to_id[identifier] = identifier

    if current is not None:
        current.finalize()
        drafts.append(current)

    by_id = {draft.identifier: draft for draft in drafts}
    for draft in drafts:
        if draft.parent_id is not None:
            by_id[draft.parent_id].children.append(draft.identifier)

    sections = tuple(
        RuleNode(
            id=draft.identifier,
            number=f"{draft.identifier}.",
            title=draft.title,
            content=draft.content,
            level=draft.level,
            parent_id=draft.parent_id,
            children=tuple(draft.children),
            cross_refs=draft.cross_refs,
            version=version,
        )
        for draft in drafts
    )
    document = RuleDocument(
        version=version,
        last_updated=last_updated,
        sections=sections,
    )

    orphan_ids = tuple(
        node.id for node in sections if node.level > 0 and node.parent_id is None
    )
    dangling_refs = {
        node.id: dangling
        for node in sections
        if (dangling := tuple(ref for ref in node.cross_refs if ref not in document.index))
    }
    for node_id in orphan_ids:
        warnings.append(f"orphan:{node_id}")

    diagnostics = BuildDiagnostics(
        stats={
            **counts,
            "node_count": len(sections),
            "top_level_count": sum(1 for node in sections if node.level == 0),
            "max_level": max((node.level for node in sections), default=-1),
            "orphan_count": len(orphan_ids),
            "cross_ref_count": sum(len(node.cross_refs) for node in sections),
            "dangling_ref_count": sum(len(refs) for refs in dangling_refs.values()),
            "duplicate_count": len(duplicate_ids),
        },
        duplicate_ids=tuple(duplicate_ids),
        orphan_ids=orphan_ids,
        dangling_refs=dangling_refs,
        warnings=tuple(warnings),
    )
    log.debug(
        "Built %d rule nodes (version %s) from %d lines",
        len(sections),
        version,
        len(lines),
    )
    return document, diagnostics


def parse_rules_text(
    text: str,
    *,
    source_name: str = "",
    config: ParserConfig | None = None,
) -> RuleDocument:
    """Parse rulebook text into a RuleDocument."""
    document, _ = build_rule_document(text, source_name=source_name, config=config)
    return document


def build_rule_document_from_file(
    path: Path,
    *,
    config: ParserConfig | None = None,
) -> tuple[RuleDocument, BuildDiagnostics]:
    """Read ``path`` once (UTF-8) and build it. Read errors propagate."""
    text = path.read_text(encoding="utf-8")
    return build_rule_document(text, source_name=path.name, config=config)


def parse_rules_file(path: Path, *, config: ParserConfig | None = None) -> RuleDocument:
    """Read and parse a rulebook text file. Read errors propagate."""
    document, _ = build_rule_document_from_file(path, config=config)
    return document
