"""Rulebook version comparison.

Compares two already-built documents (typically two editions saved as
``rules.json``) and reports which rule ids were added, removed or
modified. A rule is modified when its content, title or ordered
cross-reference list differs.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from rulebound.io_utils import load_rule_document
from rulebound.rule_types import RuleDocument, RuleNode, VersionDiff

log = logging.getLogger(__name__)

_VERSION_FROM_PATH_RE = re.compile(r"v\.?(\d+\.\d+)")


def _node_changed(old: RuleNode, new: RuleNode) -> bool:
    return (
        old.content != new.content
        or old.title != new.title
        or old.cross_refs != new.cross_refs
    )


def compare_versions(old: RuleDocument, new: RuleDocument) -> VersionDiff:
    """Diff two documents.

    ``added`` and ``modified`` follow the new document's order, ``removed``
    the old document's order. The three lists are disjoint.
    """
    old_ids = set(old.index)
    new_ids = set(new.index)

    added = tuple(node.id for node in new.sections if node.id not in old_ids)
    removed = tuple(node.id for node in old.sections if node.id not in new_ids)
    modified = tuple(
        node.id
        for node in new.sections
        if node.id in old_ids and _node_changed(old.index[node.id], node)
    )
    log.debug(
        "Compared %s -> %s: %d added, %d modified, %d removed",
        old.version,
        new.version,
        len(added),
        len(modified),
        len(removed),
    )
    return VersionDiff(
        old_version=old.version,
        new_version=new.version,
        added=added,
        modified=modified,
        removed=removed,
    )


def detect_version(path: Path, document: RuleDocument | None = None) -> str:
    """Edition label for a saved document: its own version, else the file name."""
    if document is not None and document.version:
        return document.version
    m = _VERSION_FROM_PATH_RE.search(path.name)
    return m.group(1) if m else "unknown"


def detect_changes(old_path: Path, new_path: Path) -> VersionDiff:
    """Load two saved ``rules.json`` documents and diff them.

    One whole-file read per side; read and decode errors propagate.
    """
    old = load_rule_document(old_path)
    new = load_rule_document(new_path)
    return compare_versions(old, new)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def _snippet(text: str, *, max_len: int = 200) -> str:
    normalized = " ".join(str(text or "").split())
    if len(normalized) <= max_len:
        return normalized
    return normalized[: max_len - 3] + "..."


def _sample_rows(
    ids: tuple[str, ...],
    document: RuleDocument,
    samples: int,
) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for node_id in ids[:samples]:
        node = document.index[node_id]
        rows.append({"id": node.id, "title": node.title, "snippet": _snippet(node.content)})
    return rows


def summarize_changes(
    diff: VersionDiff,
    old: RuleDocument,
    new: RuleDocument,
    *,
    samples: int = 10,
) -> dict[str, Any]:
    """Counts plus a few sample rows per change category.

    Modified samples carry both the old and the new snippet.
    """
    modified_samples: list[dict[str, str]] = []
    for node_id in diff.modified[:samples]:
        before = old.index[node_id]
        after = new.index[node_id]
        modified_samples.append(
            {
                "id": node_id,
                "title": after.title,
                "old_snippet": _snippet(before.content),
                "new_snippet": _snippet(after.content),
            },
        )

    return {
        "old_version": diff.old_version,
        "new_version": diff.new_version,
        "counts": {
            "old_total": len(old.sections),
            "new_total": len(new.sections),
            "added": len(diff.added),
            "modified": len(diff.modified),
            "removed": len(diff.removed),
            "unchanged": len(set(old.index) & set(new.index)) - len(diff.modified),
        },
        "added_samples": _sample_rows(diff.added, new, samples),
        "modified_samples": modified_samples,
        "removed_samples": _sample_rows(diff.removed, old, samples),
    }
