"""Core types for the rules parser.

Type hierarchy:
  RuleNode         : one addressable rule (section, rule, detail...)
  RuleDocument     : parse result: ordered sections plus id index
  VersionDiff      : added / modified / removed ids between two documents
  BuildDiagnostics : counters and warnings from one build

Python attributes are snake_case. The JSON shape consumed by the
presentation layer keeps the camelCase keys of the published
``rules.json`` (``parentId``, ``crossRefs``, ``lastUpdated``...), see the
``*_to_dict`` / ``*_from_dict`` helpers at the bottom.

All types are frozen: a document is built once and then shared
read-only.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class DuplicateIdentifierError(ValueError):
    """Raised by strict builds when an identifier opens two rule nodes."""

    def __init__(self, identifier: str, line_number: int) -> None:
        super().__init__(
            f"duplicate rule identifier {identifier!r} at line {line_number}",
        )
        self.identifier = identifier
        self.line_number = line_number


class RuleDocumentFormatError(ValueError):
    """A serialized rules document is missing required keys or is mistyped."""


# ---------------------------------------------------------------------------
# RuleNode
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RuleNode:
    """One identified unit of rulebook text.

    ``content`` keeps the full body, including embedded lines that were
    not promoted to nodes of their own. ``title`` is the first body line.
    """

    id: str                         # "103.1.b.2"
    number: str                     # "103.1.b.2."
    title: str
    content: str
    level: int                      # 0 = top-level section
    parent_id: str | None
    children: tuple[str, ...]       # direct child ids, document order
    cross_refs: tuple[str, ...]     # ids named in content, may dangle
    version: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("RuleNode.id cannot be empty")
        if self.level < 0:
            raise ValueError(f"RuleNode.level must be >= 0, got {self.level}")
        if self.parent_id == self.id:
            raise ValueError(f"RuleNode {self.id!r} cannot parent itself")


# ---------------------------------------------------------------------------
# RuleDocument
# ---------------------------------------------------------------------------


def _index_sections(sections: tuple[RuleNode, ...]) -> Mapping[str, RuleNode]:
    return MappingProxyType({node.id: node for node in sections})


@dataclass(frozen=True, slots=True)
class RuleDocument:
    """Parse result and unit of persistence.

    Invariants (enforced in __post_init__):
        - ``index`` holds exactly the nodes in ``sections``
        - ``index[node.id] is node`` for every section
    """

    version: str
    last_updated: str
    sections: tuple[RuleNode, ...]
    index: Mapping[str, RuleNode] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not self.index and self.sections:
            object.__setattr__(self, "index", _index_sections(self.sections))
        elif not isinstance(self.index, MappingProxyType):
            object.__setattr__(self, "index", MappingProxyType(dict(self.index)))

        if len(self.index) != len(self.sections):
            raise ValueError(
                f"index size ({len(self.index)}) does not match "
                f"sections ({len(self.sections)}); duplicate identifiers?",
            )
        for node in self.sections:
            if self.index.get(node.id) is not node:
                raise ValueError(f"index entry for {node.id!r} is not the section node")


@dataclass(frozen=True, slots=True)
class VersionDiff:
    """Changes between two documents, as id lists."""

    old_version: str
    new_version: str
    added: tuple[str, ...]
    modified: tuple[str, ...]
    removed: tuple[str, ...]

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.modified or self.removed)


@dataclass(frozen=True, slots=True)
class BuildDiagnostics:
    """Build statistics and warnings."""

    stats: dict[str, int]
    duplicate_ids: tuple[str, ...]
    orphan_ids: tuple[str, ...]         # level > 0 but no ancestor in the text
    dangling_refs: dict[str, tuple[str, ...]]   # node id -> unresolved cross refs
    warnings: tuple[str, ...]


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def rule_node_to_dict(node: RuleNode) -> dict[str, Any]:
    """Serialize a node to its published JSON shape.

    ``parentId`` is omitted for top-level nodes.
    """
    out: dict[str, Any] = {
        "id": node.id,
        "number": node.number,
        "title": node.title,
        "content": node.content,
        "level": node.level,
        "children": list(node.children),
        "crossRefs": list(node.cross_refs),
        "version": node.version,
    }
    if node.parent_id is not None:
        out["parentId"] = node.parent_id
    return out


def rule_document_to_dict(document: RuleDocument) -> dict[str, Any]:
    sections = [rule_node_to_dict(node) for node in document.sections]
    return {
        "version": document.version,
        "lastUpdated": document.last_updated,
        "sections": sections,
        "index": {row["id"]: row for row in sections},
    }


def _require(payload: Mapping[str, Any], key: str, where: str) -> Any:
    if key not in payload:
        raise RuleDocumentFormatError(f"{where}: missing required key {key!r}")
    return payload[key]


def rule_node_from_dict(payload: Mapping[str, Any]) -> RuleNode:
    where = f"section {payload.get('id', '?')!r}"
    parent_id = payload.get("parentId")
    try:
        return RuleNode(
            id=str(_require(payload, "id", where)),
            number=str(payload.get("number") or f"{payload['id']}."),
            title=str(payload.get("title", "")),
            content=str(payload.get("content", "")),
            level=int(_require(payload, "level", where)),
            parent_id=str(parent_id) if parent_id else None,
            children=tuple(str(c) for c in payload.get("children", [])),
            cross_refs=tuple(str(r) for r in payload.get("crossRefs", [])),
            version=str(payload.get("version", "")),
        )
    except RuleDocumentFormatError:
        raise
    except (TypeError, ValueError) as exc:
        raise RuleDocumentFormatError(f"{where}: {exc}") from exc


def rule_document_from_dict(payload: Mapping[str, Any]) -> RuleDocument:
    """Rebuild a document from its JSON shape.

    The stored ``index`` is not trusted: it is rebuilt from ``sections``
    so older files with a missing or empty index still load.

    Files written by older tooling may repeat an id in ``sections``. The
    first occurrence is kept, later rows are dropped with a warning and
    repeated entries are removed from every ``children`` list, the same
    rule the builder applies to duplicate rule lines.
    """
    raw_sections = _require(payload, "sections", "rules document")
    if not isinstance(raw_sections, list):
        raise RuleDocumentFormatError("rules document: 'sections' must be a list")

    kept: dict[str, RuleNode] = {}
    dropped: list[str] = []
    for row in raw_sections:
        node = rule_node_from_dict(row)
        if node.id in kept:
            dropped.append(node.id)
            continue
        kept[node.id] = node
    if dropped:
        log.warning(
            "Dropped %d repeated section row(s), keeping first occurrence: %s",
            len(dropped),
            ", ".join(dict.fromkeys(dropped)),
        )
    sections = tuple(
        replace(node, children=tuple(dict.fromkeys(node.children)))
        if len(set(node.children)) != len(node.children)
        else node
        for node in kept.values()
    )
    try:
        return RuleDocument(
            version=str(payload.get("version", "")),
            last_updated=str(payload.get("lastUpdated", "")),
            sections=sections,
        )
    except ValueError as exc:
        raise RuleDocumentFormatError(f"rules document: {exc}") from exc


def version_diff_to_dict(diff: VersionDiff) -> dict[str, Any]:
    return {
        "oldVersion": diff.old_version,
        "newVersion": diff.new_version,
        "changes": {
            "added": list(diff.added),
            "modified": list(diff.modified),
            "removed": list(diff.removed),
        },
    }


def build_diagnostics_to_dict(diagnostics: BuildDiagnostics) -> dict[str, object]:
    return {
        "stats": dict(sorted(diagnostics.stats.items())),
        "duplicate_ids": list(diagnostics.duplicate_ids),
        "orphan_ids": list(diagnostics.orphan_ids),
        "dangling_refs": {
            node_id: list(refs)
            for node_id, refs in sorted(diagnostics.dangling_refs.items())
        },
        "warnings": list(diagnostics.warnings),
    }
