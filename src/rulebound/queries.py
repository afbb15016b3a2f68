"""Read-only query surface over a built RuleDocument.

This is the contract the presentation layer consumes: lookups by id,
tree navigation, reverse cross-reference (backlink) queries and a
simple field-weighted text search. ``RulesQuery`` never mutates the
document, so one instance can serve concurrent readers.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, TypeAlias

from rulebound.rule_types import RuleDocument, RuleNode


SearchField: TypeAlias = Literal["number", "title", "content"]

# Field weights: an id hit outranks a heading hit outranks a body hit.
FIELD_SCORES: dict[SearchField, int] = {
    "number": 15,
    "title": 10,
    "content": 5,
}

SNIPPET_RADIUS_CHARS = 50


@dataclass(frozen=True, slots=True)
class SearchMatch:
    """Where a query matched inside one field."""

    field: SearchField
    snippet: str
    position: int       # char offset of the match in the full field value


@dataclass(frozen=True, slots=True)
class SearchResult:
    node: RuleNode
    score: int
    matches: tuple[SearchMatch, ...]


def _content_snippet(content: str, position: int, query_len: int) -> str:
    start = max(0, position - SNIPPET_RADIUS_CHARS)
    end = min(len(content), position + query_len + SNIPPET_RADIUS_CHARS)
    prefix = "..." if start > 0 else ""
    suffix = "..." if end < len(content) else ""
    return f"{prefix}{content[start:end]}{suffix}"


class RulesQuery:
    """Query helpers bound to one document."""

    __slots__ = ("document",)

    def __init__(self, document: RuleDocument) -> None:
        self.document = document

    def top_level_nodes(self) -> list[RuleNode]:
        return [node for node in self.document.sections if node.level == 0]

    def node_by_id(self, node_id: str) -> RuleNode | None:
        return self.document.index.get(node_id)

    def child_nodes(self, node_id: str) -> list[RuleNode]:
        """Direct children in document order; unresolved ids are dropped."""
        node = self.node_by_id(node_id)
        if node is None:
            return []
        return [
            child for child_id in node.children
            if (child := self.document.index.get(child_id)) is not None
        ]

    def referencing_nodes(self, node_id: str) -> list[RuleNode]:
        """Nodes whose cross references name ``node_id`` (backlinks)."""
        return [node for node in self.document.sections if node_id in node.cross_refs]

    def resolved_cross_refs(self, node_id: str) -> list[RuleNode]:
        """Targets of a node's cross references, dangling ones dropped."""
        node = self.node_by_id(node_id)
        if node is None:
            return []
        return [
            target for ref in node.cross_refs
            if (target := self.document.index.get(ref)) is not None
        ]

    def ancestors(self, node_id: str) -> list[RuleNode]:
        """Parent chain of a node, root first (breadcrumb order)."""
        chain: list[RuleNode] = []
        node = self.node_by_id(node_id)
        seen: set[str] = set()
        while node is not None and node.parent_id is not None and node.parent_id not in seen:
            seen.add(node.parent_id)
            node = self.document.index.get(node.parent_id)
            if node is not None:
                chain.append(node)
        chain.reverse()
        return chain

    def search(self, query: str) -> list[SearchResult]:
        """Case-insensitive substring search over number, title and content.

        Matching runs on the original field text, so ``position`` and the
        content snippet window are offsets into the stored value even when
        lowercasing would change its length. Results are ordered by score
        (highest first); ties keep document order. A blank query returns
        no results.
        """
        needle = query.strip()
        if not needle:
            return []
        pattern = re.compile(re.escape(needle), re.IGNORECASE)

        results: list[SearchResult] = []
        for node in self.document.sections:
            matches: list[SearchMatch] = []
            score = 0

            m = pattern.search(node.number)
            if m is not None:
                score += FIELD_SCORES["number"]
                matches.append(SearchMatch(field="number", snippet=node.number, position=m.start()))

            m = pattern.search(node.title)
            if m is not None:
                score += FIELD_SCORES["title"]
                matches.append(SearchMatch(field="title", snippet=node.title, position=m.start()))

            m = pattern.search(node.content)
            if m is not None:
                score += FIELD_SCORES["content"]
                matches.append(
                    SearchMatch(
                        field="content",
                        snippet=_content_snippet(node.content, m.start(), m.end() - m.start()),
                        position=m.start(),
                    ),
                )

            if matches:
                results.append(SearchResult(node=node, score=score, matches=tuple(matches)))

        results.sort(key=lambda row: -row.score)
        return results


def search_result_to_dict(result: SearchResult) -> dict[str, object]:
    return {
        "id": result.node.id,
        "score": result.score,
        "matches": [
            {"field": m.field, "snippet": m.snippet, "position": m.position}
            for m in result.matches
        ],
    }
