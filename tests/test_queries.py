"""Tests for rulebound.queries."""
from __future__ import annotations

from rulebound.document_builder import parse_rules_text
from rulebound.queries import RulesQuery, search_result_to_dict
from rulebound.rule_types import RuleDocument, RuleNode


def _ids(nodes: list[RuleNode]) -> list[str]:
    return [node.id for node in nodes]


class TestNavigation:
    def test_top_level_nodes(self, sample_document: RuleDocument) -> None:
        query = RulesQuery(sample_document)
        assert _ids(query.top_level_nodes()) == ["000", "100", "103", "346"]

    def test_node_by_id(self, sample_document: RuleDocument) -> None:
        query = RulesQuery(sample_document)
        node = query.node_by_id("103.1.a")
        assert node is not None
        assert node.level == 2
        assert query.node_by_id("999") is None

    def test_child_nodes(self, sample_document: RuleDocument) -> None:
        query = RulesQuery(sample_document)
        assert _ids(query.child_nodes("103")) == ["103.1", "103.2"]
        assert query.child_nodes("103.1.a.1.b") == []
        assert query.child_nodes("999") == []

    def test_referencing_nodes(self, sample_document: RuleDocument) -> None:
        query = RulesQuery(sample_document)
        assert _ids(query.referencing_nodes("346")) == ["103.1.a"]
        assert _ids(query.referencing_nodes("103")) == ["000.1"]
        assert query.referencing_nodes("100") == []

    def test_referencing_dangling_id(self, sample_document: RuleDocument) -> None:
        query = RulesQuery(sample_document)
        assert _ids(query.referencing_nodes("999")) == ["346.1.b"]

    def test_resolved_cross_refs_drop_dangling(self, sample_document: RuleDocument) -> None:
        query = RulesQuery(sample_document)
        assert _ids(query.resolved_cross_refs("103.2")) == ["103.1.a"]
        assert query.resolved_cross_refs("346.1.b") == []

    def test_ancestors_root_first(self, sample_document: RuleDocument) -> None:
        query = RulesQuery(sample_document)
        assert _ids(query.ancestors("103.1.a.1.b")) == ["103", "103.1", "103.1.a", "103.1.a.1"]
        assert query.ancestors("103") == []
        assert query.ancestors("missing") == []


class TestSearch:
    def test_field_weights(self, sample_document: RuleDocument) -> None:
        results = RulesQuery(sample_document).search("shuffl")
        assert [(r.node.id, r.score) for r in results] == [("103.1", 15), ("103.1.a", 15)]
        assert [m.field for m in results[0].matches] == ["title", "content"]

    def test_content_only_hit_scores_lowest(self, sample_document: RuleDocument) -> None:
        results = RulesQuery(sample_document).search("draw step")
        assert [(r.node.id, r.score) for r in results] == [("103.2", 5)]
        assert results[0].matches[0].field == "content"

    def test_number_hits_rank_first_in_document_order(self, sample_document: RuleDocument) -> None:
        results = RulesQuery(sample_document).search("103.1")
        assert [r.node.id for r in results] == [
            "103.1",
            "103.1.a",
            "103.1.a.1",
            "103.1.a.1.b",
            "103.2",
        ]
        assert results[0].score == 15
        assert results[-1].score == 5

    def test_case_insensitive(self, sample_document: RuleDocument) -> None:
        results = RulesQuery(sample_document).search("  PLAYING cards ")
        assert "346" in [r.node.id for r in results]

    def test_blank_query(self, sample_document: RuleDocument) -> None:
        assert RulesQuery(sample_document).search("   ") == []

    def test_no_hits(self, sample_document: RuleDocument) -> None:
        assert RulesQuery(sample_document).search("zebra") == []

    def test_content_snippet_window(self) -> None:
        body = "x" * 80 + "needle" + "y" * 80
        doc = parse_rules_text(f"400. Draw\n400.1. {body}\n")
        result = RulesQuery(doc).search("needle")[0]
        content_match = next(m for m in result.matches if m.field == "content")
        assert content_match.position == 80
        assert content_match.snippet == "..." + "x" * 50 + "needle" + "y" * 50 + "..."

    def test_offsets_index_original_text(self) -> None:
        # "İ".lower() is two code points; offsets must not drift.
        body = "İ" * 60 + " needle"
        doc = parse_rules_text(f"400. Draw\n400.1. {body}\n")
        result = RulesQuery(doc).search("NEEDLE")[0]
        content_match = next(m for m in result.matches if m.field == "content")
        assert content_match.position == 61
        assert content_match.snippet == "..." + "İ" * 49 + " needle"
        assert body[content_match.position:].startswith("needle")

    def test_short_content_snippet_has_no_ellipsis(self) -> None:
        doc = parse_rules_text("400. Draw\n400.1. Take a card.\nThen needle here.\n")
        result = RulesQuery(doc).search("needle")[0]
        assert result.node.id == "400.1"
        assert result.score == 5
        assert result.matches[0].snippet == "Take a card.\nThen needle here."

    def test_result_to_dict(self, sample_document: RuleDocument) -> None:
        result = RulesQuery(sample_document).search("Setup")[0]
        payload = search_result_to_dict(result)
        assert payload["id"] == "103"
        assert payload["score"] == 15
        assert payload["matches"][0] == {"field": "title", "snippet": "Setup", "position": 0}
