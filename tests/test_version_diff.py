"""Tests for rulebound.version_diff."""
from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import orjson
import pytest

from rulebound.document_builder import parse_rules_text
from rulebound.io_utils import save_rule_document
from rulebound.rule_types import RuleDocument, version_diff_to_dict
from rulebound.version_diff import (
    compare_versions,
    detect_changes,
    detect_version,
    summarize_changes,
)


OLD_TEXT = (
    "400. Draw\n"
    "400.1. Drawing is taking the top card. See rule 346.\n"
    "400.2. Removed rule.\n"
    "346. Playing Cards\n"
)

NEW_TEXT = (
    "400. Drawing\n"
    "400.1. Drawing is taking the top card. See rule 346.\n"
    "400.3. Added rule.\n"
    "346. Playing Cards\n"
    "346.1. Also added.\n"
)


@pytest.fixture
def old_doc() -> RuleDocument:
    return parse_rules_text(OLD_TEXT, source_name="rules v1.2.txt")


@pytest.fixture
def new_doc() -> RuleDocument:
    return parse_rules_text(NEW_TEXT, source_name="rules v1.3.txt")


class TestCompareVersions:
    def test_added_modified_removed(self, old_doc: RuleDocument, new_doc: RuleDocument) -> None:
        diff = compare_versions(old_doc, new_doc)
        assert diff.added == ("400.3", "346.1")
        assert diff.removed == ("400.2",)
        assert diff.modified == ("400",)
        assert (diff.old_version, diff.new_version) == ("1.2", "1.3")
        assert diff.has_changes is True

    def test_identical_documents(self, old_doc: RuleDocument) -> None:
        diff = compare_versions(old_doc, old_doc)
        assert diff.added == diff.modified == diff.removed == ()
        assert diff.has_changes is False

    def test_partition(self, old_doc: RuleDocument, new_doc: RuleDocument) -> None:
        diff = compare_versions(old_doc, new_doc)
        added, modified, removed = set(diff.added), set(diff.modified), set(diff.removed)
        assert not added & modified
        assert not added & removed
        assert not modified & removed

        for node_id in set(old_doc.index) & set(new_doc.index) - modified:
            before, after = old_doc.index[node_id], new_doc.index[node_id]
            assert before.content == after.content
            assert before.title == after.title
            assert before.cross_refs == after.cross_refs

    def test_cross_ref_order_alone_counts_as_modified(self, old_doc: RuleDocument) -> None:
        node = old_doc.index["400.1"]
        changed = replace(node, cross_refs=("346", "103"))
        sections = tuple(changed if n.id == node.id else n for n in old_doc.sections)
        new = RuleDocument(version="1.3", last_updated="", sections=sections)
        assert compare_versions(old_doc, new).modified == ("400.1",)

    def test_empty_old_document(self, new_doc: RuleDocument) -> None:
        empty = RuleDocument(version="0.0", last_updated="", sections=())
        diff = compare_versions(empty, new_doc)
        assert diff.added == tuple(n.id for n in new_doc.sections)
        assert diff.removed == ()

    def test_to_dict_shape(self, old_doc: RuleDocument, new_doc: RuleDocument) -> None:
        payload = version_diff_to_dict(compare_versions(old_doc, new_doc))
        assert payload == {
            "oldVersion": "1.2",
            "newVersion": "1.3",
            "changes": {
                "added": ["400.3", "346.1"],
                "modified": ["400"],
                "removed": ["400.2"],
            },
        }


class TestDetectChanges:
    def test_from_saved_files(
        self, tmp_path: Path, old_doc: RuleDocument, new_doc: RuleDocument,
    ) -> None:
        old_path = tmp_path / "versions" / "v1.2.json"
        new_path = tmp_path / "rules.json"
        save_rule_document(old_doc, old_path)
        save_rule_document(new_doc, new_path)

        diff = detect_changes(old_path, new_path)
        assert diff == compare_versions(old_doc, new_doc)

    def test_old_edition_with_repeated_ids(self, tmp_path: Path, new_doc: RuleDocument) -> None:
        old_path = tmp_path / "versions" / "v1.2.json"
        old_path.parent.mkdir(parents=True)
        rows = [
            {"id": "400", "level": 0, "title": "Draw", "content": "Draw",
             "children": ["400.1", "400.1"]},
            {"id": "400.1", "level": 1, "parentId": "400",
             "title": "Drawing is taking the top card. See rule 346.",
             "content": "Drawing is taking the top card. See rule 346.",
             "crossRefs": ["346"]},
            {"id": "400.1", "level": 1, "parentId": "400",
             "title": "Later copy.", "content": "Later copy."},
            {"id": "346", "level": 0, "title": "Playing Cards", "content": "Playing Cards"},
        ]
        old_path.write_bytes(orjson.dumps({"version": "1.2", "sections": rows}))
        new_path = tmp_path / "rules.json"
        save_rule_document(new_doc, new_path)

        diff = detect_changes(old_path, new_path)
        assert diff.added == ("400.3", "346.1")
        assert diff.modified == ("400",)
        assert diff.removed == ()

    def test_missing_file_propagates(self, tmp_path: Path, old_doc: RuleDocument) -> None:
        old_path = tmp_path / "old.json"
        save_rule_document(old_doc, old_path)
        with pytest.raises(FileNotFoundError):
            detect_changes(old_path, tmp_path / "missing.json")


class TestDetectVersion:
    def test_document_version_wins(self, old_doc: RuleDocument) -> None:
        assert detect_version(Path("v9.9.json"), old_doc) == "1.2"

    def test_file_name_fallback(self) -> None:
        assert detect_version(Path("public/data/versions/v1.2.json")) == "1.2"
        assert detect_version(Path("rules.json")) == "unknown"


class TestSummarizeChanges:
    def test_counts_and_samples(self, old_doc: RuleDocument, new_doc: RuleDocument) -> None:
        diff = compare_versions(old_doc, new_doc)
        summary = summarize_changes(diff, old_doc, new_doc, samples=1)
        assert summary["counts"] == {
            "old_total": 4,
            "new_total": 5,
            "added": 2,
            "modified": 1,
            "removed": 1,
            "unchanged": 2,
        }
        assert summary["added_samples"] == [
            {"id": "400.3", "title": "Added rule.", "snippet": "Added rule."},
        ]
        assert summary["removed_samples"][0]["id"] == "400.2"
        assert summary["modified_samples"] == [
            {"id": "400", "title": "Drawing", "old_snippet": "Draw", "new_snippet": "Drawing"},
        ]
