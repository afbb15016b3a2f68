"""Rulebook text parser: classifier, hierarchical builder, version diff."""

from rulebound.config import DEFAULT_CONFIG, ParserConfig, parser_config_from_dict
from rulebound.document_builder import (
    build_rule_document,
    build_rule_document_from_file,
    extract_last_updated,
    extract_version,
    find_parent_id,
    split_lines,
    parse_rules_file,
    parse_rules_text,
)
from rulebound.identifiers import (
    IdentifierSegment,
    ancestor_prefixes,
    identifier_level,
    parse_identifier,
)
from rulebound.io_utils import load_rule_document, save_rule_document
from rulebound.line_classifier import (
    NOT_A_RULE,
    LineClassification,
    classify_line,
    detect_level,
    extract_cross_references,
    extract_heading_text,
    extract_identifier,
)
from rulebound.queries import RulesQuery, SearchMatch, SearchResult
from rulebound.rule_types import (
    BuildDiagnostics,
    DuplicateIdentifierError,
    RuleDocument,
    RuleDocumentFormatError,
    RuleNode,
    VersionDiff,
    rule_document_from_dict,
    rule_document_to_dict,
    version_diff_to_dict,
)
from rulebound.version_diff import (
    compare_versions,
    detect_changes,
    detect_version,
    summarize_changes,
)

__all__ = [
    "DEFAULT_CONFIG",
    "NOT_A_RULE",
    "BuildDiagnostics",
    "DuplicateIdentifierError",
    "IdentifierSegment",
    "LineClassification",
    "ParserConfig",
    "RuleDocument",
    "RuleDocumentFormatError",
    "RuleNode",
    "RulesQuery",
    "SearchMatch",
    "SearchResult",
    "VersionDiff",
    "ancestor_prefixes",
    "build_rule_document",
    "build_rule_document_from_file",
    "classify_line",
    "compare_versions",
    "detect_changes",
    "detect_level",
    "detect_version",
    "extract_cross_references",
    "extract_heading_text",
    "extract_identifier",
    "extract_last_updated",
    "extract_version",
    "find_parent_id",
    "identifier_level",
    "load_rule_document",
    "parse_identifier",
    "parse_rules_file",
    "parse_rules_text",
    "parser_config_from_dict",
    "rule_document_from_dict",
    "rule_document_to_dict",
    "save_rule_document",
    "split_lines",
    "summarize_changes",
    "version_diff_to_dict",
]
