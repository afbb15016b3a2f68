"""I/O utilities for rules documents and JSON files.

All JSON goes through orjson. ``save_rule_document`` writes the
published ``rules.json`` shape (2-space indent, sorted keys);
``load_rule_document`` reads it back into frozen types.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson

from rulebound.rule_types import (
    RuleDocument,
    RuleDocumentFormatError,
    rule_document_from_dict,
    rule_document_to_dict,
)


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS if pretty else orjson.OPT_SORT_KEYS
    path.write_bytes(orjson.dumps(obj, option=opts))


def load_rule_document(path: Path) -> RuleDocument:
    """Load a saved rules document.

    Raises:
        FileNotFoundError / OSError: the file cannot be read.
        orjson.JSONDecodeError: the file is not JSON.
        RuleDocumentFormatError: the JSON is not a rules document.
    """
    payload = load_json(path)
    if not isinstance(payload, dict):
        raise RuleDocumentFormatError(f"{path}: rules document must be a JSON object")
    return rule_document_from_dict(payload)


def save_rule_document(document: RuleDocument, path: Path, *, pretty: bool = True) -> None:
    save_json(rule_document_to_dict(document), path, pretty=pretty)
