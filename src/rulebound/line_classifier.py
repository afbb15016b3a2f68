"""Rule line classifier.

Decides, from the lexical shape of one physical line alone, whether the
line opens a new rule node, at which depth, and what its identifier and
heading text are.

    "103. Setup"              -> level 0, id "103",     heading "Setup"
    "103.1. Each player..."   -> level 1, id "103.1",   heading "Each player..."
    "103.1.a. If a player..." -> level 2, id "103.1.a", heading "If a player..."
    "continues the sentence"  -> NOT_A_RULE

Classification is greedy: the identifier regex consumes the longest
well-formed dotted prefix that is followed by ``.`` plus whitespace (or
end of line), so "103.1. Text" is level 1 even though "103." would also
start the line.

None of these functions raise on any string input; unrecognized lines
come back as NOT_A_RULE / None / [] and are treated as continuation
text by the caller.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from rulebound.identifiers import IDENTIFIER_PATTERN, parse_identifier


NOT_A_RULE = -1

# Identifier at line start, terminated by "." and whitespace or end of line.
_RULE_PREFIX_RE = re.compile(rf"^({IDENTIFIER_PATTERN})\.(?=\s|$)")

# "See rule 346." / "rule 103.1.a." -- keywords are case-insensitive, the
# identifier itself is not (letters are always lowercase).
_CROSS_REF_RE = re.compile(
    rf"\b(?i:(?:see\s+)?rule)\s+({IDENTIFIER_PATTERN})\.(?![0-9A-Za-z])",
)


@dataclass(frozen=True, slots=True)
class LineClassification:
    """Structural judgment for one line."""

    level: int
    identifier: str | None
    heading: str

    @property
    def is_rule_start(self) -> bool:
        return self.level != NOT_A_RULE


def classify_line(line: str) -> LineClassification:
    """Classify one line in a single regex pass."""
    trimmed = line.strip()
    m = _RULE_PREFIX_RE.match(trimmed)
    if m is None:
        return LineClassification(level=NOT_A_RULE, identifier=None, heading=trimmed)

    identifier = m.group(1)
    segments = parse_identifier(identifier)
    if segments is None:
        return LineClassification(level=NOT_A_RULE, identifier=None, heading=trimmed)

    return LineClassification(
        level=len(segments) - 1,
        identifier=identifier,
        heading=trimmed[m.end():].strip(),
    )


def detect_level(line: str) -> int:
    """Hierarchy level of a rule-start line, or NOT_A_RULE."""
    return classify_line(line).level


def extract_identifier(line: str) -> str | None:
    """Dotted identifier without its trailing period, or None."""
    return classify_line(line).identifier


def extract_heading_text(line: str) -> str:
    """Text after the identifier delimiter; the whole trimmed line otherwise."""
    return classify_line(line).heading


def extract_cross_references(text: str) -> list[str]:
    """Identifiers named by "(See) rule <id>." phrases, first occurrence order."""
    refs: list[str] = []
    seen: set[str] = set()
    for m in _CROSS_REF_RE.finditer(text):
        ref_id = m.group(1)
        if ref_id not in seen:
            seen.add(ref_id)
            refs.append(ref_id)
    return refs
