"""Rule identifier grammar and typed segment parsing.

A rule identifier is a dotted path such as ``103.1.b.2``:

    103          three-digit section group   (level 0)
    103.1        numeric rule                (level 1)
    103.1.b      lowercase letter detail     (level 2)
    103.1.b.2    numeric sub-detail          (level 3)
    103.1.b.2.a  ...and so on, alternating   (level 4)

Segments after the first strictly alternate numeric / alpha, starting
with numeric. Identifiers are parsed once into ``IdentifierSegment``
tuples; the level is ``len(segments) - 1``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, TypeAlias


SegmentKind: TypeAlias = Literal["group", "numeric", "alpha"]


# Shared grammar fragment. The nesting enforces the numeric/alpha
# alternation so a regex match is always a well-formed identifier.
IDENTIFIER_PATTERN = r"\d{3}(?:\.\d+(?:\.[a-z]\.\d+)*(?:\.[a-z])?)?"

_IDENTIFIER_RE = re.compile(rf"^{IDENTIFIER_PATTERN}$")


@dataclass(frozen=True, slots=True)
class IdentifierSegment:
    """One dotted segment of a rule identifier."""

    kind: SegmentKind
    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("segment value cannot be empty")


def parse_identifier(identifier: str) -> tuple[IdentifierSegment, ...] | None:
    """Parse a dotted identifier into typed segments.

    Returns None when ``identifier`` does not follow the grammar (wrong
    group width, two numeric segments in a row, uppercase letters...).
    """
    if not identifier or not _IDENTIFIER_RE.match(identifier):
        return None

    parts = identifier.split(".")
    segments: list[IdentifierSegment] = [IdentifierSegment(kind="group", value=parts[0])]
    for pos, part in enumerate(parts[1:]):
        kind: SegmentKind = "numeric" if pos % 2 == 0 else "alpha"
        segments.append(IdentifierSegment(kind=kind, value=part))
    return tuple(segments)


def identifier_level(identifier: str) -> int:
    """Hierarchy depth of an identifier, or -1 when it is malformed."""
    segments = parse_identifier(identifier)
    if segments is None:
        return -1
    return len(segments) - 1


def ancestor_prefixes(identifier: str) -> list[str]:
    """Dotted prefixes of ``identifier``, nearest first.

    ``ancestor_prefixes("103.1.b.2") == ["103.1.b", "103.1", "103"]``.
    Works on the raw dotted string so callers can walk the observed
    hierarchy without re-validating each prefix.
    """
    parts = identifier.split(".")
    return [".".join(parts[:end]) for end in range(len(parts) - 1, 0, -1)]
