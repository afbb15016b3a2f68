"""Parser configuration.

Defaults match the published Riftbound Core Rules text. A different
rulebook (or a new edition with a different title line) only needs a
small JSON file::

    {
      "header_prefixes": ["Riftbound Core Rules", "Last Updated"],
      "header_scan_lines": 3,
      "default_version": "1.2",
      "strict_duplicates": false
    }
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import orjson


@dataclass(frozen=True, slots=True)
class ParserConfig:
    """Knobs for one build."""

    # Lines starting with these prefixes are dropped when they occur
    # within the first ``header_scan_lines`` physical lines.
    header_prefixes: tuple[str, ...] = ("Riftbound Core Rules", "Last Updated")
    header_scan_lines: int = 3
    # Edition used when the source file name carries no "v1.2"-style tag.
    default_version: str = "1.2"
    # Reject duplicate identifiers instead of keeping the first occurrence.
    strict_duplicates: bool = False

    def __post_init__(self) -> None:
        if self.header_scan_lines < 0:
            raise ValueError(
                f"header_scan_lines must be >= 0, got {self.header_scan_lines}",
            )
        if not self.default_version:
            raise ValueError("default_version cannot be empty")

    @classmethod
    def from_json(cls, path: Path) -> ParserConfig:
        """Load from a parser config JSON file."""
        data = orjson.loads(path.read_bytes())
        if not isinstance(data, dict):
            raise ValueError(f"{path}: parser config must be a JSON object")
        return parser_config_from_dict(data)


DEFAULT_CONFIG = ParserConfig()


def parser_config_from_dict(d: dict[str, Any]) -> ParserConfig:
    """Create a ParserConfig from a dict, rejecting unknown keys."""
    valid_fields = {f.name for f in fields(ParserConfig)}
    unknown = sorted(set(d) - valid_fields)
    if unknown:
        raise ValueError(f"unknown parser config key(s): {', '.join(unknown)}")

    converted: dict[str, Any] = dict(d)
    if "header_prefixes" in converted:
        converted["header_prefixes"] = tuple(str(p) for p in converted["header_prefixes"])
    if "header_scan_lines" in converted:
        converted["header_scan_lines"] = int(converted["header_scan_lines"])
    if "default_version" in converted:
        converted["default_version"] = str(converted["default_version"])
    if "strict_duplicates" in converted and not isinstance(converted["strict_duplicates"], bool):
        raise ValueError(
            "strict_duplicates must be a JSON boolean, "
            f"got {converted['strict_duplicates']!r}",
        )
    return ParserConfig(**converted)


def parser_config_to_dict(config: ParserConfig) -> dict[str, Any]:
    return {
        "header_prefixes": list(config.header_prefixes),
        "header_scan_lines": config.header_scan_lines,
        "default_version": config.default_version,
        "strict_duplicates": config.strict_duplicates,
    }
