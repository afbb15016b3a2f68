from __future__ import annotations

import pytest

from rulebound.document_builder import parse_rules_text
from rulebound.rule_types import RuleDocument


SAMPLE_RULEBOOK = """\
Riftbound Core Rules
Last Updated: 2025-06-01

000. Golden and Silver Rules
000.1. If card text contradicts these rules, the card text takes precedence.
See rule 103. Setup.

100. Game Concepts
103. Setup
103.1. Each player shuffles their deck.
103.1.a. A player may look at their own deck while shuffling. See rule 346. Playing Cards.
103.1.a.1. Mulligans follow the same procedure.
103.1.a.1.b. This is an extra deep detail.
103.2. Players draw opening hands.
continued setup text referring to rule 103.1.a.

Draw step paragraph.
346. Playing Cards
346.1.b. Skipped tier detail. See rule 999.
"""


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_RULEBOOK


@pytest.fixture
def sample_document() -> RuleDocument:
    return parse_rules_text(SAMPLE_RULEBOOK, source_name="Riftbound Core Rules v.1.3.txt")
