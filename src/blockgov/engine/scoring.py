"""
BlockGov Priority Scorer

Deterministic priority score used to rank and filter blocked cases.

    score = round(weight[impact] * (delay + 1) * (1 + amount / 1_000_000))

Key properties:
- Pure: same case, same score
- Non-decreasing in delay and in amount for a fixed impact
- Never raises: malformed input degrades to the lowest contribution
"""
from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

IMPACT_WEIGHT: Mapping[str, int] = {
    "critical": 100,
    "high": 50,
    "medium": 20,
    "low": 5,
}

# Weight for a missing or unrecognized impact
UNKNOWN_IMPACT_WEIGHT = 1

AMOUNT_UNIT = 1_000_000

_NON_DIGIT = re.compile(r"\D")


def parse_amount(amount: Any) -> int:
    """
    Extract an integer amount from free text.

    Every non-digit character is stripped ("15 000 000 FCFA" -> 15000000).
    Empty input, or a value too large to be a finite float, yields 0.

    Example:
        >>> parse_amount("1.250.000 FCFA")
        1250000
        >>> parse_amount(None)
        0
    """
    digits = _NON_DIGIT.sub("", str(amount if amount is not None else ""))
    if not digits:
        return 0
    # Digit strings long enough to overflow a float are treated as garbage
    if len(digits) > sys.float_info.max_10_exp + 1:
        return 0
    value = int(digits)
    try:
        float(value)
    except OverflowError:
        return 0
    return value


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class PriorityScorer:
    """
    Scores cases (or case snapshots) by impact, delay and amount.

    Anything with ``impact``, ``delay_days`` and ``amount`` attributes can
    be scored, so the ledger scores the snapshot it is about to store.

    Usage:
        scorer = PriorityScorer()
        scorer.score(case)          # -> 33600
        scorer.rank(cases)          # highest priority first
    """
    impact_weight: Mapping[str, int] = field(default_factory=lambda: dict(IMPACT_WEIGHT))
    unknown_weight: int = UNKNOWN_IMPACT_WEIGHT

    def weight(self, impact: Any) -> int:
        key = getattr(impact, "value", impact)
        if not isinstance(key, str):
            return self.unknown_weight
        return self.impact_weight.get(key, self.unknown_weight)

    def score(self, case: Any) -> int:
        """Compute the priority of a case. Always an integer >= 0."""
        weight = self.weight(getattr(case, "impact", None))
        delay_factor = _delay(getattr(case, "delay_days", 0)) + 1
        amount_factor = 1 + parse_amount(getattr(case, "amount", None)) / AMOUNT_UNIT
        try:
            return round_half_up(weight * delay_factor * amount_factor)
        except OverflowError:
            return round_half_up(weight * delay_factor)

    def rank(self, cases: Iterable[Any]) -> list[Any]:
        """Order cases by score descending, ties broken by id ascending."""
        return sorted(cases, key=lambda c: (-self.score(c), str(getattr(c, "id", ""))))


def _delay(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError, OverflowError):
        return 0


DEFAULT_SCORER = PriorityScorer()


def score(case: Any) -> int:
    """Score a case with the default impact weights."""
    return DEFAULT_SCORER.score(case)


def rank(cases: Iterable[Any]) -> list[Any]:
    """Rank cases with the default impact weights."""
    return DEFAULT_SCORER.rank(cases)
