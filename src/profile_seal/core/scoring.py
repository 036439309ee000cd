"""Score parsing, check digits and the derived IQ/tier lookups."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final

# Fixed, ordered indicator set shared by validation and sealing.
INDICATORS: Final[tuple[str, ...]] = (
    "logical_reasoning",
    "pattern_recognition",
    "verbal_comprehension",
    "mathematical_ability",
    "spatial_reasoning",
    "memory_recall",
    "processing_speed",
    "abstract_thinking",
    "critical_analysis",
    "problem_decomposition",
    "deductive_inductive_reasoning",
    "systems_thinking",
    "creative_problem_solving",
    "knowledge_integration",
    "deep_thinking",
    "critical_thinking",
    "building",
    "electronics",
    "software",
    "communication",
    "creativity",
    "analysis",
    "leadership",
    "research",
    "problem_solving",
    "technical_depth",
    "collaboration",
    "innovation",
)

SCORE_MIN: Final[float] = 0.0
SCORE_MAX: Final[float] = 100.0
IQ_BASE: Final[int] = 70
IQ_SCALE: Final[float] = 0.9
IQ_MIN: Final[int] = 70
IQ_MAX: Final[int] = 160

_FOUR_PLACES = Decimal("0.0001")
_SCORE_PATTERN = re.compile(r"\d{1,3}\.\d{4}", re.ASCII)

# (lower bound, tier, roast), highest band first
_BANDS: Final[tuple[tuple[int, str, str], ...]] = (
    (145, "galaxy_brain",
     "Galaxy brain detected. You're actually scary smart. Touch grass immediately."),
    (130, "genius",
     "Certified genius. You probably corrected your teacher as a kid. Annoying but impressive."),
    (115, "smart",
     "Above average. Smart enough to know you're not that smart. That's actually smart."),
    (100, "average",
     "Perfectly average. The human equivalent of room temperature. Congratulations?"),
    (85, "below_average", "Below average. Your brain called. It wants a refund."),
)
_FLOOR_TIER: Final[str] = "dumbass"
_FLOOR_ROAST: Final[str] = (
    "Certified dumbass. If stupidity was an Olympic sport, you'd forget to show up."
)


@dataclass(frozen=True)
class ParsedScore:
    """A format-valid score with its numeric value and check digit."""

    text: str
    value: float
    check: int


def render_score(raw: object) -> str | None:
    """Return the fixed four-decimal text form of a score, or None."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, float) and not math.isfinite(raw):
        return None
    if isinstance(raw, (int, float)):
        # Exact binary value, ties rounded up like JavaScript toFixed(4).
        try:
            rendered = Decimal(raw).quantize(_FOUR_PLACES, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return None
        return str(rendered.copy_abs() if raw == 0 else rendered)
    if isinstance(raw, str):
        return raw
    return None


def check_digit(fraction: str) -> int:
    """Return the digit sum of a fractional part modulo 10."""
    return sum(int(ch) for ch in fraction) % 10


def parse_score(raw: object) -> ParsedScore | None:
    """Parse a profile score.

    Numbers are rendered with four decimals first; strings must already be in
    the `D{1,3}.DDDD` form. Range is not checked here.

    Returns:
        The parsed score, or None if the value is not in the required format.
    """
    text = render_score(raw)
    if text is None or not _SCORE_PATTERN.fullmatch(text):
        return None
    fraction = text.split(".", 1)[1]
    return ParsedScore(text=text, value=float(text), check=check_digit(fraction))


def in_range(score: ParsedScore) -> bool:
    return SCORE_MIN <= score.value <= SCORE_MAX


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def derive_iq(values: Iterable[float]) -> int:
    """Map profile scores to a bounded integer score.

    The arithmetic mean goes through `70 + 0.9 * mean`, is rounded half up,
    and is clamped into [70, 160].
    """
    scores = list(values)
    if not scores:
        raise ValueError("At least one score is required")
    mean = sum(scores) / len(scores)
    iq = _round_half_up(IQ_BASE + mean * IQ_SCALE)
    return min(IQ_MAX, max(IQ_MIN, iq))


def tier_for(iq: int) -> str:
    for lower, tier, _ in _BANDS:
        if iq >= lower:
            return tier
    return _FLOOR_TIER


def roast_for(iq: int) -> str:
    for lower, _, roast in _BANDS:
        if iq >= lower:
            return roast
    return _FLOOR_ROAST
