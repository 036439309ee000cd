"""Structural and check-digit validation of client submissions."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from profile_seal.core.errors import PayloadValidationError
from profile_seal.core.scoring import INDICATORS, ParsedScore, in_range, parse_score

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Submission:
    """A submission that passed validation, with its parsed indicator scores."""

    context_messages: int | float
    analysis_summary: str
    profile: Mapping[str, Any]
    scores: Mapping[str, ParsedScore]


def _is_integer(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


class PayloadValidator:
    """Validate submissions against a fixed, ordered indicator set.

    Checks run in order and stop at the first failure:

    1. payload is an object with a nested `profile` object;
    2. `context_messages` is an integer, `analysis_summary` a string;
    3. the embedded nonce equals the nonce being redeemed;
    4. every indicator is present in the profile (extra keys are ignored);
    5. every indicator score is format-valid, within [0, 100], and shares the
       check digit of the first indicator's score.
    """

    def __init__(self, indicators: Sequence[str] = INDICATORS) -> None:
        if not indicators:
            raise ValueError("indicators must not be empty")
        self._indicators = tuple(indicators)

    @property
    def indicators(self) -> tuple[str, ...]:
        return self._indicators

    def _reject(self, code: str) -> PayloadValidationError:
        logger.info("Submission rejected: %s", code)
        return PayloadValidationError(code)

    def validate(self, payload: object, expected_nonce: str) -> Submission:
        """Validate `payload` for redemption of `expected_nonce`.

        Returns:
            The validated `Submission`.

        Raises:
            PayloadValidationError: With the code of the first failed check.
        """
        if not isinstance(payload, Mapping):
            raise self._reject("bad_profile_obj")
        profile = payload.get("profile")
        if not isinstance(profile, Mapping):
            raise self._reject("missing_profile")

        context_messages = payload.get("context_messages")
        if not _is_integer(context_messages):
            raise self._reject("context_messages_not_int")
        analysis_summary = payload.get("analysis_summary")
        if not isinstance(analysis_summary, str):
            raise self._reject("analysis_summary_not_string")

        if payload.get("nonce") != expected_nonce:
            raise self._reject("nonce_mismatch")

        for name in self._indicators:
            if name not in profile:
                raise self._reject(f"missing_key_{name}")

        first = self._indicators[0]
        reference = parse_score(profile[first])
        if reference is None:
            raise self._reject(f"bad_score_{first}")

        scores: dict[str, ParsedScore] = {}
        for name in self._indicators:
            score = parse_score(profile[name])
            if score is None:
                raise self._reject(f"bad_score_{name}")
            if not in_range(score):
                raise self._reject("score_out_of_range")
            if score.check != reference.check:
                raise self._reject("check_digit_mismatch")
            scores[name] = score

        return Submission(
            context_messages=context_messages,  # type: ignore[arg-type]
            analysis_summary=analysis_summary,
            profile=profile,
            scores=scores,
        )
