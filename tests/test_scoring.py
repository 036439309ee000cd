# tests/test_scoring.py
import pytest

from profile_seal.core.scoring import (
    INDICATORS,
    check_digit,
    derive_iq,
    in_range,
    parse_score,
    roast_for,
    tier_for,
)


def test_indicator_set_is_fixed_and_ordered() -> None:
    assert len(INDICATORS) == 28
    assert len(set(INDICATORS)) == 28
    assert INDICATORS[0] == "logical_reasoning"
    assert INDICATORS[-1] == "innovation"


@pytest.mark.parametrize(
    ("raw", "text", "check"),
    [
        ("50.0007", "50.0007", 7),
        ("7.1234", "7.1234", 0),
        ("100.0000", "100.0000", 0),
        (42.5, "42.5000", 5),
        (3, "3.0000", 0),
        ("0.9999", "0.9999", 6),
    ],
)
def test_parse_score_formats_and_check_digits(raw: object, text: str, check: int) -> None:
    score = parse_score(raw)
    assert score is not None
    assert score.text == text
    assert score.check == check


@pytest.mark.parametrize(
    "raw",
    [
        "50.007", "1000.0000", "-1.0000", "50", "abc", "", None, True, [],
        float("inf"), " 5.0000", "50.0000\n", "٥٠.٠٠٠٠",
    ],
)
def test_parse_score_rejects_bad_format(raw: object) -> None:
    assert parse_score(raw) is None


def test_range_is_checked_separately() -> None:
    score = parse_score("150.0000")
    assert score is not None
    assert in_range(score) is False
    assert in_range(parse_score("100.0000")) is True  # type: ignore[arg-type]


def test_check_digit_is_digit_sum_mod_ten() -> None:
    assert check_digit("9999") == 6
    assert check_digit("0000") == 0
    assert check_digit("1234") == 0


def test_derive_iq_affine_transform() -> None:
    assert derive_iq([50.0] * 28) == 115
    assert derive_iq([0.0]) == 70
    assert derive_iq([100.0]) == 160


def test_derive_iq_rounds_half_up() -> None:
    # 70 + 0.9 * 5 = 74.5
    assert derive_iq([5.0]) == 75


def test_derive_iq_requires_scores() -> None:
    with pytest.raises(ValueError):
        derive_iq([])


@pytest.mark.parametrize(
    ("iq", "tier"),
    [
        (160, "galaxy_brain"),
        (145, "galaxy_brain"),
        (144, "genius"),
        (130, "genius"),
        (129, "smart"),
        (115, "smart"),
        (114, "average"),
        (100, "average"),
        (99, "below_average"),
        (85, "below_average"),
        (84, "dumbass"),
        (70, "dumbass"),
    ],
)
def test_tier_bands(iq: int, tier: str) -> None:
    assert tier_for(iq) == tier


def test_roast_follows_tier_bands() -> None:
    assert roast_for(150).startswith("Galaxy brain")
    assert roast_for(115).startswith("Above average")
    assert roast_for(70).startswith("Certified dumbass")


def test_numeric_ties_round_half_up() -> None:
    """Exact binary ties round up, as the browser client's toFixed(4) does."""
    score = parse_score(1.03125)
    assert score is not None
    assert score.text == "1.0313"
    assert score.check == 7


def test_negative_zero_renders_unsigned() -> None:
    score = parse_score(-0.0)
    assert score is not None
    assert score.text == "0.0000"


@pytest.mark.parametrize("raw", [10**400, -(10**400), 1e300])
def test_oversized_numbers_are_bad_format(raw: object) -> None:
    assert parse_score(raw) is None
