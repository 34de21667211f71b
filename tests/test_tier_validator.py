"""
Tier table validation: accepted tables and the first-failure reasons.
"""
import pytest

from b2b_pricing.engine import PriceTier, validate_tiers
from b2b_pricing.engine import tier_validator


def tier(min_q, max_q, price):
    return PriceTier(min_quantity=min_q, max_quantity=max_q, unit_price=price)


def test_empty_table_is_valid():
    result = validate_tiers([])
    assert result.valid
    assert result.reason is None


def test_two_band_table_is_valid():
    assert validate_tiers([tier(1, 9, 10), tier(10, None, 8)]).valid


def test_equal_prices_are_allowed():
    assert validate_tiers([tier(1, 9, 10), tier(10, None, 10)]).valid


def test_bounded_last_tier_is_allowed():
    assert validate_tiers([tier(1, 9, 10), tier(10, 20, 8)]).valid


def test_order_of_input_does_not_matter():
    assert validate_tiers([tier(10, None, 8), tier(1, 9, 10)]).valid


def test_first_tier_must_start_at_one():
    result = validate_tiers([tier(2, 9, 10)])
    assert not result.valid
    assert result.reason == tier_validator.FIRST_TIER_NOT_ONE


def test_gap_between_bands_is_rejected():
    result = validate_tiers([tier(1, 9, 10), tier(11, None, 8)])
    assert not result.valid
    assert "contiguous" in result.reason
    assert "9" in result.reason


def test_overlapping_bands_are_rejected():
    result = validate_tiers([tier(1, 9, 10), tier(5, None, 8)])
    assert not result.valid
    assert "contiguous" in result.reason


def test_price_increase_is_rejected():
    result = validate_tiers([tier(1, 9, 10), tier(10, None, 12)])
    assert not result.valid
    assert result.reason == tier_validator.PRICE_INCREASES


def test_unbounded_tier_must_be_last():
    result = validate_tiers([tier(1, None, 10), tier(10, None, 8)])
    assert not result.valid
    assert result.reason == tier_validator.UNBOUNDED_NOT_LAST


def test_too_many_tiers():
    tiers = [tier(1, 1, 10), tier(2, 2, 9), tier(3, 3, 8), tier(4, 4, 7), tier(5, 5, 6), tier(6, None, 5)]
    result = validate_tiers(tiers)
    assert not result.valid
    assert "at most 5" in result.reason


def test_five_tiers_is_the_limit():
    tiers = [tier(1, 1, 10), tier(2, 2, 9), tier(3, 3, 8), tier(4, 4, 7), tier(5, None, 6)]
    assert validate_tiers(tiers).valid


def test_custom_tier_limit():
    result = validate_tiers([tier(1, 9, 10), tier(10, None, 8)], max_tiers=1)
    assert not result.valid


@pytest.mark.parametrize("price", [0, -1.5])
def test_price_must_be_positive(price):
    result = validate_tiers([tier(1, 9, 10), tier(10, None, price)])
    assert not result.valid
    assert result.reason == tier_validator.NON_POSITIVE_PRICE


def test_only_first_failure_is_reported():
    """A table breaking several rules reports the earliest check."""
    result = validate_tiers([tier(1, 9, 10), tier(11, None, 12)])
    assert not result.valid
    assert "contiguous" in result.reason
    assert result.reason != tier_validator.PRICE_INCREASES


def test_validation_never_raises_on_zero_min():
    result = validate_tiers([tier(0, 9, 10)])
    assert not result.valid


@pytest.mark.parametrize("price", [float('nan'), float('inf')])
def test_non_finite_last_price_is_rejected(price):
    result = validate_tiers([tier(1, 9, 10.0), tier(10, None, price)])
    assert not result.valid


@pytest.mark.parametrize("price", [float('nan'), float('inf')])
def test_non_finite_single_price_is_rejected(price):
    result = validate_tiers([tier(1, None, price)])
    assert not result.valid
    assert result.reason == tier_validator.NON_POSITIVE_PRICE


def test_nan_middle_price_is_rejected():
    """A NaN price fails both the positivity and the monotonic checks."""
    result = validate_tiers([tier(1, 9, 10.0), tier(10, 19, float('nan')), tier(20, None, 8.0)])
    assert not result.valid
