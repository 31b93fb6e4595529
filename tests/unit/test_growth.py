"""Unit tests for historical growth rate calculation"""

import pytest
from datetime import date

from sure_forecast.domain.exceptions import InvalidArgumentError
from sure_forecast.domain.growth import (
    DECLINING_TREND_WARNING,
    HIGH_VOLATILITY_WARNING,
    STAGNANT_GROWTH_WARNING,
    GrowthRateCalculator,
    classify_volatility,
    mean_growth,
    median_growth,
    weighted_growth,
)
from sure_forecast.domain.models import DataQualityError, GrowthMethod, Volatility
from sure_forecast.domain.money import Money
from sure_forecast.domain.net_worth import NetWorthCalculator
from tests.factories import month_end_balances, month_end_samples, samples_from_changes


def usd_list(cents):
    return [Money(c, "USD") for c in cents]


def calculator_for(checking, balances=(), minimum_months=6, as_of=date(2026, 10, 18)):
    return GrowthRateCalculator(NetWorthCalculator([checking], balances), minimum_months=minimum_months, as_of=as_of)


def test_single_month_growth(checking):
    """Test $10,000 to $10,500 with mean gives $500 per month"""
    calculator = calculator_for(checking, minimum_months=2)

    result = calculator.calculate_from_samples(month_end_samples([1_000_000, 1_050_000]), GrowthMethod.MEAN)

    assert result.sufficient_data
    assert result.monthly_rate == Money(50_000, "USD")
    assert result.annual_rate == Money(600_000, "USD")
    assert result.data_points_used == 2
    # 50,000 / 1,025,000 average
    assert result.monthly_rate_percent == 4.88


def test_minimum_history_boundary(checking):
    """Test five samples are insufficient and six are enough when six are required"""
    calculator = calculator_for(checking, minimum_months=6)

    short = calculator.calculate_from_samples(samples_from_changes([10_000] * 4))
    enough = calculator.calculate_from_samples(samples_from_changes([10_000] * 5))

    assert not short.sufficient_data
    assert short.monthly_rate is None
    assert short.error == DataQualityError.INSUFFICIENT_HISTORY
    assert short.message == "At least 6 months of history required. Found 5 months."
    assert short.data_points_used == 5
    assert short.data_points_required == 6

    assert enough.sufficient_data
    assert enough.monthly_rate == Money(10_000, "USD")


def test_poor_data_quality(checking):
    """Test more than 30% zero samples is rejected"""
    calculator = calculator_for(checking, minimum_months=6)

    poor = calculator.calculate_from_samples(month_end_samples([0, 0, 0, 0, 100, 200, 300, 400, 500, 600]))
    borderline = calculator.calculate_from_samples(month_end_samples([0, 0, 0, 100, 200, 300, 400, 500, 600, 700]))

    assert not poor.sufficient_data
    assert poor.error == DataQualityError.POOR_DATA_QUALITY
    assert poor.invalid_count == 4
    assert borderline.sufficient_data


def test_growth_methods():
    """Test mean, median and weighted averages of monthly deltas"""
    changes = usd_list([10_000, 20_000, 30_000])

    assert mean_growth(changes, "USD") == Money(20_000, "USD")
    assert median_growth(changes, "USD") == Money(20_000, "USD")
    # (10,000 * 1 + 20,000 * 2 + 30,000 * 3) / 6 = 23,333.33
    assert weighted_growth(changes, "USD") == Money(23_333, "USD")
    assert median_growth(usd_list([10, 20, 30, 40]), "USD") == Money(25, "USD")
    assert mean_growth([], "USD") == Money(0, "USD")


def test_median_resists_outlier():
    """Test one spike moves the median less than the mean"""
    base = usd_list([10_000] * 5)
    spiked = usd_list([10_000] * 4 + [1_000_000])

    mean_shift = abs(mean_growth(spiked, "USD").cents - mean_growth(base, "USD").cents)
    median_shift = abs(median_growth(spiked, "USD").cents - median_growth(base, "USD").cents)

    assert median_shift < mean_shift
    assert median_growth(spiked, "USD") == Money(10_000, "USD")


def test_mean_rounds_toward_negative_infinity():
    """Test integer averaging of negative deltas"""
    assert mean_growth(usd_list([-1, -2]), "USD") == Money(-2, "USD")


@pytest.mark.parametrize(
    "changes, expected",
    [
        ([10_000] * 5, Volatility.LOW),
        ([10_000, 30_000, 0, 20_000], Volatility.MEDIUM),
        ([10_000, -5_000, 10_000, -5_000, 10_000], Volatility.HIGH),
        ([10_000, -10_000], Volatility.LOW),  # zero mean
        ([], Volatility.LOW),
    ],
)
def test_classify_volatility(changes, expected):
    """Test coefficient of variation buckets"""
    assert classify_volatility(usd_list(changes)) == expected


def test_declining_trend_warning(checking):
    """Test three consecutive negative months are flagged"""
    result = calculator_for(checking, minimum_months=2).calculate_from_samples(
        samples_from_changes([50_000, -1_000, -2_000, -3_000])
    )

    assert DECLINING_TREND_WARNING in result.warnings
    assert result.warning is not None


def test_high_volatility_warning(checking):
    """Test high volatility is flagged"""
    result = calculator_for(checking, minimum_months=2).calculate_from_samples(
        samples_from_changes([10_000, -5_000, 10_000, -5_000, 10_000])
    )

    assert result.volatility == Volatility.HIGH
    assert HIGH_VOLATILITY_WARNING in result.warnings


def test_stagnant_growth_warning(checking):
    """Test deltas under $1 are flagged as stagnant"""
    result = calculator_for(checking, minimum_months=2).calculate_from_samples(samples_from_changes([50, -20, 10]))

    assert STAGNANT_GROWTH_WARNING in result.warnings


def test_steady_growth_has_no_warnings(checking):
    """Test clean history"""
    result = calculator_for(checking, minimum_months=2).calculate_from_samples(samples_from_changes([10_000] * 6))

    assert result.warnings == []
    assert result.warning is None
    assert result.volatility == Volatility.LOW


def test_calculate_from_balance_history(checking, growing_history, as_of):
    """Test lookback of minimum plus three months from the as-of date"""
    result = calculator_for(checking, growing_history, as_of=as_of).calculate()

    # 2026-01-18 .. 2026-10-18 -> month ends Jan through Sep
    assert result.sufficient_data
    assert result.data_points_used == 9
    assert result.historical_period.start_date == date(2026, 1, 31)
    assert result.historical_period.end_date == date(2026, 9, 30)
    assert result.monthly_rate == Money(50_000, "USD")
    assert result.method == GrowthMethod.MEAN


def test_history_starts_at_first_balance(checking, as_of):
    """Test months before the first balance do not count as history"""
    five_months = month_end_balances("checking", date(2026, 5, 1), [100_000, 110_000, 120_000, 130_000, 140_000])
    six_months = month_end_balances("checking", date(2026, 4, 1), [90_000, 100_000, 110_000, 120_000, 130_000, 140_000])

    assert not calculator_for(checking, five_months, as_of=as_of).sufficient_data()
    assert calculator_for(checking, six_months, as_of=as_of).sufficient_data()


def test_no_history(checking, as_of):
    """Test an empty family reports insufficient history"""
    result = calculator_for(checking, [], as_of=as_of).calculate()

    assert not result.sufficient_data
    assert result.error == DataQualityError.INSUFFICIENT_HISTORY
    assert result.data_points_used == 0


def test_invalid_method_and_minimum(checking):
    """Test argument validation"""
    with pytest.raises(InvalidArgumentError):
        calculator_for(checking).calculate("mode")

    with pytest.raises(InvalidArgumentError):
        calculator_for(checking, minimum_months=0)
