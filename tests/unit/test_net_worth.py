"""Unit tests for net worth calculation and timelines"""

import pytest
from datetime import date
from decimal import Decimal

from sure_forecast.domain.exceptions import ExchangeRateUnavailableError, InvalidArgumentError
from sure_forecast.domain.models import Account, AccountClassification, BalancePoint, TimelineInterval
from sure_forecast.domain.money import Money
from sure_forecast.domain.net_worth import NetWorthCalculator, timeline_dates
from sure_forecast.infrastructure.stores.exchange_rates import ExchangeRateTable


def usd(cents):
    return Money(cents, "USD")


@pytest.fixture
def checking_points():
    return [
        BalancePoint(date=date(2026, 1, 10), account_id="checking", amount=usd(10_000)),
        BalancePoint(date=date(2026, 3, 5), account_id="checking", amount=usd(30_000)),
        BalancePoint(date=date(2026, 2, 20), account_id="checking", amount=usd(15_000)),
    ]


def test_balance_carries_forward(checking, checking_points):
    """Test each account contributes its latest balance on or before the date"""
    calculator = NetWorthCalculator([checking], checking_points)

    assert calculator.calculate(date(2026, 1, 9)) == usd(0)  # before first balance
    assert calculator.calculate(date(2026, 1, 10)) == usd(10_000)
    assert calculator.calculate(date(2026, 2, 1)) == usd(10_000)
    assert calculator.calculate(date(2026, 2, 20)) == usd(15_000)
    assert calculator.calculate(date(2026, 12, 31)) == usd(30_000)


def test_earlier_points_do_not_change_later_values(checking, checking_points):
    """Test adding history before a date leaves later net worth unchanged"""
    before = NetWorthCalculator([checking], checking_points).calculate(date(2026, 4, 1))

    extended = checking_points + [BalancePoint(date=date(2025, 12, 1), account_id="checking", amount=usd(99))]
    after = NetWorthCalculator([checking], extended).calculate(date(2026, 4, 1))

    assert before == after == usd(30_000)


def test_last_point_on_same_date_wins(checking):
    """Test duplicate dates resolve to the later supplied balance"""
    points = [
        BalancePoint(date=date(2026, 1, 10), account_id="checking", amount=usd(100)),
        BalancePoint(date=date(2026, 1, 10), account_id="checking", amount=usd(200)),
    ]
    assert NetWorthCalculator([checking], points).calculate(date(2026, 1, 10)) == usd(200)


def test_liabilities_are_subtracted(checking, credit_card, checking_points):
    """Test net worth is assets minus liabilities"""
    points = checking_points + [BalancePoint(date=date(2026, 2, 1), account_id="card", amount=usd(2_500))]
    calculator = NetWorthCalculator([checking, credit_card], points)

    assert calculator.calculate(date(2026, 1, 31)) == usd(10_000)
    assert calculator.calculate(date(2026, 2, 15)) == usd(7_500)


def test_hidden_accounts_are_excluded(checking, checking_points):
    """Test accounts hidden from net worth contribute nothing"""
    hidden = Account(account_id="old", currency="USD", classification=AccountClassification.ASSET, visible=False)
    points = checking_points + [BalancePoint(date=date(2026, 1, 1), account_id="old", amount=usd(1_000_000))]

    assert NetWorthCalculator([checking, hidden], points).calculate(date(2026, 3, 31)) == usd(30_000)


def test_empty_history_is_zero(checking):
    """Test no balances gives zero net worth in the reporting currency"""
    calculator = NetWorthCalculator([checking], [], currency="eur")

    assert calculator.currency == "EUR"
    assert calculator.calculate(date(2026, 1, 1)) == Money(0, "EUR")
    assert calculator.earliest_balance_date() is None


def test_foreign_currency_uses_rate_for_date(brokerage_eur, exchange_rates):
    """Test conversion at the historical rate of the valuation date"""
    points = [BalancePoint(date=date(2026, 9, 1), account_id="brokerage", amount=Money(100_000, "EUR"))]
    calculator = NetWorthCalculator([brokerage_eur], points, exchange_rates=exchange_rates)

    assert calculator.calculate(date(2026, 9, 30)) == usd(110_000)
    assert calculator.calculate(date(2026, 10, 15)) == usd(120_000)


def test_foreign_currency_falls_back_to_latest_rate(brokerage_eur, exchange_rates):
    """Test a date without a rate uses the most recent known rate"""
    points = [BalancePoint(date=date(2026, 9, 1), account_id="brokerage", amount=Money(100_000, "EUR"))]
    calculator = NetWorthCalculator([brokerage_eur], points, exchange_rates=exchange_rates)

    assert calculator.calculate(date(2026, 10, 1)) == usd(120_000)


def test_foreign_currency_without_rate_raises(brokerage_eur):
    """Test conversion failure is an error, not a silent zero"""
    points = [BalancePoint(date=date(2026, 9, 1), account_id="brokerage", amount=Money(100_000, "EUR"))]

    with pytest.raises(ExchangeRateUnavailableError):
        NetWorthCalculator([brokerage_eur], points).calculate(date(2026, 10, 1))

    with pytest.raises(ExchangeRateUnavailableError):
        NetWorthCalculator([brokerage_eur], points, exchange_rates=ExchangeRateTable()).calculate(date(2026, 10, 1))


def test_exchange_rate_table_lookups():
    """Test identity, direct and reciprocal rates"""
    table = ExchangeRateTable()
    table.add("usd", "eur", date(2026, 1, 1), "0.5")

    assert table.rate("USD", "USD", date(2026, 1, 1)) == Decimal(1)
    assert table.rate("USD", "EUR", date(2026, 1, 1)) == Decimal("0.5")
    assert table.rate("EUR", "USD", date(2026, 1, 1)) == Decimal(2)
    assert table.rate("EUR", "USD", date(2026, 1, 2)) is None
    assert table.latest_rate("EUR", "USD") == Decimal(2)
    assert table.latest_rate("GBP", "USD") is None


def test_timeline_changes(checking, checking_points):
    """Test timeline values, change and percent change"""
    calculator = NetWorthCalculator([checking], checking_points)

    points = calculator.timeline(date(2026, 1, 15), date(2026, 3, 10), "monthly")

    assert [p.date for p in points] == [date(2026, 1, 15), date(2026, 1, 31), date(2026, 2, 28), date(2026, 3, 10)]
    assert [p.value.cents for p in points] == [10_000, 10_000, 15_000, 30_000]
    assert [p.change.cents for p in points] == [0, 0, 5_000, 15_000]
    assert [p.percent_change for p in points] == [0.0, 0.0, 50.0, 100.0]


def test_timeline_rejects_bad_input(checking, checking_points):
    """Test reversed ranges and unknown intervals"""
    calculator = NetWorthCalculator([checking], checking_points)

    with pytest.raises(InvalidArgumentError):
        calculator.timeline(date(2026, 3, 1), date(2026, 1, 1))

    with pytest.raises(InvalidArgumentError):
        calculator.timeline(date(2026, 1, 1), date(2026, 3, 1), "hourly")


def test_summary(checking, checking_points):
    """Test start, end and change over a period"""
    summary = NetWorthCalculator([checking], checking_points).summary(date(2026, 1, 15), date(2026, 3, 10))

    assert summary.start_value == usd(10_000)
    assert summary.end_value == usd(30_000)
    assert summary.total_change == usd(20_000)
    assert summary.percent_change == 200.0


def test_monthly_samples(checking, checking_points):
    """Test month-end sampling up to the end date"""
    samples = NetWorthCalculator([checking], checking_points).monthly_samples(date(2026, 1, 15), date(2026, 4, 10))

    assert [s.date for s in samples] == [date(2026, 1, 31), date(2026, 2, 28), date(2026, 3, 31)]
    assert [s.value.cents for s in samples] == [10_000, 15_000, 30_000]


@pytest.mark.parametrize(
    "start, end, interval, expected",
    [
        (date(2026, 1, 1), date(2026, 1, 3), TimelineInterval.DAILY,
         [date(2026, 1, 1), date(2026, 1, 2), date(2026, 1, 3)]),
        (date(2026, 1, 1), date(2026, 1, 20), TimelineInterval.WEEKLY,
         [date(2026, 1, 1), date(2026, 1, 8), date(2026, 1, 15), date(2026, 1, 20)]),
        (date(2026, 1, 31), date(2026, 2, 28), TimelineInterval.MONTHLY,
         [date(2026, 1, 31), date(2026, 2, 28)]),
        (date(2026, 1, 15), date(2026, 7, 10), TimelineInterval.QUARTERLY,
         [date(2026, 1, 15), date(2026, 3, 31), date(2026, 6, 30), date(2026, 7, 10)]),
        (date(2024, 6, 1), date(2026, 3, 31), TimelineInterval.YEARLY,
         [date(2024, 6, 1), date(2024, 12, 31), date(2025, 12, 31), date(2026, 3, 31)]),
        (date(2026, 5, 5), date(2026, 5, 5), TimelineInterval.MONTHLY, [date(2026, 5, 5)]),
    ],
)
def test_timeline_dates(start, end, interval, expected):
    """Test sample dates include both ends without duplicates"""
    assert timeline_dates(start, end, interval) == expected
