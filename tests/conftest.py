"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timezone
from typing import List

from sure_forecast.domain.models import Account, AccountClassification, BalancePoint
from sure_forecast.infrastructure.stores.exchange_rates import ExchangeRateTable
from sure_forecast.infrastructure.stores.patterns import InMemoryPatternStore
from tests.factories import month_end_balances


AS_OF = date(2026, 10, 18)
NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def as_of() -> date:
    """Fixed 'today' for date-relative calculations"""
    return AS_OF


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def checking() -> Account:
    return Account(account_id="checking", currency="USD", classification=AccountClassification.ASSET, name="Checking")


@pytest.fixture
def credit_card() -> Account:
    return Account(
        account_id="card", currency="USD", classification=AccountClassification.LIABILITY, name="Credit Card"
    )


@pytest.fixture
def brokerage_eur() -> Account:
    return Account(account_id="brokerage", currency="EUR", classification=AccountClassification.ASSET, name="Depot")


@pytest.fixture
def growing_history() -> List[BalancePoint]:
    """
    Twelve month ends (Oct 2025 - Sep 2026) growing $500 per month.

    $10,000.00 at 2025-10-31 up to $15,500.00 at 2026-09-30.
    """
    return month_end_balances("checking", date(2025, 10, 1), [1_000_000 + 50_000 * i for i in range(12)])


@pytest.fixture
def exchange_rates() -> ExchangeRateTable:
    """EUR -> USD rates on two dates"""
    table = ExchangeRateTable()
    table.add("EUR", "USD", date(2026, 9, 30), "1.10")
    table.add("EUR", "USD", date(2026, 10, 15), "1.20")
    return table


@pytest.fixture
def pattern_store() -> InMemoryPatternStore:
    return InMemoryPatternStore()
