"""Net worth facade: current value, growth rate, projections and history for one family"""

import time
from datetime import date
from typing import Iterable, List, Optional, Sequence

from sure_forecast.domain.growth import GrowthRateCalculator
from sure_forecast.domain.models import (
    Account,
    BalancePoint,
    GrowthMethod,
    GrowthRateResult,
    NetWorthSummary,
    NetWorthTimelinePoint,
    ProjectionInterval,
    ProjectionResult,
    TimelineInterval,
)
from sure_forecast.domain.money import Money
from sure_forecast.domain.net_worth import NetWorthCalculator
from sure_forecast.domain.ports import ExchangeRateProvider
from sure_forecast.domain.projection import DEFAULT_TIMEFRAMES, ProjectionEngine
from sure_forecast.infrastructure.observability.logging import log_projection
from sure_forecast.infrastructure.observability.metrics import (
    calculation_duration_histogram,
    record_projection,
)


def parse_timeframes(raw: str | None) -> List[int]:
    """
    Parse a comma separated timeframe parameter such as ``"1,5,10"``.

    Non-numeric and non-positive entries are dropped; an absent value gives
    the default timeframes. Unsupported years are left for the projection
    engine to reject.
    """
    if not raw or not raw.strip():
        return list(DEFAULT_TIMEFRAMES)

    timeframes = []
    for part in raw.split(","):
        part = part.strip()
        if part.lstrip("-").isdigit() and int(part) > 0:
            timeframes.append(int(part))
    return timeframes


class NetWorthService:
    """
    Wires the net worth, growth rate and projection calculators for a family.

    Inputs are passed explicitly; nothing is read from ambient state.
    """

    def __init__(
        self,
        family_id: str,
        accounts: Iterable[Account],
        balances: Iterable[BalancePoint],
        currency: str | None = None,
        exchange_rates: Optional[ExchangeRateProvider] = None,
        as_of: date | None = None,
        minimum_months: int | None = None,
    ):
        self.family_id = family_id
        self.as_of = as_of or date.today()
        self.calculator = NetWorthCalculator(accounts, balances, currency=currency, exchange_rates=exchange_rates)
        self.growth_calculator = GrowthRateCalculator(
            self.calculator, minimum_months=minimum_months, as_of=self.as_of
        )

    @property
    def currency(self) -> str:
        return self.calculator.currency

    def current(self) -> Money:
        return self.calculator.current(self.as_of)

    def can_project(self) -> bool:
        return self.growth_calculator.sufficient_data()

    def growth_rate(self, method: GrowthMethod | str = GrowthMethod.MEAN) -> GrowthRateResult:
        with calculation_duration_histogram.labels(calculator="growth_rate").time():
            return self.growth_calculator.calculate(method=method)

    def projections(
        self,
        timeframes: Sequence[int] = DEFAULT_TIMEFRAMES,
        interval: ProjectionInterval | str = ProjectionInterval.MONTHLY,
        monthly_growth_rate: Money | None = None,
    ) -> ProjectionResult:
        """Multi-scenario projection; logs and records the outcome"""
        start_time = time.time()

        engine = ProjectionEngine(
            self.calculator,
            monthly_growth_rate=monthly_growth_rate,
            growth_calculator=self.growth_calculator,
            as_of=self.as_of,
        )
        with calculation_duration_histogram.labels(calculator="projection").time():
            result = engine.generate(timeframes=timeframes, interval=interval)

        growth = result.growth_rate
        outcome = "generated" if result.sufficient_data else result.error.value
        record_projection(outcome, growth.volatility.value if result.sufficient_data else None)
        log_projection(
            family_id=self.family_id,
            sufficient_data=result.sufficient_data,
            error=result.error.value if result.error else None,
            monthly_rate_cents=growth.monthly_rate.cents if growth.monthly_rate else None,
            timeframes=result.timeframes,
            duration_ms=(time.time() - start_time) * 1000,
        )
        return result

    def timeline(
        self,
        start_date: date,
        end_date: date,
        interval: TimelineInterval | str = TimelineInterval.MONTHLY,
    ) -> List[NetWorthTimelinePoint]:
        with calculation_duration_histogram.labels(calculator="timeline").time():
            return self.calculator.timeline(start_date, end_date, interval)

    def summary(self, start_date: date, end_date: date) -> NetWorthSummary:
        return self.calculator.summary(start_date, end_date)
