"""Historical monthly growth rate of net worth"""

import statistics
from datetime import date
from typing import List, Sequence

from sure_forecast.config import settings
from sure_forecast.domain.exceptions import InvalidArgumentError
from sure_forecast.domain.models import (
    DataQualityError,
    GrowthMethod,
    GrowthRateResult,
    HistoricalPeriod,
    NetWorthSample,
    Volatility,
    parse_enum,
)
from sure_forecast.domain.money import Money, percent
from sure_forecast.domain.net_worth import NetWorthCalculator
from sure_forecast.utils.date_utils import add_months

MAX_INVALID_SHARE = 0.3  # more than 30% zero samples is poor data
RECENT_TREND_MONTHS = 3

DECLINING_TREND_WARNING = "Recent 3 months show declining net worth. Projections may be pessimistic."
HIGH_VOLATILITY_WARNING = (
    "High volatility detected in historical data. Projections should be treated as rough estimates."
)
STAGNANT_GROWTH_WARNING = "Minimal historical growth detected. Projections may not be meaningful."


def monthly_changes(samples: Sequence[NetWorthSample]) -> List[Money]:
    """Month-over-month deltas of consecutive samples"""
    return [current.value - previous.value for previous, current in zip(samples, samples[1:])]


def mean_growth(changes: Sequence[Money], currency: str) -> Money:
    if not changes:
        return Money.zero(currency)
    return Money(sum(c.cents for c in changes) // len(changes), currency)


def median_growth(changes: Sequence[Money], currency: str) -> Money:
    """Middle delta; robust to a single outlier month"""
    if not changes:
        return Money.zero(currency)

    sorted_cents = sorted(c.cents for c in changes)
    middle = len(sorted_cents) // 2
    if len(sorted_cents) % 2:
        return Money(sorted_cents[middle], currency)
    return Money((sorted_cents[middle - 1] + sorted_cents[middle]) // 2, currency)


def weighted_growth(changes: Sequence[Money], currency: str) -> Money:
    """Linear weights: oldest delta weight 1, most recent weight N"""
    if not changes:
        return Money.zero(currency)

    weighted_sum = 0
    weight_sum = 0
    for index, change in enumerate(changes):
        weight = index + 1
        weighted_sum += change.cents * weight
        weight_sum += weight
    return Money(weighted_sum // weight_sum, currency)


_GROWTH_METHODS = {
    GrowthMethod.MEAN: mean_growth,
    GrowthMethod.MEDIAN: median_growth,
    GrowthMethod.WEIGHTED: weighted_growth,
}


def classify_volatility(changes: Sequence[Money]) -> Volatility:
    """
    Coefficient of variation of the deltas: <0.5 low, <1.5 medium, else high.

    A zero mean (or no deltas) is classified as low.
    """
    if not changes:
        return Volatility.LOW

    cents = [c.cents for c in changes]
    mean = statistics.fmean(cents)
    if mean == 0:
        return Volatility.LOW

    coefficient = statistics.pstdev(cents) / abs(mean)
    if coefficient < 0.5:
        return Volatility.LOW
    if coefficient < 1.5:
        return Volatility.MEDIUM
    return Volatility.HIGH


def detect_warnings(changes: Sequence[Money], volatility: Volatility, stagnant_threshold_cents: int) -> List[str]:
    warnings = []

    recent = changes[-RECENT_TREND_MONTHS:]
    if len(recent) >= RECENT_TREND_MONTHS and all(c.is_negative() for c in recent):
        warnings.append(DECLINING_TREND_WARNING)

    if volatility == Volatility.HIGH:
        warnings.append(HIGH_VOLATILITY_WARNING)

    if changes and all(abs(c.cents) < stagnant_threshold_cents for c in changes):
        warnings.append(STAGNANT_GROWTH_WARNING)

    return warnings


class GrowthRateCalculator:
    """
    Derives a baseline monthly growth rate from month-end net worth samples.

    Looks back ``minimum_months + 3`` months from ``as_of``. Month ends before
    the family's first recorded balance are not counted as history.
    """

    def __init__(
        self,
        net_worth: NetWorthCalculator,
        minimum_months: int | None = None,
        as_of: date | None = None,
    ):
        minimum_months = settings.growth_minimum_months if minimum_months is None else minimum_months
        if isinstance(minimum_months, bool) or not isinstance(minimum_months, int) or minimum_months < 1:
            raise InvalidArgumentError(f"minimum_months must be a positive integer, got {minimum_months!r}")

        self.net_worth = net_worth
        self.minimum_months = minimum_months
        self.as_of = as_of or date.today()

    @property
    def currency(self) -> str:
        return self.net_worth.currency

    def historical_samples(self) -> List[NetWorthSample]:
        earliest = self.net_worth.earliest_balance_date()
        if earliest is None:
            return []

        lookback = self.minimum_months + settings.growth_lookback_padding_months
        start_date = max(add_months(self.as_of, -lookback), earliest)
        return self.net_worth.monthly_samples(start_date, self.as_of)

    def calculate(self, method: GrowthMethod | str = GrowthMethod.MEAN) -> GrowthRateResult:
        method = parse_enum(GrowthMethod, method, "method")
        return self.calculate_from_samples(self.historical_samples(), method)

    def sufficient_data(self) -> bool:
        return self._validate(self.historical_samples()) is None

    def calculate_from_samples(
        self,
        samples: Sequence[NetWorthSample],
        method: GrowthMethod | str = GrowthMethod.MEAN,
    ) -> GrowthRateResult:
        """
        Growth statistics for an explicit sample window.

        Never computes a rate on partial data: insufficient or poor-quality
        history comes back as ``sufficient_data=False`` with an error code.
        """
        method = parse_enum(GrowthMethod, method, "method")
        samples = sorted(samples, key=lambda s: s.date)

        failure = self._validate(samples)
        if failure is not None:
            return failure

        changes = monthly_changes(samples)
        rate = _GROWTH_METHODS[method](changes, self.currency)
        volatility = classify_volatility(changes)
        average_cents = sum(s.value.cents for s in samples) // len(samples)

        return GrowthRateResult(
            sufficient_data=True,
            monthly_rate=rate,
            monthly_rate_percent=percent(rate.cents, average_cents),
            data_points_used=len(samples),
            method=method,
            volatility=volatility,
            warnings=detect_warnings(changes, volatility, settings.stagnant_growth_threshold_cents),
            historical_period=HistoricalPeriod(start_date=samples[0].date, end_date=samples[-1].date),
        )

    def _validate(self, samples: Sequence[NetWorthSample]) -> GrowthRateResult | None:
        if len(samples) < self.minimum_months:
            return GrowthRateResult(
                sufficient_data=False,
                data_points_used=len(samples),
                error=DataQualityError.INSUFFICIENT_HISTORY,
                message=(
                    f"At least {self.minimum_months} months of history required. "
                    f"Found {len(samples)} months."
                ),
                data_points_required=self.minimum_months,
            )

        invalid = [s for s in samples if s.value is None or s.value.is_zero()]
        if len(invalid) > len(samples) * MAX_INVALID_SHARE:
            return GrowthRateResult(
                sufficient_data=False,
                data_points_used=len(samples),
                error=DataQualityError.POOR_DATA_QUALITY,
                message="Too many periods with zero or missing net worth data. Projections may be unreliable.",
                data_points_required=self.minimum_months,
                invalid_count=len(invalid),
            )

        return None
