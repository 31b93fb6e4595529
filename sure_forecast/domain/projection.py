"""Future net worth projections under conservative, realistic and optimistic scenarios"""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from sure_forecast.domain.exceptions import InvalidArgumentError
from sure_forecast.domain.growth import GrowthRateCalculator
from sure_forecast.domain.models import (
    GrowthMethod,
    GrowthRateResult,
    Milestone,
    ProjectionInterval,
    ProjectionPoint,
    ProjectionResult,
    Scenario,
    ScenarioProjection,
    Volatility,
    parse_enum,
)
from sure_forecast.domain.money import Money
from sure_forecast.domain.net_worth import NetWorthCalculator
from sure_forecast.utils.date_utils import add_months, months_between

# Multipliers applied to the base monthly growth rate
SCENARIO_MULTIPLIERS = {
    Scenario.CONSERVATIVE: Decimal("0.70"),
    Scenario.REALISTIC: Decimal("1.00"),
    Scenario.OPTIMISTIC: Decimal("1.30"),
}

AVAILABLE_TIMEFRAMES = (1, 2, 3, 5, 10, 20)
DEFAULT_TIMEFRAMES = (1, 5, 10)

_INTERVAL_MONTHS = {
    ProjectionInterval.MONTHLY: 1,
    ProjectionInterval.QUARTERLY: 3,
    ProjectionInterval.YEARLY: 12,
}


def validate_timeframes(timeframes: Iterable[int]) -> List[int]:
    """Sorted unique timeframes; raises InvalidArgumentError for empty or unsupported values"""
    timeframes = list(timeframes)
    if not timeframes:
        raise InvalidArgumentError("At least one timeframe must be specified")

    invalid = [tf for tf in timeframes if isinstance(tf, bool) or tf not in AVAILABLE_TIMEFRAMES]
    if invalid:
        raise InvalidArgumentError(
            f"Invalid timeframes: {', '.join(str(tf) for tf in invalid)}. "
            f"Available: {', '.join(str(tf) for tf in AVAILABLE_TIMEFRAMES)}"
        )
    return sorted(set(timeframes))


def projection_dates(start_date: date, years: int, interval: ProjectionInterval) -> List[date]:
    """Dates from start_date to start_date + years, stepping whole calendar months"""
    step = _INTERVAL_MONTHS[interval]
    return [add_months(start_date, months) for months in range(0, years * 12 + 1, step)]


class ProjectionEngine:
    """
    Linear net worth projection: ``current + scenario_rate * months_elapsed``.

    The base monthly rate comes from the mean historical growth unless an
    override is supplied.
    """

    def __init__(
        self,
        net_worth: NetWorthCalculator,
        monthly_growth_rate: Money | None = None,
        growth_calculator: GrowthRateCalculator | None = None,
        as_of: date | None = None,
    ):
        if monthly_growth_rate is not None and monthly_growth_rate.currency != net_worth.currency:
            raise InvalidArgumentError(
                f"Growth rate is in {monthly_growth_rate.currency}, net worth is in {net_worth.currency}"
            )

        self.net_worth = net_worth
        self.monthly_growth_rate = monthly_growth_rate
        self.as_of = as_of or date.today()
        self.growth_calculator = growth_calculator or GrowthRateCalculator(net_worth, as_of=self.as_of)

    def growth_rate(self) -> GrowthRateResult:
        if self.monthly_growth_rate is not None:
            return GrowthRateResult(
                sufficient_data=True,
                monthly_rate=self.monthly_growth_rate,
                monthly_rate_percent=0.0,
                data_points_used=0,
                volatility=Volatility.LOW,
            )
        return self.growth_calculator.calculate(method=GrowthMethod.MEAN)

    def can_project(self) -> bool:
        return self.growth_rate().sufficient_data

    def generate(
        self,
        timeframes: Sequence[int] = DEFAULT_TIMEFRAMES,
        interval: ProjectionInterval | str = ProjectionInterval.MONTHLY,
    ) -> ProjectionResult:
        """
        Project every scenario out to the longest requested timeframe.

        Returns without scenarios when the growth rate could not be computed.

        Raises:
            InvalidArgumentError: empty or unsupported timeframes, or unknown interval
        """
        timeframes = validate_timeframes(timeframes)
        interval = parse_enum(ProjectionInterval, interval, "interval")

        current_value = self.net_worth.calculate(self.as_of)
        growth = self.growth_rate()

        if not growth.sufficient_data:
            return ProjectionResult(
                current_value=current_value,
                growth_rate=growth,
                scenarios={},
                timeframes=timeframes,
            )

        scenarios: Dict[Scenario, ScenarioProjection] = {}
        for scenario, multiplier in SCENARIO_MULTIPLIERS.items():
            scenarios[scenario] = self._project_scenario(
                current_value=current_value,
                monthly_rate=growth.monthly_rate.scale(multiplier),
                timeframes=timeframes,
                interval=interval,
            )

        return ProjectionResult(
            current_value=current_value,
            growth_rate=growth,
            scenarios=scenarios,
            timeframes=timeframes,
        )

    def _project_scenario(
        self,
        current_value: Money,
        monthly_rate: Money,
        timeframes: List[int],
        interval: ProjectionInterval,
    ) -> ScenarioProjection:
        max_years = max(timeframes)

        values = []
        for point_date in projection_dates(self.as_of, max_years, interval):
            months_elapsed = months_between(self.as_of, point_date)
            values.append(
                ProjectionPoint(
                    date=point_date,
                    value=current_value + monthly_rate * months_elapsed,
                    months_from_now=months_elapsed,
                )
            )

        # Closest series point to each requested anniversary
        milestones = {}
        for years in timeframes:
            target_date = add_months(self.as_of, years * 12)
            point = min(values, key=lambda v: abs((v.date - target_date).days))
            milestones[years] = Milestone(
                date=point.date,
                value=point.value,
                growth_from_current=point.value - current_value,
            )

        final_value = values[-1].value
        return ScenarioProjection(
            monthly_rate=monthly_rate,
            values=values,
            milestones=milestones,
            final_value=final_value,
            total_growth=final_value - current_value,
            years_projected=max_years,
        )
