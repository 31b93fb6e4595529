"""
Retirement savings projection - compound growth with monthly contributions.

All intermediate math is Decimal on minor units; results are rounded to
whole cents. The 25x needs multiplier and 4% withdrawal rate are the
"4% rule" heuristic, configurable through settings.
"""

from dataclasses import replace
from decimal import Decimal
from typing import Dict, List

from sure_forecast.config import settings
from sure_forecast.domain.models import (
    Recommendation,
    RetirementInputs,
    RetirementProjectionResult,
    RetirementYear,
)
from sure_forecast.domain.money import Factor, Money, percent, round_to_cents, to_decimal

MAX_EXTRA_WORKING_YEARS = 10

# Preset (annual return %, inflation %) assumption sets
SCENARIO_PRESETS = {
    "conservative": {"annual_return_rate": 4.0, "inflation_rate": 3.0},
    "moderate": {"annual_return_rate": 7.0, "inflation_rate": 2.5},
    "aggressive": {"annual_return_rate": 10.0, "inflation_rate": 2.0},
}


def monthly_rate(annual_rate_percent: Factor) -> Decimal:
    return to_decimal(annual_rate_percent) / 100 / 12


def future_value(present_cents: int, contribution_cents: int, annual_rate_percent: Factor, months: int) -> Decimal:
    """
    FV = PV * (1 + r)^n + PMT * ((1 + r)^n - 1) / r

    With a zero rate this degrades to ``PV + PMT * n``.
    """
    rate = monthly_rate(annual_rate_percent)
    if rate == 0:
        return Decimal(present_cents) + Decimal(contribution_cents) * months

    growth = (1 + rate) ** months
    return Decimal(present_cents) * growth + Decimal(contribution_cents) * ((growth - 1) / rate)


def required_contribution(target_cents: int, annual_rate_percent: Factor, months: int) -> Decimal:
    """Monthly payment whose future value after ``months`` equals ``target_cents``"""
    if months <= 0:
        return Decimal(target_cents)

    rate = monthly_rate(annual_rate_percent)
    if rate == 0:
        return Decimal(target_cents) / months
    return Decimal(target_cents) * rate / ((1 + rate) ** months - 1)


class RetirementCalculator:
    """Pure function of its validated inputs; ``calculate`` has no hidden state"""

    def __init__(
        self,
        current_age: int,
        retirement_age: int,
        current_savings: Money,
        monthly_contribution: Money,
        annual_return_rate: float = 7.0,
        retirement_monthly_expenses: Money | None = None,
        life_expectancy: int = 90,
        inflation_rate: float = 2.5,
        withdrawal_rate: float | None = None,
        needs_multiplier: int | None = None,
    ):
        self.inputs = RetirementInputs(
            current_age=current_age,
            retirement_age=retirement_age,
            current_savings=current_savings,
            monthly_contribution=monthly_contribution,
            annual_return_rate=annual_return_rate,
            retirement_monthly_expenses=retirement_monthly_expenses,
            life_expectancy=life_expectancy,
            inflation_rate=inflation_rate,
        )
        self.withdrawal_rate = settings.safe_withdrawal_rate if withdrawal_rate is None else withdrawal_rate
        self.needs_multiplier = settings.retirement_needs_multiplier if needs_multiplier is None else needs_multiplier

    @classmethod
    def from_inputs(
        cls,
        inputs: RetirementInputs,
        withdrawal_rate: float | None = None,
        needs_multiplier: int | None = None,
    ) -> "RetirementCalculator":
        return cls(
            current_age=inputs.current_age,
            retirement_age=inputs.retirement_age,
            current_savings=inputs.current_savings,
            monthly_contribution=inputs.monthly_contribution,
            annual_return_rate=inputs.annual_return_rate,
            retirement_monthly_expenses=inputs.retirement_monthly_expenses,
            life_expectancy=inputs.life_expectancy,
            inflation_rate=inputs.inflation_rate,
            withdrawal_rate=withdrawal_rate,
            needs_multiplier=needs_multiplier,
        )

    def projected_savings(self, inputs: RetirementInputs | None = None) -> Money:
        inputs = inputs or self.inputs
        value = future_value(
            inputs.current_savings.cents,
            inputs.monthly_contribution.cents,
            inputs.annual_return_rate,
            inputs.years_until_retirement * 12,
        )
        return Money(round_to_cents(value), inputs.currency)

    def inflated_annual_expenses(self, inputs: RetirementInputs | None = None) -> Money:
        """Today's annual expenses in retirement-date money"""
        inputs = inputs or self.inputs
        annual = inputs.retirement_monthly_expenses * 12
        inflation = (1 + to_decimal(inputs.inflation_rate) / 100) ** inputs.years_until_retirement
        return annual.scale(inflation)

    def needed_savings(self, inputs: RetirementInputs | None = None) -> Money:
        return self.inflated_annual_expenses(inputs).scale(self.needs_multiplier)

    def monthly_income(self, savings: Money) -> Money:
        return savings.scale(to_decimal(self.withdrawal_rate) / 12)

    def trajectory(self) -> List[RetirementYear]:
        """
        Year-end balances from current age to retirement age inclusive.

        Compounds annually and adds a full year of contributions at each year
        end, alongside the principal-plus-contributions total for comparison.
        """
        inputs = self.inputs
        annual_rate = to_decimal(inputs.annual_return_rate) / 100
        annual_contribution = inputs.monthly_contribution.cents * 12

        balance = Decimal(inputs.current_savings.cents)
        contributed = inputs.current_savings.cents
        years = []
        for year in range(inputs.years_until_retirement + 1):
            if year > 0:
                balance = balance * (1 + annual_rate) + annual_contribution
                contributed += annual_contribution

            balance_money = Money(round_to_cents(balance), inputs.currency)
            contributed_money = Money(contributed, inputs.currency)
            years.append(
                RetirementYear(
                    age=inputs.current_age + year,
                    year=year,
                    balance=balance_money,
                    total_contributed=contributed_money,
                    growth=balance_money - contributed_money,
                )
            )
        return years

    def calculate(self) -> RetirementProjectionResult:
        inputs = self.inputs
        months = inputs.years_until_retirement * 12

        projected = self.projected_savings()
        total_contributions = inputs.current_savings + inputs.monthly_contribution * months
        needed = self.needed_savings()
        gap = projected - needed

        return RetirementProjectionResult(
            inputs=inputs,
            years_until_retirement=inputs.years_until_retirement,
            years_in_retirement=inputs.years_in_retirement,
            projected_savings=projected,
            total_contributions=total_contributions,
            projected_growth=projected - total_contributions,
            inflated_annual_expenses=self.inflated_annual_expenses(),
            needed_savings=needed,
            monthly_retirement_income=self.monthly_income(projected),
            gap=gap,
            gap_percent=percent(gap.cents, needed.cents),
            is_on_track=gap.cents >= 0,
            trajectory=self.trajectory(),
            recommendations=self.recommendations(projected, needed),
        )

    def calculate_scenarios(self) -> Dict[str, RetirementProjectionResult]:
        """Full calculation under each preset return / inflation assumption"""
        results = {}
        for name, assumptions in SCENARIO_PRESETS.items():
            calculator = RetirementCalculator.from_inputs(
                replace(self.inputs, **assumptions),
                withdrawal_rate=self.withdrawal_rate,
                needs_multiplier=self.needs_multiplier,
            )
            results[name] = calculator.calculate()
        return results

    def recommendations(self, projected: Money, needed: Money) -> List[Recommendation]:
        inputs = self.inputs
        gap = projected - needed

        if gap.cents >= 0:
            recommendations = [
                Recommendation(
                    kind="on_track",
                    message=(
                        f"You're on track to retire at {inputs.retirement_age} with "
                        f"{projected.format()} saved against {needed.format()} needed."
                    ),
                    amount=projected,
                )
            ]
            if gap.is_positive():
                extra_spending = self.monthly_income(gap)
                recommendations.append(
                    Recommendation(
                        kind="increase_spending",
                        message=(
                            f"Your projected surplus of {gap.format()} could support about "
                            f"{extra_spending.format()} more per month in retirement."
                        ),
                        amount=extra_spending,
                    )
                )
                earliest_age = self._earliest_feasible_retirement_age()
                if earliest_age is not None:
                    recommendations.append(
                        Recommendation(
                            kind="retire_earlier",
                            message=f"You could retire as early as {earliest_age} and still meet your goal.",
                            years=inputs.retirement_age - earliest_age,
                        )
                    )
            return recommendations

        shortfall = -gap
        months = inputs.years_until_retirement * 12
        extra_contribution = Money(
            round_to_cents(required_contribution(shortfall.cents, inputs.annual_return_rate, months)),
            inputs.currency,
        )
        recommendations = [
            Recommendation(
                kind="shortfall",
                message=(
                    f"You're projected to be {shortfall.format()} short of the "
                    f"{needed.format()} needed at {inputs.retirement_age}."
                ),
                amount=shortfall,
            ),
            Recommendation(
                kind="increase_contribution",
                message=f"Saving an additional {extra_contribution.format()} per month would close the gap.",
                amount=extra_contribution,
            ),
        ]

        annual_contribution = inputs.monthly_contribution.cents * 12
        if annual_contribution > 0:
            extra_years = min(-(-shortfall.cents // annual_contribution), MAX_EXTRA_WORKING_YEARS)
            recommendations.append(
                Recommendation(
                    kind="work_longer",
                    message=(
                        f"Working {extra_years} more year{'s' if extra_years != 1 else ''} "
                        f"would add {Money(annual_contribution * extra_years, inputs.currency).format()} "
                        "in contributions."
                    ),
                    years=extra_years,
                )
            )
        return recommendations

    def _earliest_feasible_retirement_age(self) -> int | None:
        """Youngest age before the planned retirement age that still covers the needed savings"""
        inputs = self.inputs
        for age in range(inputs.current_age + 1, inputs.retirement_age):
            earlier = replace(inputs, retirement_age=age)
            if self.projected_savings(earlier) >= self.needed_savings(earlier):
                return age
        return None
