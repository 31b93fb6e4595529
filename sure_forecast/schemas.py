"""Pydantic schemas for JSON-ready calculator results"""

import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from sure_forecast.domain.models import (
    CategorySuggestion,
    GrowthRateResult,
    HistoricalPeriod,
    NetWorthTimelinePoint,
    ProjectionResult,
    RetirementProjectionResult,
    ScenarioProjection,
)
from sure_forecast.domain.money import Money


class MoneySchema(BaseModel):
    """Money as exact amount string, minor units and display text"""

    amount: str
    cents: int
    currency: str
    formatted: str

    @classmethod
    def from_money(cls, money: Money) -> "MoneySchema":
        return cls(amount=str(money), cents=money.cents, currency=money.currency, formatted=money.format())


class HistoricalPeriodSchema(BaseModel):
    start_date: datetime.date
    end_date: datetime.date

    @classmethod
    def from_period(cls, period: Optional[HistoricalPeriod]) -> Optional["HistoricalPeriodSchema"]:
        if period is None:
            return None
        return cls(start_date=period.start_date, end_date=period.end_date)


class GrowthRateSchema(BaseModel):
    monthly: MoneySchema
    annual: MoneySchema
    percent: float


class DataQualitySchema(BaseModel):
    sufficient_data: bool
    volatility: Optional[str] = None
    warning: Optional[str] = None
    data_points_used: int = 0
    historical_period: Optional[HistoricalPeriodSchema] = None
    error: Optional[str] = None
    message: Optional[str] = None


class GrowthRateResponse(BaseModel):
    """Growth rate info, or the reason it is unavailable"""

    growth_rate: Optional[GrowthRateSchema] = None
    method: Optional[str] = None
    data_quality: DataQualitySchema

    @classmethod
    def from_result(cls, result: GrowthRateResult) -> "GrowthRateResponse":
        return cls(
            growth_rate=_growth_rate(result),
            method=result.method.value if result.method else None,
            data_quality=_data_quality(result),
        )


class ProjectionPointSchema(BaseModel):
    date: datetime.date
    value: MoneySchema
    months_from_now: int


class MilestoneSchema(BaseModel):
    date: datetime.date
    value: MoneySchema
    growth_from_current: MoneySchema


class ScenarioSchema(BaseModel):
    monthly_rate: MoneySchema
    milestones: Dict[int, MilestoneSchema]
    values: List[ProjectionPointSchema]
    final_value: MoneySchema
    total_growth: MoneySchema

    @classmethod
    def from_scenario(cls, scenario: ScenarioProjection) -> "ScenarioSchema":
        return cls(
            monthly_rate=MoneySchema.from_money(scenario.monthly_rate),
            milestones={
                years: MilestoneSchema(
                    date=milestone.date,
                    value=MoneySchema.from_money(milestone.value),
                    growth_from_current=MoneySchema.from_money(milestone.growth_from_current),
                )
                for years, milestone in scenario.milestones.items()
            },
            values=[
                ProjectionPointSchema(
                    date=point.date,
                    value=MoneySchema.from_money(point.value),
                    months_from_now=point.months_from_now,
                )
                for point in scenario.values
            ],
            final_value=MoneySchema.from_money(scenario.final_value),
            total_growth=MoneySchema.from_money(scenario.total_growth),
        )


class ProjectionResponse(BaseModel):
    """Net worth projection payload for charts and milestone cards"""

    current_net_worth: MoneySchema
    growth_rate: Optional[GrowthRateSchema] = None
    scenarios: Dict[str, ScenarioSchema]
    data_quality: DataQualitySchema
    timeframes: List[int]
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_result(cls, result: ProjectionResult) -> "ProjectionResponse":
        return cls(
            current_net_worth=MoneySchema.from_money(result.current_value),
            growth_rate=_growth_rate(result.growth_rate),
            scenarios={
                scenario.value: ScenarioSchema.from_scenario(projection)
                for scenario, projection in result.scenarios.items()
            },
            data_quality=_data_quality(result.growth_rate),
            timeframes=result.timeframes,
            error=result.error.value if result.error else None,
            message=result.message,
        )


class TimelinePointSchema(BaseModel):
    date: datetime.date
    value: MoneySchema
    change: MoneySchema
    percent_change: float

    @classmethod
    def from_point(cls, point: NetWorthTimelinePoint) -> "TimelinePointSchema":
        return cls(
            date=point.date,
            value=MoneySchema.from_money(point.value),
            change=MoneySchema.from_money(point.change),
            percent_change=point.percent_change,
        )


class CategorySuggestionSchema(BaseModel):
    category_id: str
    confidence: float
    similarity: float
    match_type: str
    merchant: str

    @classmethod
    def from_suggestion(cls, suggestion: CategorySuggestion) -> "CategorySuggestionSchema":
        return cls(
            category_id=suggestion.category_id,
            confidence=round(suggestion.confidence, 4),
            similarity=round(suggestion.similarity, 4),
            match_type=suggestion.match_type.value,
            merchant=suggestion.matched_pattern.merchant_normalized,
        )


class RetirementYearSchema(BaseModel):
    age: int
    year: int
    balance: MoneySchema
    total_contributed: MoneySchema
    growth: MoneySchema


class RecommendationSchema(BaseModel):
    kind: str
    message: str
    amount: Optional[MoneySchema] = None
    years: Optional[int] = None


class RetirementProjectionResponse(BaseModel):
    years_until_retirement: int
    years_in_retirement: int
    annual_return_rate: float
    inflation_rate: float
    projected_savings: MoneySchema
    total_contributions: MoneySchema
    projected_growth: MoneySchema
    needed_savings: MoneySchema
    monthly_retirement_income: MoneySchema
    gap: MoneySchema
    gap_percent: float
    is_on_track: bool
    trajectory: List[RetirementYearSchema]
    recommendations: List[RecommendationSchema]

    @classmethod
    def from_result(cls, result: RetirementProjectionResult) -> "RetirementProjectionResponse":
        return cls(
            years_until_retirement=result.years_until_retirement,
            years_in_retirement=result.years_in_retirement,
            annual_return_rate=result.inputs.annual_return_rate,
            inflation_rate=result.inputs.inflation_rate,
            projected_savings=MoneySchema.from_money(result.projected_savings),
            total_contributions=MoneySchema.from_money(result.total_contributions),
            projected_growth=MoneySchema.from_money(result.projected_growth),
            needed_savings=MoneySchema.from_money(result.needed_savings),
            monthly_retirement_income=MoneySchema.from_money(result.monthly_retirement_income),
            gap=MoneySchema.from_money(result.gap),
            gap_percent=result.gap_percent,
            is_on_track=result.is_on_track,
            trajectory=[
                RetirementYearSchema(
                    age=year.age,
                    year=year.year,
                    balance=MoneySchema.from_money(year.balance),
                    total_contributed=MoneySchema.from_money(year.total_contributed),
                    growth=MoneySchema.from_money(year.growth),
                )
                for year in result.trajectory
            ],
            recommendations=[
                RecommendationSchema(
                    kind=rec.kind,
                    message=rec.message,
                    amount=MoneySchema.from_money(rec.amount) if rec.amount is not None else None,
                    years=rec.years,
                )
                for rec in result.recommendations
            ],
        )


def _growth_rate(result: GrowthRateResult) -> Optional[GrowthRateSchema]:
    if not result.sufficient_data or result.monthly_rate is None:
        return None
    return GrowthRateSchema(
        monthly=MoneySchema.from_money(result.monthly_rate),
        annual=MoneySchema.from_money(result.annual_rate),
        percent=result.monthly_rate_percent,
    )


def _data_quality(result: GrowthRateResult) -> DataQualitySchema:
    return DataQualitySchema(
        sufficient_data=result.sufficient_data,
        volatility=result.volatility.value if result.sufficient_data else None,
        warning=result.warning,
        data_points_used=result.data_points_used,
        historical_period=HistoricalPeriodSchema.from_period(result.historical_period),
        error=result.error.value if result.error else None,
        message=result.message,
    )
