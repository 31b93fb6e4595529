"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Type, TypeVar

from sure_forecast.domain.exceptions import InvalidArgumentError
from sure_forecast.domain.money import Money

E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: Type[E], value, label: str) -> E:
    """Coerce a string or enum member, raising InvalidArgumentError on unknown values"""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidArgumentError(f"Invalid {label}: {value!r}. Available: {allowed}") from None


class AccountClassification(str, Enum):
    ASSET = "asset"
    LIABILITY = "liability"


class TimelineInterval(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class ProjectionInterval(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class GrowthMethod(str, Enum):
    MEAN = "mean"
    MEDIAN = "median"
    WEIGHTED = "weighted"


class Volatility(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DataQualityError(str, Enum):
    INSUFFICIENT_HISTORY = "insufficient_history"
    POOR_DATA_QUALITY = "poor_data_quality"


class Scenario(str, Enum):
    CONSERVATIVE = "conservative"
    REALISTIC = "realistic"
    OPTIMISTIC = "optimistic"


class MatchType(str, Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    PARTIAL = "partial"


class CategorizationSource(str, Enum):
    """Where a categorization came from"""

    USER = "user"
    RULE = "rule"
    AUTOMATED = "automated"  # AI / probabilistic classifier

    @property
    def trusted(self) -> bool:
        return self in (CategorizationSource.USER, CategorizationSource.RULE)


@dataclass(frozen=True)
class Account:
    """Account visible to the net worth calculation"""

    account_id: str
    currency: str
    classification: AccountClassification
    visible: bool = True
    name: str = ""


@dataclass(frozen=True)
class BalancePoint:
    """Known or inferred balance of one account on one date"""

    date: date
    account_id: str
    amount: Money


@dataclass(frozen=True)
class NetWorthSample:
    """One point on a family-level net worth series"""

    date: date
    value: Money


@dataclass
class NetWorthTimelinePoint:
    date: date
    value: Money
    change: Money
    percent_change: float


@dataclass
class NetWorthSummary:
    start_date: date
    end_date: date
    start_value: Money
    end_value: Money
    total_change: Money
    percent_change: float


@dataclass
class HistoricalPeriod:
    start_date: date
    end_date: date


@dataclass
class GrowthRateResult:
    """
    Historical growth statistics, or the reason they could not be computed.

    When ``sufficient_data`` is False only ``error``, ``message`` and the
    counters are meaningful.
    """

    sufficient_data: bool
    monthly_rate: Optional[Money] = None
    monthly_rate_percent: float = 0.0
    data_points_used: int = 0
    method: Optional[GrowthMethod] = None  # None when the rate was supplied by the caller
    volatility: Volatility = Volatility.LOW
    warnings: List[str] = field(default_factory=list)
    error: Optional[DataQualityError] = None
    message: Optional[str] = None
    historical_period: Optional[HistoricalPeriod] = None
    data_points_required: Optional[int] = None
    invalid_count: Optional[int] = None

    @property
    def annual_rate(self) -> Optional[Money]:
        if self.monthly_rate is None:
            return None
        return self.monthly_rate * 12

    @property
    def warning(self) -> Optional[str]:
        return " ".join(self.warnings) if self.warnings else None


@dataclass
class ProjectionPoint:
    date: date
    value: Money
    months_from_now: int


@dataclass
class Milestone:
    date: date
    value: Money
    growth_from_current: Money


@dataclass
class ScenarioProjection:
    """Projected series for one scenario"""

    monthly_rate: Money
    values: List[ProjectionPoint]
    milestones: Dict[int, Milestone]
    final_value: Money
    total_growth: Money
    years_projected: int


@dataclass
class ProjectionResult:
    """Multi-scenario forecast; ``scenarios`` is empty when growth data is insufficient"""

    current_value: Money
    growth_rate: GrowthRateResult
    scenarios: Dict[Scenario, ScenarioProjection]
    timeframes: List[int]

    @property
    def sufficient_data(self) -> bool:
        return self.growth_rate.sufficient_data

    @property
    def error(self) -> Optional[DataQualityError]:
        return self.growth_rate.error

    @property
    def message(self) -> Optional[str]:
        return self.growth_rate.message


@dataclass(frozen=True)
class CategorizationPattern:
    """Learned merchant to category association for one family"""

    family_id: str
    merchant_normalized: str
    category_id: str
    match_count: int = 1
    confidence_score: float = 0.0
    last_matched_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.family_id, self.merchant_normalized, self.category_id)


@dataclass
class CategorySuggestion:
    category_id: str
    confidence: float
    similarity: float
    matched_pattern: CategorizationPattern
    match_type: MatchType


@dataclass(frozen=True)
class RetirementInputs:
    """Validated retirement planning assumptions (rates are percentages)"""

    current_age: int
    retirement_age: int
    current_savings: Money
    monthly_contribution: Money
    annual_return_rate: float = 7.0
    retirement_monthly_expenses: Optional[Money] = None
    life_expectancy: int = 90
    inflation_rate: float = 2.5

    def __post_init__(self) -> None:
        for name in ("current_age", "retirement_age", "life_expectancy"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")

        if self.current_age <= 0:
            raise InvalidArgumentError(f"current_age must be positive, got {self.current_age}")
        if self.retirement_age <= self.current_age:
            raise InvalidArgumentError(
                f"retirement_age ({self.retirement_age}) must be greater than current_age ({self.current_age})"
            )
        if self.life_expectancy <= self.retirement_age:
            raise InvalidArgumentError(
                f"life_expectancy ({self.life_expectancy}) must be greater than retirement_age ({self.retirement_age})"
            )

        if self.retirement_monthly_expenses is None:
            object.__setattr__(self, "retirement_monthly_expenses", Money.zero(self.current_savings.currency))

        for name in ("current_savings", "monthly_contribution", "retirement_monthly_expenses"):
            value = getattr(self, name)
            if not isinstance(value, Money):
                raise InvalidArgumentError(f"{name} must be Money, got {type(value).__name__}")
            if value.is_negative():
                raise InvalidArgumentError(f"{name} must not be negative, got {value.format()}")
            if value.currency != self.current_savings.currency:
                raise InvalidArgumentError(
                    f"{name} is in {value.currency} but current_savings is in {self.current_savings.currency}"
                )

        for name in ("annual_return_rate", "inflation_rate"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidArgumentError(f"{name} must be a number, got {value!r}")
            if not 0 <= value <= 100:
                raise InvalidArgumentError(f"{name} must be between 0 and 100 percent, got {value}")

    @property
    def currency(self) -> str:
        return self.current_savings.currency

    @property
    def years_until_retirement(self) -> int:
        return self.retirement_age - self.current_age

    @property
    def years_in_retirement(self) -> int:
        return self.life_expectancy - self.retirement_age


@dataclass
class RetirementYear:
    """Year-end balance on the way to retirement"""

    age: int
    year: int
    balance: Money
    total_contributed: Money  # principal plus contributions, no growth
    growth: Money


@dataclass
class Recommendation:
    kind: str
    message: str
    amount: Optional[Money] = None
    years: Optional[int] = None


@dataclass
class RetirementProjectionResult:
    inputs: RetirementInputs
    years_until_retirement: int
    years_in_retirement: int
    projected_savings: Money
    total_contributions: Money
    projected_growth: Money
    inflated_annual_expenses: Money
    needed_savings: Money
    monthly_retirement_income: Money
    gap: Money
    gap_percent: float
    is_on_track: bool
    trajectory: List[RetirementYear]
    recommendations: List[Recommendation]
