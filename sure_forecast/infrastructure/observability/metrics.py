"""Prometheus metrics for projections, categorization and retirement planning"""

from prometheus_client import Counter, Histogram

# Projection metrics
projection_counter = Counter(
    "sure_projection_total",
    "Net worth projections requested",
    ["outcome"],  # generated | insufficient_history | poor_data_quality
)

growth_volatility_counter = Counter(
    "sure_growth_volatility_total",
    "Growth rate calculations by volatility class",
    ["volatility"],  # low | medium | high
)

# Categorization metrics
suggestion_counter = Counter(
    "sure_category_suggestion_total",
    "Category suggestions produced",
    ["match_type"],  # exact | fuzzy | partial
)

auto_categorization_counter = Counter(
    "sure_auto_categorization_total",
    "Auto-categorization attempts",
    ["outcome"],  # applied | needs_review | no_match
)

pattern_learning_counter = Counter(
    "sure_pattern_learning_total",
    "Categorizations offered for pattern learning",
    ["outcome"],  # created | updated | refused
)

patterns_pruned_counter = Counter(
    "sure_patterns_pruned_total",
    "Patterns deleted by the pruning sweep",
    ["reason"],  # stale | low_confidence
)

# Retirement metrics
retirement_outcome_counter = Counter(
    "sure_retirement_projection_total",
    "Retirement projections by outcome",
    ["outcome"],  # on_track | short
)

# Calculation latency
calculation_duration_histogram = Histogram(
    "sure_calculation_duration_seconds",
    "Calculator run time",
    ["calculator"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)


def record_projection(outcome: str, volatility: str | None = None) -> None:
    """Record projection outcome and, when computed, the volatility of the growth rate"""
    projection_counter.labels(outcome=outcome).inc()
    if volatility:
        growth_volatility_counter.labels(volatility=volatility).inc()


def record_suggestions(match_types: list[str]) -> None:
    for match_type in match_types:
        suggestion_counter.labels(match_type=match_type).inc()


def record_auto_categorization(outcome: str) -> None:
    auto_categorization_counter.labels(outcome=outcome).inc()


def record_learning(outcome: str) -> None:
    pattern_learning_counter.labels(outcome=outcome).inc()


def record_pruned(reasons: list[str]) -> None:
    for reason in reasons:
        patterns_pruned_counter.labels(reason=reason).inc()


def record_retirement(is_on_track: bool) -> None:
    retirement_outcome_counter.labels(outcome="on_track" if is_on_track else "short").inc()
