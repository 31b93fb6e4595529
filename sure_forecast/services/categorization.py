"""Categorization workflow over a tenant-scoped pattern store"""

from collections import Counter
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sure_forecast.domain.categorization import (
    CategorizationMatcher,
    learn as learn_pattern,
    normalize_merchant,
    select_prunable,
)
from sure_forecast.domain.models import (
    CategorizationPattern,
    CategorizationSource,
    CategorySuggestion,
    parse_enum,
)
from sure_forecast.domain.ports import PatternStore
from sure_forecast.infrastructure.observability.logging import log_categorization, log_prune
from sure_forecast.infrastructure.observability.metrics import (
    record_auto_categorization,
    record_learning,
    record_pruned,
    record_suggestions,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CategorizationService:
    """Suggest, auto-apply, learn and prune merchant patterns for a family"""

    def __init__(self, store: PatternStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def suggest(self, family_id: str, name: str) -> List[CategorySuggestion]:
        """Suggestions for human review, best first"""
        matcher = CategorizationMatcher(self.store.find_by_family(family_id))
        suggestions = matcher.suggest(name)
        record_suggestions([s.match_type.value for s in suggestions])
        return suggestions

    def auto_categorize(self, family_id: str, name: str) -> Optional[CategorySuggestion]:
        """Category to apply without review, or None when nothing clears the confidence bar"""
        matcher = CategorizationMatcher(self.store.find_by_family(family_id))
        suggestions = matcher.suggest(name)
        best = matcher.auto_applicable(suggestions)

        if best is not None:
            outcome = "applied"
        elif suggestions:
            outcome = "needs_review"
        else:
            outcome = "no_match"

        record_auto_categorization(outcome)
        top = best or (suggestions[0] if suggestions else None)
        log_categorization(
            family_id=family_id,
            merchant_normalized=normalize_merchant(name),
            outcome=outcome,
            category_id=top.category_id if top else None,
            confidence=top.confidence if top else None,
        )
        return best

    def learn(
        self,
        family_id: str,
        merchant: str,
        category_id: str,
        source: CategorizationSource | str,
        now: datetime | None = None,
    ) -> Optional[CategorizationPattern]:
        """
        Record a confirmed categorization.

        Automated (AI) categorizations are skipped and return None so they
        never feed the training set.
        """
        source = parse_enum(CategorizationSource, source, "categorization source")
        merchant_normalized = normalize_merchant(merchant)

        if not source.trusted:
            record_learning("refused")
            log_categorization(
                family_id=family_id,
                merchant_normalized=merchant_normalized,
                outcome="learning_refused",
                category_id=category_id,
            )
            return None

        now = now or self.clock()
        pattern = self.store.upsert_match(
            family_id,
            merchant_normalized,
            category_id,
            lambda existing: learn_pattern(existing, family_id, merchant, category_id, source, now),
        )

        outcome = "created" if pattern.match_count == 1 else "updated"
        record_learning(outcome)
        log_categorization(
            family_id=family_id,
            merchant_normalized=merchant_normalized,
            outcome=f"pattern_{outcome}",
            category_id=category_id,
            confidence=pattern.confidence_score,
        )
        return pattern

    def prune(self, family_id: str, now: datetime | None = None) -> int:
        """Delete stale low-usage and low-confidence patterns; returns how many were removed"""
        now = now or self.clock()
        patterns = self.store.find_by_family(family_id)
        prunable = select_prunable(patterns, now)

        deleted = self.store.delete(pattern for pattern, _ in prunable)
        reasons = [reason for _, reason in prunable]
        record_pruned(reasons)
        log_prune(family_id, examined=len(patterns), deleted=deleted, reasons=dict(Counter(reasons)))
        return deleted
