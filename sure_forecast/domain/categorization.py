"""
Merchant categorization patterns - learning, matching and pruning.

Patterns are immutable values. Every change (a new confirmation, a
confidence refresh) returns a new pattern, and the pattern store is
responsible for persisting it atomically.
"""

import re
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sure_forecast.config import settings
from sure_forecast.domain.exceptions import InvalidArgumentError, UntrustedProvenanceError
from sure_forecast.domain.models import (
    CategorizationPattern,
    CategorizationSource,
    CategorySuggestion,
    MatchType,
    parse_enum,
)
from sure_forecast.domain.similarity import similarity
from sure_forecast.utils.date_utils import add_months

# Confidence weights
FREQUENCY_WEIGHT = 0.6
RECENCY_WEIGHT = 0.3
SPECIFICITY_WEIGHT = 0.1

FREQUENCY_SATURATION = 20  # matches for a full frequency score
SPECIFICITY_SATURATION = 20  # characters for a full specificity score
RECENCY_FULL_DAYS = 30
RECENCY_DECAY_DAYS = 150  # zero after 180 days

_LOCATION_NUMBER = re.compile(r"\b(?:store|str|location|loc|unit|branch)\s*(?:no\.?\s*|#\s*)?\d+\b")
_HASH_NUMBER = re.compile(r"#\s*\d+")
_NON_ALNUM = re.compile(r"[\W_]+")
_BARE_NUMBER = re.compile(r"\b\d{3,}\b")
_WHITESPACE = re.compile(r"\s+")


def normalize_merchant(name: str | None) -> str:
    """
    Canonical merchant key used both when learning and when matching.

    "STARBUCKS STORE #1234 SEATTLE" -> "starbucks seattle"
    """
    if not name:
        return ""

    text = _LOCATION_NUMBER.sub(" ", name.lower())
    text = _HASH_NUMBER.sub(" ", text)
    text = _NON_ALNUM.sub(" ", text)

    # Removing one token can bring a keyword next to another number
    while True:
        stripped = _BARE_NUMBER.sub(" ", _LOCATION_NUMBER.sub(" ", text))
        if stripped == text:
            break
        text = stripped

    return _WHITESPACE.sub(" ", text).strip()


def frequency_score(match_count: int) -> float:
    return min(match_count / FREQUENCY_SATURATION, 1.0)


def recency_score(last_matched_at: Optional[datetime], now: datetime) -> float:
    """1.0 within 30 days of the last match, then linear decay to 0.0 at 180 days"""
    if last_matched_at is None:
        return 0.0

    days = (now - last_matched_at).total_seconds() / 86400
    if days <= RECENCY_FULL_DAYS:
        return 1.0
    if days >= RECENCY_FULL_DAYS + RECENCY_DECAY_DAYS:
        return 0.0
    return 1.0 - (days - RECENCY_FULL_DAYS) / RECENCY_DECAY_DAYS


def specificity_score(merchant_normalized: str) -> float:
    return min(len(merchant_normalized) / SPECIFICITY_SATURATION, 1.0)


def calculate_confidence(pattern: CategorizationPattern, now: datetime) -> float:
    return (
        FREQUENCY_WEIGHT * frequency_score(pattern.match_count)
        + RECENCY_WEIGHT * recency_score(pattern.last_matched_at, now)
        + SPECIFICITY_WEIGHT * specificity_score(pattern.merchant_normalized)
    )


def recalculate(pattern: CategorizationPattern, now: datetime) -> CategorizationPattern:
    return replace(pattern, confidence_score=calculate_confidence(pattern, now))


def new_pattern(family_id: str, merchant: str, category_id: str, now: datetime) -> CategorizationPattern:
    """First confirmed categorization of a merchant for a category"""
    merchant_normalized = normalize_merchant(merchant)
    if not merchant_normalized:
        raise InvalidArgumentError(f"Merchant {merchant!r} is empty after normalization")

    pattern = CategorizationPattern(
        family_id=family_id,
        merchant_normalized=merchant_normalized,
        category_id=category_id,
        match_count=1,
        last_matched_at=now,
        created_at=now,
    )
    return recalculate(pattern, now)


def record_match(pattern: CategorizationPattern, now: datetime) -> CategorizationPattern:
    """Repeat confirmation: bump the count, stamp the match and recompute confidence"""
    updated = replace(pattern, match_count=pattern.match_count + 1, last_matched_at=now)
    return recalculate(updated, now)


def learn(
    existing: Optional[CategorizationPattern],
    family_id: str,
    merchant: str,
    category_id: str,
    source: CategorizationSource | str,
    now: datetime,
) -> CategorizationPattern:
    """
    Create or update the pattern for a confirmed categorization.

    Raises:
        UntrustedProvenanceError: categorization came from an automated classifier
        InvalidArgumentError: merchant normalizes to nothing, or ``existing`` is another pattern
    """
    source = parse_enum(CategorizationSource, source, "categorization source")
    if not source.trusted:
        raise UntrustedProvenanceError(f"Refusing to learn from {source.value} categorization")

    if existing is None:
        return new_pattern(family_id, merchant, category_id, now)

    expected_key = (family_id, normalize_merchant(merchant), category_id)
    if existing.key != expected_key:
        raise InvalidArgumentError(f"Pattern {existing.key} does not match {expected_key}")
    return record_match(existing, now)


def prune_reason(
    pattern: CategorizationPattern,
    now: datetime,
    min_confidence: float | None = None,
    stale_months: int | None = None,
    min_matches: int | None = None,
) -> Optional[str]:
    """
    Why a pattern should be deleted, or None to keep it.

    Confidence is re-evaluated as of ``now`` so that recency decay counts.
    """
    min_confidence = settings.pattern_min_confidence if min_confidence is None else min_confidence
    stale_months = settings.pattern_stale_months if stale_months is None else stale_months
    min_matches = settings.pattern_min_matches if min_matches is None else min_matches

    stale_before = add_months(now, -stale_months)
    is_stale = pattern.last_matched_at is None or pattern.last_matched_at < stale_before
    if is_stale and pattern.match_count < min_matches:
        return "stale"

    if calculate_confidence(pattern, now) < min_confidence:
        return "low_confidence"

    return None


def select_prunable(
    patterns: Iterable[CategorizationPattern], now: datetime
) -> List[Tuple[CategorizationPattern, str]]:
    selected = []
    for pattern in patterns:
        reason = prune_reason(pattern, now)
        if reason:
            selected.append((pattern, reason))
    return selected


def _contains_words(a: str, b: str) -> bool:
    """True when the shorter name appears as a run of whole words in the longer"""
    short, long = sorted((a.split(), b.split()), key=len)
    if not short:
        return False
    width = len(short)
    return any(long[i:i + width] == short for i in range(len(long) - width + 1))


class CategorizationMatcher:
    """Suggest categories for a merchant name from one family's patterns"""

    def __init__(
        self,
        patterns: Iterable[CategorizationPattern],
        fuzzy_threshold: float | None = None,
        auto_categorize_threshold: float | None = None,
    ):
        self.patterns = list(patterns)
        self.fuzzy_threshold = settings.fuzzy_match_threshold if fuzzy_threshold is None else fuzzy_threshold
        self.auto_categorize_threshold = (
            settings.auto_categorize_threshold if auto_categorize_threshold is None else auto_categorize_threshold
        )

    def suggest(self, name: str) -> List[CategorySuggestion]:
        """
        All candidate categories, best first, one suggestion per category.

        Exact matches win outright; fuzzy and partial matches are only
        considered when no pattern matches exactly.
        """
        query = normalize_merchant(name)
        if not query:
            return []

        candidates: List[Tuple[CategorizationPattern, float, MatchType]] = [
            (pattern, 1.0, MatchType.EXACT)
            for pattern in self.patterns
            if pattern.merchant_normalized == query
        ]

        if not candidates:
            for pattern in self.patterns:
                score = similarity(query, pattern.merchant_normalized)
                if score >= self.fuzzy_threshold:
                    candidates.append((pattern, score, MatchType.FUZZY))
                elif _contains_words(query, pattern.merchant_normalized):
                    candidates.append((pattern, score, MatchType.PARTIAL))

        best_by_category: Dict[str, CategorySuggestion] = {}
        for pattern, score, match_type in candidates:
            suggestion = CategorySuggestion(
                category_id=pattern.category_id,
                confidence=min(pattern.confidence_score * score, 1.0),
                similarity=score,
                matched_pattern=pattern,
                match_type=match_type,
            )
            current = best_by_category.get(pattern.category_id)
            if current is None or suggestion.confidence > current.confidence:
                best_by_category[pattern.category_id] = suggestion

        return sorted(
            best_by_category.values(),
            key=lambda s: (-s.confidence, -s.similarity, s.category_id),
        )

    def best_match(self, name: str) -> Optional[CategorySuggestion]:
        """Suggestion that may be applied without review, else None"""
        return self.auto_applicable(self.suggest(name))

    def auto_applicable(self, suggestions: Iterable[CategorySuggestion]) -> Optional[CategorySuggestion]:
        """
        Best exact or fuzzy suggestion clearing the auto-categorize threshold.

        Partial matches sit below the fuzzy similarity floor and are only
        ever offered for review.
        """
        for suggestion in suggestions:
            if suggestion.match_type == MatchType.PARTIAL or suggestion.similarity < self.fuzzy_threshold:
                continue
            if suggestion.confidence >= self.auto_categorize_threshold:
                return suggestion
        return None
