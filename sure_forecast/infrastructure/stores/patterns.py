"""In-memory categorization pattern store implementing PatternStore"""

import threading
from typing import Dict, Iterable, List, Optional, Tuple

from sure_forecast.domain.models import CategorizationPattern
from sure_forecast.domain.ports import PatternUpdate

PatternKey = Tuple[str, str, str]


class InMemoryPatternStore:
    """
    Patterns keyed by (family_id, merchant_normalized, category_id).

    A single lock serializes ``upsert_match`` so concurrent confirmations of
    the same merchant never lose a match count.
    """

    def __init__(self, patterns: Iterable[CategorizationPattern] = ()):
        self._lock = threading.Lock()
        self._patterns: Dict[PatternKey, CategorizationPattern] = {p.key: p for p in patterns}

    def find_by_family(self, family_id: str) -> List[CategorizationPattern]:
        with self._lock:
            return [p for p in self._patterns.values() if p.family_id == family_id]

    def find(self, family_id: str, merchant_normalized: str, category_id: str) -> Optional[CategorizationPattern]:
        with self._lock:
            return self._patterns.get((family_id, merchant_normalized, category_id))

    def upsert_match(
        self,
        family_id: str,
        merchant_normalized: str,
        category_id: str,
        update: PatternUpdate,
    ) -> CategorizationPattern:
        """Apply ``update`` to the current row (or None) and store the result atomically"""
        key = (family_id, merchant_normalized, category_id)
        with self._lock:
            updated = update(self._patterns.get(key))
            if updated.key != key:
                raise ValueError(f"Update for {key} produced pattern {updated.key}")
            self._patterns[key] = updated
            return updated

    def delete(self, patterns: Iterable[CategorizationPattern]) -> int:
        deleted = 0
        with self._lock:
            for pattern in patterns:
                if self._patterns.pop(pattern.key, None) is not None:
                    deleted += 1
        return deleted

    def __len__(self) -> int:
        with self._lock:
            return len(self._patterns)
