"""Interfaces of the external collaborators the calculators depend on"""

from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Protocol

from sure_forecast.domain.models import CategorizationPattern


class ExchangeRateProvider(Protocol):
    """Rate lookup; ``None`` means the rate is not known"""

    def rate(self, from_currency: str, to_currency: str, on: date) -> Optional[Decimal]:
        ...

    def latest_rate(self, from_currency: str, to_currency: str) -> Optional[Decimal]:
        ...


PatternUpdate = Callable[[Optional[CategorizationPattern]], CategorizationPattern]


class PatternStore(Protocol):
    """
    Tenant-scoped pattern persistence.

    ``upsert_match`` must serialize concurrent updates of the same
    (family, merchant, category) row so that no match is lost.
    """

    def find_by_family(self, family_id: str) -> List[CategorizationPattern]:
        ...

    def find(self, family_id: str, merchant_normalized: str, category_id: str) -> Optional[CategorizationPattern]:
        ...

    def upsert_match(
        self,
        family_id: str,
        merchant_normalized: str,
        category_id: str,
        update: PatternUpdate,
    ) -> CategorizationPattern:
        ...

    def delete(self, patterns: Iterable[CategorizationPattern]) -> int:
        ...
