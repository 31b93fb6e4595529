"""In-memory exchange rate table implementing ExchangeRateProvider"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Optional, Tuple

from sure_forecast.domain.money import Factor, to_decimal


class ExchangeRateTable:
    """
    Historical rates keyed by (from, to, date).

    Same-currency lookups return 1. When only the reverse pair is known its
    reciprocal is used.
    """

    def __init__(self):
        self._rates: Dict[Tuple[str, str], Dict[date, Decimal]] = defaultdict(dict)

    def add(self, from_currency: str, to_currency: str, on: date, rate: Factor) -> None:
        self._rates[(from_currency.upper(), to_currency.upper())][on] = to_decimal(rate)

    def rate(self, from_currency: str, to_currency: str, on: date) -> Optional[Decimal]:
        from_currency, to_currency = from_currency.upper(), to_currency.upper()
        if from_currency == to_currency:
            return Decimal(1)

        direct = self._rates.get((from_currency, to_currency), {}).get(on)
        if direct is not None:
            return direct

        reverse = self._rates.get((to_currency, from_currency), {}).get(on)
        if reverse:
            return 1 / reverse
        return None

    def latest_rate(self, from_currency: str, to_currency: str) -> Optional[Decimal]:
        from_currency, to_currency = from_currency.upper(), to_currency.upper()
        if from_currency == to_currency:
            return Decimal(1)

        direct = self._rates.get((from_currency, to_currency))
        if direct:
            return direct[max(direct)]

        reverse = self._rates.get((to_currency, from_currency))
        if reverse:
            latest = reverse[max(reverse)]
            return 1 / latest if latest else None
        return None
