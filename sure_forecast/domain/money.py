"""Integer minor-unit money value with explicit currency"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from functools import total_ordering
from typing import Union

from sure_forecast.domain.exceptions import CurrencyMismatchError, InvalidArgumentError

# Currencies whose minor unit is not 1/100 of the major unit
MINOR_UNIT_EXPONENTS = {
    "JPY": 0,
    "KRW": 0,
    "VND": 0,
    "CLP": 0,
    "ISK": 0,
    "BHD": 3,
    "KWD": 3,
    "OMR": 3,
    "JOD": 3,
    "TND": 3,
}

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "C$",
    "AUD": "A$",
    "NZD": "NZ$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
    "BRL": "R$",
}

Factor = Union[Decimal, int, float, str]


def to_decimal(value: Factor) -> Decimal:
    """Convert a factor to Decimal without inheriting binary float noise"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round_to_cents(value: Decimal) -> int:
    """Round half away from zero to whole minor units"""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def percent(numerator: int, denominator: int, places: int = 2) -> float:
    """``numerator / |denominator| * 100`` rounded for display; 0.0 for a zero denominator"""
    if denominator == 0:
        return 0.0
    value = Decimal(numerator) / Decimal(abs(denominator)) * 100
    return float(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def minor_unit_exponent(currency: str) -> int:
    return MINOR_UNIT_EXPONENTS.get(currency.upper(), 2)


@total_ordering
@dataclass(frozen=True)
class Money:
    """
    Amount in integer minor units (cents) plus an ISO currency code.

    Arithmetic between two Money values requires the same currency. Scaling by
    a ratio goes through Decimal and rounds back to minor units explicitly.
    """

    cents: int
    currency: str

    def __post_init__(self) -> None:
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise InvalidArgumentError(f"Money requires integer minor units, got {self.cents!r}")
        if not self.currency:
            raise InvalidArgumentError("Money requires a currency code")
        object.__setattr__(self, "currency", self.currency.upper())

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(0, currency)

    @classmethod
    def from_amount(cls, amount: Factor, currency: str) -> "Money":
        """Build from a major-unit amount, e.g. ``Money.from_amount("12.34", "USD")``"""
        scaled = to_decimal(amount).scaleb(minor_unit_exponent(currency))
        return cls(round_to_cents(scaled), currency)

    @property
    def amount(self) -> Decimal:
        """Major-unit amount as an exact Decimal"""
        exponent = minor_unit_exponent(self.currency)
        return Decimal(self.cents).scaleb(-exponent).quantize(Decimal(1).scaleb(-exponent))

    def is_zero(self) -> bool:
        return self.cents == 0

    def is_negative(self) -> bool:
        return self.cents < 0

    def is_positive(self) -> bool:
        return self.cents > 0

    def _check_currency(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Expected Money, got {type(other).__name__}")
        if other.currency != self.currency:
            raise CurrencyMismatchError(
                f"Cannot combine {self.currency} with {other.currency} without conversion"
            )

    def __add__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.cents + other.cents, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.cents - other.cents, self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.cents, self.currency)

    def __abs__(self) -> "Money":
        return Money(abs(self.cents), self.currency)

    def __mul__(self, times: int) -> "Money":
        if isinstance(times, bool) or not isinstance(times, int):
            raise TypeError("Money can only be multiplied by an int; use scale() for ratios")
        return Money(self.cents * times, self.currency)

    __rmul__ = __mul__

    def __lt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.cents < other.cents

    def scale(self, factor: Factor) -> "Money":
        """Multiply by a ratio, rounding half away from zero to minor units"""
        return Money(round_to_cents(Decimal(self.cents) * to_decimal(factor)), self.currency)

    def exchange_to(self, currency: str, rate: Factor) -> "Money":
        """Convert using ``rate`` units of ``currency`` per unit of this currency"""
        currency = currency.upper()
        if currency == self.currency:
            return self
        shift = minor_unit_exponent(currency) - minor_unit_exponent(self.currency)
        converted = (Decimal(self.cents) * to_decimal(rate)).scaleb(shift)
        return Money(round_to_cents(converted), currency)

    def format(self) -> str:
        """Display string such as ``$1,234.56`` or ``-€5.00``"""
        exponent = minor_unit_exponent(self.currency)
        body = f"{abs(self.amount):,.{exponent}f}"
        symbol = CURRENCY_SYMBOLS.get(self.currency)
        text = f"{symbol}{body}" if symbol else f"{body} {self.currency}"
        return f"-{text}" if self.cents < 0 else text

    def __str__(self) -> str:
        return str(self.amount)
