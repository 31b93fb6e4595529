"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidArgumentError(DomainException, ValueError):
    """Input is malformed or out of range; fatal to the single call"""

    pass


class CurrencyMismatchError(InvalidArgumentError):
    """Money values in different currencies combined without conversion"""

    pass


class ExchangeRateUnavailableError(DomainException):
    """Neither a historical nor a latest rate is known for a currency pair"""

    pass


class UntrustedProvenanceError(DomainException):
    """Categorization came from a source that must not train patterns"""

    pass
