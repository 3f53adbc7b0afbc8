"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Insufficient stock is deliberately *not* an exception: it is an expected
outcome of an availability check and is returned as data.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class StockReservationError(DomainException):
    """Deducting or returning stock for an order's line items failed.

    Items processed before the failing one stay applied.
    """


class StockAdjustmentError(DomainException):
    """A manual stock adjustment could not be applied."""
