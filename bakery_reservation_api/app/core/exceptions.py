"""
Domain errors raised by the service layer.

Every error carries a human-readable message and is terminal for the
operation that raised it; nothing is retried.  Endpoints translate the
subclasses into HTTP status codes.  They derive from ``ValueError`` so
callers that only distinguish "bad input" keep working.
"""


class ReservationError(ValueError):
    """Base class for reservation domain errors."""


class NotFoundError(ReservationError):
    """A reservation, member or bread could not be found."""


class ValidationFailedError(ReservationError):
    """A request violates a business rule, e.g. the pickup time window."""


class EmptyAggregateError(ReservationError):
    """The sales rollup found no completed reservations for the day."""
