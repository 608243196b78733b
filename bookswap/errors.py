# bookswap/errors.py


class ExchangeError(Exception):
    """Base class for every error raised by the exchange services."""


class NotFound(ExchangeError):
    """The requested entity id is unknown."""


class Forbidden(ExchangeError):
    """The caller has no rights over the target entity."""


class InvalidState(ExchangeError):
    """The operation is not legal for the entity's current status."""


class ValidationError(ExchangeError):
    """An input value is missing or malformed."""


class Conflict(ExchangeError):
    """The operation would violate a uniqueness or one-active invariant."""


class InvalidOperation(ExchangeError):
    """The operation is well formed but not allowed, e.g. requesting your own book."""


__all__ = [
    'ExchangeError',
    'NotFound',
    'Forbidden',
    'InvalidState',
    'ValidationError',
    'Conflict',
    'InvalidOperation',
]
