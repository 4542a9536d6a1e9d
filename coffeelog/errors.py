"""
Exception hierarchy for Coffee Log.

ValidationError is caller-correctable (bad rating, empty patch).
NotFoundError, StorageError and TransportError are environment failures
and are never retried automatically.
"""

from typing import Optional


class CoffeeLogError(Exception):
    """
    Base class for all Coffee Log errors.

    Args:
        message: Developer-facing description
        user_message: Message received from the server, shown verbatim to the
            user when present
    """

    def __init__(self, message: str = "", user_message: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.user_message = user_message


class ValidationError(CoffeeLogError):
    """The request was rejected before any store mutation happened."""


class ConflictError(ValidationError):
    """A record already exists under the requested key."""


class NotFoundError(CoffeeLogError):
    """No record exists under the requested key."""


class StorageError(CoffeeLogError):
    """The record store failed (timeout, missing key on update, I/O)."""


class TransportError(CoffeeLogError):
    """The request/response boundary failed (network error, bad status)."""
