"""Ledger error taxonomy.

Every error carries the HTTP status it maps to so the API layer can respond
from a single handler.
"""


class LedgerError(Exception):
    """Base class for ledger errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Raised for malformed or missing input."""

    status_code = 400


class NotFoundError(LedgerError):
    """Raised when the referenced wallet does not exist."""

    status_code = 404


class InsufficientFundsError(LedgerError):
    """Raised when a debit would drive the balance below zero."""

    status_code = 400


class StoreError(LedgerError):
    """Raised when the database rejects or aborts a unit of work."""

    status_code = 500
