"""Error taxonomy for ledger operations.

Every failure leaves ledger state untouched. Callers branch on the
exception type or on the stable ``code`` string.
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base class for all ledger failures."""

    code = "ledger_error"

    def __init__(self, message: str = "", **context: Any):
        super().__init__(message or self.code)
        self.message = message or self.code
        self.context = context


class Unauthorized(LedgerError):
    """Caller is not allowed to perform the operation."""

    code = "unauthorized"


class NotFound(LedgerError):
    """Unknown identity or out-of-range document index."""

    code = "not_found"


class InvalidRange(LedgerError):
    """A numeric or enumerated field is outside its configured bounds."""

    code = "invalid_range"


class AlreadyValidated(LedgerError):
    """The document at this index has already been validated."""

    code = "already_validated"


class InsufficientDocuments(LedgerError):
    """Scoring attempted below the validated document threshold."""

    code = "insufficient_documents"


__all__ = [
    "AlreadyValidated",
    "InsufficientDocuments",
    "InvalidRange",
    "LedgerError",
    "NotFound",
    "Unauthorized",
]
