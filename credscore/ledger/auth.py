"""Ledger access policy: one privileged identity versus account holders.

The privileged identity (the ledger owner, acting as validator) is fixed
when the guard is built. Every gated operation consults ``require_privileged``
before touching state.

Fail-closed: an empty or unknown caller is never privileged.
"""

from __future__ import annotations

from dataclasses import dataclass

import bittensor as bt

from .errors import Unauthorized


def short_id(identity: str | None) -> str:
    """Truncated identity for log lines."""
    return identity[:16] if identity else "none"


@dataclass
class AuthorizationResult:
    """Result of an authorization check."""

    allowed: bool
    reason: str = ""


class AccessGuard:
    """Single-owner authorization check shared by every mutating entry point."""

    def __init__(self, privileged_identity: str):
        if not privileged_identity:
            raise ValueError("privileged_identity must be a non-empty identity")
        self._privileged = privileged_identity

    @property
    def privileged_identity(self) -> str:
        return self._privileged

    def is_privileged(self, caller: str | None) -> bool:
        return bool(caller) and caller == self._privileged

    def check(self, caller: str | None) -> AuthorizationResult:
        """Check whether a caller may run a privileged operation."""
        if not caller:
            return AuthorizationResult(allowed=False, reason="empty_identity")
        if caller != self._privileged:
            return AuthorizationResult(allowed=False, reason="not_privileged")
        return AuthorizationResult(allowed=True)

    def require_privileged(self, caller: str | None, operation: str) -> None:
        """Raise Unauthorized unless caller is the privileged identity."""
        result = self.check(caller)
        if result.allowed:
            return
        bt.logging.warning({"ledger_auth": {
            "event": "rejected",
            "operation": operation,
            "caller": short_id(caller),
            "reason": result.reason,
        }})
        raise Unauthorized(
            f"{operation} requires the privileged identity",
            operation=operation,
            reason=result.reason,
        )

    def require_identity(self, caller: str | None, operation: str) -> None:
        """Raise Unauthorized for a missing caller identity."""
        if caller:
            return
        bt.logging.warning({"ledger_auth": {
            "event": "rejected",
            "operation": operation,
            "caller": "none",
            "reason": "empty_identity",
        }})
        raise Unauthorized(
            f"{operation} requires a caller identity",
            operation=operation,
            reason="empty_identity",
        )


__all__ = ["AccessGuard", "AuthorizationResult", "short_id"]
