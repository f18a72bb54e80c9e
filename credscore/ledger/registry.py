"""Per-identity account records, locks, and the global user counter."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from .errors import NotFound
from .models import Account, CreditInfo


@dataclass
class _LockEntry:
    lock: threading.RLock = field(default_factory=threading.RLock)
    holders: int = 0  # threads holding or waiting on this lock


class AccountRegistry:
    """Account records keyed by identity.

    Accounts are created by the first successful submission. ``total_users``
    counts creations and never decreases, so it always equals the number
    of accounts.

    Identity locks are kept for as long as the account exists. A lock taken
    for an identity that never became an account is dropped once its last
    holder releases it.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._locks: dict[str, _LockEntry] = {}
        self._total_users = 0
        # Guards _accounts, _locks and _total_users
        self._lock = threading.Lock()

    @contextmanager
    def locked(self, identity: str) -> Iterator[None]:
        """Serialize all mutations of one identity's state."""
        with self._lock:
            entry = self._locks.get(identity)
            if entry is None:
                entry = self._locks[identity] = _LockEntry()
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._lock:
                entry.holders -= 1
                if entry.holders == 0 and identity not in self._accounts:
                    del self._locks[identity]

    @property
    def total_users(self) -> int:
        with self._lock:
            return self._total_users

    def get(self, identity: str) -> Account | None:
        with self._lock:
            return self._accounts.get(identity)

    def require(self, identity: str) -> Account:
        account = self.get(identity)
        if account is None or not account.exists:
            raise NotFound("unknown identity", owner=identity)
        return account

    def create(self, account: Account) -> None:
        """Publish a new account with its initial counters in one write."""
        with self._lock:
            if account.identity in self._accounts:
                raise RuntimeError(f"account already exists: {account.identity}")
            self._accounts[account.identity] = account
            self._total_users += 1

    def replace(self, account: Account) -> None:
        """Swap in an updated record for an existing account."""
        with self._lock:
            self._accounts[account.identity] = account

    def credit_info(self, identity: str) -> CreditInfo:
        """Dashboard projection. Unknown identities project to all zeros."""
        account = self.get(identity)
        if account is None:
            return CreditInfo()
        return CreditInfo(
            credit_score=account.credit_score,
            validated_docs=account.validated_docs,
            total_docs=account.total_docs,
            is_active=account.is_active,
        )

    def listing(self) -> tuple[list[Account], int]:
        """All accounts ordered by identity, with total_users read atomically."""
        with self._lock:
            accounts = [self._accounts[k] for k in sorted(self._accounts)]
            return accounts, self._total_users

    def restore(self, accounts: list[Account], total_users: int) -> None:
        """Load persisted accounts. Only valid on an empty registry."""
        with self._lock:
            if self._accounts:
                raise RuntimeError("cannot restore into a non-empty registry")
            self._accounts = {a.identity: a for a in accounts}
            self._total_users = total_users


__all__ = ["AccountRegistry"]
