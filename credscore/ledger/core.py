"""Credit ledger: the operation surface over accounts, documents and scores.

Every mutating call runs under its target identity's lock and follows the
same shape: authorize -> validate and prepare -> commit -> record event,
then notify event subscribers once the lock is released. Preparation
raises before anything is written, so a failed call leaves the identity's
state and the event log untouched.

Reads never take the guard, never emit events, and copy records under the
identity lock so they observe either all or none of a concurrent mutation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import bittensor as bt

from .auth import AccessGuard, short_id
from .documents import DocumentLedger
from .errors import Unauthorized
from .events import EventLog
from .models import (
    Account,
    AccountState,
    CreditInfo,
    Document,
    DocumentDetailsView,
    DocumentsView,
    LedgerConstants,
    LedgerSnapshot,
    ScoreUpdateEvent,
    StatusEvent,
    SubmissionEvent,
    ValidationEvent,
)
from .registry import AccountRegistry
from .scoring import ScoreResult, ScoringWeights, compute_credit_score


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CreditLedger:
    """Authoritative per-account document and credit score store."""

    def __init__(
        self,
        privileged_identity: str,
        constants: LedgerConstants | None = None,
        weights: ScoringWeights | None = None,
        *,
        allow_inactive_submissions: bool = False,
        event_log: EventLog | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.constants = constants or LedgerConstants()
        self.weights = weights or ScoringWeights()
        self.allow_inactive_submissions = allow_inactive_submissions
        self.guard = AccessGuard(privileged_identity)
        self.registry = AccountRegistry()
        self.ledger = DocumentLedger(self.constants)
        self.event_log = event_log if event_log is not None else EventLog()
        self._clock = clock or _utcnow

    # -- Mutations --

    def submit_document(
        self,
        caller: str,
        doc_hash: Any,
        doc_type: Any,
        salary: int,
        employment_years: int,
        repayment_history_score: int,
        current_balance: int,
        last_total_utility_bills: int,
        document_authenticity: bool,
    ) -> int:
        """Append a document for the caller. Returns its permanent index."""
        self.guard.require_identity(caller, "submit_document")

        with self.registry.locked(caller):
            existing = self.registry.get(caller)
            if (
                existing is not None
                and not existing.is_active
                and not self.allow_inactive_submissions
            ):
                bt.logging.warning({"credit_ledger": {
                    "event": "submission_rejected",
                    "owner": short_id(caller),
                    "reason": "account_inactive",
                }})
                raise Unauthorized(
                    "inactive accounts cannot submit documents",
                    operation="submit_document",
                    reason="account_inactive",
                )

            now = self._clock()
            document = self.ledger.prepare_submission(
                caller,
                doc_hash=doc_hash,
                doc_type=doc_type,
                salary=salary,
                employment_years=employment_years,
                repayment_history_score=repayment_history_score,
                current_balance=current_balance,
                last_total_utility_bills=last_total_utility_bills,
                document_authenticity=document_authenticity,
                submitted_at=now,
            )

            index = self.ledger.commit_submission(caller, document)
            created = existing is None
            if created:
                self.registry.create(Account(identity=caller, exists=True, total_docs=1))
            else:
                self.registry.replace(existing.model_copy(update={
                    "total_docs": existing.total_docs + 1,
                }))

            event = self.event_log.record(SubmissionEvent(
                owner=caller,
                timestamp=now,
                doc_index=index,
                doc_hash=document.doc_hash,
                doc_type=document.doc_type,
                salary=document.salary,
                employment_years=document.employment_years,
                repayment_history_score=document.repayment_history_score,
                current_balance=document.current_balance,
                last_total_utility_bills=document.last_total_utility_bills,
                document_authenticity=document.document_authenticity,
            ))

        self.event_log.notify(event)
        if created:
            bt.logging.info({"credit_ledger": {"event": "account_created", "owner": short_id(caller)}})
        bt.logging.info({"credit_ledger": {
            "event": "document_submitted",
            "owner": short_id(caller),
            "doc_index": index,
            "doc_type": document.doc_type.name,
        }})
        return index

    def validate_document(self, caller: str, owner: str, index: int) -> None:
        """Mark one of owner's documents validated. One-way."""
        self.guard.require_privileged(caller, "validate_document")

        with self.registry.locked(owner):
            account = self.registry.require(owner)
            now = self._clock()
            document = self.ledger.prepare_validation(owner, index, now)

            self.ledger.commit_validation(owner, document)
            self.registry.replace(account.model_copy(update={
                "validated_docs": account.validated_docs + 1,
            }))

            event = self.event_log.record(ValidationEvent(
                owner=owner,
                timestamp=now,
                doc_index=document.index,
                doc_hash=document.doc_hash,
                validated_by=caller,
            ))

        self.event_log.notify(event)
        bt.logging.info({"credit_ledger": {
            "event": "document_validated",
            "owner": short_id(owner),
            "doc_index": document.index,
        }})

    def calculate_credit_score(self, caller: str, owner: str) -> int:
        """Recompute and store owner's credit score from validated documents."""
        self.guard.require_privileged(caller, "calculate_credit_score")

        with self.registry.locked(owner):
            account = self.registry.require(owner)
            result = compute_credit_score(
                self.ledger.documents(owner), self.constants, self.weights,
            )

            self.registry.replace(account.model_copy(update={"credit_score": result.score}))
            event = self.event_log.record(ScoreUpdateEvent(
                owner=owner,
                timestamp=self._clock(),
                new_score=result.score,
                validated_docs=account.validated_docs,
            ))

        self.event_log.notify(event)
        bt.logging.info({"credit_ledger": {
            "event": "credit_score_updated",
            "owner": short_id(owner),
            "score": result.score,
            "validated_docs": result.validated_docs,
        }})
        return result.score

    def deactivate_user(self, caller: str, owner: str) -> None:
        self._set_active(caller, owner, False, "deactivate_user")

    def reactivate_user(self, caller: str, owner: str) -> None:
        self._set_active(caller, owner, True, "reactivate_user")

    def _set_active(self, caller: str, owner: str, active: bool, operation: str) -> None:
        self.guard.require_privileged(caller, operation)

        with self.registry.locked(owner):
            account = self.registry.require(owner)
            self.registry.replace(account.model_copy(update={"is_active": active}))
            event = self.event_log.record(StatusEvent(
                owner=owner,
                timestamp=self._clock(),
                is_active=active,
                changed_by=caller,
            ))

        self.event_log.notify(event)
        bt.logging.info({"credit_ledger": {
            "event": "status_changed",
            "owner": short_id(owner),
            "is_active": active,
        }})

    # -- Reads --

    def owner(self) -> str:
        return self.guard.privileged_identity

    def total_users(self) -> int:
        return self.registry.total_users

    def get_documents(self, owner: str) -> list[Document]:
        """Owner's documents in index order."""
        if self.registry.get(owner) is None:
            return []
        with self.registry.locked(owner):
            return self.ledger.documents(owner)

    def get_user_documents(self, owner: str) -> DocumentsView:
        return DocumentsView.from_documents(self.get_documents(owner))

    def get_user_document_details(self, owner: str) -> DocumentDetailsView:
        return DocumentDetailsView.from_documents(self.get_documents(owner))

    def get_credit_info(self, owner: str) -> CreditInfo:
        return self.registry.credit_info(owner)

    def get_credit_score(self, owner: str) -> int:
        return self.registry.credit_info(owner).credit_score

    def get_user_document_count(self, owner: str) -> int:
        return len(self.get_documents(owner))

    def get_total_docs_count(self, owner: str) -> int:
        return self.registry.credit_info(owner).total_docs

    def get_validated_docs_count(self, owner: str) -> int:
        return self.registry.credit_info(owner).validated_docs

    def get_score_breakdown(self, owner: str) -> ScoreResult:
        """Score owner's current validated documents without storing anything."""
        return compute_credit_score(self.get_documents(owner), self.constants, self.weights)

    # -- Persistence --

    def export_state(self) -> tuple[list[AccountState], int]:
        """Durable state as (account states ordered by identity, total_users).

        The account list and the user count are read together, so an
        identity registering mid-export is either fully in both or in
        neither. Each account is then copied under its identity lock.
        """
        accounts, total_users = self.registry.listing()
        states: list[AccountState] = []
        for account in accounts:
            with self.registry.locked(account.identity):
                current = self.registry.get(account.identity)
                documents = self.ledger.documents(account.identity)
            states.append(AccountState(account=current, documents=documents))
        return states, total_users

    @classmethod
    def from_snapshot(
        cls,
        snapshot: LedgerSnapshot,
        weights: ScoringWeights | None = None,
        **kwargs: Any,
    ) -> CreditLedger:
        """Rebuild a ledger from a persisted snapshot. Events start empty."""
        ledger = cls(
            snapshot.manifest.privileged_identity,
            constants=snapshot.constants,
            weights=weights,
            **kwargs,
        )
        ledger.registry.restore(
            [state.account for state in snapshot.accounts],
            total_users=snapshot.manifest.total_users,
        )
        for state in snapshot.accounts:
            ledger.ledger.restore(state.account.identity, state.documents)

        bt.logging.info({"credit_ledger": {
            "event": "restored",
            "accounts": len(snapshot.accounts),
            "total_users": snapshot.manifest.total_users,
        }})
        return ledger


__all__ = ["CreditLedger"]
