"""Pydantic models for the credit ledger.

Three groups:
- State records: Account and Document (frozen, replaced wholesale on update)
- Read projections: CreditInfo and the index-aligned document views
- Event records and the signed snapshot shape used for persistence
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Schema version - bump on breaking changes to the snapshot format
# ---------------------------------------------------------------------------

LEDGER_SCHEMA_VERSION = 1


# ---------------------------------------------------------------------------
# Configuration constants
# ---------------------------------------------------------------------------


class DocumentType(int, Enum):
    """Kinds of evidentiary document a user can submit."""

    BANK_STATEMENT = 0
    UTILITY_BILL = 1
    SALARY_SLIP = 2

    @property
    def label(self) -> str:
        return _DOCUMENT_TYPE_LABELS[self]


_DOCUMENT_TYPE_LABELS = {
    DocumentType.BANK_STATEMENT: "Bank Statement",
    DocumentType.UTILITY_BILL: "Utility Bill",
    DocumentType.SALARY_SLIP: "Salary Slip",
}


class LedgerConstants(BaseModel):
    """Read-only bounds the ledger enforces."""

    model_config = ConfigDict(frozen=True)

    min_repayment_score: int = Field(default=0, ge=0)
    max_repayment_score: int = 100
    # 0 is reserved as the "not yet scored" sentinel
    min_credit_score: int = Field(default=300, ge=1)
    max_credit_score: int = 850
    min_required_docs: int = Field(default=2, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> LedgerConstants:
        if self.min_repayment_score >= self.max_repayment_score:
            raise ValueError("min_repayment_score must be below max_repayment_score")
        if self.min_credit_score >= self.max_credit_score:
            raise ValueError("min_credit_score must be below max_credit_score")
        return self


# ---------------------------------------------------------------------------
# State records
# ---------------------------------------------------------------------------


class Document(BaseModel):
    """One submitted document. Its index never changes once assigned."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    doc_hash: str
    doc_type: DocumentType
    salary: int = Field(ge=0)
    employment_years: int = Field(ge=0)
    repayment_history_score: int = Field(ge=0)
    current_balance: int = Field(ge=0)
    last_total_utility_bills: int = Field(ge=0)
    document_authenticity: bool
    is_validated: bool = False
    submission_time: datetime
    validation_time: datetime | None = None


class Account(BaseModel):
    """Per-identity counters, activation flag and stored credit score."""

    model_config = ConfigDict(frozen=True)

    identity: str
    credit_score: int = Field(default=0, ge=0)
    validated_docs: int = Field(default=0, ge=0)
    total_docs: int = Field(default=0, ge=0)
    is_active: bool = True
    exists: bool = False

    @model_validator(mode="after")
    def _check_counters(self) -> Account:
        if self.validated_docs > self.total_docs:
            raise ValueError("validated_docs cannot exceed total_docs")
        return self


# ---------------------------------------------------------------------------
# Read projections
# ---------------------------------------------------------------------------


class CreditInfo(BaseModel):
    """Dashboard projection of an account."""

    model_config = ConfigDict(frozen=True)

    credit_score: int = 0
    validated_docs: int = 0
    total_docs: int = 0
    is_active: bool = False


class DocumentsView(BaseModel):
    """Index-aligned summary arrays: entry n of every list is document n."""

    doc_hashes: list[str] = Field(default_factory=list)
    doc_types: list[DocumentType] = Field(default_factory=list)
    is_validated: list[bool] = Field(default_factory=list)
    submission_times: list[datetime] = Field(default_factory=list)

    @classmethod
    def from_documents(cls, documents: list[Document]) -> DocumentsView:
        return cls(
            doc_hashes=[d.doc_hash for d in documents],
            doc_types=[d.doc_type for d in documents],
            is_validated=[d.is_validated for d in documents],
            submission_times=[d.submission_time for d in documents],
        )


class DocumentDetailsView(BaseModel):
    """Index-aligned extracted attributes: entry n of every list is document n."""

    salaries: list[int] = Field(default_factory=list)
    employment_years: list[int] = Field(default_factory=list)
    repayment_history_scores: list[int] = Field(default_factory=list)
    current_balances: list[int] = Field(default_factory=list)
    last_total_utility_bills: list[int] = Field(default_factory=list)
    document_authenticities: list[bool] = Field(default_factory=list)
    validation_times: list[datetime | None] = Field(default_factory=list)

    @classmethod
    def from_documents(cls, documents: list[Document]) -> DocumentDetailsView:
        return cls(
            salaries=[d.salary for d in documents],
            employment_years=[d.employment_years for d in documents],
            repayment_history_scores=[d.repayment_history_score for d in documents],
            current_balances=[d.current_balance for d in documents],
            last_total_utility_bills=[d.last_total_utility_bills for d in documents],
            document_authenticities=[d.document_authenticity for d in documents],
            validation_times=[d.validation_time for d in documents],
        )


# ---------------------------------------------------------------------------
# Events (observational, not part of the authoritative state)
# ---------------------------------------------------------------------------


class LedgerEvent(BaseModel):
    """Common envelope. ``seq`` is assigned by the EventLog on append."""

    model_config = ConfigDict(frozen=True)

    seq: int = 0
    owner: str
    timestamp: datetime


class SubmissionEvent(LedgerEvent):
    kind: Literal["submission"] = "submission"
    doc_index: int
    doc_hash: str
    doc_type: DocumentType
    salary: int
    employment_years: int
    repayment_history_score: int
    current_balance: int
    last_total_utility_bills: int
    document_authenticity: bool


class ValidationEvent(LedgerEvent):
    kind: Literal["validation"] = "validation"
    doc_index: int
    doc_hash: str
    validated_by: str


class ScoreUpdateEvent(LedgerEvent):
    kind: Literal["score_update"] = "score_update"
    new_score: int
    validated_docs: int


class StatusEvent(LedgerEvent):
    kind: Literal["status"] = "status"
    is_active: bool
    changed_by: str


# ---------------------------------------------------------------------------
# Snapshot (the persisted state shape)
# ---------------------------------------------------------------------------


class SnapshotManifest(BaseModel):
    """Signed header for a ledger snapshot."""

    schema_version: int = LEDGER_SCHEMA_VERSION
    snapshot_at: datetime
    privileged_identity: str
    total_users: int = Field(ge=0)
    content_hashes: dict[str, str] = Field(
        description="Map of section name -> SHA256 hex digest"
    )
    signer_hotkey: str
    signature: str = ""
    created_at: datetime


class AccountState(BaseModel):
    """One account together with its ordered document sequence."""

    account: Account
    documents: list[Document] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_alignment(self) -> AccountState:
        if len(self.documents) != self.account.total_docs:
            raise ValueError("document count does not match total_docs")
        if [d.index for d in self.documents] != list(range(len(self.documents))):
            raise ValueError("document indices must be contiguous from 0")
        validated = sum(1 for d in self.documents if d.is_validated)
        if validated != self.account.validated_docs:
            raise ValueError("validated document count does not match validated_docs")
        return self


class LedgerSnapshot(BaseModel):
    """Entire durable ledger state."""

    manifest: SnapshotManifest
    constants: LedgerConstants
    accounts: list[AccountState] = Field(default_factory=list)


__all__ = [
    "LEDGER_SCHEMA_VERSION",
    "Account",
    "AccountState",
    "CreditInfo",
    "Document",
    "DocumentDetailsView",
    "DocumentType",
    "DocumentsView",
    "LedgerConstants",
    "LedgerEvent",
    "LedgerSnapshot",
    "ScoreUpdateEvent",
    "SnapshotManifest",
    "StatusEvent",
    "SubmissionEvent",
    "ValidationEvent",
]
