"""Append-only per-identity document sequences.

A document's position in its owner's sequence is its permanent index.
Entries are never removed or reordered; the only in-place change is the
one-way Pending -> Validated transition, which swaps in an updated frozen
record at the same index.

Mutations are split into a pure ``prepare_*`` step that raises on bad
input and a ``commit_*`` step that cannot fail, so callers holding the
identity lock can validate everything before changing anything.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ValidationError

from .errors import AlreadyValidated, InvalidRange, NotFound
from .models import Document, DocumentType, LedgerConstants


def normalize_doc_hash(doc_hash: Any) -> str:
    """Content fingerprints are stored as strings; raw bytes become 0x-hex."""
    if isinstance(doc_hash, (bytes, bytearray)):
        return "0x" + bytes(doc_hash).hex()
    return str(doc_hash)


class DocumentLedger:
    """Ordered document store keyed by owner identity."""

    def __init__(self, constants: LedgerConstants):
        self.constants = constants
        self._documents: dict[str, list[Document]] = {}

    # -- Submission --

    def prepare_submission(
        self,
        owner: str,
        *,
        doc_hash: Any,
        doc_type: Any,
        salary: int,
        employment_years: int,
        repayment_history_score: int,
        current_balance: int,
        last_total_utility_bills: int,
        document_authenticity: bool,
        submitted_at: datetime,
    ) -> Document:
        """Validate submission fields and build the next document for owner."""
        try:
            doc_type = DocumentType(doc_type)
        except ValueError as e:
            raise InvalidRange(
                f"unknown document type: {doc_type!r}", field="doc_type",
            ) from e

        try:
            document = Document(
                index=self.count(owner),
                doc_hash=normalize_doc_hash(doc_hash),
                doc_type=doc_type,
                salary=salary,
                employment_years=employment_years,
                repayment_history_score=repayment_history_score,
                current_balance=current_balance,
                last_total_utility_bills=last_total_utility_bills,
                document_authenticity=document_authenticity,
                submission_time=submitted_at,
            )
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            raise InvalidRange(
                f"invalid document fields: {', '.join(fields)}", fields=fields,
            ) from e

        low = self.constants.min_repayment_score
        high = self.constants.max_repayment_score
        if not low <= document.repayment_history_score <= high:
            raise InvalidRange(
                f"repayment_history_score must be within [{low}, {high}]",
                field="repayment_history_score",
                value=document.repayment_history_score,
            )
        return document

    def commit_submission(self, owner: str, document: Document) -> int:
        """Append a prepared document. Returns its index."""
        sequence = self._documents.setdefault(owner, [])
        sequence.append(document)
        return document.index

    # -- Validation --

    def prepare_validation(self, owner: str, index: int, validated_at: datetime) -> Document:
        """Build the validated version of document ``index`` without storing it."""
        sequence = self._documents.get(owner)
        if sequence is None:
            raise NotFound("identity has no documents", owner=owner)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(sequence):
            raise NotFound(
                f"document index {index!r} out of range",
                owner=owner, index=index, total_docs=len(sequence),
            )
        document = sequence[index]
        if document.is_validated:
            raise AlreadyValidated(
                f"document {index} already validated", owner=owner, index=index,
            )
        return document.model_copy(update={
            "is_validated": True,
            "validation_time": validated_at,
        })

    def commit_validation(self, owner: str, document: Document) -> None:
        self._documents[owner][document.index] = document

    # -- Queries --

    def count(self, owner: str) -> int:
        return len(self._documents.get(owner, ()))

    def documents(self, owner: str) -> list[Document]:
        """Copy of owner's sequence in index order."""
        return list(self._documents.get(owner, ()))

    def restore(self, owner: str, documents: list[Document]) -> None:
        """Load a previously persisted sequence for owner."""
        self._documents[owner] = list(documents)


__all__ = ["DocumentLedger", "normalize_doc_hash"]
