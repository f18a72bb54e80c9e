"""Deterministic credit score computation.

Integer (per-mille fixed point) arithmetic only, so the same validated
document set always yields the same score on any machine.

Steps:
1. Keep validated documents only, in index order
2. Normalize each attribute into a 0..1000 component
3. Weight components into a per-document score (halved if not authentic)
4. Average across documents (floor)
5. Map the average into [MIN_CREDIT_SCORE, MAX_CREDIT_SCORE] and clamp
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import InsufficientDocuments
from .models import Document, LedgerConstants

PER_MILLE = 1000

# Attribute values saturate here so int64 products cannot overflow
_VALUE_CAP = 10**15


class ScoringWeights(BaseModel):
    """Component weights (per mille, summing to 1000) and normalization caps."""

    model_config = ConfigDict(frozen=True)

    w_repayment: int = Field(default=500, ge=0)
    w_tenure: int = Field(default=200, ge=0)
    w_stability: int = Field(default=200, ge=0)
    w_income: int = Field(default=100, ge=0)

    employment_cap_years: int = Field(default=10, ge=1)
    salary_cap: int = Field(default=100_000, ge=1)
    # Stability component when both balance and utility bills are zero
    neutral_stability: int = Field(default=500, ge=0, le=PER_MILLE)

    @model_validator(mode="after")
    def _check_total(self) -> ScoringWeights:
        total = self.w_repayment + self.w_tenure + self.w_stability + self.w_income
        if total != PER_MILLE:
            raise ValueError(f"component weights must sum to {PER_MILLE}, got {total}")
        return self


@dataclass
class ScoreResult:
    """Output of compute_credit_score with full audit trail."""

    score: int = 0
    validated_docs: int = 0
    aggregate: int = 0  # per-mille mean of document scores

    document_scores: dict[int, int] = field(default_factory=dict)  # doc index -> per-mille
    component_means: dict[str, int] = field(default_factory=dict)  # component -> per-mille


def _int_array(values: list[int]) -> np.ndarray:
    return np.array([min(int(v), _VALUE_CAP) for v in values], dtype=np.int64)


def compute_credit_score(
    documents: Sequence[Document],
    constants: LedgerConstants,
    weights: ScoringWeights | None = None,
) -> ScoreResult:
    """Score an account from its documents.

    Unvalidated documents are ignored. Raises InsufficientDocuments when
    fewer than ``constants.min_required_docs`` documents are validated.
    The result is non-decreasing in every document's repayment score.
    """
    w = weights or ScoringWeights()
    validated = sorted((d for d in documents if d.is_validated), key=lambda d: d.index)
    n_docs = len(validated)
    if n_docs < constants.min_required_docs:
        raise InsufficientDocuments(
            f"{n_docs} validated documents, {constants.min_required_docs} required",
            validated_docs=n_docs,
            required=constants.min_required_docs,
        )

    indices = [d.index for d in validated]
    repayment = _int_array([d.repayment_history_score for d in validated])
    years = _int_array([d.employment_years for d in validated])
    balance = _int_array([d.current_balance for d in validated])
    bills = _int_array([d.last_total_utility_bills for d in validated])
    salary = _int_array([d.salary for d in validated])
    authentic = np.array([d.document_authenticity for d in validated], dtype=bool)

    # Step 1: Normalize into 0..1000
    low, high = constants.min_repayment_score, constants.max_repayment_score
    repayment_c = (np.clip(repayment, low, high) - low) * PER_MILLE // (high - low)

    tenure_c = np.minimum(years, w.employment_cap_years) * PER_MILLE // w.employment_cap_years

    outflow = balance + bills
    stability_c = np.where(
        outflow > 0,
        balance * PER_MILLE // np.maximum(outflow, 1),
        w.neutral_stability,
    ).astype(np.int64)

    income_c = np.minimum(salary, w.salary_cap) * PER_MILLE // w.salary_cap

    # Step 2: Weighted per-document score
    doc_scores = (
        w.w_repayment * repayment_c
        + w.w_tenure * tenure_c
        + w.w_stability * stability_c
        + w.w_income * income_c
    ) // PER_MILLE
    doc_scores = np.where(authentic, doc_scores, doc_scores // 2).astype(np.int64)

    # Step 3: Average and map into the credit range
    aggregate = int(doc_scores.sum()) // n_docs
    low_c, high_c = constants.min_credit_score, constants.max_credit_score
    raw = low_c + (high_c - low_c) * aggregate // PER_MILLE
    score = min(max(raw, low_c), high_c)

    return ScoreResult(
        score=score,
        validated_docs=n_docs,
        aggregate=aggregate,
        document_scores={idx: int(s) for idx, s in zip(indices, doc_scores)},
        component_means={
            "repayment": int(repayment_c.sum()) // n_docs,
            "tenure": int(tenure_c.sum()) // n_docs,
            "stability": int(stability_c.sum()) // n_docs,
            "income": int(income_c.sum()) // n_docs,
        },
    )


def credit_band(score: int) -> str:
    """Dashboard label for a credit score. Unscored (0) is "Building"."""
    if score >= 800:
        return "Excellent"
    if score >= 700:
        return "Good"
    if score >= 600:
        return "Fair"
    return "Building"


__all__ = ["PER_MILLE", "ScoreResult", "ScoringWeights", "compute_credit_score", "credit_band"]
