"""Tests for the deterministic credit score computation."""

import pytest
from datetime import datetime, timezone

from pydantic import ValidationError

from credscore.ledger.errors import InsufficientDocuments
from credscore.ledger.models import Document, DocumentType, LedgerConstants
from credscore.ledger.scoring import (
    PER_MILLE,
    ScoringWeights,
    compute_credit_score,
    credit_band,
)


NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _make_doc(index: int, validated: bool = True, **overrides) -> Document:
    defaults = dict(
        index=index,
        doc_hash=f"h{index}",
        doc_type=DocumentType.BANK_STATEMENT,
        salary=50_000,
        employment_years=3,
        repayment_history_score=85,
        current_balance=10_000,
        last_total_utility_bills=200,
        document_authenticity=True,
        is_validated=validated,
        submission_time=NOW,
        validation_time=NOW if validated else None,
    )
    defaults.update(overrides)
    return Document(**defaults)


@pytest.fixture
def constants():
    return LedgerConstants()


class TestComputeCreditScore:

    def test_reference_values(self, constants):
        """Two documents with repayment 85 and 90 score 708."""
        docs = [
            _make_doc(0, repayment_history_score=85),
            _make_doc(1, repayment_history_score=90, doc_type=DocumentType.UTILITY_BILL),
        ]
        result = compute_credit_score(docs, constants)
        # repayment 850/900, tenure 300, stability 980, income 500
        assert result.document_scores == {0: 731, 1: 756}
        assert result.aggregate == 743
        assert result.score == 300 + 550 * 743 // 1000
        assert result.validated_docs == 2
        assert result.component_means == {
            "repayment": 875, "tenure": 300, "stability": 980, "income": 500,
        }

    def test_deterministic_same_input_same_output(self, constants):
        docs = [_make_doc(i, repayment_history_score=60 + i) for i in range(5)]
        scores = {compute_credit_score(docs, constants).score for _ in range(10)}
        assert len(scores) == 1

    def test_input_order_irrelevant(self, constants):
        docs = [_make_doc(i, repayment_history_score=50 + 7 * i) for i in range(4)]
        forward = compute_credit_score(docs, constants)
        backward = compute_credit_score(list(reversed(docs)), constants)
        assert forward.score == backward.score
        assert forward.document_scores == backward.document_scores

    def test_unvalidated_documents_ignored(self, constants):
        base = [_make_doc(0), _make_doc(1)]
        with_pending = base + [_make_doc(2, validated=False, repayment_history_score=0,
                                        document_authenticity=False)]
        assert compute_credit_score(base, constants).score == \
            compute_credit_score(with_pending, constants).score

    def test_insufficient_documents(self, constants):
        docs = [_make_doc(0), _make_doc(1, validated=False)]
        with pytest.raises(InsufficientDocuments) as exc:
            compute_credit_score(docs, constants)
        assert exc.value.context == {"validated_docs": 1, "required": 2}

    def test_custom_threshold(self):
        constants = LedgerConstants(min_required_docs=1)
        result = compute_credit_score([_make_doc(0)], constants)
        assert result.validated_docs == 1

    @pytest.mark.parametrize("target", [0, 1])
    def test_monotonic_in_repayment(self, constants, target):
        previous = None
        for repayment in range(0, 101):
            docs = [_make_doc(0, repayment_history_score=40), _make_doc(1, repayment_history_score=70)]
            docs[target] = _make_doc(target, repayment_history_score=repayment)
            score = compute_credit_score(docs, constants).score
            if previous is not None:
                assert score >= previous
            previous = score

    def test_bounds_extremes(self, constants):
        worst = [
            _make_doc(i, repayment_history_score=0, employment_years=0, salary=0,
                      current_balance=0, last_total_utility_bills=500,
                      document_authenticity=False)
            for i in range(2)
        ]
        best = [
            _make_doc(i, repayment_history_score=100, employment_years=40,
                      salary=10**9, current_balance=10**6, last_total_utility_bills=0)
            for i in range(2)
        ]
        assert compute_credit_score(worst, constants).score == constants.min_credit_score
        assert compute_credit_score(best, constants).score == constants.max_credit_score

    def test_huge_values_saturate(self, constants):
        docs = [
            _make_doc(i, salary=10**30, current_balance=10**30, employment_years=10**20)
            for i in range(2)
        ]
        result = compute_credit_score(docs, constants)
        assert constants.min_credit_score <= result.score <= constants.max_credit_score

    def test_zero_balance_and_bills_is_neutral(self, constants):
        docs = [_make_doc(i, current_balance=0, last_total_utility_bills=0) for i in range(2)]
        result = compute_credit_score(docs, constants)
        assert result.component_means["stability"] == ScoringWeights().neutral_stability

    def test_inauthentic_document_halved(self, constants):
        authentic = compute_credit_score([_make_doc(0), _make_doc(1)], constants)
        mixed = compute_credit_score(
            [_make_doc(0), _make_doc(1, document_authenticity=False)], constants,
        )
        assert mixed.document_scores[1] == authentic.document_scores[1] // 2
        assert mixed.score < authentic.score

    def test_score_is_integer(self, constants):
        result = compute_credit_score([_make_doc(0), _make_doc(1)], constants)
        assert type(result.score) is int
        assert all(type(v) is int for v in result.document_scores.values())


class TestScoringWeights:

    def test_defaults_sum_to_per_mille(self):
        w = ScoringWeights()
        assert w.w_repayment + w.w_tenure + w.w_stability + w.w_income == PER_MILLE

    def test_bad_total_rejected(self):
        with pytest.raises(ValidationError):
            ScoringWeights(w_repayment=600)

    def test_repayment_only_weights(self, constants):
        weights = ScoringWeights(w_repayment=1000, w_tenure=0, w_stability=0, w_income=0)
        docs = [_make_doc(0, repayment_history_score=100), _make_doc(1, repayment_history_score=100)]
        assert compute_credit_score(docs, constants, weights).score == constants.max_credit_score


class TestCreditBand:

    @pytest.mark.parametrize("score,band", [
        (850, "Excellent"),
        (800, "Excellent"),
        (799, "Good"),
        (700, "Good"),
        (600, "Fair"),
        (599, "Building"),
        (0, "Building"),
    ])
    def test_bands(self, score, band):
        assert credit_band(score) == band
