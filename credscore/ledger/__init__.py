"""Credit ledger state machine.

Per-identity ordered document sequences, one-way validation by a single
privileged identity, and a deterministic bounded credit score computed
from validated documents only.

Persistence uses signed snapshots:
- Snapshot: every account with its ordered documents plus global counters
- Manifest: schema version, content hashes and the operator's signature
"""

from .auth import AccessGuard
from .core import CreditLedger
from .errors import (
    AlreadyValidated,
    InsufficientDocuments,
    InvalidRange,
    LedgerError,
    NotFound,
    Unauthorized,
)
from .events import EventLog
from .models import (
    Account,
    CreditInfo,
    Document,
    DocumentDetailsView,
    DocumentType,
    DocumentsView,
    LedgerConstants,
    LedgerSnapshot,
    ScoreUpdateEvent,
    StatusEvent,
    SubmissionEvent,
    ValidationEvent,
)
from .scoring import ScoreResult, ScoringWeights, compute_credit_score, credit_band

__all__ = [
    "AccessGuard",
    "Account",
    "AlreadyValidated",
    "CreditInfo",
    "CreditLedger",
    "Document",
    "DocumentDetailsView",
    "DocumentType",
    "DocumentsView",
    "EventLog",
    "InsufficientDocuments",
    "InvalidRange",
    "LedgerConstants",
    "LedgerError",
    "LedgerSnapshot",
    "NotFound",
    "ScoreResult",
    "ScoreUpdateEvent",
    "ScoringWeights",
    "StatusEvent",
    "SubmissionEvent",
    "Unauthorized",
    "ValidationEvent",
    "compute_credit_score",
    "credit_band",
]
