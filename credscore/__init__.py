"""Document-validation ledger and deterministic credit scoring."""

__version__ = "0.1.0"
