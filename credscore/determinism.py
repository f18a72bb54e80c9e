"""Canonical hashing helpers shared by snapshot export and verification."""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json(data: Any) -> str:
    """Serialize data to a canonical JSON string.

    Keys are sorted and separators are fixed so the same logical content
    always produces the same bytes.
    """
    return json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)


def compute_hash(data: Any) -> str:
    """SHA256 hex digest of the canonical JSON form of data."""
    return hashlib.sha256(canonical_json(data).encode()).hexdigest()


__all__ = ["canonical_json", "compute_hash"]
