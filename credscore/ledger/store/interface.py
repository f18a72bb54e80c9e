"""SnapshotStore protocol - pluggable persistence interface.

Implementations: FilesystemStore (v1).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from credscore.ledger.models import LedgerSnapshot


@runtime_checkable
class SnapshotStore(Protocol):
    """Abstract interface for reading/writing ledger snapshots."""

    async def put_snapshot(self, snapshot: LedgerSnapshot) -> str:
        """Write a snapshot. Returns the snapshot ID."""
        ...

    async def get_latest_snapshot(self) -> LedgerSnapshot | None:
        """Fetch the most recent snapshot."""
        ...

    async def list_snapshots(self) -> list[str]:
        """List snapshot IDs, oldest first."""
        ...

    async def get_snapshot(self, snapshot_id: str) -> LedgerSnapshot | None:
        """Fetch a specific snapshot by ID."""
        ...


__all__ = ["SnapshotStore"]
