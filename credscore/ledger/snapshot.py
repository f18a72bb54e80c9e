"""Snapshot exporter: produces signed snapshots of the full ledger state.

A snapshot carries every account with its ordered documents, the global
user count and the constants the ledger was built with. Events are not
included; they are observational.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import bittensor as bt

from .core import CreditLedger
from .models import LEDGER_SCHEMA_VERSION, LedgerSnapshot, SnapshotManifest
from .signer import section_hashes, sign_manifest


class SnapshotExporter:
    """Builds signed LedgerSnapshot objects from a live ledger."""

    def __init__(self, ledger: CreditLedger, wallet: Any):
        self.ledger = ledger
        self.wallet = wallet
        self._hotkey = wallet.hotkey.ss58_address

    def export_snapshot(self, *, as_of: datetime | None = None) -> LedgerSnapshot:
        """Export the current ledger state.

        Args:
            as_of: Timestamp recorded as the snapshot point (default: now).

        Returns:
            Signed LedgerSnapshot ready to write to a SnapshotStore.
        """
        now = datetime.now(timezone.utc)
        accounts, total_users = self.ledger.export_state()
        constants = self.ledger.constants

        manifest = SnapshotManifest(
            schema_version=LEDGER_SCHEMA_VERSION,
            snapshot_at=as_of or now,
            privileged_identity=self.ledger.owner(),
            total_users=total_users,
            content_hashes=section_hashes(accounts, constants),
            signer_hotkey=self._hotkey,
            created_at=now,
        )
        manifest.signature = sign_manifest(manifest, self.wallet)

        bt.logging.info({"snapshot_export": {
            "accounts": len(accounts),
            "total_users": manifest.total_users,
            "documents": sum(len(s.documents) for s in accounts),
        }})
        return LedgerSnapshot(manifest=manifest, constants=constants, accounts=accounts)


__all__ = ["SnapshotExporter"]
