"""Filesystem-based SnapshotStore implementation.

Writes one directory per snapshot:
  {data_dir}/ledger/snapshots/s_{snapshot_at}_{seq}/manifest.json
  {data_dir}/ledger/snapshots/s_{snapshot_at}_{seq}/accounts.json.gz
  {data_dir}/ledger/snapshots/s_{snapshot_at}_{seq}/constants.json

Retention: keep all snapshots within the retention window, but never
prune the newest one.
"""

from __future__ import annotations

import gzip
import json
import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import bittensor as bt

from credscore.ledger.models import (
    AccountState,
    LedgerConstants,
    LedgerSnapshot,
    SnapshotManifest,
)

_TS_FORMAT = "%Y%m%dT%H%M%S"


def _write_gzip_json(path: Path, data: Any) -> None:
    """Write data as gzipped JSON, creating parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    raw = json.dumps(data, default=str, sort_keys=True).encode()
    with gzip.open(path, "wb") as f:
        f.write(raw)


def _read_gzip_json(path: Path) -> Any:
    with gzip.open(path, "rb") as f:
        return json.loads(f.read())


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, default=str, sort_keys=True)


def _read_json(path: Path) -> Any:
    with open(path) as f:
        return json.load(f)


class FilesystemStore:
    """Local filesystem SnapshotStore implementation."""

    def __init__(self, data_dir: str, retention_days: int = 30):
        self.base = Path(data_dir) / "ledger"
        self.snapshots_dir = self.base / "snapshots"
        self.retention_days = retention_days
        self.base.mkdir(parents=True, exist_ok=True)

    def _next_id(self, snapshot: LedgerSnapshot) -> str:
        stamp = snapshot.manifest.snapshot_at.astimezone(timezone.utc).strftime(_TS_FORMAT)
        prefix = f"s_{stamp}_"
        existing = 0
        if self.snapshots_dir.exists():
            existing = sum(1 for d in self.snapshots_dir.iterdir() if d.name.startswith(prefix))
        return f"{prefix}{existing:04d}"

    async def put_snapshot(self, snapshot: LedgerSnapshot) -> str:
        """Write a snapshot to disk. Returns snapshot ID."""
        snapshot_id = self._next_id(snapshot)
        snap_dir = self.snapshots_dir / snapshot_id

        # Manifest as plain JSON (small, readable)
        _write_json(snap_dir / "manifest.json", snapshot.manifest.model_dump(mode="json"))
        _write_gzip_json(
            snap_dir / "accounts.json.gz",
            [a.model_dump(mode="json") for a in snapshot.accounts],
        )
        _write_json(snap_dir / "constants.json", snapshot.constants.model_dump(mode="json"))

        bt.logging.info({"snapshot_store": {
            "event": "snapshot_written",
            "snapshot_id": snapshot_id,
            "accounts": len(snapshot.accounts),
        }})
        self._prune()
        return snapshot_id

    async def list_snapshots(self) -> list[str]:
        if not self.snapshots_dir.exists():
            return []
        return sorted(
            d.name for d in self.snapshots_dir.iterdir()
            if d.is_dir() and (d / "manifest.json").exists()
        )

    async def get_latest_snapshot(self) -> LedgerSnapshot | None:
        snapshot_ids = await self.list_snapshots()
        if not snapshot_ids:
            return None
        return self._load_snapshot(self.snapshots_dir / snapshot_ids[-1])

    async def get_snapshot(self, snapshot_id: str) -> LedgerSnapshot | None:
        snap_dir = self.snapshots_dir / snapshot_id
        if not (snap_dir / "manifest.json").exists():
            return None
        return self._load_snapshot(snap_dir)

    def _load_snapshot(self, snap_dir: Path) -> LedgerSnapshot:
        manifest = SnapshotManifest(**_read_json(snap_dir / "manifest.json"))
        accounts = [
            AccountState(**a)
            for a in _read_gzip_json(snap_dir / "accounts.json.gz")
        ]
        constants = LedgerConstants(**_read_json(snap_dir / "constants.json"))
        return LedgerSnapshot(manifest=manifest, constants=constants, accounts=accounts)

    def _prune(self) -> None:
        """Remove snapshots older than the retention window, keeping the newest."""
        if not self.snapshots_dir.exists():
            return
        cutoff = datetime.now(timezone.utc) - timedelta(days=self.retention_days)
        cutoff_str = cutoff.strftime(_TS_FORMAT)

        snap_dirs = sorted(d for d in self.snapshots_dir.iterdir() if d.is_dir())
        for snap_dir in snap_dirs[:-1]:
            # Snapshot ID: s_YYYYMMDDTHHMMSS_NNNN
            parts = snap_dir.name.split("_")
            if len(parts) >= 2 and parts[1] < cutoff_str:
                shutil.rmtree(snap_dir, ignore_errors=True)


__all__ = ["FilesystemStore"]
