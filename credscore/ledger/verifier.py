"""Snapshot verification.

Checks schema version, signer, signature and content hashes before a
snapshot is trusted for restore.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import LEDGER_SCHEMA_VERSION, LedgerSnapshot
from .signer import section_hashes, verify_manifest


@dataclass
class VerificationResult:
    """Outcome of snapshot verification."""

    valid: bool
    errors: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


class SnapshotVerifier:
    """Verifies snapshot integrity against an expected signer hotkey."""

    def __init__(self, signer_hotkey: str):
        self.signer_hotkey = signer_hotkey

    def verify(self, snapshot: LedgerSnapshot) -> VerificationResult:
        errors: list[str] = []
        manifest = snapshot.manifest

        if manifest.schema_version != LEDGER_SCHEMA_VERSION:
            errors.append(
                f"schema_version mismatch: got {manifest.schema_version}, "
                f"expected {LEDGER_SCHEMA_VERSION}"
            )

        if manifest.signer_hotkey != self.signer_hotkey:
            errors.append(
                f"signer_hotkey mismatch: got {manifest.signer_hotkey}, "
                f"expected {self.signer_hotkey}"
            )

        if not verify_manifest(manifest, self.signer_hotkey):
            errors.append("signature verification failed")

        actual_hashes = section_hashes(snapshot.accounts, snapshot.constants)
        for section_name, actual in actual_hashes.items():
            expected = manifest.content_hashes.get(section_name)
            if expected is None:
                errors.append(f"missing content hash for section: {section_name}")
                continue

            if actual != expected:
                errors.append(
                    f"content hash mismatch for {section_name}: "
                    f"expected {expected[:16]}..., got {actual[:16]}..."
                )

        # Every account counted in total_users must be present
        if manifest.total_users != len(snapshot.accounts):
            errors.append(
                f"total_users mismatch: manifest {manifest.total_users}, "
                f"accounts {len(snapshot.accounts)}"
            )

        return VerificationResult(valid=len(errors) == 0, errors=errors)


__all__ = ["SnapshotVerifier", "VerificationResult"]
