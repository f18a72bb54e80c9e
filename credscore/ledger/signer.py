"""Snapshot signing and content hashing with bittensor keypairs.

The ledger operator signs every snapshot manifest with its hotkey; readers
check the signature against the operator hotkey they expect before
restoring anything from the snapshot.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

import bittensor as bt

from credscore.determinism import compute_hash

if TYPE_CHECKING:
    from .models import AccountState, LedgerConstants, SnapshotManifest


def manifest_digest(manifest: SnapshotManifest) -> str:
    """Hash of every manifest field except the signature."""
    return compute_hash(manifest.model_dump(mode="json", exclude={"signature"}))


def section_hashes(
    accounts: Sequence[AccountState],
    constants: LedgerConstants,
) -> dict[str, str]:
    """Content hash per snapshot section, keyed by section name."""
    return {
        "accounts": compute_hash({"items": [s.model_dump(mode="json") for s in accounts]}),
        "constants": compute_hash(constants.model_dump(mode="json")),
    }


def sign_manifest(manifest: SnapshotManifest, wallet: Any) -> str:
    """Hex signature of the manifest digest by ``wallet.hotkey``."""
    signature = wallet.hotkey.sign(manifest_digest(manifest).encode())
    return signature.hex() if isinstance(signature, bytes) else str(signature)


def verify_manifest(manifest: SnapshotManifest, hotkey_ss58: str) -> bool:
    """True only if the manifest carries a valid signature by hotkey_ss58."""
    if not manifest.signature:
        return False
    try:
        signature = bytes.fromhex(manifest.signature)
        keypair = bt.Keypair(ss58_address=hotkey_ss58)
        return bool(keypair.verify(manifest_digest(manifest).encode(), signature))
    except Exception as e:
        # Malformed hex or address: treat as unsigned
        bt.logging.debug({"snapshot_signer": {"event": "verify_error", "error": str(e)}})
        return False


__all__ = ["manifest_digest", "section_hashes", "sign_manifest", "verify_manifest"]
