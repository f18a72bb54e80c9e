"""Ledger operator CLI.

Reads the latest snapshot from the filesystem store and either verifies
it or prints an identity's credit information.

Usage:
    credscore-ledger verify --signer-hotkey 5Grw...
    credscore-ledger inspect --identity 0xabc...
    credscore-ledger summary
"""

import argparse
import asyncio
import json
import sys

import bittensor as bt

from credscore.config import ENV_PREFIX, LedgerSettings, load_settings
from credscore.ledger.core import CreditLedger
from credscore.ledger.scoring import credit_band
from credscore.ledger.store.filesystem import FilesystemStore
from credscore.ledger.verifier import SnapshotVerifier


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Credit ledger snapshot tools")
    bt.logging.add_args(parser)
    parser.add_argument("--ledger.data_dir", type=str, default=None)
    parser.add_argument("--ledger.retention_days", type=int, default=None)

    sub = parser.add_subparsers(dest="command", required=True)

    verify = sub.add_parser("verify", help="verify the latest snapshot")
    verify.add_argument("--signer-hotkey", type=str, default=None)

    inspect = sub.add_parser("inspect", help="show credit info for an identity")
    inspect.add_argument("--identity", type=str, required=True)

    sub.add_parser("summary", help="show ledger-wide counters and constants")
    return parser


def _emit(payload: dict) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def _ledger_option(settings: LedgerSettings, name: str, cli_value):
    """Environment (or .env) value when set, else the CLI value, else the default."""
    if name in settings.model_fields_set or cli_value is None:
        return getattr(settings, name)
    return cli_value


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    settings = load_settings()

    data_dir = _ledger_option(settings.ledger, "data_dir", getattr(args, "ledger.data_dir"))
    retention_days = _ledger_option(
        settings.ledger, "retention_days", getattr(args, "ledger.retention_days"),
    )

    store = FilesystemStore(data_dir=data_dir, retention_days=retention_days)
    snapshot = asyncio.run(store.get_latest_snapshot())
    if snapshot is None:
        bt.logging.error({"ledger_cli": {"event": "no_snapshot", "data_dir": data_dir}})
        sys.exit(1)

    if args.command == "verify":
        signer = _ledger_option(settings.ledger, "signer_hotkey", args.signer_hotkey)
        if not signer:
            bt.logging.error(f"--signer-hotkey or {ENV_PREFIX}LEDGER__SIGNER_HOTKEY is required")
            sys.exit(1)
        result = SnapshotVerifier(signer_hotkey=signer).verify(snapshot)
        _emit({"valid": result.valid, "errors": result.errors})
        sys.exit(0 if result.valid else 2)

    ledger = CreditLedger.from_snapshot(snapshot, weights=settings.scoring)

    if args.command == "summary":
        _emit({
            "owner": ledger.owner(),
            "total_users": ledger.total_users(),
            "snapshot_at": snapshot.manifest.snapshot_at,
            "constants": ledger.constants.model_dump(mode="json"),
        })
        return

    info = ledger.get_credit_info(args.identity)
    documents = ledger.get_documents(args.identity)
    _emit({
        "identity": args.identity,
        "credit": info.model_dump(mode="json"),
        "band": credit_band(info.credit_score),
        "documents": [
            {
                "index": d.index,
                "type": d.doc_type.label,
                "doc_hash": d.doc_hash,
                "validated": d.is_validated,
                "submitted_at": d.submission_time,
                "validated_at": d.validation_time,
            }
            for d in documents
        ],
    })


if __name__ == "__main__":
    main()
