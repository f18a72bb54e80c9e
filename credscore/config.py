"""Settings for the credit ledger.

Values come from environment variables named
``CREDSCORE_<SECTION>__<FIELD>``, e.g. ``CREDSCORE_LEDGER__DATA_DIR``,
parsed by pydantic-settings. A ``.env`` file is read as well unless
``CREDSCORE_TEST_MODE`` is true. Environment values take precedence over
CLI arguments.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from credscore.ledger.core import CreditLedger
from credscore.ledger.models import LedgerConstants
from credscore.ledger.scoring import ScoringWeights

ENV_PREFIX = "CREDSCORE_"


def is_test_mode() -> bool:
    return os.environ.get(f"{ENV_PREFIX}TEST_MODE", "").lower() in ("true", "1")


class WalletSettings(BaseModel):
    name: str = "default"
    hotkey: str = "default"


class LedgerSettings(BaseModel):
    privileged_identity: str = ""
    signer_hotkey: str = ""
    data_dir: str = "credscore/data"
    retention_days: int = Field(default=30, ge=1)
    allow_inactive_submissions: bool = False

    min_repayment_score: int = 0
    max_repayment_score: int = 100
    min_credit_score: int = 300
    max_credit_score: int = 850
    min_required_docs: int = 2

    def constants(self) -> LedgerConstants:
        return LedgerConstants(
            min_repayment_score=self.min_repayment_score,
            max_repayment_score=self.max_repayment_score,
            min_credit_score=self.min_credit_score,
            max_credit_score=self.max_credit_score,
            min_required_docs=self.min_required_docs,
        )


class Settings(BaseSettings):
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    scoring: ScoringWeights = Field(default_factory=ScoringWeights)
    wallet: WalletSettings = Field(default_factory=WalletSettings)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


def load_settings() -> Settings:
    """Build Settings from the environment (and .env outside test mode)."""
    if is_test_mode():
        return Settings(_env_file=None)
    return Settings()


def build_ledger(settings: Settings) -> CreditLedger:
    """Construct an empty ledger from settings."""
    if not settings.ledger.privileged_identity:
        raise ValueError(f"{ENV_PREFIX}LEDGER__PRIVILEGED_IDENTITY is required")
    return CreditLedger(
        settings.ledger.privileged_identity,
        constants=settings.ledger.constants(),
        weights=settings.scoring,
        allow_inactive_submissions=settings.ledger.allow_inactive_submissions,
    )


__all__ = [
    "ENV_PREFIX",
    "LedgerSettings",
    "Settings",
    "WalletSettings",
    "build_ledger",
    "is_test_mode",
    "load_settings",
]
