"""Tests for environment-driven settings."""

import os

import pytest
from pydantic import ValidationError

from credscore.config import (
    LedgerSettings,
    WalletSettings,
    build_ledger,
    is_test_mode,
    load_settings,
)
from credscore.ledger.errors import Unauthorized
from credscore.ledger.models import LedgerConstants
from credscore.ledger.scoring import ScoringWeights


OWNER = "0x00000000000000000000000000000000000000aa"


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Clean CREDSCORE_ environment in test mode, run from an empty directory."""
    for key in list(os.environ):
        if key.startswith("CREDSCORE_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("CREDSCORE_TEST_MODE", "true")
    monkeypatch.chdir(tmp_path)

    def _set(**values):
        for key, value in values.items():
            monkeypatch.setenv(f"CREDSCORE_{key}", value)

    return _set


class TestLoadSettings:

    def test_defaults(self, env):
        settings = load_settings()
        assert settings.ledger == LedgerSettings()
        assert settings.wallet == WalletSettings()
        assert settings.ledger.constants() == LedgerConstants()
        assert settings.scoring == ScoringWeights()

    def test_nested_sections_from_env(self, env):
        env(
            LEDGER__PRIVILEGED_IDENTITY=OWNER,
            LEDGER__MIN_REQUIRED_DOCS="3",
            LEDGER__ALLOW_INACTIVE_SUBMISSIONS="true",
            SCORING__W_REPAYMENT="600",
            SCORING__W_INCOME="0",
            WALLET__NAME="ops",
        )
        settings = load_settings()
        assert settings.ledger.privileged_identity == OWNER
        assert settings.ledger.min_required_docs == 3
        assert settings.ledger.allow_inactive_submissions is True
        assert settings.ledger.data_dir == "credscore/data"
        assert settings.scoring.w_repayment == 600
        assert settings.scoring.w_income == 0
        assert settings.wallet.name == "ops"
        assert settings.ledger.model_fields_set == {
            "privileged_identity", "min_required_docs", "allow_inactive_submissions",
        }

    def test_unrelated_variables_ignored(self, env, monkeypatch):
        monkeypatch.setenv("OTHER_LEDGER__DATA_DIR", "/nope")
        env(UNKNOWN__FIELD="x", LEDGERDATA="x")
        assert load_settings().ledger.data_dir == "credscore/data"

    def test_invalid_weights_rejected(self, env):
        env(SCORING__W_REPAYMENT="900")
        with pytest.raises(ValidationError):
            load_settings()

    def test_invalid_constants_rejected(self, env):
        env(LEDGER__MIN_CREDIT_SCORE="900")
        with pytest.raises(ValidationError):
            load_settings().ledger.constants()

    def test_dotenv_read_outside_test_mode(self, env, monkeypatch, tmp_path):
        (tmp_path / ".env").write_text(f"CREDSCORE_LEDGER__PRIVILEGED_IDENTITY={OWNER}\n")
        assert load_settings().ledger.privileged_identity == ""

        monkeypatch.delenv("CREDSCORE_TEST_MODE")
        assert load_settings().ledger.privileged_identity == OWNER

    def test_env_overrides_dotenv(self, env, monkeypatch, tmp_path):
        (tmp_path / ".env").write_text("CREDSCORE_LEDGER__DATA_DIR=/from/dotenv\n")
        monkeypatch.delenv("CREDSCORE_TEST_MODE")
        env(LEDGER__DATA_DIR="/from/env")
        assert load_settings().ledger.data_dir == "/from/env"

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("1", True), ("TRUE", True), ("false", False), ("", False),
    ])
    def test_is_test_mode(self, env, value, expected):
        env(TEST_MODE=value)
        assert is_test_mode() is expected


class TestBuildLedger:

    def test_requires_privileged_identity(self, env):
        with pytest.raises(ValueError, match="PRIVILEGED_IDENTITY"):
            build_ledger(load_settings())

    def test_builds_configured_ledger(self, env):
        env(LEDGER__PRIVILEGED_IDENTITY=OWNER, LEDGER__MIN_REQUIRED_DOCS="1")
        ledger = build_ledger(load_settings())
        assert ledger.owner() == OWNER
        assert ledger.constants.min_required_docs == 1

        ledger.submit_document("alice", "h", 0, 1, 1, 50, 1, 1, True)
        ledger.validate_document(OWNER, "alice", 0)
        assert ledger.calculate_credit_score(OWNER, "alice") >= ledger.constants.min_credit_score

    def test_inactive_submission_flag(self, env):
        env(LEDGER__PRIVILEGED_IDENTITY=OWNER)
        strict = build_ledger(load_settings())
        env(LEDGER__ALLOW_INACTIVE_SUBMISSIONS="1")
        lenient = build_ledger(load_settings())
        for ledger in (strict, lenient):
            ledger.submit_document("alice", "h", 0, 1, 1, 50, 1, 1, True)
            ledger.deactivate_user(OWNER, "alice")

        with pytest.raises(Unauthorized):
            strict.submit_document("alice", "h2", 0, 1, 1, 50, 1, 1, True)
        assert lenient.submit_document("alice", "h2", 0, 1, 1, 50, 1, 1, True) == 1
