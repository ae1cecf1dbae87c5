"""Tests for settings and engine wiring."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from fulfillment.application import build_engine
from fulfillment.config import EngineSettings, Settings, StorageSettings, get_settings
from fulfillment.config.settings import reset_settings
from fulfillment.core.interfaces import ITransactionalStore


@pytest.fixture
def mock_store():
    return MagicMock(spec=ITransactionalStore)


class TestSettings:
    def test_env_overrides(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "db"))
        monkeypatch.setenv("ENGINE_MAX_TRANSACTION_ATTEMPTS", "9")
        monkeypatch.setenv("ENGINE_ACTIVITY_FEED", "log")
        reset_settings()

        settings = get_settings()

        assert settings.storage.db_path == tmp_path / "db" / "fulfillment.db"
        assert settings.engine.max_transaction_attempts == 9
        assert settings.engine.activity_feed == "log"

    def test_singleton(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        assert get_settings() is get_settings()

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            EngineSettings(max_transaction_attempts=0)


class TestBuildEngine:
    def test_services_share_runner_and_ledger(self, tmp_path: Path, mock_store):
        settings = Settings(
            storage=StorageSettings(data_dir=tmp_path),
            engine=EngineSettings(auto_reorder=False, low_stock_alerts=False),
        )

        engine = build_engine(mock_store, settings)

        assert engine.runner.store is mock_store
        assert engine.issuances._ledger is engine.ledger
        assert engine.issuances._auto_reorder is False
        assert engine.sink is None
