"""Tests for configuration loading."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from homeledger import config as config_module
from homeledger.config import BaseConfig
from homeledger.infra.database import bootstrap_database, create_db_engine


def test_defaults_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("HOMELEDGER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("HOMELEDGER_DATABASE_URL", raising=False)
    monkeypatch.setenv("HOMELEDGER_DEV_MODE", "no")
    monkeypatch.setenv("HOMELEDGER_CURRENCY", " usd ")
    monkeypatch.setenv("HOMELEDGER_LOG_LEVEL", "debug")

    config = BaseConfig()

    assert config.DATA_DIR == (tmp_path / "data").resolve()
    assert config.DATA_DIR.is_dir()
    assert config.DATABASE_URL == f"sqlite:///{config.DATA_DIR / 'homeledger.db'}"
    assert config.DEV_MODE is False
    assert config.CURRENCY == "USD"
    assert config.LOG_LEVEL == "DEBUG"
    assert config.is_sqlite


def test_database_url_override(tmp_path, monkeypatch):
    monkeypatch.setenv("HOMELEDGER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HOMELEDGER_DATABASE_URL", "postgresql://ledger@localhost/ledger")

    config = BaseConfig()

    assert not config.is_sqlite
    assert config.sqlalchemy_engine_options() == {"pool_pre_ping": True}


def test_reserved_category_names():
    assert BaseConfig.TRANSFER_CATEGORY_NAME == "Transfer"
    assert BaseConfig.DEBT_PAYMENT_CATEGORY_NAME == "Pembayaran Utang"


def test_sqlite_engine_enforces_foreign_keys(tmp_path, monkeypatch):
    monkeypatch.setenv("HOMELEDGER_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("HOMELEDGER_DATABASE_URL", raising=False)

    engine = create_db_engine(BaseConfig())
    with engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
    engine.dispose()


def test_in_memory_config_shares_one_connection(tmp_path, monkeypatch):
    monkeypatch.setenv("HOMELEDGER_DATA_DIR", str(tmp_path))
    config = config_module.TestConfig()

    assert config.DATABASE_URL == "sqlite://"
    assert config.sqlalchemy_engine_options()["poolclass"] is StaticPool

    engine, factory = bootstrap_database(config)
    with factory() as session:
        tables = session.execute(text("SELECT name FROM sqlite_master WHERE type='table'")).scalars().all()
    assert {"account", "category", "debt", "savings_goal", "monthly_budget", "transaction", "user"} <= set(tables)
    engine.dispose()
