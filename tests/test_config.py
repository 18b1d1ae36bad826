import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from pydantic import ValidationError

from liftlog.config import Config, _bool, _norm_db_url


def test_norm_db_url_sqlite_to_aiosqlite() -> None:
    assert _norm_db_url("sqlite:///test.db") == "sqlite+aiosqlite:///test.db"
    assert _norm_db_url("sqlite:///:memory:") == "sqlite+aiosqlite:///:memory:"
    # already using aiosqlite should stay untouched
    assert _norm_db_url("sqlite+aiosqlite:///test.db") == "sqlite+aiosqlite:///test.db"


def test_norm_db_url_postgres_to_asyncpg() -> None:
    assert _norm_db_url("postgres://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
    assert _norm_db_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
    assert _norm_db_url("postgresql+psycopg://u:p@h/db") == "postgresql+psycopg://u:p@h/db"
    assert _norm_db_url("") is None


def test_bool_env(monkeypatch) -> None:
    monkeypatch.setenv("LIFTLOG_TEST_FLAG", " Yes ")
    assert _bool("LIFTLOG_TEST_FLAG", False) is True
    monkeypatch.setenv("LIFTLOG_TEST_FLAG", "0")
    assert _bool("LIFTLOG_TEST_FLAG", True) is False
    monkeypatch.delenv("LIFTLOG_TEST_FLAG")
    assert _bool("LIFTLOG_TEST_FLAG", True) is True


def test_config_normalizes_values() -> None:
    cfg = Config(DATABASE_URL="sqlite:///local.db", LOG_LEVEL=" debug ")
    assert cfg.DATABASE_URL == "sqlite+aiosqlite:///local.db"
    assert cfg.LOG_LEVEL == "DEBUG"
    assert cfg.PORT == 8080


def test_config_requires_database_url() -> None:
    with pytest.raises(ValidationError):
        Config(DATABASE_URL="")
