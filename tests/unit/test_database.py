"""Unit tests for engine construction and session helpers."""
import pytest
from sqlalchemy import text
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session
from sqlalchemy.pool import QueuePool

from src.cardshop import database, errors, models
from src.cardshop.config import Config


class TestBuildEngine:
    def test_file_sqlite_uses_configured_pool_bounds(self, tmp_path):
        engine = database.build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
        try:
            assert isinstance(engine.pool, QueuePool)
            assert engine.pool.size() == Config.DB_POOL_SIZE
            assert engine.pool.timeout() == Config.DB_POOL_TIMEOUT
        finally:
            engine.dispose()

    def test_file_sqlite_checkout_fails_fast_when_pool_is_exhausted(self, tmp_path, monkeypatch):
        monkeypatch.setattr(Config, "DB_POOL_SIZE", 1)
        monkeypatch.setattr(Config, "DB_MAX_OVERFLOW", 0)
        monkeypatch.setattr(Config, "DB_POOL_TIMEOUT", 0.1)
        engine = database.build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
        held = engine.connect()
        try:
            with pytest.raises(PoolTimeoutError):
                engine.connect()
            with pytest.raises(errors.TransientStoreError):
                with database.session_scope(bind=engine) as db:
                    db.execute(text("SELECT 1"))
        finally:
            held.close()
            engine.dispose()


class TestSessionScope:
    def test_bind_targets_the_given_engine(self, engine):
        with database.session_scope(bind=engine) as db:
            assert db.get_bind() is engine
            db.add(models.Customer(name="Alice", contact_info="alice@x.com"))

        with Session(engine) as check:
            assert check.query(models.Customer).count() == 1
