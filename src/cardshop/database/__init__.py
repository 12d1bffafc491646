from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool, QueuePool

from ..config import Config
from ..errors import store_boundary


def build_engine(url: str = Config.DATABASE_URL):
    """Create the pooled engine for ``url``.

    - In-memory SQLite shares one connection (StaticPool) so every session sees the same data.
    - File SQLite gets WAL and a lock wait.
    - Every other case gets a fixed-size QueuePool whose checkout fails after DB_POOL_TIMEOUT.
    """
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if make_url(url).database in (None, "", ":memory:"):
            engine = create_engine(url, connect_args=connect_args, poolclass=StaticPool)
        else:
            engine = create_engine(
                url,
                connect_args=connect_args,
                poolclass=QueuePool,
                pool_size=Config.DB_POOL_SIZE,
                max_overflow=Config.DB_MAX_OVERFLOW,
                pool_timeout=Config.DB_POOL_TIMEOUT,
                pool_pre_ping=True,
            )

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute(f"PRAGMA busy_timeout={Config.DB_BUSY_TIMEOUT_MS}")  # wait for locks
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

        return engine

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=Config.DB_POOL_SIZE,
        max_overflow=Config.DB_MAX_OVERFLOW,
        pool_timeout=Config.DB_POOL_TIMEOUT,  # fail fast instead of queueing forever
        pool_pre_ping=True,
        pool_recycle=3600,
    )


engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for getting database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """One flat all-or-nothing unit of work on ``db``.

    Commits when the block finishes, rolls back on any exception. Store errors
    leave as LedgerError subclasses; domain errors propagate unchanged.
    """
    with store_boundary():
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise


@contextmanager
def session_scope(bind=None):
    """Check out a session, run one transaction on it and always give it back.

    ``bind`` points the session at another engine than the application one.
    """
    db = SessionLocal(bind=bind) if bind is not None else SessionLocal()
    try:
        with transaction(db):
            yield db
    finally:
        db.close()


def dispose_engine():
    engine.dispose()
