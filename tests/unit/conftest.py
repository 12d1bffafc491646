"""Pytest fixtures for unit tests."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker

from src.cardshop import crud, schemas
from src.cardshop.database import build_engine
from src.cardshop.models import Base


@pytest.fixture(scope="function")
def engine():
    """In-memory SQLite engine with the ledger schema."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine):
    """Create an in-memory SQLite database for unit testing."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_event(db):
    """Factory scheduling an event tomorrow with the given capacity."""
    def _make_event(max_players=2, title="Friday Locals", game_title="Hololive", days_ahead=1):
        return crud.create_event(
            db,
            schemas.EventCreate(
                title=title,
                game_title=game_title,
                event_date=datetime.now() + timedelta(days=days_ahead),
                entry_fee=5.0,
                max_players=max_players,
            ),
        )
    return _make_event
