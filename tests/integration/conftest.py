"""Pytest fixtures for integration tests."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from src.cardshop.database import build_engine
from src.cardshop.models import Base
from src.cardshop.main import app


@pytest.fixture(scope="function")
def db():
    """Create an in-memory SQLite database for integration testing."""
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with a test database session."""
    def override_get_db():
        yield db

    from src.cardshop import database
    app.dependency_overrides[database.get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def create_event(client):
    """POST a new event and return its JSON."""
    def _create_event(max_players=2, title="Friday Locals", days_ahead=1):
        response = client.post(
            "/api/events/create",
            json={
                "title": title,
                "game_title": "Hololive",
                "event_date": (datetime.now() + timedelta(days=days_ahead)).isoformat(),
                "entry_fee": 5.0,
                "max_players": max_players,
                "description": "Swiss rounds",
            },
        )
        assert response.status_code == 201
        return response.json()
    return _create_event
