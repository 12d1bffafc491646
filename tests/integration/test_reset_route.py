"""Integration tests for the load-test reset route."""
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.cardshop import database, main, models


def test_reset_route_not_mounted_by_default(client):
    assert client.post("/test/reset-db").status_code == 404


def test_reset_clears_every_table(db, client, create_event):
    event = create_event(max_players=2)
    client.post(
        "/api/events/join",
        json={"event_id": event["id"], "player_name": "Alice", "contact_info": "alice@x.com"},
    )
    customer_id = client.get("/api/customers").json()[0]["id"]
    client.post(
        "/api/storage/update",
        json={"customer_id": customer_id, "game_title": "Hololive", "change_amount": 2, "event_id": event["id"]},
    )

    test_app = FastAPI()
    test_app.include_router(main.router)
    test_app.dependency_overrides[database.get_db] = lambda: db

    response = TestClient(test_app).post("/test/reset-db")

    assert response.status_code == 204
    for model in (models.PackTransaction, models.CustomerPack, models.EventRegistration, models.Event, models.Customer):
        assert db.query(model).count() == 0
