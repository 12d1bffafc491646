from locust import HttpUser, task, between, events
from datetime import datetime, timedelta
import random
import time
import requests
import logging
from requests.exceptions import RequestException

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# The server must run with ENABLE_TEST_ROUTES=1 for the reset endpoint.

EVENT_IDS = []


def reset_database(host):
    """Helper to reset the database by calling the test endpoint."""
    try:
        response = requests.post(f"{host}/test/reset-db")
        if response.status_code == 204:
            logger.info("Successfully reset database")
        else:
            logger.error(f"Failed to reset database: {response.status_code} - {response.text}")
    except RequestException as e:
        logger.error(f"Error resetting database: {str(e)}")
        raise

# Read:Write ratio is about 70:30. Staff mostly look at storage and player lists;
# joins and pack deposits/withdrawals come in bursts around events.

@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Reset database and schedule a few large events before the load test starts."""
    host = environment.host or "http://127.0.0.1:8000"
    logger.info("Resetting database before test...")
    reset_database(host)

    logger.info("Scheduling events for load testing...")
    for i in range(5):
        payload = {
            "title": f"Load Test Event {i}",
            "game_title": "Hololive",
            "event_date": (datetime.now() + timedelta(days=i + 1)).isoformat(),
            "entry_fee": 5.0,
            # large capacity so the run measures throughput rather than rejections
            "max_players": 100000,
        }
        try:
            resp = requests.post(f"{host}/api/events/create", json=payload, timeout=5)
            if resp.status_code == 201:
                EVENT_IDS.append(resp.json()["id"])
                logger.info(f"Event {resp.json()['id']} ready")
        except Exception as e:
            logger.warning(f"Could not create event {i}: {e}")
    logger.info("Scheduling complete. Starting load test...")

@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Clean up after load test completes."""
    host = environment.host or "http://127.0.0.1:8000"
    logger.info("Test complete. Resetting database...")
    reset_database(host)
    logger.info("Cleanup complete.")

class ShopStaff(HttpUser):
    wait_time = between(0.5, 2.0)

    @task(5)
    def view_storage(self):
        with self.client.get("/api/storage", name="GET /api/storage", catch_response=True) as resp:
            if resp.status_code != 200:
                resp.failure(f"unexpected status {resp.status_code}")

    @task(2)
    def view_players(self):
        if not EVENT_IDS:
            return
        event_id = random.choice(EVENT_IDS)
        with self.client.get(f"/api/events/{event_id}/players", name="GET /api/events/[id]/players", catch_response=True) as resp:
            if resp.status_code != 200:
                resp.failure(f"unexpected status {resp.status_code}")

    @task(3)
    def join_and_store_flow(self):
        # Join an event as a new player, deposit prize packs, then take one out
        if not EVENT_IDS:
            return
        event_id = random.choice(EVENT_IDS)
        contact = f"locust-{int(time.time()*1000)}-{random.randint(1, 100000)}@example.com"
        join_payload = {"event_id": event_id, "player_name": "Locust Player", "contact_info": contact}
        with self.client.post("/api/events/join", json=join_payload, name="POST /api/events/join", catch_response=True) as resp:
            if resp.status_code not in (200, 409):
                resp.failure(f"join unexpected status {resp.status_code}")
                return
            if resp.status_code == 409:
                return

        listing = self.client.get("/api/customers", params={"search": contact}, name="GET /api/customers?search")
        if listing.status_code != 200 or not listing.json():
            return
        customer_id = listing.json()[0]["id"]

        deposit = {"customer_id": customer_id, "game_title": "Hololive", "change_amount": 3, "event_id": event_id}
        with self.client.post("/api/storage/update", json=deposit, name="POST /api/storage/update (deposit)", catch_response=True) as resp:
            if resp.status_code != 200:
                resp.failure(f"deposit unexpected status {resp.status_code}")
                return

        withdraw = {"customer_id": customer_id, "game_title": "Hololive", "change_amount": -1}
        with self.client.post("/api/storage/update", json=withdraw, name="POST /api/storage/update (withdraw)", catch_response=True) as resp:
            if resp.status_code not in (200, 409):
                resp.failure(f"withdraw unexpected status {resp.status_code}")
