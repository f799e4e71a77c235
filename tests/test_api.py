import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlmodel import Session

from conftest import DAY, add_activity, add_payment, at
from hotelfeed.api.feed_routes import get_feed_session, router as feed_router
from hotelfeed.api.guest_routes import router as guest_router
from hotelfeed.connectors.activity_log import ActivityLogSource
from hotelfeed.core.errors import SourceUnavailableError
from hotelfeed.connectors.payments import PaymentSource
from hotelfeed.database import get_session
from hotelfeed.feed.session import FeedSession, build_feed_session


class BrokenPayments(PaymentSource):
    def fetch_events(self, filter):
        raise SourceUnavailableError("store offline", self.kind.value)


def make_client(engine, feed_session):
    app = FastAPI()
    app.include_router(feed_router)
    app.include_router(guest_router)

    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_feed_session] = lambda: feed_session
    return TestClient(app)


@pytest.fixture
def client(engine, staff):
    return make_client(engine, build_feed_session(engine))


def test_get_feed(client, engine, staff):
    add_activity(engine, staff["ana"], at(9), "Login")
    add_payment(engine, staff["ana"], at(10, 15), transaction_reference="TX-1")

    resp = client.get("/feed", params={"date": "2024-03-01"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 2
    assert body["empty"] is False
    assert body["events"][0]["description"].startswith("Payment Completed - 150.00 via Cash (Ref: TX-1)")
    assert body["events"][1]["display_type"] == "Login"


def test_get_feed_empty_day(client):
    body = client.get("/feed", params={"date": "2024-03-02"}).json()
    assert body["count"] == 0
    assert body["empty"] is True
    assert body["summary"] == "Showing 0 activities for 2024-03-02"


def test_get_feed_bad_date(client):
    assert client.get("/feed", params={"date": "yesterday"}).status_code == 422


def test_get_feed_source_failure(engine, staff):
    client = make_client(engine, FeedSession([ActivityLogSource(engine), BrokenPayments(engine)]))
    resp = client.get("/feed", params={"date": DAY.isoformat()})
    assert resp.status_code == 503


def test_poll_endpoint(client, engine, staff):
    add_activity(engine, staff["ana"], at(9))
    client.get("/feed", params={"date": "2024-03-01"})

    assert client.get("/feed/poll").json()["refreshed"] is False
    add_activity(engine, staff["ben"], at(9, 5), "Check-In")
    body = client.get("/feed/poll").json()
    assert body["refreshed"] is True
    assert body["feed"]["count"] == 2


def test_filter_options(client, staff):
    body = client.get("/feed/filters").json()
    assert [e["name"] for e in body["employees"]] == ["All Employees", "Ana Reyes", "Ben Cruz"]
    assert body["types"][0] == {"value": None, "label": "All Types"}
    assert [t["value"] for t in body["types"][1:]] == [
        "login", "checkin", "checkout", "reservation", "payment",
    ]


def test_ensure_guest_route(client):
    payload = {"first_name": "Maria", "last_name": "Santos", "phone": "0917", "id_number": "P1"}
    first = client.post("/guests/ensure", json=payload).json()["guest_id"]
    second = client.post("/guests/ensure", json=payload).json()["guest_id"]
    assert first == second
