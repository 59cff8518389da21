"""API tests: role gates, session endpoints and the Provide Access routes."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import date, datetime
from fastapi.testclient import TestClient
from unittest.mock import MagicMock
from access_console.database import get_db
from access_console.dependencies import get_backend_client
from access_console.errors import FetchFailedError
from access_console.main import app
from access_console.schemas.access_log import AccessLogEntry, LogStatus
from access_console.schemas.person import Person, PersonType
from access_console.services.presence_engine import PresenceEngine, get_presence_engine
from access_console.services.state_store import SESSION_KEY, AppStateStore, get_state_store


class StubBackend:
    def __init__(self):
        self.logs = []

    async def get_suppliers(self):
        return [Person(id="S1", person_type=PersonType.SUPPLIER, name="Ahmed", code="01234567")]

    async def get_personnel(self):
        return [Person(id="P1", person_type=PersonType.LEONI_PERSONNEL, name="Imen B.", code="MAT54321")]

    async def get_schedules(self):
        return []

    async def get_active_logs(self):
        return [log for log in self.logs if log.is_active]

    async def get_recent_logs(self, limit, start_date=None, end_date=None):
        return list(self.logs)

    async def get_monthly_stats(self, month):
        raise FetchFailedError("monthly stats", "HTTP 404", 404)

    async def get_stats(self):
        return {"todayEntries": len(self.logs)}

    async def check_in(self, body, person_name):
        log = AccessLogEntry(id=f"L{len(self.logs) + 1}", person_id=body["personId"],
                             person_type=body["personType"], entry_time=body["entryTime"],
                             status=LogStatus.ENTRY)
        log.log_date = log.entry_time.date()
        self.logs.append(log)
        return log


@pytest.fixture
def store():
    return AppStateStore()


@pytest.fixture
def backend():
    return StubBackend()


@pytest.fixture
def client(store, backend):
    engine = PresenceEngine(history_limit=300)
    app.dependency_overrides[get_state_store] = lambda: store
    app.dependency_overrides[get_presence_engine] = lambda: engine
    app.dependency_overrides[get_backend_client] = lambda: backend
    app.dependency_overrides[get_db] = lambda: MagicMock()
    # No context manager: startup (table creation, state load) is not run
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestRoleGates:
    def test_signed_out_gets_401_with_signin_redirect(self, client):
        resp = client.get("/api/v1/access")
        assert resp.status_code == 401
        assert resp.json()["detail"]["redirect"] == "/signin"

    def test_admin_cannot_check_in(self, client, store):
        store.set_session("tok", "admin")
        resp = client.post("/api/v1/access/check-in", json={
            "person_id": "S1", "person_type": "Supplier", "date": "2024-06-01", "time": "08:00"})
        assert resp.status_code == 403
        assert resp.json()["detail"]["redirect"] == "/dashboard"

    def test_sos_can_read_logs(self, client, store):
        store.set_session("tok", "sos")
        assert client.get("/api/v1/logs").status_code == 200

    def test_missing_token_is_auth_error(self, client, store):
        app.dependency_overrides.pop(get_backend_client)
        store.set(SESSION_KEY, {"role": "sos"})
        resp = client.get("/api/v1/access")
        assert resp.status_code == 401
        assert resp.json()["error"] == "AuthMissingError"
        assert resp.json()["redirect"] == "/signin"


class TestSession:
    def test_open_and_close(self, client, store):
        resp = client.post("/api/v1/session", json={"token": "tok", "role": "sos", "username": "guard"})
        assert resp.status_code == 200
        assert resp.json() == {"authenticated": True, "role": "sos", "username": "guard",
                               "landing_page": "/provide-access"}
        assert store.token == "tok"

        resp = client.delete("/api/v1/session")
        assert resp.json()["authenticated"] is False
        assert resp.json()["landing_page"] == "/signin"

    def test_unknown_role_rejected(self, client):
        resp = client.post("/api/v1/session", json={"token": "tok", "role": "guest"})
        assert resp.status_code == 422


class TestAccessRoutes:
    def test_view_and_search(self, client, store):
        store.set_session("tok", "sos")
        resp = client.get("/api/v1/access")
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["rows"]) == 2
        assert body["monthly_count_source"] == "client"

        resp = client.get("/api/v1/access", params={"search": "mat543"})
        assert [row["person_id"] for row in resp.json()["rows"]] == ["P1"]

        resp = client.get("/api/v1/access", params={"person_type": "Supplier"})
        assert [row["person_id"] for row in resp.json()["rows"]] == ["S1"]

    def test_check_in_then_refused_twice(self, client, store, backend):
        store.set_session("tok", "sos")
        payload = {"person_id": "S1", "person_type": "Supplier", "date": "2024-06-01", "time": "08:00"}

        resp = client.post("/api/v1/access/check-in", json=payload)
        assert resp.status_code == 200
        assert resp.json()["message"] == "Ahmed has checked in successfully at 08:00."

        resp = client.post("/api/v1/access/check-in", json={**payload, "time": "09:00"})
        assert resp.status_code == 409
        assert resp.json()["error"] == "AlreadyInsideError"
        assert len(backend.logs) == 1

    def test_check_out_without_entry(self, client, store):
        store.set_session("tok", "sos")
        resp = client.post("/api/v1/access/check-out", json={
            "person_id": "S1", "person_type": "Supplier", "date": "2024-06-01", "time": "17:00"})
        assert resp.status_code == 409
        assert resp.json()["error"] == "NotInsideError"

    def test_unknown_person(self, client, store):
        store.set_session("tok", "sos")
        resp = client.post("/api/v1/access/check-in", json={
            "person_id": "nobody", "person_type": "Supplier", "date": "2024-06-01", "time": "08:00"})
        assert resp.status_code == 404


class TestLogRoutes:
    def test_rows_and_grouping(self, client, store, backend):
        store.set_session("tok", "admin")
        backend.logs.append(AccessLogEntry(
            id="L1", person_id="S1", person_type=PersonType.SUPPLIER, person_name="Ahmed",
            entry_time=datetime(2024, 6, 1, 8, 0), exit_time=datetime(2024, 6, 1, 17, 0),
            status=LogStatus.EXIT, log_date=date(2024, 6, 1)))

        rows = client.get("/api/v1/logs", params={"owner": "ahmed"}).json()
        assert rows[0]["state"] == "Exited"
        assert rows[0]["duration"] == "9h 0m"

        groups = client.get("/api/v1/logs/grouped").json()
        assert groups[0]["person_id"] == "S1"
        assert groups[0]["visit_count"] == 1

        assert client.get("/api/v1/logs/stats").json() == {"todayEntries": 1}
