"""HTTP tests for the marina API using FastAPI's TestClient."""

import threading
import time
from datetime import date

import pytest
from fastapi.testclient import TestClient

from marina.config import Settings, build_store, load_settings
from marina.domain.errors import ConfigurationError, StoreError
from marina.main import create_app
from marina.repos.memory import InMemoryRecordStore
from marina.repos.postgrest import PostgRESTRecordStore

_TODAY = date(2025, 6, 1)


@pytest.fixture()
def store():
    return InMemoryRecordStore()


@pytest.fixture()
def client(store):
    app = create_app(settings=Settings(), store=store, today=lambda: _TODAY)
    return TestClient(app)


def _book(client, **overrides):
    body = {
        "guest_name": "Jordan Reyes",
        "start_date": "2025-06-10",
        "end_date": "2025-06-12",
        "dock_id": "102",
    }
    body.update(overrides)
    return client.post("/reservations", json=body)


# ── Navigation ────────────────────────────────────────────────────────


def test_landing_lists_sections(client):
    resp = client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Marina Management Hub"
    assert data["sections"][0]["tiles"][0]["view"] == "guestDockCalendar"


def test_view_lookup(client):
    data = client.get("/views/waitlistTransientDocking").json()
    assert data["key"] == "waitlistTransientDocking"
    assert data["view"] == {"kind": "waitlist", "waitlist_type": "Transient Docking"}


def test_unknown_view_lands_on_hub(client):
    assert client.get("/views/nowhere").json() == {"key": "landing", "view": {"kind": "landing"}}


def test_docks(client):
    assert client.get("/docks").json() == ["102", "112", "113", "114", "300", "301", "310"]


def test_request_id_is_echoed(client):
    resp = client.get("/docks", headers={"X-Request-ID": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"
    assert client.get("/docks").headers["X-Request-ID"]


# ── Reservations ──────────────────────────────────────────────────────


def test_create_reservation(client):
    resp = _book(client)
    assert resp.status_code == 201
    data = resp.json()
    assert data["reservation"]["start_date"] == "2025-06-10"
    assert data["reservation"]["payment_status"] == "Not Paid Yet"
    assert len(data["reservations"]) == 1


def test_overlapping_reservation_is_rejected(client):
    _book(client)
    resp = _book(client, guest_name="Sam Lee", start_date="2025-06-12", end_date="2025-06-14")

    assert resp.status_code == 409
    data = resp.json()
    assert data["conflict_day"] == "2025-06-12"
    assert data["guest_name"] == "Jordan Reyes"
    assert data["message"] == "Dock 102 is already booked on June 12th, 2025 by Jordan Reyes."
    assert len(client.get("/reservations").json()) == 1


def test_same_dates_on_another_dock_are_fine(client):
    _book(client)
    assert _book(client, dock_id="300").status_code == 201


def test_missing_guest_name_is_422(client):
    resp = _book(client, guest_name="")
    assert resp.status_code == 422
    assert resp.json()["field"] == "guest_name"


def test_reversed_dates_are_422(client):
    resp = _book(client, start_date="2025-06-12", end_date="2025-06-10")
    assert resp.status_code == 422
    assert resp.json()["field"] == "end_date"


def test_update_reservation(client):
    reservation_id = _book(client).json()["reservation"]["id"]

    resp = client.put(
        f"/reservations/{reservation_id}",
        json={"guest_name": "Jordan Reyes", "start_date": "2025-06-10", "end_date": "2025-06-13"},
    )

    assert resp.status_code == 200
    assert resp.json()["reservation"]["end_date"] == "2025-06-13"
    assert len(resp.json()["reservations"]) == 1


def test_update_missing_reservation_is_404(client):
    resp = client.put(
        "/reservations/999",
        json={"guest_name": "X", "start_date": "2025-06-10", "end_date": "2025-06-11"},
    )
    assert resp.status_code == 404


def test_cancel_requires_confirm(client):
    reservation_id = _book(client).json()["reservation"]["id"]

    assert client.delete(f"/reservations/{reservation_id}").status_code == 400
    resp = client.delete(f"/reservations/{reservation_id}", params={"confirm": "true"})

    assert resp.status_code == 200
    assert resp.json() == []


def test_cancel_missing_reservation_is_404(client):
    assert client.delete("/reservations/999", params={"confirm": "true"}).status_code == 404


def test_store_failure_is_502(store):
    class FailingStore(InMemoryRecordStore):
        def insert(self, collection, record):
            raise StoreError("save", collection, "permission denied for table")

    client = TestClient(create_app(settings=Settings(), store=FailingStore(), today=lambda: _TODAY))
    resp = _book(client)

    assert resp.status_code == 502
    assert "permission denied for table" in resp.json()["detail"]


def test_simultaneous_identical_bookings_store_one_row():
    class SlowStore(InMemoryRecordStore):
        def insert(self, collection, record):
            time.sleep(0.3)
            return super().insert(collection, record)

    store = SlowStore()
    client = TestClient(create_app(settings=Settings(), store=store, today=lambda: _TODAY))
    codes = []

    def post():
        codes.append(_book(client).status_code)

    threads = [threading.Thread(target=post) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(codes) == [201, 409]
    assert len(store.fetch_all("reservations")) == 1


def test_booking_waiting_too_long_for_another_write_is_refused(client):
    ctx = client.app.state.marina
    ctx.write_timeout = 0.05

    with ctx.reservation_write():
        resp = _book(client)

    assert resp.status_code == 409
    assert resp.json()["detail"] == "A submission is already in progress."
    assert client.get("/reservations").json() == []
    assert _book(client).status_code == 201


def test_partial_iso_date_is_422(client):
    resp = _book(client, start_date="2025-06")
    assert resp.status_code == 422
    assert resp.json()["field"] == "start_date"


def test_conflict_check_over_a_very_long_stay(client):
    _book(client)
    resp = client.post(
        "/conflicts/check",
        json={"dock_id": "102", "start_date": "2025-06-01", "end_date": "9999-12-31"},
    )
    assert resp.status_code == 200
    assert resp.json()["conflict_day"] == "2025-06-10"


def test_conflict_check_previews_without_saving(client):
    reservation_id = _book(client).json()["reservation"]["id"]

    clash = client.post(
        "/conflicts/check",
        json={"dock_id": "102", "start_date": "2025-06-11", "end_date": "2025-06-15"},
    ).json()
    own = client.post(
        "/conflicts/check",
        json={
            "dock_id": "102",
            "start_date": "2025-06-10",
            "end_date": "2025-06-15",
            "exclude_reservation_id": reservation_id,
        },
    ).json()

    assert clash["conflict"] is True
    assert clash["conflict_day"] == "2025-06-11"
    assert own == {
        "conflict": False,
        "conflict_day": None,
        "reservation_id": None,
        "guest_name": None,
        "message": None,
    }
    assert len(client.get("/reservations").json()) == 1


def test_conflict_check_rejects_reversed_range(client):
    resp = client.post(
        "/conflicts/check",
        json={"dock_id": "102", "start_date": "2025-06-15", "end_date": "2025-06-11"},
    )
    assert resp.status_code == 422


# ── Calendar ──────────────────────────────────────────────────────────


def test_month_grid(client):
    _book(client)
    data = client.get("/calendar/2025/6").json()

    assert data["month_name"] == "June"
    assert data["leading_blanks"] == 0
    day_11 = data["days"][10]
    slot = next(s for s in day_11["docks"] if s["dock_id"] == "102")
    assert slot["available"] is False
    assert slot["guest_name"] == "Jordan Reyes"


def test_bad_month_is_422(client):
    assert client.get("/calendar/2025/13").status_code == 422


def test_calendar_opens_on_the_current_month_with_neighbours(client):
    data = client.get("/calendar").json()

    assert (data["year"], data["month"]) == (2025, 6)
    assert data["previous_month"] == {"year": 2025, "month": 5}
    assert data["next_month"] == {"year": 2025, "month": 7}


def test_last_month_of_the_calendar(client):
    grid = client.get("/calendar/9999/12")
    assert grid.status_code == 200
    assert grid.json()["next_month"] is None

    resp = client.post("/calendar/select", json={"day": "9999-12-31", "dock_id": "102"})
    assert resp.status_code == 422
    assert resp.json()["field"] == "start_date"


def test_select_cells(client):
    reservation_id = _book(client).json()["reservation"]["id"]

    occupied = client.post("/calendar/select", json={"day": "2025-06-11", "dock_id": "102"}).json()
    free = client.post("/calendar/select", json={"day": "2025-06-20", "dock_id": "102"}).json()

    assert occupied["mode"] == "edit"
    assert occupied["reservation_id"] == reservation_id
    assert free["mode"] == "new"
    assert free["form"]["end_date"] == "2025-06-21"


# ── To-dos and waitlists ──────────────────────────────────────────────


def test_todo_flow(client):
    todo_id = client.post("/todos", json={"task": "Order fuel"}).json()[0]["id"]

    toggled = client.post(f"/todos/{todo_id}/toggle").json()
    assert toggled[0]["is_completed"] is True

    assert client.delete(f"/todos/{todo_id}").json() == []
    assert client.post("/todos", json={"task": " "}).status_code == 422
    assert client.post("/todos/999/toggle").status_code == 404


def test_waitlist_flow(client):
    base = "/waitlists/Transient%20Docking"
    created = client.post(base, json={"name": "Riley Chen"})
    assert created.status_code == 201
    entry_id = created.json()[0]["id"]

    status = client.patch(f"{base}/{entry_id}/status", json={"status": "Contacted"})
    assert status.json()[0]["status"] == "Contacted"

    again = client.patch(f"{base}/{entry_id}/status", json={"status": "Contacted"})
    assert again.status_code == 422

    details = client.put(f"{base}/{entry_id}", json={"name": "Riley Chen", "boat_length": "28"})
    assert details.json()[0]["boat_length"] == "28"

    assert client.get("/waitlists/Jet%20Ski%20Dockage").json() == []
    assert client.delete(f"{base}/{entry_id}").json() == []


def test_unknown_waitlist_type_is_422(client):
    assert client.get("/waitlists/Houseboats").status_code == 422


# ── Activity ──────────────────────────────────────────────────────────


def test_activity_log_records_writes(client):
    reservation_id = _book(client).json()["reservation"]["id"]
    _book(client, guest_name="Sam Lee", start_date="2025-06-11", end_date="2025-06-11")
    client.delete(f"/reservations/{reservation_id}", params={"confirm": "true"})

    types = [entry["type"] for entry in client.get("/activity").json()]
    assert types == ["reservation_created", "conflict_detected", "reservation_cancelled"]


# ── Configuration ─────────────────────────────────────────────────────


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("MARINA_STORE_BACKEND", "postgrest")
    monkeypatch.setenv("SUPABASE_URL", "https://db.example.test")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("STORE_HTTP_TIMEOUT", "7.5")

    settings = load_settings()

    assert settings.store_backend == "postgrest"
    assert settings.store_http_timeout == 7.5
    store = build_store(settings)
    assert isinstance(store, PostgRESTRecordStore)
    assert store.timeout == 7.5


def test_postgrest_without_credentials_fails(monkeypatch):
    monkeypatch.setenv("MARINA_STORE_BACKEND", "postgrest")
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)

    with pytest.raises(ConfigurationError) as exc_info:
        build_store(load_settings())
    assert "Supabase URL or anon key is missing" in str(exc_info.value)


def test_memory_store_can_be_seeded():
    store = build_store(Settings(seed_data=True))
    assert len(store.fetch_all("reservations")) == 4
