"""Tests for the to-do list and waitlist services."""

import pytest

from marina.domain.bus import EventBus
from marina.domain.errors import RecordNotFound, StoreError, ValidationError
from marina.domain.events import TodosChanged, WaitlistChanged
from marina.domain.models import VehicleType, WaitlistForm, WaitlistStatus, WaitlistType
from marina.repos.collections import TodoRepository, WaitlistRepository
from marina.repos.memory import InMemoryRecordStore
from marina.services.todos import TodoService
from marina.services.waitlist import WaitlistService


@pytest.fixture()
def store():
    return InMemoryRecordStore()


@pytest.fixture()
def bus_events():
    bus = EventBus()
    events: list = []
    bus.subscribe(TodosChanged, events.append)
    bus.subscribe(WaitlistChanged, events.append)
    return bus, events


# ---------------------------------------------------------------------------
# To-dos
# ---------------------------------------------------------------------------


def test_todos_are_listed_newest_first(store, bus_events):
    bus, _ = bus_events
    service = TodoService(TodoRepository(store), bus)
    service.add("Pump out slip 300")
    items = service.add("Order fuel")
    assert [t.task for t in items] == ["Order fuel", "Pump out slip 300"]
    assert all(not t.is_completed for t in items)


def test_blank_task_is_rejected(store, bus_events):
    bus, events = bus_events
    service = TodoService(TodoRepository(store), bus)
    with pytest.raises(ValidationError):
        service.add("   ")
    assert service.list_todos() == []
    assert events == []


def test_task_text_is_trimmed(store, bus_events):
    bus, _ = bus_events
    service = TodoService(TodoRepository(store), bus)
    assert service.add("  Check lines  ")[0].task == "Check lines"


def test_toggle_flips_completion(store, bus_events):
    bus, events = bus_events
    service = TodoService(TodoRepository(store), bus)
    todo_id = service.add("Check lines")[0].id

    assert service.toggle(todo_id)[0].is_completed is True
    assert service.toggle(str(todo_id))[0].is_completed is False
    assert [e.action for e in events] == ["added", "completed", "reopened"]


def test_toggle_missing_todo(store, bus_events):
    bus, _ = bus_events
    with pytest.raises(RecordNotFound):
        TodoService(TodoRepository(store), bus).toggle(99)


def test_delete_todo(store, bus_events):
    bus, events = bus_events
    service = TodoService(TodoRepository(store), bus)
    todo_id = service.add("Check lines")[0].id
    assert service.delete(todo_id) == []
    assert events[-1].action == "deleted"


def test_delete_missing_todo_surfaces_store_error(store, bus_events):
    bus, _ = bus_events
    with pytest.raises(StoreError):
        TodoService(TodoRepository(store), bus).delete(99)


# ---------------------------------------------------------------------------
# Waitlists
# ---------------------------------------------------------------------------


def _service(store, bus, waitlist_type=WaitlistType.TRANSIENT_DOCKING):
    return WaitlistService(WaitlistRepository(store), bus, waitlist_type)


def test_new_entries_start_waiting(store, bus_events):
    bus, events = bus_events
    entries = _service(store, bus).add(WaitlistForm(name="  Riley Chen ", phone="555-0100"))

    assert len(entries) == 1
    entry = entries[0]
    assert entry.name == "Riley Chen"
    assert entry.status == WaitlistStatus.WAITING.value
    assert entry.waitlist_type == WaitlistType.TRANSIENT_DOCKING.value
    assert entry.boat_or_jet_ski == VehicleType.BOAT.value
    assert events[0].action == "added"


def test_entries_are_oldest_first(store, bus_events):
    bus, _ = bus_events
    service = _service(store, bus)
    service.add(WaitlistForm(name="First"))
    entries = service.add(WaitlistForm(name="Second"))
    assert [e.name for e in entries] == ["First", "Second"]


def test_waitlists_are_separated_by_type(store, bus_events):
    bus, _ = bus_events
    transient = _service(store, bus)
    jet_ski = _service(store, bus, WaitlistType.JET_SKI_DOCKAGE)
    transient.add(WaitlistForm(name="Riley"))
    jet_ski.add(WaitlistForm(name="Quinn", boat_or_jet_ski=VehicleType.JET_SKI))

    assert [e.name for e in transient.list_entries()] == ["Riley"]
    assert [e.name for e in jet_ski.list_entries()] == ["Quinn"]


def test_name_is_required(store, bus_events):
    bus, _ = bus_events
    with pytest.raises(ValidationError) as exc_info:
        _service(store, bus).add(WaitlistForm(name="   "))
    assert exc_info.value.field == "name"


def test_status_change(store, bus_events):
    bus, events = bus_events
    service = _service(store, bus)
    entry_id = service.add(WaitlistForm(name="Riley"))[0].id

    entries = service.update_status(entry_id, WaitlistStatus.CONTACTED)

    assert entries[0].status == "Contacted"
    assert events[-1].action == "status:Contacted"


def test_same_status_is_rejected(store, bus_events):
    bus, _ = bus_events
    service = _service(store, bus)
    entry_id = service.add(WaitlistForm(name="Riley"))[0].id
    with pytest.raises(ValidationError) as exc_info:
        service.update_status(entry_id, WaitlistStatus.WAITING)
    assert "Riley is already Waiting" in str(exc_info.value)


def test_update_details_keeps_status(store, bus_events):
    bus, _ = bus_events
    service = _service(store, bus)
    entry_id = service.add(WaitlistForm(name="Riley"))[0].id
    service.update_status(entry_id, WaitlistStatus.OFFER_MADE)

    entries = service.update_details(entry_id, WaitlistForm(name="Riley Chen", boat_length="28"))

    assert entries[0].name == "Riley Chen"
    assert entries[0].boat_length == "28"
    assert entries[0].status == "Offer Made"


def test_entry_of_another_type_is_not_found(store, bus_events):
    bus, _ = bus_events
    entry_id = _service(store, bus).add(WaitlistForm(name="Riley"))[0].id
    other = _service(store, bus, WaitlistType.INDOOR_WINTER_STORAGE)
    with pytest.raises(RecordNotFound):
        other.delete(entry_id)


def test_delete_entry(store, bus_events):
    bus, events = bus_events
    service = _service(store, bus)
    entry_id = service.add(WaitlistForm(name="Riley"))[0].id
    assert service.delete(entry_id) == []
    assert events[-1].action == "deleted"
