"""Typed repositories over a :class:`~marina.repos.store.RecordStore`.

These translate between store rows (flat dicts with ``YYYY-MM-DD`` dates)
and marina models. They add no caching; every ``list_*`` call is a full
fetch.
"""

from __future__ import annotations

from typing import Any

from marina.domain.dates import to_wire
from marina.domain.models import RecordId, Reservation, TodoItem, WaitlistEntry
from marina.repos.store import RESERVATIONS, TODOS, WAITLIST_ENTRIES, RecordStore


def _encode_dates(record: dict[str, Any]) -> dict[str, Any]:
    encoded = dict(record)
    for key in ("start_date", "end_date"):
        if encoded.get(key) is not None:
            encoded[key] = to_wire(encoded[key])
    return encoded


class ReservationRepository:
    """Reservations, in the store's creation order."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def list_all(self) -> list[Reservation]:
        rows = self.store.fetch_all(RESERVATIONS, order_by="created_at")
        return [Reservation.model_validate(row) for row in rows]

    def add(self, record: dict[str, Any]) -> Reservation:
        row = self.store.insert(RESERVATIONS, _encode_dates(record))
        return Reservation.model_validate(row)

    def update(self, reservation_id: RecordId, changes: dict[str, Any]) -> Reservation:
        row = self.store.update(RESERVATIONS, reservation_id, _encode_dates(changes))
        return Reservation.model_validate(row)

    def delete(self, reservation_id: RecordId) -> None:
        self.store.delete(RESERVATIONS, reservation_id)


class TodoRepository:
    """To-do items, newest first."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def list_all(self) -> list[TodoItem]:
        rows = self.store.fetch_all(TODOS, order_by="created_at", descending=True)
        return [TodoItem.model_validate(row) for row in rows]

    def add(self, task: str) -> TodoItem:
        row = self.store.insert(TODOS, {"task": task, "is_completed": False})
        return TodoItem.model_validate(row)

    def set_completed(self, todo_id: RecordId, is_completed: bool) -> TodoItem:
        row = self.store.update(TODOS, todo_id, {"is_completed": is_completed})
        return TodoItem.model_validate(row)

    def delete(self, todo_id: RecordId) -> None:
        self.store.delete(TODOS, todo_id)


class WaitlistRepository:
    """Waitlist entries for every waitlist type, oldest first."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def list_for_type(self, waitlist_type: str) -> list[WaitlistEntry]:
        rows = self.store.fetch_all(
            WAITLIST_ENTRIES,
            filters={"waitlist_type": waitlist_type},
            order_by="created_at",
        )
        return [WaitlistEntry.model_validate(row) for row in rows]

    def add(self, record: dict[str, Any]) -> WaitlistEntry:
        row = self.store.insert(WAITLIST_ENTRIES, record)
        return WaitlistEntry.model_validate(row)

    def update(self, entry_id: RecordId, changes: dict[str, Any]) -> WaitlistEntry:
        row = self.store.update(WAITLIST_ENTRIES, entry_id, changes)
        return WaitlistEntry.model_validate(row)

    def delete(self, entry_id: RecordId) -> None:
        self.store.delete(WAITLIST_ENTRIES, entry_id)
