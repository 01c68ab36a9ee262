"""Domain events published after marina writes."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel

from marina.domain.models import RecordId


class ReservationSaved(BaseModel):
    """Fired after a reservation insert or update reached the store."""

    reservation_id: RecordId
    dock_id: str
    start_date: date
    end_date: date
    created: bool


class ReservationCancelled(BaseModel):
    """Fired after a reservation was deleted from the store."""

    reservation_id: RecordId


class ConflictDetected(BaseModel):
    """Fired when a proposed stay was rejected for overlapping another."""

    dock_id: str
    conflict_day: date
    conflicting_reservation_id: RecordId
    excluded_reservation_id: RecordId | None = None


class TodosChanged(BaseModel):
    todo_id: RecordId
    action: str


class WaitlistChanged(BaseModel):
    waitlist_type: str
    entry_id: RecordId
    action: str
