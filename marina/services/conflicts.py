"""Service for detecting overlapping dock reservations.

Stays are inclusive on both ends: a guest booked through the 12th still
holds the dock on the 12th, so a new stay starting on the 12th conflicts.
"""

from __future__ import annotations

from typing import Iterable

from marina.domain.dates import DayLike, to_day
from marina.domain.errors import ValidationError
from marina.domain.models import CandidateInterval, Conflict, Reservation, same_id


def is_dock_booked_on(
    day: DayLike,
    dock_id: str,
    reservations: Iterable[Reservation],
) -> Reservation | None:
    """Return the first reservation holding *dock_id* on *day*, if any.

    Reservations are scanned in the order given (the store's fetch order).
    """
    target = to_day(day)
    for reservation in reservations:
        if reservation.dock_id == dock_id and reservation.covers(target):
            return reservation
    return None


def find_conflict(
    candidate: CandidateInterval,
    reservations: Iterable[Reservation],
) -> Conflict | None:
    """Return the earliest day on which *candidate* collides with another stay.

    The reported day is the first day the two stays share. When several
    stays share that same earliest day, the first one in fetch order wins,
    which is what walking the candidate's days one by one would report.
    The reservation named by ``exclude_reservation_id`` (the one being
    edited) is ignored. Cost is linear in the number of reservations, not
    in the length of the stay.
    """
    start, end = to_day(candidate.start_date), to_day(candidate.end_date)
    if end < start:
        raise ValidationError("End date cannot be before start date.", field="end_date")

    best: Conflict | None = None
    for reservation in reservations:
        if reservation.dock_id != candidate.dock_id:
            continue
        if same_id(reservation.id, candidate.exclude_reservation_id):
            continue
        if reservation.end_date < start or reservation.start_date > end:
            continue
        first_shared = max(start, reservation.start_date)
        # Strict comparison keeps the earlier-fetched holder on ties.
        if best is None or first_shared < best.conflict_day:
            best = Conflict(conflict_day=first_shared, reservation=reservation)
    return best
