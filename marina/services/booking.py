"""Booking lifecycle: compose, validate, persist, refresh.

One controller drives one booking dialog. It holds the reservation
snapshot the dialog was opened against, the draft being edited, and the
current lifecycle state::

    IDLE -> COMPOSING(new|edit) -> VALIDATING -> PERSISTING -> IDLE
                     ^                 |             |
                     +---- FAILED <----+-------------+

A failed submit leaves the draft in place so the user can fix it and
submit again. Closing the dialog discards the draft.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Sequence

from marina.domain.bus import EventBus
from marina.domain.dates import DayParseError, add_days, parse_day_input, to_day
from marina.domain.errors import (
    ConflictError,
    MarinaError,
    StoreError,
    SubmissionInProgress,
    ValidationError,
)
from marina.domain.events import ConflictDetected, ReservationCancelled, ReservationSaved
from marina.domain.models import (
    DOCK_LABELS,
    BookingForm,
    CandidateInterval,
    RecordId,
    Reservation,
    StrEnum,
)
from marina.observability.logging import get_logger
from marina.repos.collections import ReservationRepository
from marina.services.conflicts import find_conflict

logger = get_logger(__name__)


class BookingState(StrEnum):
    IDLE = "idle"
    COMPOSING = "composing"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    FAILED = "failed"


class BookingMode(StrEnum):
    NEW = "new"
    EDIT = "edit"


class BookingController:
    def __init__(
        self,
        reservations: ReservationRepository,
        bus: EventBus,
        docks: Sequence[str] = DOCK_LABELS,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.reservations = reservations
        self.bus = bus
        self.docks = tuple(docks)
        self.today = today
        self.snapshot: list[Reservation] = []
        self._reset()

    def _reset(self) -> None:
        self.state = BookingState.IDLE
        self.mode: BookingMode | None = None
        self.form: BookingForm | None = None
        self.editing: Reservation | None = None
        self.dock_id: str | None = None
        self.failure: str | None = None

    def _transition(self, state: BookingState) -> None:
        logger.debug(
            "booking state change",
            extra={"extra_fields": {"from": self.state.value, "to": state.value}},
        )
        self.state = state

    # ------------------------------------------------------------------
    # Composing
    # ------------------------------------------------------------------

    def load_reservations(self) -> list[Reservation]:
        """Fetch the full reservation set the next submit is checked against."""
        self.snapshot = self.reservations.list_all()
        return self.snapshot

    def begin_new_booking(self, day: date, dock_id: str) -> BookingForm:
        """Open a blank one-night stay starting on *day* at *dock_id*."""
        self._guard_idle_write()
        start = to_day(day)
        try:
            end = add_days(start, 1)
        except OverflowError as e:
            raise ValidationError(
                "Bookings cannot start on the last day of the calendar.",
                field="start_date",
            ) from e
        self._reset()
        self.load_reservations()
        self.mode = BookingMode.NEW
        self.dock_id = dock_id
        self.form = BookingForm(start_date=start, end_date=end, dock_id=dock_id)
        self._transition(BookingState.COMPOSING)
        return self.form

    def begin_edit(self, reservation: Reservation) -> BookingForm:
        """Open an existing reservation; nothing is written until submit."""
        self._guard_idle_write()
        self._reset()
        self.load_reservations()
        self.mode = BookingMode.EDIT
        self.editing = reservation
        self.dock_id = reservation.dock_id
        self.form = BookingForm.from_reservation(reservation)
        self._transition(BookingState.COMPOSING)
        return self.form

    def close(self) -> None:
        """Leave the dialog; any unsaved draft is dropped."""
        self._guard_idle_write()
        self._reset()

    @property
    def is_busy(self) -> bool:
        return self.state == BookingState.PERSISTING

    def _guard_idle_write(self) -> None:
        if self.is_busy:
            raise SubmissionInProgress()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, form: BookingForm) -> CandidateInterval:
        """Run the submit checks in order; the first failure is raised.

        1. guest name present
        2. end date not before start date
        3. dock id known
        4. no overlap with another reservation on the dock
        """
        if not form.guest_name or not form.guest_name.strip():
            raise ValidationError("Guest name is required.", field="guest_name")

        try:
            start = parse_day_input(form.start_date, self.today())
            end = parse_day_input(form.end_date, self.today())
        except DayParseError as e:
            raise ValidationError(
                f"Invalid start or end date: {e}", field="start_date"
            ) from e
        if end < start:
            raise ValidationError("End date cannot be before start date.", field="end_date")

        dock_id = self.editing.dock_id if self.editing is not None else (
            self.dock_id or form.dock_id
        )
        if not dock_id:
            raise ValidationError("Dock ID is missing for the operation.", field="dock_id")
        if dock_id not in self.docks:
            raise ValidationError(f"Unknown dock {dock_id}.", field="dock_id")

        candidate = CandidateInterval(
            dock_id=dock_id,
            start_date=start,
            end_date=end,
            exclude_reservation_id=self.editing.id if self.editing is not None else None,
        )
        conflict = find_conflict(candidate, self.snapshot)
        if conflict is not None:
            logger.warning(
                "reservation conflict detected",
                extra={
                    "extra_fields": {
                        "dock_id": dock_id,
                        "requested_start": start.isoformat(),
                        "requested_end": end.isoformat(),
                        "conflict_day": conflict.conflict_day.isoformat(),
                        "conflicting_reservation_id": conflict.reservation_id,
                    }
                },
            )
            self.bus.publish(
                ConflictDetected(
                    dock_id=dock_id,
                    conflict_day=conflict.conflict_day,
                    conflicting_reservation_id=conflict.reservation_id,
                    excluded_reservation_id=candidate.exclude_reservation_id,
                )
            )
            raise ConflictError(conflict)
        return candidate

    # ------------------------------------------------------------------
    # Persisting
    # ------------------------------------------------------------------

    def submit(self, form: BookingForm | None = None) -> Reservation:
        """Validate the draft and write it with a single insert or update."""
        self._guard_idle_write()
        if self.state not in (BookingState.COMPOSING, BookingState.FAILED):
            raise ValidationError("No booking is open.")
        if form is not None:
            self.form = form
        if self.form is None:
            raise ValidationError("No booking is open.")

        self._transition(BookingState.VALIDATING)
        try:
            candidate = self.validate(self.form)
        except MarinaError as e:
            self._fail(e)
            raise

        record = {
            "guest_name": self.form.guest_name.strip(),
            "start_date": candidate.start_date,
            "end_date": candidate.end_date,
            **self.form.descriptive_fields(),
        }

        self._transition(BookingState.PERSISTING)
        try:
            if self.mode == BookingMode.EDIT:
                saved = self.reservations.update(self.editing.id, record)
            else:
                saved = self.reservations.add({"dock_id": candidate.dock_id, **record})
        except StoreError as e:
            self._fail(e)
            raise

        created = self.mode == BookingMode.NEW
        self._reset()
        self.snapshot = []
        self.bus.publish(
            ReservationSaved(
                reservation_id=saved.id,
                dock_id=saved.dock_id,
                start_date=saved.start_date,
                end_date=saved.end_date,
                created=created,
            )
        )
        return saved

    def cancel(self, reservation_id: RecordId, confirmed: bool) -> bool:
        """Delete a reservation once the user has confirmed it.

        Returns False (and touches nothing) when *confirmed* is not set.
        """
        self._guard_idle_write()
        if not confirmed:
            return False

        previous = self.state
        self._transition(BookingState.PERSISTING)
        try:
            self.reservations.delete(reservation_id)
        except StoreError as e:
            self.failure = str(e)
            self._transition(
                BookingState.IDLE if previous == BookingState.IDLE else BookingState.FAILED
            )
            raise

        self._reset()
        self.snapshot = []
        self.bus.publish(ReservationCancelled(reservation_id=reservation_id))
        return True

    def _fail(self, error: MarinaError) -> None:
        self.failure = str(error)
        self._transition(BookingState.FAILED)
