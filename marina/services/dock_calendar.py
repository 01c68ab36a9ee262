"""Month grid for the guest-dock calendar."""

from __future__ import annotations

import calendar
from datetime import date
from typing import Sequence

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field

from marina.domain.dates import iter_days
from marina.domain.models import DOCK_LABELS, BookingForm, RecordId, Reservation
from marina.services.booking import BookingController
from marina.services.conflicts import is_dock_booked_on

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


class CalendarMonth(BaseModel):
    year: int = Field(ge=1, le=9999)
    month: int = Field(ge=1, le=12)

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    @property
    def name(self) -> str:
        return self.first_day.strftime("%B")

    def previous(self) -> CalendarMonth | None:
        """The month before, or None before year 1."""
        if (self.year, self.month) == (1, 1):
            return None
        d = self.first_day - relativedelta(months=1)
        return CalendarMonth(year=d.year, month=d.month)

    def next(self) -> CalendarMonth | None:
        """The month after, or None past year 9999."""
        if (self.year, self.month) == (9999, 12):
            return None
        d = self.first_day + relativedelta(months=1)
        return CalendarMonth(year=d.year, month=d.month)

    @classmethod
    def containing(cls, day: date) -> CalendarMonth:
        return cls(year=day.year, month=day.month)


class DockSlot(BaseModel):
    dock_id: str
    available: bool
    reservation_id: RecordId | None = None
    guest_name: str | None = None


class DayCell(BaseModel):
    day: date
    docks: list[DockSlot]


class MonthGrid(BaseModel):
    year: int
    month: int
    month_name: str
    weekdays: list[str] = Field(default_factory=lambda: list(WEEKDAY_NAMES))
    leading_blanks: int
    days: list[DayCell]
    previous_month: CalendarMonth | None = None
    next_month: CalendarMonth | None = None


def build_month_grid(
    month: CalendarMonth,
    reservations: Sequence[Reservation],
    docks: Sequence[str] = DOCK_LABELS,
) -> MonthGrid:
    """Lay out *month* as Sunday-first weeks with one slot per dock per day."""
    # date.weekday() is Monday=0; the grid starts on Sunday.
    leading = (month.first_day.weekday() + 1) % 7
    cells = []
    for day in iter_days(month.first_day, month.last_day):
        slots = []
        for dock_id in docks:
            holder = is_dock_booked_on(day, dock_id, reservations)
            slots.append(
                DockSlot(
                    dock_id=dock_id,
                    available=holder is None,
                    reservation_id=holder.id if holder else None,
                    guest_name=holder.guest_name if holder else None,
                )
            )
        cells.append(DayCell(day=day, docks=slots))
    return MonthGrid(
        year=month.year,
        month=month.month,
        month_name=month.name,
        leading_blanks=leading,
        days=cells,
        previous_month=month.previous(),
        next_month=month.next(),
    )


def select_cell(
    controller: BookingController,
    day: date,
    dock_id: str,
    reservations: Sequence[Reservation],
) -> BookingForm:
    """Open the booking dialog for a clicked cell.

    An occupied cell opens the reservation holding it; a free cell opens a
    new booking starting that day.
    """
    holder = is_dock_booked_on(day, dock_id, reservations)
    if holder is not None:
        return controller.begin_edit(holder)
    return controller.begin_new_booking(day, dock_id)
