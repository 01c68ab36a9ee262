"""Domain models for the marina manager."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from marina.domain.dates import format_day, to_day

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


DOCK_LABELS: tuple[str, ...] = ("102", "112", "113", "114", "300", "301", "310")

RecordId = int | str


def same_id(a: RecordId | None, b: RecordId | None) -> bool:
    """Compare store ids that may arrive as int (JSON) or str (URL path)."""
    if a is None or b is None:
        return False
    return str(a) == str(b)


class PaymentStatus(StrEnum):
    NOT_PAID = "Not Paid Yet"
    DEPOSIT_PAID = "Deposit Paid"
    PAID_IN_FULL = "Paid in Full"
    REFUNDED = "Refunded"


class WaitlistType(StrEnum):
    TRANSIENT_DOCKING = "Transient Docking"
    SEASONAL_BOAT_DOCKAGE = "Seasonal Boat Dockage"
    JET_SKI_DOCKAGE = "Jet Ski Dockage"
    INDOOR_WINTER_STORAGE = "Indoor Winter Storage"
    OUTDOOR_WINTER_STORAGE = "Outdoor Winter Storage"


class WaitlistStatus(StrEnum):
    WAITING = "Waiting"
    CONTACTED = "Contacted"
    OFFER_MADE = "Offer Made"
    ACCEPTED_PENDING = "Accepted - Pending"
    FULFILLED = "Fulfilled"
    DECLINED = "Declined"
    ARCHIVED = "Archived"


class VehicleType(StrEnum):
    BOAT = "Boat"
    JET_SKI = "Jet Ski"
    PWC = "PWC"
    DINGHY = "Dinghy"
    OTHER = "Other"


class ActivityType(StrEnum):
    RESERVATION_CREATED = "reservation_created"
    RESERVATION_UPDATED = "reservation_updated"
    RESERVATION_CANCELLED = "reservation_cancelled"
    CONFLICT_DETECTED = "conflict_detected"
    TODOS_CHANGED = "todos_changed"
    WAITLIST_CHANGED = "waitlist_changed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------


class Reservation(BaseModel):
    id: RecordId
    created_at: datetime | None = None
    dock_id: str
    start_date: date
    end_date: date
    guest_name: str
    boat_type: str | None = None
    boat_length: str | None = None
    boat_width: str | None = None
    email: str | None = None
    phone_number: str | None = None
    payment_status: str | None = PaymentStatus.NOT_PAID.value
    notes: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _as_day(cls, value):
        return to_day(value)

    def covers(self, day: date) -> bool:
        """True when *day* falls inside the inclusive stay."""
        return self.start_date <= day <= self.end_date


class TodoItem(BaseModel):
    id: RecordId
    created_at: datetime | None = None
    task: str
    is_completed: bool = False


class WaitlistEntry(BaseModel):
    id: RecordId
    created_at: datetime | None = None
    waitlist_type: str
    name: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    boat_name: str | None = None
    boat_license: str | None = None
    trailer_license_plate: str | None = None
    boat_or_jet_ski: str | None = None
    boat_width: str | None = None
    boat_length: str | None = None
    notes: str | None = None
    status: str = WaitlistStatus.WAITING.value


class ActivityEntry(BaseModel):
    timestamp: datetime = Field(default_factory=_utcnow)
    type: ActivityType
    subject_id: RecordId | None = None
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Conflict checking
# ---------------------------------------------------------------------------


class CandidateInterval(BaseModel):
    """A proposed or edited stay, checked before anything is persisted."""

    dock_id: str
    start_date: date
    end_date: date
    exclude_reservation_id: RecordId | None = None


class Conflict(BaseModel):
    conflict_day: date
    reservation: Reservation

    @property
    def reservation_id(self) -> RecordId:
        return self.reservation.id

    @property
    def guest_name(self) -> str:
        return self.reservation.guest_name

    @property
    def message(self) -> str:
        return (
            f"Dock {self.reservation.dock_id} is already booked on "
            f"{format_day(self.conflict_day)} by {self.guest_name}."
        )


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class BookingForm(BaseModel):
    """Form state submitted from the booking dialog.

    Dates arrive as loose strings or dates; they are normalized by the
    controller so that a bad value is reported as a form error rather than
    a schema error.
    """

    guest_name: str = ""
    start_date: date | str | None = None
    end_date: date | str | None = None
    dock_id: str | None = None
    boat_type: str | None = None
    boat_length: str | None = None
    boat_width: str | None = None
    email: str | None = None
    phone_number: str | None = None
    payment_status: str | None = PaymentStatus.NOT_PAID.value
    notes: str | None = None

    def descriptive_fields(self) -> dict:
        return {
            "boat_type": self.boat_type,
            "boat_length": self.boat_length,
            "boat_width": self.boat_width,
            "email": self.email,
            "phone_number": self.phone_number,
            "payment_status": self.payment_status,
            "notes": self.notes,
        }

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> BookingForm:
        return cls(
            guest_name=reservation.guest_name or "",
            start_date=reservation.start_date,
            end_date=reservation.end_date,
            dock_id=reservation.dock_id,
            boat_type=reservation.boat_type or "",
            boat_length=reservation.boat_length or "",
            boat_width=reservation.boat_width or "",
            email=reservation.email or "",
            phone_number=reservation.phone_number or "",
            payment_status=reservation.payment_status or PaymentStatus.NOT_PAID.value,
            notes=reservation.notes or "",
        )


class ConflictCheckRequest(BaseModel):
    dock_id: str
    start_date: date
    end_date: date
    exclude_reservation_id: RecordId | None = None

    @model_validator(mode="after")
    def _end_not_before_start(self) -> ConflictCheckRequest:
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date.")
        return self


class ConflictCheckResponse(BaseModel):
    conflict: bool
    conflict_day: date | None = None
    reservation_id: RecordId | None = None
    guest_name: str | None = None
    message: str | None = None


class TodoCreateRequest(BaseModel):
    task: str


class WaitlistForm(BaseModel):
    name: str = ""
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    boat_name: str | None = None
    boat_license: str | None = None
    trailer_license_plate: str | None = None
    boat_or_jet_ski: VehicleType = VehicleType.BOAT
    boat_width: str | None = None
    boat_length: str | None = None
    notes: str | None = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return value.strip()


class WaitlistStatusRequest(BaseModel):
    status: WaitlistStatus
