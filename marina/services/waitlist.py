"""Service for the per-category waitlists (transient, seasonal, storage)."""

from __future__ import annotations

from marina.domain.bus import EventBus
from marina.domain.errors import RecordNotFound, ValidationError
from marina.domain.events import WaitlistChanged
from marina.domain.models import (
    RecordId,
    WaitlistEntry,
    WaitlistForm,
    WaitlistStatus,
    WaitlistType,
    same_id,
)
from marina.repos.collections import WaitlistRepository
from marina.repos.store import WAITLIST_ENTRIES


class WaitlistService:
    """One waitlist category. Writes are followed by a full refetch."""

    def __init__(
        self,
        entries: WaitlistRepository,
        bus: EventBus,
        waitlist_type: WaitlistType,
    ) -> None:
        self.entries = entries
        self.bus = bus
        self.waitlist_type = waitlist_type

    def list_entries(self) -> list[WaitlistEntry]:
        return self.entries.list_for_type(self.waitlist_type.value)

    def _get(self, entry_id: RecordId) -> WaitlistEntry:
        for entry in self.list_entries():
            if same_id(entry.id, entry_id):
                return entry
        raise RecordNotFound(WAITLIST_ENTRIES, entry_id)

    def _publish(self, entry_id: RecordId, action: str) -> None:
        self.bus.publish(
            WaitlistChanged(
                waitlist_type=self.waitlist_type.value,
                entry_id=entry_id,
                action=action,
            )
        )

    def add(self, form: WaitlistForm) -> list[WaitlistEntry]:
        if not form.name:
            raise ValidationError("Name is required.", field="name")
        entry = self.entries.add(
            {
                **form.model_dump(mode="json"),
                "waitlist_type": self.waitlist_type.value,
                "status": WaitlistStatus.WAITING.value,
            }
        )
        self._publish(entry.id, "added")
        return self.list_entries()

    def update_status(
        self, entry_id: RecordId, status: WaitlistStatus
    ) -> list[WaitlistEntry]:
        entry = self._get(entry_id)
        if entry.status == status.value:
            raise ValidationError(
                f"{entry.name} is already {status.value}.", field="status"
            )
        self.entries.update(entry.id, {"status": status.value})
        self._publish(entry.id, f"status:{status.value}")
        return self.list_entries()

    def update_details(
        self, entry_id: RecordId, form: WaitlistForm
    ) -> list[WaitlistEntry]:
        """Replace the descriptive fields; id, type, status and created_at stay."""
        entry = self._get(entry_id)
        if not form.name:
            raise ValidationError("Name is required.", field="name")
        self.entries.update(entry.id, form.model_dump(mode="json"))
        self._publish(entry.id, "updated")
        return self.list_entries()

    def delete(self, entry_id: RecordId) -> list[WaitlistEntry]:
        entry = self._get(entry_id)
        self.entries.delete(entry.id)
        self._publish(entry.id, "deleted")
        return self.list_entries()
