"""Domain event handlers, wired up when the application is built."""

from __future__ import annotations

from marina.domain.bus import EventBus
from marina.domain.events import (
    ConflictDetected,
    ReservationCancelled,
    ReservationSaved,
    TodosChanged,
    WaitlistChanged,
)
from marina.domain.models import ActivityEntry, ActivityType
from marina.observability.logging import get_logger
from marina.repos.memory import ActivityRepository

logger = get_logger(__name__)


class HandlerRegistry:
    """Records marina activity from the events published on *bus*."""

    def __init__(self, bus: EventBus, activity_repo: ActivityRepository) -> None:
        self.bus = bus
        self.activity_repo = activity_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(ReservationSaved, self.on_reservation_saved)
        self.bus.subscribe(ReservationCancelled, self.on_reservation_cancelled)
        self.bus.subscribe(ConflictDetected, self.on_conflict_detected)
        self.bus.subscribe(TodosChanged, self.on_todos_changed)
        self.bus.subscribe(WaitlistChanged, self.on_waitlist_changed)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_reservation_saved(self, event: ReservationSaved) -> None:
        activity = (
            ActivityType.RESERVATION_CREATED
            if event.created
            else ActivityType.RESERVATION_UPDATED
        )
        self.activity_repo.add(
            ActivityEntry(
                type=activity,
                subject_id=event.reservation_id,
                payload={
                    "dock_id": event.dock_id,
                    "start_date": event.start_date.isoformat(),
                    "end_date": event.end_date.isoformat(),
                },
            )
        )
        logger.info(
            "reservation saved",
            extra={
                "extra_fields": {
                    "reservation_id": event.reservation_id,
                    "dock_id": event.dock_id,
                    "created": event.created,
                }
            },
        )

    def on_reservation_cancelled(self, event: ReservationCancelled) -> None:
        self.activity_repo.add(
            ActivityEntry(
                type=ActivityType.RESERVATION_CANCELLED,
                subject_id=event.reservation_id,
            )
        )
        logger.info(
            "reservation cancelled",
            extra={"extra_fields": {"reservation_id": event.reservation_id}},
        )

    def on_conflict_detected(self, event: ConflictDetected) -> None:
        self.activity_repo.add(
            ActivityEntry(
                type=ActivityType.CONFLICT_DETECTED,
                subject_id=event.conflicting_reservation_id,
                payload={
                    "dock_id": event.dock_id,
                    "conflict_day": event.conflict_day.isoformat(),
                    "excluded_reservation_id": event.excluded_reservation_id,
                },
            )
        )

    def on_todos_changed(self, event: TodosChanged) -> None:
        self.activity_repo.add(
            ActivityEntry(
                type=ActivityType.TODOS_CHANGED,
                subject_id=event.todo_id,
                payload={"action": event.action},
            )
        )

    def on_waitlist_changed(self, event: WaitlistChanged) -> None:
        self.activity_repo.add(
            ActivityEntry(
                type=ActivityType.WAITLIST_CHANGED,
                subject_id=event.entry_id,
                payload={"waitlist_type": event.waitlist_type, "action": event.action},
            )
        )
