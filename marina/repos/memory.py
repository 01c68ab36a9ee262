"""In-memory record store and activity log."""

from __future__ import annotations

import copy
import itertools
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Any

from marina.domain.errors import StoreError
from marina.domain.models import ActivityEntry, ActivityType, RecordId, same_id
from marina.observability.logging import get_logger
from marina.repos.store import RESERVATIONS, Record

logger = get_logger(__name__)


class InMemoryRecordStore:
    """Dict-backed store keyed by collection then id.

    Ids come from a single increasing counter, as a database sequence
    would hand them out. Records are copied in and out so callers never
    share state with the store.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Record]] = defaultdict(dict)
        self._ids = itertools.count(1)
        self._ticks = itertools.count()
        self._epoch = datetime.now(timezone.utc)

    def _timestamp(self) -> datetime:
        # Strictly increasing so ordering by created_at is stable.
        return self._epoch + timedelta(microseconds=next(self._ticks))

    def fetch_all(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str = "created_at",
        descending: bool = False,
    ) -> list[Record]:
        rows = [
            copy.deepcopy(row)
            for row in self._collections[collection].values()
            if all(row.get(k) == v for k, v in (filters or {}).items())
        ]
        rows.sort(key=lambda row: row.get(order_by) or "", reverse=descending)
        return rows

    def insert(self, collection: str, record: Record) -> Record:
        row = copy.deepcopy(record)
        row["id"] = next(self._ids)
        row["created_at"] = self._timestamp().isoformat(timespec="microseconds")
        self._collections[collection][str(row["id"])] = row
        logger.info(
            "record inserted",
            extra={"extra_fields": {"collection": collection, "record_id": row["id"]}},
        )
        return copy.deepcopy(row)

    def update(self, collection: str, record_id: RecordId, changes: Record) -> Record:
        row = self._collections[collection].get(str(record_id))
        if row is None:
            raise StoreError("update", collection, f"no row with id {record_id}")
        for key, value in changes.items():
            if key in ("id", "created_at"):
                continue
            row[key] = copy.deepcopy(value)
        logger.info(
            "record updated",
            extra={"extra_fields": {"collection": collection, "record_id": record_id}},
        )
        return copy.deepcopy(row)

    def delete(self, collection: str, record_id: RecordId) -> None:
        removed = self._collections[collection].pop(str(record_id), None)
        if removed is None:
            raise StoreError("delete", collection, f"no row with id {record_id}")
        logger.info(
            "record deleted",
            extra={"extra_fields": {"collection": collection, "record_id": record_id}},
        )


class ActivityRepository:
    """List-backed log of what happened to marina records."""

    def __init__(self) -> None:
        self._entries: list[ActivityEntry] = []

    def add(self, entry: ActivityEntry) -> None:
        self._entries.append(entry)

    def list_all(self) -> list[ActivityEntry]:
        return sorted(self._entries, key=lambda e: e.timestamp)

    def list_for_subject(self, subject_id: RecordId) -> list[ActivityEntry]:
        return [e for e in self.list_all() if same_id(e.subject_id, subject_id)]

    def list_by_type(self, activity_type: ActivityType) -> list[ActivityEntry]:
        return [e for e in self.list_all() if e.type == activity_type]


# ---------------------------------------------------------------------------
# Seed data – a few stays around the current month for the calendar
# ---------------------------------------------------------------------------


def seed_reservations(store: InMemoryRecordStore, today: date | None = None) -> None:
    today = today or date.today()
    first = today.replace(day=1)
    samples = [
        ("102", 2, 4, "Alice Harper", "Sailboat", "32"),
        ("112", 5, 5, "Ben Ortiz", "Center console", "24"),
        ("300", 10, 16, "Carla Nguyen", "Trawler", "42"),
        ("102", 12, 14, "Dev Patel", "Catamaran", "38"),
    ]
    for dock_id, start_offset, end_offset, guest, boat_type, length in samples:
        store.insert(
            RESERVATIONS,
            {
                "dock_id": dock_id,
                "start_date": (first + timedelta(days=start_offset)).isoformat(),
                "end_date": (first + timedelta(days=end_offset)).isoformat(),
                "guest_name": guest,
                "boat_type": boat_type,
                "boat_length": length,
                "payment_status": "Not Paid Yet",
            },
        )


def create_record_store(seed: bool = False) -> InMemoryRecordStore:
    """Return an in-memory store, optionally pre-loaded with sample stays."""
    store = InMemoryRecordStore()
    if seed:
        seed_reservations(store)
    return store
