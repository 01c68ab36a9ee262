"""Record store contract shared by every collection.

A store holds named collections of flat records (dicts). The marina only
needs four operations per collection: fetch everything (optionally
filtered by equality and ordered by a timestamp column), insert, update
by id, and delete by id. Ids and ``created_at`` are assigned by the store.
"""

from __future__ import annotations

from typing import Any, Protocol

from marina.domain.models import RecordId

RESERVATIONS = "reservations"
TODOS = "todos"
WAITLIST_ENTRIES = "waitlist_entries"

Record = dict[str, Any]


class RecordStore(Protocol):
    def fetch_all(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str = "created_at",
        descending: bool = False,
    ) -> list[Record]: ...

    def insert(self, collection: str, record: Record) -> Record: ...

    def update(self, collection: str, record_id: RecordId, changes: Record) -> Record: ...

    def delete(self, collection: str, record_id: RecordId) -> None: ...
