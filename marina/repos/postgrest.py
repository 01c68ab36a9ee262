"""Record store backed by a Supabase/PostgREST HTTP endpoint.

Each collection maps to a table under ``{base_url}/rest/v1/``. Filters are
sent as ``column=eq.value`` query parameters and ordering as
``order=column.asc|desc``. Writes ask for ``return=representation`` so the
row the server stored (with its id and ``created_at``) comes back.
"""

from __future__ import annotations

from typing import Any

import requests

from marina.domain.errors import StoreError
from marina.domain.models import RecordId
from marina.observability.logging import get_logger
from marina.repos.store import Record

logger = get_logger(__name__)


def _error_message(response: requests.Response) -> str:
    """Pull PostgREST's ``message`` out of an error body, else the raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or str(body)
    return str(body)


class PostgRESTRecordStore:
    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def _url(self, collection: str) -> str:
        return f"{self.base_url}/rest/v1/{collection}"

    def _send(
        self,
        operation: str,
        method: str,
        collection: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        try:
            response = self.session.request(
                method,
                self._url(collection),
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(
                "record store request failed",
                extra={
                    "extra_fields": {
                        "collection": collection,
                        "operation": operation,
                        "error": str(e),
                    }
                },
            )
            raise StoreError(operation, collection, str(e)) from e

        if not response.ok:
            message = _error_message(response)
            logger.error(
                "record store rejected request",
                extra={
                    "extra_fields": {
                        "collection": collection,
                        "operation": operation,
                        "status": response.status_code,
                        "error": message,
                    }
                },
            )
            raise StoreError(operation, collection, message)
        return response

    def fetch_all(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        order_by: str = "created_at",
        descending: bool = False,
    ) -> list[Record]:
        params = {"select": "*", "order": f"{order_by}.{'desc' if descending else 'asc'}"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        response = self._send("load", "GET", collection, params=params)
        return list(response.json())

    def insert(self, collection: str, record: Record) -> Record:
        response = self._send(
            "save",
            "POST",
            collection,
            json=[record],
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        if not rows:
            raise StoreError("save", collection, "store returned no row")
        logger.info(
            "record inserted",
            extra={"extra_fields": {"collection": collection, "record_id": rows[0].get("id")}},
        )
        return rows[0]

    def update(self, collection: str, record_id: RecordId, changes: Record) -> Record:
        response = self._send(
            "update",
            "PATCH",
            collection,
            params={"id": f"eq.{record_id}"},
            json=changes,
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        if not rows:
            raise StoreError("update", collection, f"no row with id {record_id}")
        logger.info(
            "record updated",
            extra={"extra_fields": {"collection": collection, "record_id": record_id}},
        )
        return rows[0]

    def delete(self, collection: str, record_id: RecordId) -> None:
        self._send("delete", "DELETE", collection, params={"id": f"eq.{record_id}"})
        logger.info(
            "record deleted",
            extra={"extra_fields": {"collection": collection, "record_id": record_id}},
        )
