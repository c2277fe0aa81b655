from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from storefront.core.config import Settings
from storefront.core.http import post_with_retries, status_of

logger = logging.getLogger(__name__)


class DocumentStoreError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def encode_ejson(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        stamp = value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return {"$date": stamp}
    if isinstance(value, dict):
        return {key: encode_ejson(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_ejson(item) for item in value]
    return value


def _parse_date(raw: Any) -> datetime | Any:
    if isinstance(raw, dict) and "$numberLong" in raw:
        return datetime.fromtimestamp(int(raw["$numberLong"]) / 1000, tz=timezone.utc)
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
    if isinstance(raw, str):
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    return raw


def decode_ejson(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {"$date"}:
            return _parse_date(value["$date"])
        return {key: decode_ejson(item) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_ejson(item) for item in value]
    return value


class DocumentStore:
    """Collections in a document database reached through an HTTP data API.

    Each operation POSTs to ``<base url>/action/<name>`` with the data source,
    database and collection in the body. Dates travel as extended JSON.
    """

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.base_url = settings.analytics_data_api_url.rstrip("/")
        self.data_source = settings.analytics_data_source
        self.database = settings.analytics_database
        self.max_retries = settings.analytics_max_retries
        self.retry_backoff_seconds = settings.analytics_retry_backoff_seconds
        self._client = httpx.AsyncClient(
            timeout=settings.analytics_timeout_seconds,
            headers={
                "api-key": settings.analytics_data_api_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def insert_many(self, collection: str, documents: list[dict[str, Any]]) -> int:
        if not documents:
            return 0
        result = await self._action("insertMany", collection, {"documents": documents})
        return len(result.get("insertedIds") or [])

    async def insert_one(self, collection: str, document: dict[str, Any]) -> str | None:
        result = await self._action("insertOne", collection, {"document": document})
        return result.get("insertedId")

    async def update_one(
        self,
        collection: str,
        filter: dict[str, Any],
        update: dict[str, Any],
        upsert: bool = False,
    ) -> dict[str, Any]:
        return await self._action("updateOne", collection, {"filter": filter, "update": update, "upsert": upsert})

    async def find_one(self, collection: str, filter: dict[str, Any]) -> dict[str, Any] | None:
        result = await self._action("findOne", collection, {"filter": filter})
        return result.get("document")

    async def _action(self, name: str, collection: str, payload: dict[str, Any]) -> dict[str, Any]:
        body = {
            "dataSource": self.data_source,
            "database": self.database,
            "collection": collection,
            **encode_ejson(payload),
        }
        url = f"{self.base_url}/action/{name}"
        try:
            response = await post_with_retries(self._client, url, body, self.max_retries, self.retry_backoff_seconds)
        except httpx.HTTPError as exc:
            raise DocumentStoreError(f"{name} on {collection} failed: {exc}", status_of(exc)) from exc

        try:
            return decode_ejson(response.json()) or {}
        except ValueError as exc:
            raise DocumentStoreError(f"{name} on {collection} returned invalid JSON", response.status_code) from exc
