import json
from datetime import datetime, timezone

import httpx
import pytest

from storefront.analytics.document_store import DocumentStore, DocumentStoreError, decode_ejson, encode_ejson
from storefront.core.config import Settings


def _settings(**overrides) -> Settings:
    values = {
        "analytics_data_api_url": "https://data.example.test/app/v1/",
        "analytics_data_api_key": "secret",
        "analytics_retry_backoff_seconds": 0,
        "analytics_max_retries": 2,
    }
    values.update(overrides)
    return Settings(**values)


def test_ejson_dates_round_trip():
    stamp = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)
    encoded = encode_ejson({"when": stamp, "items": [stamp]})
    assert encoded == {"when": {"$date": "2026-10-18T09:30:00.000Z"}, "items": [{"$date": "2026-10-18T09:30:00.000Z"}]}
    assert decode_ejson(encoded) == {"when": stamp, "items": [stamp]}
    assert decode_ejson({"$date": {"$numberLong": "0"}}) == datetime(1970, 1, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_insert_many_posts_action_body():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"insertedIds": ["a", "b"]})

    store = DocumentStore(_settings(), transport=httpx.MockTransport(handler))
    inserted = await store.insert_many("events", [{"n": 1}, {"n": 2}])
    await store.aclose()

    assert inserted == 2
    request = seen[0]
    assert str(request.url) == "https://data.example.test/app/v1/action/insertMany"
    assert request.headers["api-key"] == "secret"
    body = json.loads(request.content)
    assert body["collection"] == "events"
    assert body["database"] == "analytics"
    assert body["dataSource"] == "Cluster0"
    assert body["documents"] == [{"n": 1}, {"n": 2}]


@pytest.mark.asyncio
async def test_find_one_decodes_dates():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"document": {"startTime": {"$date": "2026-10-18T09:30:00Z"}}})

    store = DocumentStore(_settings(), transport=httpx.MockTransport(handler))
    document = await store.find_one("sessions", {"sessionId": "s"})
    await store.aclose()
    assert document == {"startTime": datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)}


@pytest.mark.asyncio
async def test_retries_then_succeeds():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] < 3:
            return httpx.Response(503)
        return httpx.Response(200, json={"matchedCount": 1})

    store = DocumentStore(_settings(), transport=httpx.MockTransport(handler))
    result = await store.update_one("sessions", {"sessionId": "s"}, {"$set": {"x": 1}}, upsert=True)
    await store.aclose()
    assert result == {"matchedCount": 1}
    assert calls["count"] == 3


@pytest.mark.asyncio
async def test_non_retryable_status_raises_immediately():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(401, json={"error": "bad key"})

    store = DocumentStore(_settings(), transport=httpx.MockTransport(handler))
    with pytest.raises(DocumentStoreError) as exc_info:
        await store.insert_one("events", {"n": 1})
    await store.aclose()
    assert exc_info.value.status_code == 401
    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_network_errors_exhaust_retries():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        raise httpx.ConnectError("refused", request=request)

    store = DocumentStore(_settings(analytics_max_retries=1), transport=httpx.MockTransport(handler))
    with pytest.raises(DocumentStoreError):
        await store.find_one("sessions", {})
    await store.aclose()
    assert calls["count"] == 2
