import copy
import logging
from datetime import timezone

from storefront.analytics.sanitize import sanitize_input
from storefront.analytics.validator import (
    MAX_BATCH_SIZE,
    sanitize_event_batch,
    sanitize_object,
    validate_event_batch,
)

NOW_MS = 1_760_000_000_000
SESSION_ID = "0b6f6c1e-4a52-4c1e-9d55-8d8c7c1f2a11"
ANONYMOUS_ID = "5f3c2b1a-9e8d-4c7b-a6f5-e4d3c2b1a098"


def _event(**overrides):
    payload = {
        "eventType": "pageview",
        "timestamp": NOW_MS - 1000,
        "page": {"url": "https://talla.shop/products/blazer", "path": "/products/blazer", "title": "Blazer", "referrer": ""},
        "eventData": {},
    }
    payload.update(overrides)
    return payload


def _batch(events=None, **overrides):
    payload = {
        "sessionId": SESSION_ID,
        "anonymousId": ANONYMOUS_ID,
        "events": events if events is not None else [_event()],
        "context": {"userAgent": "pytest", "deviceType": "desktop", "screenSize": {"width": 1440, "height": 900}},
    }
    payload.update(overrides)
    return payload


def test_valid_batch_passes():
    result = validate_event_batch(_batch(), now_ms=NOW_MS)
    assert result.valid
    assert result.errors == []


def test_non_object_batch_rejected():
    result = validate_event_batch([_event()], now_ms=NOW_MS)
    assert not result.valid
    assert result.errors == ["Invalid batch: must be an object"]


def test_identifier_errors():
    result = validate_event_batch(_batch(sessionId="abc", anonymousId=None, userId=42), now_ms=NOW_MS)
    assert "Invalid sessionId format: must be a UUID" in result.errors
    assert "Missing or invalid anonymousId" in result.errors
    assert "Invalid userId: must be a string" in result.errors


def test_events_array_bounds():
    assert "Empty events array" in validate_event_batch(_batch(events=[]), now_ms=NOW_MS).errors
    too_many = [_event() for _ in range(MAX_BATCH_SIZE + 1)]
    assert "Too many events: maximum 50 per batch" in validate_event_batch(_batch(events=too_many), now_ms=NOW_MS).errors
    assert "Missing or invalid events: must be an array" in validate_event_batch(
        _batch(events="nope"), now_ms=NOW_MS
    ).errors


def test_event_errors_are_prefixed_with_index():
    events = [
        _event(),
        _event(eventType="teleport", timestamp=NOW_MS + 120_000, page={"url": "", "path": "/x"}, eventData="bad"),
    ]
    errors = validate_event_batch(_batch(events=events), now_ms=NOW_MS).errors
    assert errors == [
        "Event 1: Unknown eventType: teleport",
        "Event 1: Timestamp is in the future",
        "Event 1: Missing or invalid page.url",
        "Event 1: Invalid page.title",
        "Event 1: Invalid page.referrer",
        "Event 1: Invalid eventData: must be an object",
    ]


def test_old_and_missing_timestamps():
    events = [_event(timestamp=NOW_MS - 25 * 3600 * 1000), _event(timestamp=None), _event(timestamp=True)]
    errors = validate_event_batch(_batch(events=events), now_ms=NOW_MS).errors
    assert errors == [
        "Event 0: Timestamp is too old (max 24 hours)",
        "Event 1: Missing or invalid timestamp",
        "Event 2: Missing or invalid timestamp",
    ]


def test_small_clock_skew_is_allowed():
    assert validate_event_batch(_batch(events=[_event(timestamp=NOW_MS + 30_000)]), now_ms=NOW_MS).valid


def test_context_errors():
    batch = _batch(context={"userAgent": "", "deviceType": "mobile", "screenSize": {"width": "wide", "height": 2}})
    errors = validate_event_batch(batch, now_ms=NOW_MS).errors
    assert "Missing or invalid context.userAgent" in errors
    assert "Invalid screen size: width and height must be numbers" in errors
    assert validate_event_batch(_batch(context=None), now_ms=NOW_MS).errors == ["Missing or invalid context"]


def test_sanitize_input_strips_markup_and_handlers():
    assert sanitize_input("<script>alert(1)</script>Hello <b>there</b>") == "Hello there"
    assert sanitize_input("  javascript:void(0) ") == "void(0)"
    assert sanitize_input('x onclick=steal()') == "x steal()"
    assert sanitize_input("3 > 2") == "3  2"


def test_sanitize_object_bounds():
    nested = {"a": {"b": {"c": {"d": {"e": {"f": {"g": 1}}}}}}}
    assert sanitize_object(nested) == {"a": {"b": {"c": {"d": {"e": {"f": {}}}}}}}

    wide = {f"k{i}": i for i in range(80)}
    assert len(sanitize_object(wide)) == 50

    long_list = list(range(150))
    assert sanitize_object(long_list) == list(range(100))

    assert sanitize_object("x" * 2000) == "x" * 1000
    assert sanitize_object({"<b>key</b>": True}) == {"key": True}
    assert sanitize_object(object()) is None


def test_sanitize_event_batch_builds_events():
    batch = _batch(
        events=[_event(eventData={"productId": "<i>p1</i>"})],
        userId="user-1",
        context={"userAgent": "pytest", "deviceType": "desktop", "screenSize": {"width": 20000, "height": -5}},
    )
    events = sanitize_event_batch(batch)
    assert len(events) == 1
    event = events[0]
    assert event.event_data == {"productId": "p1"}
    assert event.screen_size == {"width": 10000, "height": 0}
    assert event.timestamp.tzinfo == timezone.utc
    assert event.user_id == "user-1"
    document = event.to_document()
    assert document["sessionId"] == SESSION_ID
    assert document["userId"] == "user-1"


def test_unsanitizable_event_is_dropped(caplog):
    broken = copy.deepcopy(_event())
    broken["page"]["url"] = 123
    batch = _batch(events=[_event(), broken])

    with caplog.at_level(logging.ERROR, logger="storefront.analytics.validator"):
        events = sanitize_event_batch(batch)

    assert len(events) == 1
    assert "Dropping analytics event" in caplog.text
