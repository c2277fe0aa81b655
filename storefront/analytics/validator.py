"""Structural validation and sanitization for inbound analytics batches.

Batch shape::

    {
        "sessionId": "<uuid>",
        "anonymousId": "<uuid>",
        "userId": "optional",
        "events": [{"eventType", "timestamp" (ms), "page": {...}, "eventData": {...}}],
        "context": {"userAgent", "deviceType", "screenSize": {"width", "height"}},
    }

Validation collects every problem it finds. Sanitization runs only on valid
batches and never raises; an event that cannot be sanitized is dropped.
"""

from __future__ import annotations

import logging
import math
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from storefront.analytics.sanitize import sanitize_input

UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
MAX_BATCH_SIZE = 50
MAX_EVENT_AGE_MS = 24 * 60 * 60 * 1000
MAX_CLOCK_SKEW_MS = 60 * 1000
MAX_STRING_LENGTH = 1000
MAX_KEY_LENGTH = 100
MAX_OBJECT_DEPTH = 5
MAX_OBJECT_KEYS = 50
MAX_LIST_ITEMS = 100
MAX_SCREEN_DIMENSION = 10000

ALLOWED_EVENT_TYPES = frozenset(
    {
        "pageview",
        "page_exit",
        "click",
        "scroll",
        "form_submit",
        "form_field_focus",
        "form_field_blur",
        "form_error",
        "add_to_cart",
        "remove_from_cart",
        "update_cart",
        "begin_checkout",
        "complete_checkout",
        "product_view",
        "product_image_view",
        "size_recommendation",
        "search",
        "search_by_image",
        "filter_applied",
        "sort_applied",
        "error",
        "performance",
        "mouse_move",
        "mouse_click",
    }
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class ValidatedEvent:
    session_id: str
    anonymous_id: str
    user_id: str | None
    event_type: str
    event_data: dict[str, Any]
    page: dict[str, str]
    timestamp: datetime
    user_agent: str
    device_type: str
    screen_size: dict[str, float]

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "sessionId": self.session_id,
            "anonymousId": self.anonymous_id,
            "eventType": self.event_type,
            "eventData": self.event_data,
            "page": self.page,
            "timestamp": self.timestamp,
            "userAgent": self.user_agent,
            "deviceType": self.device_type,
            "screenSize": self.screen_size,
        }
        if self.user_id:
            document["userId"] = self.user_id
        return document


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_nonempty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _now_ms() -> int:
    return int(time.time() * 1000)


def validate_event_batch(batch: Any, now_ms: int | None = None) -> ValidationResult:
    if not isinstance(batch, dict):
        return ValidationResult(valid=False, errors=["Invalid batch: must be an object"])

    errors: list[str] = []
    for key in ("sessionId", "anonymousId"):
        value = batch.get(key)
        if not _is_nonempty_str(value):
            errors.append(f"Missing or invalid {key}")
        elif not UUID_PATTERN.match(value):
            errors.append(f"Invalid {key} format: must be a UUID")

    user_id = batch.get("userId")
    if user_id and not isinstance(user_id, str):
        errors.append("Invalid userId: must be a string")

    events = batch.get("events")
    if not isinstance(events, list):
        errors.append("Missing or invalid events: must be an array")
    elif not events:
        errors.append("Empty events array")
    elif len(events) > MAX_BATCH_SIZE:
        errors.append(f"Too many events: maximum {MAX_BATCH_SIZE} per batch")

    errors.extend(_validate_context(batch.get("context")))

    if isinstance(events, list):
        now = _now_ms() if now_ms is None else now_ms
        for index, event in enumerate(events):
            errors.extend(validate_event(event, index, now))

    return ValidationResult(valid=not errors, errors=errors)


def _validate_context(context: Any) -> list[str]:
    if not isinstance(context, dict):
        return ["Missing or invalid context"]

    errors: list[str] = []
    if not _is_nonempty_str(context.get("userAgent")):
        errors.append("Missing or invalid context.userAgent")

    screen_size = context.get("screenSize")
    if not isinstance(screen_size, dict):
        errors.append("Missing or invalid context.screenSize")
    elif not (_is_number(screen_size.get("width")) and _is_number(screen_size.get("height"))):
        errors.append("Invalid screen size: width and height must be numbers")

    if not _is_nonempty_str(context.get("deviceType")):
        errors.append("Missing or invalid context.deviceType")
    return errors


def validate_event(event: Any, index: int, now_ms: int) -> list[str]:
    prefix = f"Event {index}:"
    if not isinstance(event, dict):
        return [f"{prefix} Invalid event: must be an object"]

    errors: list[str] = []
    event_type = event.get("eventType")
    if not _is_nonempty_str(event_type):
        errors.append(f"{prefix} Missing or invalid eventType")
    elif event_type not in ALLOWED_EVENT_TYPES:
        errors.append(f"{prefix} Unknown eventType: {event_type}")

    timestamp = event.get("timestamp")
    if not _is_number(timestamp) or not timestamp:
        errors.append(f"{prefix} Missing or invalid timestamp")
    else:
        if timestamp > now_ms + MAX_CLOCK_SKEW_MS:
            errors.append(f"{prefix} Timestamp is in the future")
        if now_ms - timestamp > MAX_EVENT_AGE_MS:
            errors.append(f"{prefix} Timestamp is too old (max 24 hours)")

    page = event.get("page")
    if not isinstance(page, dict):
        errors.append(f"{prefix} Missing or invalid page object")
    else:
        if not _is_nonempty_str(page.get("url")):
            errors.append(f"{prefix} Missing or invalid page.url")
        if not _is_nonempty_str(page.get("path")):
            errors.append(f"{prefix} Missing or invalid page.path")
        if not isinstance(page.get("title"), str):
            errors.append(f"{prefix} Invalid page.title")
        if not isinstance(page.get("referrer"), str):
            errors.append(f"{prefix} Invalid page.referrer")

    event_data = event.get("eventData")
    if event_data and not isinstance(event_data, dict):
        errors.append(f"{prefix} Invalid eventData: must be an object")

    return errors


def _clip(value: str) -> str:
    return sanitize_input(value)[:MAX_STRING_LENGTH]


def _clamp_dimension(value: float) -> float:
    return min(max(value, 0), MAX_SCREEN_DIMENSION)


def sanitize_object(value: Any, depth: int = 0) -> Any:
    if depth > MAX_OBJECT_DEPTH:
        return {}
    if value is None:
        return None
    if isinstance(value, str):
        return _clip(value)
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, list):
        return [sanitize_object(item, depth + 1) for item in value[:MAX_LIST_ITEMS]]
    if isinstance(value, dict):
        sanitized: dict[str, Any] = {}
        for key in list(value)[:MAX_OBJECT_KEYS]:
            sanitized[sanitize_input(str(key))[:MAX_KEY_LENGTH]] = sanitize_object(value[key], depth + 1)
        return sanitized
    return None


def sanitize_event_batch(batch: dict[str, Any]) -> list[ValidatedEvent]:
    context = batch.get("context") or {}
    sanitized: list[ValidatedEvent] = []
    for event in batch.get("events") or []:
        try:
            page = event["page"]
            screen_size = context["screenSize"]
            user_id = batch.get("userId")
            sanitized.append(
                ValidatedEvent(
                    session_id=sanitize_input(batch["sessionId"]),
                    anonymous_id=sanitize_input(batch["anonymousId"]),
                    user_id=sanitize_input(user_id) if user_id else None,
                    event_type=sanitize_input(event["eventType"]),
                    event_data=sanitize_object(event.get("eventData") or {}),
                    page={
                        "url": _clip(page["url"]),
                        "path": _clip(page["path"]),
                        "title": _clip(page.get("title") or ""),
                        "referrer": _clip(page.get("referrer") or ""),
                    },
                    timestamp=datetime.fromtimestamp(event["timestamp"] / 1000, tz=timezone.utc),
                    user_agent=_clip(context["userAgent"]),
                    device_type=sanitize_input(context["deviceType"]),
                    screen_size={
                        "width": _clamp_dimension(screen_size["width"]),
                        "height": _clamp_dimension(screen_size["height"]),
                    },
                )
            )
        except Exception:
            event_type = event.get("eventType") if isinstance(event, dict) else None
            logger.exception("Dropping analytics event %s that could not be sanitized", event_type)
    return sanitized
