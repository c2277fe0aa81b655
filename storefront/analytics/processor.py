"""Fan validated analytics events out to their collections.

The raw ``events`` insert and the session upsert must succeed; the derived
collections (users, page views, product interactions, heatmap points) are
best effort and only logged on failure.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from storefront.analytics.document_store import DocumentStore, DocumentStoreError
from storefront.analytics.validator import ValidatedEvent

EVENTS_COLLECTION = "events"
SESSIONS_COLLECTION = "sessions"
USERS_COLLECTION = "users"
PAGE_VIEWS_COLLECTION = "page_views"
PRODUCT_INTERACTIONS_COLLECTION = "product_interactions"
HEATMAP_COLLECTION = "heatmap_data"

PRODUCT_EVENT_TYPES = {"product_view", "add_to_cart", "remove_from_cart"}

logger = logging.getLogger(__name__)


async def process_events(store: DocumentStore, events: list[ValidatedEvent]) -> None:
    if not events:
        return

    await store.insert_many(EVENTS_COLLECTION, [event.to_document() for event in events])
    await update_session(store, events)

    page_views = [event for event in events if event.event_type == "pageview"]
    if page_views:
        await _insert_best_effort(store, PAGE_VIEWS_COLLECTION, [_page_view_document(e) for e in page_views])

    product_events = [event for event in events if event.event_type in PRODUCT_EVENT_TYPES]
    if product_events:
        await _insert_best_effort(
            store,
            PRODUCT_INTERACTIONS_COLLECTION,
            [_product_interaction_document(e) for e in product_events],
        )

    mouse_events = [event for event in events if event.event_type == "mouse_move"]
    if mouse_events:
        await _insert_best_effort(store, HEATMAP_COLLECTION, [_heatmap_document(e) for e in mouse_events])


def _scroll_depth(event: ValidatedEvent) -> float:
    depth = event.event_data.get("scrollDepth")
    if isinstance(depth, (int, float)) and not isinstance(depth, bool):
        return depth
    return 0


async def update_session(store: DocumentStore, events: list[ValidatedEvent]) -> None:
    first, last = events[0], events[-1]
    page_view_count = sum(1 for event in events if event.event_type == "pageview")
    max_scroll_depth = max((_scroll_depth(e) for e in events if e.event_type == "page_exit"), default=0)
    added_to_cart = any(event.event_type == "add_to_cart" for event in events)
    started_checkout = any(event.event_type == "begin_checkout" for event in events)

    session_filter = {"sessionId": first.session_id}
    fields: dict[str, Any] = {"anonymousId": first.anonymous_id, "endTime": last.timestamp}
    if first.user_id:
        fields["userId"] = first.user_id

    await store.update_one(
        SESSIONS_COLLECTION,
        session_filter,
        {
            "$set": fields,
            "$setOnInsert": {"startTime": first.timestamp, "addedToCart": False, "startedCheckout": False},
            "$inc": {"pageViews": page_view_count},
            "$max": {"scrollDepthMax": max_scroll_depth},
        },
        upsert=True,
    )

    flags = {}
    if added_to_cart:
        flags["addedToCart"] = True
    if started_checkout:
        flags["startedCheckout"] = True
    if flags:
        await store.update_one(SESSIONS_COLLECTION, session_filter, {"$set": flags})

    session = await store.find_one(SESSIONS_COLLECTION, session_filter)
    if session:
        start, end = session.get("startTime"), session.get("endTime")
        if isinstance(start, datetime) and isinstance(end, datetime):
            duration_ms = int((end - start).total_seconds() * 1000)
            await store.update_one(SESSIONS_COLLECTION, session_filter, {"$set": {"duration": duration_ms}})

    if first.user_id:
        await update_user_profile(store, first.user_id, first.anonymous_id, first.timestamp)


async def update_user_profile(store: DocumentStore, user_id: str, anonymous_id: str, timestamp: datetime) -> None:
    try:
        await store.update_one(
            USERS_COLLECTION,
            {"userId": user_id},
            {
                "$set": {"lastSeen": timestamp},
                "$setOnInsert": {"firstSeen": timestamp},
                "$addToSet": {"anonymousIds": anonymous_id},
                "$inc": {"totalSessions": 1},
            },
            upsert=True,
        )
    except DocumentStoreError as exc:
        logger.warning("Failed to update user profile %s: %s", user_id, exc)


async def _insert_best_effort(store: DocumentStore, collection: str, documents: list[dict[str, Any]]) -> None:
    try:
        await store.insert_many(collection, documents)
    except DocumentStoreError as exc:
        logger.warning("Failed to insert %s documents into %s: %s", len(documents), collection, exc)


def _page_view_document(event: ValidatedEvent) -> dict[str, Any]:
    return {
        "sessionId": event.session_id,
        "anonymousId": event.anonymous_id,
        "userId": event.user_id,
        "page": event.page,
        "timestamp": event.timestamp,
        "userAgent": event.user_agent,
        "deviceType": event.device_type,
        "screenSize": event.screen_size,
        "referrer": event.page.get("referrer", ""),
    }


def _product_interaction_document(event: ValidatedEvent) -> dict[str, Any]:
    data = event.event_data
    return {
        "sessionId": event.session_id,
        "anonymousId": event.anonymous_id,
        "userId": event.user_id,
        "eventType": event.event_type,
        "productId": data.get("productId"),
        "variantId": data.get("variantId"),
        "productTitle": data.get("productTitle"),
        "price": data.get("price"),
        "quantity": data.get("quantity"),
        "timestamp": event.timestamp,
        "page": event.page,
    }


def _heatmap_document(event: ValidatedEvent) -> dict[str, Any]:
    return {
        "sessionId": event.session_id,
        "page": event.page,
        "x": event.event_data.get("x"),
        "y": event.event_data.get("y"),
        "timestamp": event.timestamp,
        "deviceType": event.device_type,
        "screenSize": event.screen_size,
    }
