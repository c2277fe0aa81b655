import logging
from typing import Any

from storefront.analytics.document_store import DocumentStore, DocumentStoreError
from storefront.analytics.processor import process_events
from storefront.analytics.validator import sanitize_event_batch, validate_event_batch
from storefront.core.errors import api_error
from storefront.schemas.analytics import AnalyticsIngestOut

logger = logging.getLogger(__name__)


async def ingest_batch(store: DocumentStore | None, batch: Any) -> AnalyticsIngestOut:
    validation = validate_event_batch(batch)
    if not validation.valid:
        logger.info("Rejected analytics batch: %s", validation.errors)
        raise api_error(400, "invalid_batch", "Invalid event batch", errors=validation.errors)

    events = sanitize_event_batch(batch)
    if not events:
        raise api_error(400, "empty_batch", "No valid events in batch")

    if store is None:
        raise api_error(503, "analytics_unavailable", "Analytics storage is not configured")

    try:
        await process_events(store, events)
    except DocumentStoreError as exc:
        logger.error("Failed to process %s analytics events: %s", len(events), exc)
        raise api_error(500, "processing_failed", "Failed to process events") from exc

    return AnalyticsIngestOut(message="Events processed successfully", count=len(events))
