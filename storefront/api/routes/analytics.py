import logging

from fastapi import APIRouter, Depends, Request

from storefront.analytics.document_store import DocumentStore
from storefront.api.deps import get_analytics_enabled, get_event_store
from storefront.core.errors import api_error
from storefront.schemas.analytics import AnalyticsIngestOut
from storefront.services.analytics import ingest_batch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/analytics", tags=["analytics"])


@router.post("/events", response_model=AnalyticsIngestOut, response_model_exclude_none=True)
async def ingest_events(
    request: Request,
    enabled: bool = Depends(get_analytics_enabled),
    store: DocumentStore | None = Depends(get_event_store),
) -> AnalyticsIngestOut:
    if not enabled:
        return AnalyticsIngestOut(message="Analytics disabled")

    try:
        batch = await request.json()
    except ValueError as exc:
        logger.info("Analytics request body is not valid JSON: %s", exc)
        raise api_error(400, "invalid_json", "Invalid JSON request body") from exc

    return await ingest_batch(store, batch)
