from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_notification_store, require_admin_token
from storefront.core.errors import not_found
from storefront.schemas.notifications import (
    RestockCleanupOut,
    RestockNotificationOut,
    RestockNotificationRequest,
    RestockSignupOut,
    RestockStatsOut,
    RestockStatusUpdate,
)
from storefront.services.notifications import STATUS_SENT, RestockNotificationStore

router = APIRouter(prefix="/v1/restock-notifications", tags=["restock"])
admin_router = APIRouter(
    prefix="/v1/admin/restock-notifications",
    tags=["admin"],
    dependencies=[Depends(require_admin_token)],
)


@router.post("", response_model=RestockSignupOut)
def sign_up(
    payload: RestockNotificationRequest,
    store: RestockNotificationStore = Depends(get_notification_store),
) -> RestockSignupOut:
    notification, created = store.add(payload)
    message = "You will be notified when this item is back in stock" if created else "You are already on the list"
    return RestockSignupOut(message=message, notification=RestockNotificationOut.model_validate(notification))


@admin_router.get("", response_model=list[RestockNotificationOut])
def pending_notifications(
    variant_id: str | None = Query(default=None, alias="variantId"),
    limit: int = Query(default=500, ge=1, le=5000),
    store: RestockNotificationStore = Depends(get_notification_store),
) -> list[RestockNotificationOut]:
    rows = store.pending_for_variant(variant_id) if variant_id else store.list_pending(limit=limit)
    return [RestockNotificationOut.model_validate(row) for row in rows]


@admin_router.get("/stats", response_model=RestockStatsOut)
def notification_stats(store: RestockNotificationStore = Depends(get_notification_store)) -> RestockStatsOut:
    return store.stats()


@admin_router.post("/cleanup", response_model=RestockCleanupOut)
def cleanup_notifications(store: RestockNotificationStore = Depends(get_notification_store)) -> RestockCleanupOut:
    return RestockCleanupOut(removed=store.cleanup())


@admin_router.post("/{notification_id}/status", response_model=RestockNotificationOut)
def update_status(
    notification_id: str,
    payload: RestockStatusUpdate,
    store: RestockNotificationStore = Depends(get_notification_store),
) -> RestockNotificationOut:
    notification = store.get(notification_id)
    if notification is None:
        raise not_found("Restock notification not found", notification_id=notification_id)
    if payload.status == STATUS_SENT:
        updated = store.mark_sent(notification.variant_id, notification.email)
    else:
        updated = store.mark_failed(notification.variant_id, notification.email)
    return RestockNotificationOut.model_validate(updated)
