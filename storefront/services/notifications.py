from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.models import RestockNotification
from storefront.models.entities import utc_now
from storefront.schemas.notifications import RestockNotificationRequest, RestockStatsOut

STATUS_PENDING = "pending"
STATUS_SENT = "sent"
STATUS_FAILED = "failed"
SENT_RETENTION = timedelta(days=7)

logger = logging.getLogger(__name__)


class RestockNotificationStore:
    """Back-in-stock sign-ups, one row per (variant, email)."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, notification_id: str) -> RestockNotification | None:
        return self.db.get(RestockNotification, notification_id)

    def find(self, variant_id: str, email: str) -> RestockNotification | None:
        return self.db.execute(
            select(RestockNotification).where(
                RestockNotification.variant_id == variant_id,
                RestockNotification.email == email,
            )
        ).scalar_one_or_none()

    def add(self, payload: RestockNotificationRequest) -> tuple[RestockNotification, bool]:
        """Returns the stored row and whether it was created by this call."""
        existing = self.find(payload.variant_id, payload.email)
        if existing:
            logger.info("Restock notification already exists for variant %s", payload.variant_id)
            return existing, False

        notification = RestockNotification(
            email=payload.email,
            product_id=payload.product_id,
            variant_id=payload.variant_id,
            product_title=payload.product_title,
            variant_title=payload.variant_title,
            status=STATUS_PENDING,
        )
        self.db.add(notification)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent sign-up for the same variant and email won the insert.
            self.db.rollback()
            existing = self.find(payload.variant_id, payload.email)
            if existing is None:
                raise
            logger.info("Restock notification for variant %s was added concurrently", payload.variant_id)
            return existing, False
        self.db.refresh(notification)
        logger.info("Restock notification added for variant %s", payload.variant_id)
        return notification, True

    def pending_for_variant(self, variant_id: str) -> list[RestockNotification]:
        return list(
            self.db.execute(
                select(RestockNotification)
                .where(RestockNotification.variant_id == variant_id, RestockNotification.status == STATUS_PENDING)
                .order_by(RestockNotification.created_at)
            ).scalars()
        )

    def list_pending(self, limit: int = 500) -> list[RestockNotification]:
        return list(
            self.db.execute(
                select(RestockNotification)
                .where(RestockNotification.status == STATUS_PENDING)
                .order_by(RestockNotification.created_at)
                .limit(limit)
            ).scalars()
        )

    def mark_sent(self, variant_id: str, email: str) -> RestockNotification | None:
        return self._set_status(variant_id, email, STATUS_SENT)

    def mark_failed(self, variant_id: str, email: str) -> RestockNotification | None:
        return self._set_status(variant_id, email, STATUS_FAILED)

    def cleanup(self, now: datetime | None = None) -> int:
        cutoff = (now or utc_now()) - SENT_RETENTION
        result = self.db.execute(
            delete(RestockNotification).where(
                RestockNotification.status == STATUS_SENT,
                RestockNotification.created_at < cutoff,
            )
        )
        self.db.commit()
        removed = result.rowcount or 0
        logger.info("Removed %s sent restock notifications older than %s", removed, cutoff.isoformat())
        return removed

    def stats(self) -> RestockStatsOut:
        counts = dict(
            self.db.execute(
                select(RestockNotification.status, func.count()).group_by(RestockNotification.status)
            ).all()
        )
        total_variants = self.db.execute(select(func.count(func.distinct(RestockNotification.variant_id)))).scalar_one()
        return RestockStatsOut(
            pending=counts.get(STATUS_PENDING, 0),
            sent=counts.get(STATUS_SENT, 0),
            failed=counts.get(STATUS_FAILED, 0),
            total_variants=total_variants,
        )

    def _set_status(self, variant_id: str, email: str, status: str) -> RestockNotification | None:
        notification = self.find(variant_id, email)
        if notification is None:
            return None
        notification.status = status
        notification.updated_at = utc_now()
        self.db.commit()
        self.db.refresh(notification)
        return notification
