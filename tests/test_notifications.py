from datetime import timedelta

from sqlalchemy.orm import Session

from storefront.models import RestockNotification
from storefront.models.entities import utc_now
from storefront.schemas.notifications import RestockNotificationRequest
from storefront.services.notifications import RestockNotificationStore


def _request(email="shopper@example.com", variant_id="v-1", **overrides) -> RestockNotificationRequest:
    payload = {
        "email": email,
        "productId": "p-1",
        "variantId": variant_id,
        "productTitle": "Linen Blazer",
        "variantTitle": "M",
    }
    payload.update(overrides)
    return RestockNotificationRequest.model_validate(payload)


def test_add_is_idempotent_per_variant_and_email(session):
    store = RestockNotificationStore(session)
    first, created = store.add(_request())
    again, created_again = store.add(_request())

    assert created is True
    assert created_again is False
    assert again.id == first.id
    assert session.query(RestockNotification).count() == 1


def test_same_email_different_variant_is_separate(session):
    store = RestockNotificationStore(session)
    store.add(_request(variant_id="v-1"))
    store.add(_request(variant_id="v-2"))
    assert len(store.list_pending()) == 2
    assert [row.variant_id for row in store.pending_for_variant("v-2")] == ["v-2"]


def test_status_changes_remove_from_pending(session):
    store = RestockNotificationStore(session)
    store.add(_request(email="a@example.com"))
    store.add(_request(email="b@example.com"))

    sent = store.mark_sent("v-1", "a@example.com")
    failed = store.mark_failed("v-1", "b@example.com")

    assert sent.status == "sent"
    assert failed.status == "failed"
    assert store.pending_for_variant("v-1") == []
    assert store.mark_sent("v-1", "missing@example.com") is None


def test_cleanup_removes_only_old_sent_rows(session):
    store = RestockNotificationStore(session)
    old_sent, _ = store.add(_request(email="old@example.com"))
    old_failed, _ = store.add(_request(email="failed@example.com"))
    store.add(_request(email="fresh@example.com"))
    store.mark_sent("v-1", "old@example.com")
    store.mark_failed("v-1", "failed@example.com")
    store.mark_sent("v-1", "fresh@example.com")

    long_ago = utc_now() - timedelta(days=8)
    old_sent.created_at = long_ago
    old_failed.created_at = long_ago
    session.commit()

    assert store.cleanup() == 1
    remaining = {row.email for row in session.query(RestockNotification).all()}
    assert remaining == {"failed@example.com", "fresh@example.com"}


def test_stats_counts_by_status(session):
    store = RestockNotificationStore(session)
    store.add(_request(email="a@example.com", variant_id="v-1"))
    store.add(_request(email="b@example.com", variant_id="v-1"))
    store.add(_request(email="c@example.com", variant_id="v-2"))
    store.mark_sent("v-1", "a@example.com")

    stats = store.stats()
    assert stats.pending == 2
    assert stats.sent == 1
    assert stats.failed == 0
    assert stats.total_variants == 2


def test_concurrent_signup_returns_existing_row(session, monkeypatch):
    other = Session(bind=session.get_bind())
    other.add(
        RestockNotification(
            email="shopper@example.com",
            product_id="p-1",
            variant_id="v-1",
            product_title="Linen Blazer",
            status="pending",
        )
    )
    other.commit()
    winner_id = other.query(RestockNotification).one().id
    other.close()

    store = RestockNotificationStore(session)
    real_find = store.find
    lookups = []

    def find_after_race(variant_id, email):
        lookups.append((variant_id, email))
        # The first lookup runs before the other sign-up became visible.
        return None if len(lookups) == 1 else real_find(variant_id, email)

    monkeypatch.setattr(store, "find", find_after_race)
    notification, created = store.add(_request())

    assert created is False
    assert notification.id == winner_id
    assert len(lookups) == 2
    assert session.query(RestockNotification).count() == 1
