from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from storefront.analytics.document_store import DocumentStore
from storefront.core.config import get_settings
from storefront.core.errors import api_error
from storefront.db.session import get_db
from storefront.matching.config import SimilarProductsConfig
from storefront.platform import StorefrontClient
from storefront.services.notifications import RestockNotificationStore


def require_admin_token(x_admin_token: str | None = Header(default=None)) -> None:
    settings = get_settings()
    if x_admin_token != settings.admin_token:
        raise api_error(401, "unauthorized", "Invalid admin token")


def get_storefront(request: Request) -> StorefrontClient:
    return request.app.state.storefront


def get_similar_products_config(request: Request) -> SimilarProductsConfig:
    return request.app.state.similar_products_config


def get_event_store(request: Request) -> DocumentStore | None:
    return request.app.state.event_store


def get_analytics_enabled(request: Request) -> bool:
    return request.app.state.analytics_enabled


def get_notification_store(db: Session = Depends(get_db)) -> RestockNotificationStore:
    return RestockNotificationStore(db)
