import os

os.environ["STOREFRONT_CACHE_ENABLED"] = "false"
os.environ["STOREFRONT_DATABASE_URL"] = "sqlite://"
os.environ["STOREFRONT_ANALYTICS_ENABLED"] = "false"
os.environ["STOREFRONT_ANALYTICS_DATA_API_URL"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api import deps
from storefront.db.base import Base
from storefront.db.session import get_db
from storefront.main import app
from storefront.matching.config import SimilarProductsConfig
from storefront.platform import StorefrontError
from storefront.schemas.cart import CartOut
from storefront.schemas.content import CollectionOut, PolicyOut, PredictiveSearchOut, SearchOut
from storefront.schemas.products import ProductDetailOut, ProductSummary


def make_product(handle: str, tags=None, vendor=None, product_type=None, **extra) -> ProductSummary:
    return ProductSummary(
        id=f"gid://shopify/Product/{handle}",
        handle=handle,
        title=handle.replace("-", " ").title(),
        tags=tags or [],
        vendor=vendor,
        product_type=product_type,
        **extra,
    )


class FakeStorefront:
    """In-memory stand-in for StorefrontClient keyed by query string."""

    def __init__(self) -> None:
        self.pools: dict[str, list[ProductSummary]] = {}
        self.failing_queries: set[str] = set()
        self.products: dict[str, ProductDetailOut] = {}
        self.collections: dict[str, CollectionOut] = {}
        self.policies: list[PolicyOut] = []
        self.carts: dict[str, CartOut] = {}
        self.queries: list[tuple[str, int]] = []

    async def query_products(self, query: str, first: int) -> list[ProductSummary]:
        self.queries.append((query, first))
        if query in self.failing_queries:
            raise StorefrontError(f"query failed: {query}", 503)
        return list(self.pools.get(query, []))[:first]

    async def get_product(self, handle: str) -> ProductDetailOut | None:
        return self.products.get(handle)

    async def list_collections(self, first: int = 50):
        return [CollectionOut.model_validate(item.model_dump()) for item in self.collections.values()][:first]

    async def get_collection(self, handle, first=24, after=None, sort_key=None, reverse=False):
        return self.collections.get(handle)

    async def search_products(self, term, first=24, after=None):
        matches = [p for pool in self.pools.values() for p in pool if term.lower() in p.title.lower()]
        return SearchOut(term=term, products=matches[:first], total_count=len(matches))

    async def predictive_search(self, term, limit=10):
        return PredictiveSearchOut(term=term)

    async def list_policies(self):
        return list(self.policies)

    async def get_cart(self, cart_id):
        return self.carts.get(cart_id)

    async def aclose(self) -> None:
        return None


@pytest.fixture()
def session() -> Session:
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def storefront() -> FakeStorefront:
    return FakeStorefront()


@pytest.fixture()
def similar_config() -> SimilarProductsConfig:
    return SimilarProductsConfig()


@pytest.fixture()
def client(session: Session, storefront: FakeStorefront, similar_config: SimilarProductsConfig) -> TestClient:
    def _get_db() -> Session:
        return session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[deps.get_storefront] = lambda: storefront
    app.dependency_overrides[deps.get_similar_products_config] = lambda: similar_config
    app.dependency_overrides[deps.get_analytics_enabled] = lambda: False
    app.dependency_overrides[deps.get_event_store] = lambda: None
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
