from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_storefront
from storefront.platform import StorefrontClient
from storefront.schemas.content import PredictiveSearchOut, SearchOut
from storefront.services.catalog import predictive_search, search_products

router = APIRouter(prefix="/v1/search", tags=["search"])


@router.get("", response_model=SearchOut)
async def search(
    q: str = Query(default=""),
    first: int = Query(default=24, ge=1, le=100),
    after: str | None = Query(default=None),
    storefront: StorefrontClient = Depends(get_storefront),
) -> SearchOut:
    return await search_products(storefront, q, first=first, after=after)


@router.get("/predictive", response_model=PredictiveSearchOut)
async def predictive(
    q: str = Query(default=""),
    limit: int = Query(default=10, ge=1, le=10),
    storefront: StorefrontClient = Depends(get_storefront),
) -> PredictiveSearchOut:
    return await predictive_search(storefront, q, limit=limit)
