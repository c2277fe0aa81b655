from typing import Literal

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_storefront
from storefront.platform import StorefrontClient
from storefront.schemas.content import CollectionOut, CollectionSummaryOut
from storefront.services.catalog import get_collection, list_collections

SortKey = Literal["COLLECTION_DEFAULT", "BEST_SELLING", "CREATED", "PRICE", "TITLE", "MANUAL", "RELEVANCE"]

router = APIRouter(prefix="/v1/collections", tags=["collections"])


@router.get("", response_model=list[CollectionSummaryOut])
async def collections(
    first: int = Query(default=50, ge=1, le=250),
    storefront: StorefrontClient = Depends(get_storefront),
) -> list[CollectionSummaryOut]:
    return await list_collections(storefront, first=first)


@router.get("/{handle}", response_model=CollectionOut)
async def collection(
    handle: str,
    first: int = Query(default=24, ge=1, le=250),
    after: str | None = Query(default=None),
    sort_key: SortKey | None = Query(default=None),
    reverse: bool = Query(default=False),
    storefront: StorefrontClient = Depends(get_storefront),
) -> CollectionOut:
    return await get_collection(storefront, handle, first=first, after=after, sort_key=sort_key, reverse=reverse)
