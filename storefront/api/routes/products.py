from fastapi import APIRouter, Depends

from storefront.api.deps import get_similar_products_config, get_storefront
from storefront.matching.config import SimilarProductsConfig
from storefront.platform import StorefrontClient
from storefront.schemas.products import ProductDetailOut, SimilarProductsOut, SimilarProductsRequest
from storefront.services.catalog import find_similar_products, get_product_detail

router = APIRouter(prefix="/v1/products", tags=["products"])


@router.post("/similar", response_model=SimilarProductsOut)
async def similar_products(
    payload: SimilarProductsRequest,
    storefront: StorefrontClient = Depends(get_storefront),
    config: SimilarProductsConfig = Depends(get_similar_products_config),
) -> SimilarProductsOut:
    return await find_similar_products(storefront, payload, config)


# Visual search is not implemented yet; it answers with tag-based matches.
@router.post("/search-by-image", response_model=SimilarProductsOut)
async def search_by_image(
    payload: SimilarProductsRequest,
    storefront: StorefrontClient = Depends(get_storefront),
    config: SimilarProductsConfig = Depends(get_similar_products_config),
) -> SimilarProductsOut:
    return await find_similar_products(storefront, payload, config)


@router.get("/{handle}", response_model=ProductDetailOut)
async def product_detail(
    handle: str,
    storefront: StorefrontClient = Depends(get_storefront),
    config: SimilarProductsConfig = Depends(get_similar_products_config),
) -> ProductDetailOut:
    return await get_product_detail(storefront, handle, config)
