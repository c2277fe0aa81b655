import hashlib
import logging
from dataclasses import replace

from storefront.core.cache import cache_client
from storefront.core.errors import api_error, not_found
from storefront.matching.config import SimilarProductsConfig
from storefront.matching.fabric import classify_material, get_fabric_details
from storefront.matching.similar import ReferenceProduct, SimilarProductsMatcher, SimilarProductsResult
from storefront.platform import StorefrontClient
from storefront.schemas.content import CollectionOut, CollectionSummaryOut, PolicyOut, PredictiveSearchOut, SearchOut
from storefront.schemas.products import (
    FabricOut,
    ProductDetailOut,
    SimilarProductsMeta,
    SimilarProductsOut,
    SimilarProductsRequest,
)

PRODUCT_TTL_SECONDS = 300
LISTING_TTL_SECONDS = 600
POLICY_TTL_SECONDS = 3600

logger = logging.getLogger(__name__)


def _digest(*parts: object) -> str:
    raw = ":".join("" if part is None else str(part) for part in parts)
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def describe_fabric(material: str | None) -> FabricOut | None:
    fabric_type = classify_material(material)
    if fabric_type is None:
        return None
    details = get_fabric_details(material)
    return FabricOut(
        fabric_type=fabric_type.value,
        description=details.description if details else None,
        stretch_percentage=details.stretch_percentage if details else None,
    )


async def match_similar(
    storefront: StorefrontClient,
    reference: ReferenceProduct,
    config: SimilarProductsConfig,
) -> SimilarProductsResult:
    matcher = SimilarProductsMatcher(storefront.query_products, config)
    return await matcher.find(reference)


async def get_product_detail(
    storefront: StorefrontClient,
    handle: str,
    config: SimilarProductsConfig,
) -> ProductDetailOut:
    key = cache_client.key(
        "product",
        _digest(handle, config.overlap, config.fallback_enabled, config.allow_one_tag_fallback),
    )
    cached = cache_client.get_json(key)
    if cached.hit:
        return ProductDetailOut.model_validate(cached.value)

    product = await storefront.get_product(handle)
    if product is None:
        raise not_found("Product not found", handle=handle)

    reference = ReferenceProduct(
        handle=product.handle,
        tags=tuple(product.tags),
        vendor=product.vendor,
        product_type=product.product_type,
    )
    result = await match_similar(storefront, reference, config)
    if result.failed_tiers:
        logger.warning("Similar products for %s degraded; failed tiers: %s", handle, result.failed_tiers)

    payload = product.model_copy(
        update={
            "fabric": describe_fabric(product.material),
            "similar_products": result.products,
        }
    )
    # Degraded similar-product lists are served but not cached.
    if not result.failed_tiers:
        cache_client.set_json(key, payload.model_dump(mode="json"), ttl_seconds=PRODUCT_TTL_SECONDS)
    return payload


def resolve_similar_config(request: SimilarProductsRequest, config: SimilarProductsConfig) -> SimilarProductsConfig:
    overrides = {}
    if request.allow_one_tag_fallback is not None:
        overrides["allow_one_tag_fallback"] = request.allow_one_tag_fallback
    if request.fallback_enabled is not None:
        overrides["fallback_enabled"] = request.fallback_enabled
    if request.overlap is not None:
        overrides["overlap"] = request.overlap
    return replace(config, **overrides) if overrides else config


async def find_similar_products(
    storefront: StorefrontClient,
    request: SimilarProductsRequest,
    config: SimilarProductsConfig,
) -> SimilarProductsOut:
    reference = ReferenceProduct(
        handle=request.current_handle,
        tags=tuple(request.tags),
        vendor=request.vendor or None,
        product_type=request.product_type or None,
    )
    result = await match_similar(storefront, reference, resolve_similar_config(request, config))
    if result.upstream_unavailable:
        raise api_error(502, "upstream_error", "Failed to fetch similar products", failed_tiers=result.failed_tiers)
    return SimilarProductsOut(
        products=result.products,
        meta=SimilarProductsMeta(used_fallback=result.used_fallback, tier=result.tier),
    )


async def list_collections(storefront: StorefrontClient, first: int = 50) -> list[CollectionSummaryOut]:
    key = cache_client.key("collections", _digest(first))
    cached = cache_client.get_json(key)
    if cached.hit:
        return [CollectionSummaryOut.model_validate(item) for item in cached.value]

    collections = await storefront.list_collections(first=first)
    cache_client.set_json(key, [item.model_dump(mode="json") for item in collections], ttl_seconds=LISTING_TTL_SECONDS)
    return collections


async def get_collection(
    storefront: StorefrontClient,
    handle: str,
    first: int = 24,
    after: str | None = None,
    sort_key: str | None = None,
    reverse: bool = False,
) -> CollectionOut:
    key = cache_client.key("collection", _digest(handle, first, after, sort_key, reverse))
    cached = cache_client.get_json(key)
    if cached.hit:
        return CollectionOut.model_validate(cached.value)

    collection = await storefront.get_collection(handle, first=first, after=after, sort_key=sort_key, reverse=reverse)
    if collection is None:
        raise not_found("Collection not found", handle=handle)
    cache_client.set_json(key, collection.model_dump(mode="json"), ttl_seconds=LISTING_TTL_SECONDS)
    return collection


async def search_products(
    storefront: StorefrontClient,
    term: str,
    first: int = 24,
    after: str | None = None,
) -> SearchOut:
    term = term.strip()
    if not term:
        return SearchOut(term="")
    return await storefront.search_products(term, first=first, after=after)


async def predictive_search(storefront: StorefrontClient, term: str, limit: int = 10) -> PredictiveSearchOut:
    term = term.strip()
    if not term:
        return PredictiveSearchOut(term="")
    return await storefront.predictive_search(term, limit=limit)


async def list_policies(storefront: StorefrontClient) -> list[PolicyOut]:
    key = cache_client.key("policies", "all")
    cached = cache_client.get_json(key)
    if cached.hit:
        return [PolicyOut.model_validate(item) for item in cached.value]

    policies = await storefront.list_policies()
    cache_client.set_json(key, [item.model_dump(mode="json") for item in policies], ttl_seconds=POLICY_TTL_SECONDS)
    return policies


async def get_policy(storefront: StorefrontClient, handle: str) -> PolicyOut:
    for policy in await list_policies(storefront):
        if policy.handle == handle:
            return policy
    raise not_found("Policy not found", handle=handle)
