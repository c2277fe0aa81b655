from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from storefront.matching.config import SimilarProductsConfig
from storefront.matching.normalization import dedupe

MAX_SIMILAR_PRODUCTS = 5
CANDIDATE_POOL_SIZE = 20
MAX_QUERY_TAGS = 3

TIER_TAG_OVERLAP = "tag_overlap"
TIER_ONE_TAG = "one_tag"
TIER_VENDOR = "vendor"
TIER_PRODUCT_TYPE = "product_type"
TIER_NONE = "none"

logger = logging.getLogger(__name__)


class Candidate(Protocol):
    handle: str
    tags: list[str]
    vendor: str | None
    product_type: str | None


C = TypeVar("C", bound=Candidate)

ProductFetcher = Callable[[str, int], Awaitable[Sequence[Candidate]]]


@dataclass(frozen=True)
class ReferenceProduct:
    handle: str | None
    tags: tuple[str, ...] = ()
    vendor: str | None = None
    product_type: str | None = None


@dataclass
class SimilarProductsResult:
    products: list = field(default_factory=list)
    tier: str = TIER_NONE
    attempted_tiers: list[str] = field(default_factory=list)
    failed_tiers: list[str] = field(default_factory=list)

    @property
    def used_fallback(self) -> bool:
        return self.tier not in (TIER_TAG_OVERLAP, TIER_NONE)

    @property
    def upstream_unavailable(self) -> bool:
        return not self.products and bool(self.attempted_tiers) and self.attempted_tiers == self.failed_tiers


def overlap_tags_count(tags: Iterable[str] | None, reference_tags: Iterable[str] | None) -> int:
    if not tags or not reference_tags:
        return 0
    return len(set(tags) & set(reference_tags))


def filter_by_tag_overlap(candidates: Iterable[C], tags: Sequence[str] | None, required_overlap: int) -> list[C]:
    if not tags:
        return []
    return [candidate for candidate in candidates if overlap_tags_count(candidate.tags, tags) >= required_overlap]


def vendor_fallback(candidates: Iterable[C], vendor: str | None) -> list[C]:
    if not vendor:
        return []
    return [candidate for candidate in candidates if candidate.vendor == vendor]


def product_type_fallback(candidates: Iterable[C], product_type: str | None) -> list[C]:
    if not product_type:
        return []
    return [
        candidate
        for candidate in candidates
        if product_type in (candidate.tags or []) or candidate.product_type == product_type
    ]


def build_tag_query(tags: Sequence[str]) -> str:
    return " OR ".join(tags[:MAX_QUERY_TAGS])


class SimilarProductsMatcher:
    """Tiered similar-product lookup.

    Tiers run in order and stop at the first one that yields anything:
    tag overlap, one-tag overlap on the same pool, vendor, product type.
    Every tier but the one-tag pass issues its own fetch; a failed fetch
    counts as an empty pool.
    """

    def __init__(
        self,
        fetch_products: ProductFetcher,
        config: SimilarProductsConfig,
        pool_size: int = CANDIDATE_POOL_SIZE,
        max_results: int = MAX_SIMILAR_PRODUCTS,
    ) -> None:
        self.fetch_products = fetch_products
        self.config = config
        self.pool_size = pool_size
        self.max_results = max_results

    async def find(self, reference: ReferenceProduct) -> SimilarProductsResult:
        result = SimilarProductsResult()
        tags = dedupe([tag for tag in reference.tags if tag and tag.strip()])

        if tags:
            candidates = await self._fetch(TIER_TAG_OVERLAP, build_tag_query(tags), reference, result)
            required_overlap = min(self.config.overlap, len(tags))
            matches = self._finalize(filter_by_tag_overlap(candidates, tags, required_overlap), reference)
            if matches:
                return self._resolve(result, matches, TIER_TAG_OVERLAP)

            if self.config.allow_one_tag_fallback and required_overlap > 1:
                matches = self._finalize(filter_by_tag_overlap(candidates, tags, 1), reference)
                if matches:
                    return self._resolve(result, matches, TIER_ONE_TAG)

        if not self.config.fallback_enabled:
            return result

        if reference.vendor:
            candidates = await self._fetch(TIER_VENDOR, reference.vendor, reference, result)
            matches = self._finalize(vendor_fallback(candidates, reference.vendor), reference)
            if matches:
                return self._resolve(result, matches, TIER_VENDOR)

        if reference.product_type:
            candidates = await self._fetch(TIER_PRODUCT_TYPE, reference.product_type, reference, result)
            matches = self._finalize(product_type_fallback(candidates, reference.product_type), reference)
            if matches:
                return self._resolve(result, matches, TIER_PRODUCT_TYPE)

        return result

    async def _fetch(
        self,
        tier: str,
        query: str,
        reference: ReferenceProduct,
        result: SimilarProductsResult,
    ) -> Sequence[Candidate]:
        result.attempted_tiers.append(tier)
        try:
            return await self.fetch_products(query, self.pool_size)
        except Exception as exc:
            result.failed_tiers.append(tier)
            logger.warning("Similar products %s query failed for %s: %s", tier, reference.handle, exc)
            return []

    def _finalize(self, matches: list[C], reference: ReferenceProduct) -> list[C]:
        return [candidate for candidate in matches if candidate.handle != reference.handle][: self.max_results]

    @staticmethod
    def _resolve(result: SimilarProductsResult, matches: list, tier: str) -> SimilarProductsResult:
        result.products = matches
        result.tier = tier
        return result
