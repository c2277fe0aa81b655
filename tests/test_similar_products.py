import pytest

from storefront.matching.config import SimilarProductsConfig
from storefront.matching.similar import (
    SimilarProductsMatcher,
    ReferenceProduct,
    build_tag_query,
    filter_by_tag_overlap,
    overlap_tags_count,
    product_type_fallback,
    vendor_fallback,
)
from tests.conftest import FakeStorefront, make_product


def test_filter_by_tag_overlap_keeps_candidate_order():
    candidates = [
        make_product("a", tags=["men", "blazer"]),
        make_product("b", tags=["women", "dress"]),
        make_product("c", tags=["men", "casual", "blazer"]),
    ]
    result = filter_by_tag_overlap(candidates, ["men", "blazer"], 2)
    assert [item.handle for item in result] == ["a", "c"]
    assert filter_by_tag_overlap(result, ["men", "blazer"], 2) == result


def test_filter_by_tag_overlap_without_reference_tags():
    assert filter_by_tag_overlap([make_product("a", tags=["men"])], [], 1) == []


def test_overlap_counts_each_reference_tag_once():
    assert overlap_tags_count(["men", "men", "blazer"], ["men", "men"]) == 1
    assert overlap_tags_count(None, ["men"]) == 0
    assert overlap_tags_count(["men"], None) == 0


def test_vendor_fallback_exact_vendor():
    candidates = [make_product("a", vendor="Talla"), make_product("b", vendor="Aurora"), make_product("c", vendor="Talla")]
    result = vendor_fallback(candidates, "Talla")
    assert [item.handle for item in result] == ["a", "c"]
    assert vendor_fallback(candidates, None) == []


def test_product_type_fallback_matches_tag_or_type():
    candidates = [
        make_product("a", tags=["blazer"]),
        make_product("b", product_type="blazer"),
        make_product("c", product_type="dress"),
    ]
    assert [item.handle for item in product_type_fallback(candidates, "blazer")] == ["a", "b"]
    assert product_type_fallback(candidates, None) == []


def test_build_tag_query_uses_first_three_tags():
    assert build_tag_query(["a", "b", "c", "d"]) == "a OR b OR c"
    assert build_tag_query(["solo"]) == "solo"


def _matcher(storefront, **config):
    return SimilarProductsMatcher(storefront.query_products, SimilarProductsConfig(**config))


@pytest.mark.asyncio
async def test_one_tag_fallback_reuses_first_pool():
    storefront = FakeStorefront()
    storefront.pools["men OR blazer"] = [make_product("only-men", tags=["men"])]
    reference = ReferenceProduct(handle="ref", tags=("men", "blazer"))

    result = await _matcher(storefront, allow_one_tag_fallback=True).find(reference)
    assert [item.handle for item in result.products] == ["only-men"]
    assert result.tier == "one_tag"
    assert result.used_fallback
    assert len(storefront.queries) == 1

    result = await _matcher(storefront, allow_one_tag_fallback=False).find(reference)
    assert result.products == []
    assert result.tier == "none"


@pytest.mark.asyncio
async def test_tag_overlap_then_vendor_fallback():
    storefront = FakeStorefront()
    reference = ReferenceProduct(handle="ref", tags=("men", "blazer", "formal"), vendor="Talla")
    match = make_product("match", tags=["men", "blazer"], vendor="Other")
    noise = [make_product(f"noise-{i}", tags=["women"], vendor="Talla") for i in range(3)]
    storefront.pools["men OR blazer OR formal"] = [match, *noise]
    storefront.pools["Talla"] = [make_product("ref", vendor="Talla"), *noise]

    result = await _matcher(storefront, allow_one_tag_fallback=False).find(reference)
    assert [item.handle for item in result.products] == ["match"]
    assert result.tier == "tag_overlap"
    assert not result.used_fallback

    storefront.pools["men OR blazer OR formal"] = list(noise)
    result = await _matcher(storefront, allow_one_tag_fallback=False).find(reference)
    assert [item.handle for item in result.products] == ["noise-0", "noise-1", "noise-2"]
    assert result.tier == "vendor"


@pytest.mark.asyncio
async def test_results_exclude_reference_and_cap_at_five():
    storefront = FakeStorefront()
    pool = [make_product("ref", tags=["a", "b"])] + [make_product(f"p{i}", tags=["a", "b"]) for i in range(8)]
    storefront.pools["a OR b"] = pool

    result = await _matcher(storefront).find(ReferenceProduct(handle="ref", tags=("a", "b")))
    assert [item.handle for item in result.products] == ["p0", "p1", "p2", "p3", "p4"]


@pytest.mark.asyncio
async def test_required_overlap_never_exceeds_tag_count():
    storefront = FakeStorefront()
    storefront.pools["shirt"] = [make_product("p1", tags=["shirt"])]
    result = await _matcher(storefront, overlap=3).find(ReferenceProduct(handle="ref", tags=("shirt", "shirt")))
    assert [item.handle for item in result.products] == ["p1"]
    assert result.tier == "tag_overlap"


@pytest.mark.asyncio
async def test_blank_tags_are_ignored():
    storefront = FakeStorefront()
    storefront.pools["a"] = [make_product("p1", tags=["a"])]
    result = await _matcher(storefront).find(ReferenceProduct(handle="ref", tags=("", "a", "  ")))
    assert [item.handle for item in result.products] == ["p1"]
    assert result.tier == "tag_overlap"
    assert storefront.queries == [("a", 20)]


@pytest.mark.asyncio
async def test_only_blank_tags_go_straight_to_vendor():
    storefront = FakeStorefront()
    storefront.pools["Talla"] = [make_product("same-vendor", vendor="Talla")]
    result = await _matcher(storefront).find(ReferenceProduct(handle="ref", tags=(" ",), vendor="Talla"))
    assert result.tier == "vendor"
    assert [query for query, _ in storefront.queries] == ["Talla"]


@pytest.mark.asyncio
async def test_fallback_disabled_stops_after_tag_tiers():
    storefront = FakeStorefront()
    storefront.pools["Talla"] = [make_product("same-vendor", vendor="Talla")]
    reference = ReferenceProduct(handle="ref", tags=("x",), vendor="Talla")

    result = await _matcher(storefront, fallback_enabled=False).find(reference)
    assert result.products == []
    assert [query for query, _ in storefront.queries] == ["x"]


@pytest.mark.asyncio
async def test_no_tags_goes_straight_to_product_type():
    storefront = FakeStorefront()
    storefront.pools["Blazer"] = [make_product("b1", product_type="Blazer")]
    result = await _matcher(storefront).find(ReferenceProduct(handle="ref", product_type="Blazer"))
    assert [item.handle for item in result.products] == ["b1"]
    assert result.tier == "product_type"
    assert storefront.queries == [("Blazer", 20)]


@pytest.mark.asyncio
async def test_failed_fetch_is_absorbed_and_next_tier_runs():
    storefront = FakeStorefront()
    storefront.failing_queries.add("men OR blazer")
    storefront.pools["Talla"] = [make_product("v1", vendor="Talla")]
    reference = ReferenceProduct(handle="ref", tags=("men", "blazer"), vendor="Talla")

    result = await _matcher(storefront).find(reference)
    assert [item.handle for item in result.products] == ["v1"]
    assert result.failed_tiers == ["tag_overlap"]
    assert not result.upstream_unavailable


@pytest.mark.asyncio
async def test_all_fetches_failing_marks_upstream_unavailable():
    storefront = FakeStorefront()
    storefront.failing_queries.update({"men", "Talla"})
    reference = ReferenceProduct(handle="ref", tags=("men",), vendor="Talla")

    result = await _matcher(storefront).find(reference)
    assert result.products == []
    assert result.attempted_tiers == ["tag_overlap", "vendor"]
    assert result.upstream_unavailable


@pytest.mark.asyncio
async def test_empty_reference_makes_no_requests():
    storefront = FakeStorefront()
    result = await _matcher(storefront).find(ReferenceProduct(handle="ref"))
    assert result.products == []
    assert storefront.queries == []
    assert not result.upstream_unavailable
