from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from storefront.core.config import Settings
from storefront.core.http import post_with_retries, status_of
from storefront.platform import queries
from storefront.schemas.cart import CartLineOut, CartOut
from storefront.schemas.content import (
    CollectionOut,
    CollectionSummaryOut,
    PolicyOut,
    PredictiveSearchOut,
    SearchOut,
)
from storefront.schemas.products import ProductDetailOut, ProductSummary

M = TypeVar("M", bound=BaseModel)

ACCESS_TOKEN_HEADER = "X-Shopify-Storefront-Access-Token"

POLICY_FIELDS_BY_HANDLE = {
    "privacy-policy": "privacyPolicy",
    "shipping-policy": "shippingPolicy",
    "terms-of-service": "termsOfService",
    "refund-policy": "refundPolicy",
}


class StorefrontError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StorefrontUserError(StorefrontError):
    def __init__(self, errors: list[dict[str, Any]]) -> None:
        messages = [str(error.get("message") or "Unknown cart error") for error in errors]
        super().__init__("; ".join(messages) or "Cart update rejected")
        self.errors = errors


class StorefrontClient:
    """Async GraphQL client for the Shopify Storefront API."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.endpoint = (
            f"https://{settings.shopify_store_domain}/api/"
            f"{settings.shopify_storefront_api_version}/graphql.json"
        )
        self.max_retries = max(0, settings.storefront_max_retries)
        self.retry_backoff_seconds = settings.storefront_retry_backoff_seconds
        self._client = httpx.AsyncClient(
            timeout=settings.storefront_timeout_seconds,
            headers={
                ACCESS_TOKEN_HEADER: settings.shopify_storefront_token,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def query_products(self, query: str, first: int) -> list[ProductSummary]:
        data = await self._execute(queries.PRODUCTS_QUERY, {"query": query, "first": first})
        nodes = ((data.get("products") or {}).get("nodes")) or []
        return [_validate(ProductSummary, node) for node in nodes]

    async def get_product(self, handle: str) -> ProductDetailOut | None:
        data = await self._execute(queries.PRODUCT_QUERY, {"handle": handle})
        node = data.get("product")
        if not node:
            return None
        payload = dict(node)
        payload["images"] = _nodes(node.get("images"))
        payload["variants"] = _nodes(node.get("variants"))
        material = node.get("material") or {}
        payload["material"] = material.get("value") or None
        return _validate(ProductDetailOut, payload)

    async def list_collections(self, first: int = 50) -> list[CollectionSummaryOut]:
        data = await self._execute(queries.COLLECTIONS_QUERY, {"first": first})
        nodes = _nodes(data.get("collections"))
        return [_validate(CollectionSummaryOut, node) for node in nodes]

    async def get_collection(
        self,
        handle: str,
        first: int = 24,
        after: str | None = None,
        sort_key: str | None = None,
        reverse: bool = False,
    ) -> CollectionOut | None:
        variables = {"handle": handle, "first": first, "after": after, "sortKey": sort_key, "reverse": reverse}
        data = await self._execute(queries.COLLECTION_QUERY, variables)
        node = data.get("collection")
        if not node:
            return None
        payload = dict(node)
        products = node.get("products") or {}
        payload["products"] = products.get("nodes") or []
        payload["pageInfo"] = products.get("pageInfo") or {}
        return _validate(CollectionOut, payload)

    async def search_products(self, term: str, first: int = 24, after: str | None = None) -> SearchOut:
        data = await self._execute(queries.SEARCH_QUERY, {"query": term, "first": first, "after": after})
        search = data.get("search") or {}
        # Non-product nodes come back as empty objects.
        nodes = [node for node in search.get("nodes") or [] if node.get("handle")]
        return _validate(
            SearchOut,
            {
                "term": term,
                "products": nodes,
                "totalCount": search.get("totalCount") or 0,
                "pageInfo": search.get("pageInfo") or {},
            }
        )

    async def predictive_search(self, term: str, limit: int = 10) -> PredictiveSearchOut:
        data = await self._execute(queries.PREDICTIVE_SEARCH_QUERY, {"query": term, "limit": limit})
        result = data.get("predictiveSearch") or {}
        return _validate(
            PredictiveSearchOut,
            {
                "term": term,
                "products": result.get("products") or [],
                "collections": result.get("collections") or [],
                "queries": result.get("queries") or [],
            }
        )

    async def list_policies(self) -> list[PolicyOut]:
        data = await self._execute(queries.POLICIES_QUERY)
        shop = data.get("shop") or {}
        policies = []
        for field_name in POLICY_FIELDS_BY_HANDLE.values():
            node = shop.get(field_name)
            if node:
                policies.append(_validate(PolicyOut, node))
        return policies

    async def get_policy(self, handle: str) -> PolicyOut | None:
        if handle not in POLICY_FIELDS_BY_HANDLE:
            return None
        for policy in await self.list_policies():
            if policy.handle == handle:
                return policy
        return None

    async def create_cart(self, lines: list[dict[str, Any]]) -> CartOut:
        data = await self._execute(queries.CART_CREATE_MUTATION, {"input": {"lines": lines}})
        return self._cart_from_mutation(data.get("cartCreate"))

    async def get_cart(self, cart_id: str) -> CartOut | None:
        data = await self._execute(queries.CART_QUERY, {"id": cart_id})
        node = data.get("cart")
        return _parse_cart(node) if node else None

    async def add_cart_lines(self, cart_id: str, lines: list[dict[str, Any]]) -> CartOut:
        data = await self._execute(queries.CART_LINES_ADD_MUTATION, {"cartId": cart_id, "lines": lines})
        return self._cart_from_mutation(data.get("cartLinesAdd"))

    async def update_cart_lines(self, cart_id: str, lines: list[dict[str, Any]]) -> CartOut:
        data = await self._execute(queries.CART_LINES_UPDATE_MUTATION, {"cartId": cart_id, "lines": lines})
        return self._cart_from_mutation(data.get("cartLinesUpdate"))

    async def remove_cart_lines(self, cart_id: str, line_ids: list[str]) -> CartOut:
        data = await self._execute(queries.CART_LINES_REMOVE_MUTATION, {"cartId": cart_id, "lineIds": line_ids})
        return self._cart_from_mutation(data.get("cartLinesRemove"))

    def _cart_from_mutation(self, payload: dict[str, Any] | None) -> CartOut:
        payload = payload or {}
        user_errors = payload.get("userErrors") or []
        if user_errors:
            raise StorefrontUserError(user_errors)
        cart = payload.get("cart")
        if not cart:
            raise StorefrontError("Cart mutation returned no cart")
        return _parse_cart(cart)

    async def _execute(self, document: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = await post_with_retries(
                self._client,
                self.endpoint,
                {"query": document, "variables": variables or {}},
                self.max_retries,
                self.retry_backoff_seconds,
            )
        except httpx.HTTPError as exc:
            raise StorefrontError(f"Storefront API request failed: {exc}", status_of(exc)) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise StorefrontError("Storefront API returned invalid JSON", response.status_code) from exc

        errors = payload.get("errors")
        if errors:
            messages = [str(error.get("message", error)) if isinstance(error, dict) else str(error) for error in errors]
            raise StorefrontError(f"Storefront API errors: {'; '.join(messages)}", response.status_code)
        return payload.get("data") or {}


def _nodes(connection: dict[str, Any] | None) -> list[dict[str, Any]]:
    if not connection:
        return []
    return list(connection.get("nodes") or [])


def _validate(model: type[M], payload: Any) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise StorefrontError(f"Unexpected {model.__name__} payload from Storefront API: {exc}") from exc


def _parse_cart(node: dict[str, Any]) -> CartOut:
    try:
        return _build_cart(node)
    except (KeyError, ValidationError) as exc:
        raise StorefrontError(f"Unexpected cart payload from Storefront API: {exc!r}") from exc


def _build_cart(node: dict[str, Any]) -> CartOut:
    cost = node.get("cost") or {}
    lines = []
    for line in _nodes(node.get("lines")):
        merchandise = line.get("merchandise") or {}
        product = merchandise.get("product") or {}
        lines.append(
            CartLineOut(
                id=line["id"],
                quantity=line.get("quantity") or 0,
                merchandise_id=merchandise.get("id", ""),
                merchandise_title=merchandise.get("title") or "",
                product_handle=product.get("handle"),
                product_title=product.get("title"),
                price=merchandise.get("price"),
                image=merchandise.get("image"),
            )
        )
    return CartOut(
        id=node["id"],
        checkout_url=node.get("checkoutUrl"),
        total_quantity=node.get("totalQuantity") or 0,
        subtotal=cost.get("subtotalAmount"),
        total=cost.get("totalAmount"),
        lines=lines,
    )
