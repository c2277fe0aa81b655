from storefront.core.errors import not_found
from storefront.platform import StorefrontClient
from storefront.schemas.cart import (
    CartCreateRequest,
    CartLinesAddRequest,
    CartLinesRemoveRequest,
    CartLinesUpdateRequest,
    CartOut,
)


def _line_inputs(lines) -> list[dict]:
    return [{"merchandiseId": line.merchandise_id, "quantity": line.quantity} for line in lines]


async def create_cart(storefront: StorefrontClient, request: CartCreateRequest) -> CartOut:
    return await storefront.create_cart(_line_inputs(request.lines))


async def get_cart(storefront: StorefrontClient, cart_id: str) -> CartOut:
    cart = await storefront.get_cart(cart_id)
    if cart is None:
        raise not_found("Cart not found", cart_id=cart_id)
    return cart


async def add_lines(storefront: StorefrontClient, request: CartLinesAddRequest) -> CartOut:
    return await storefront.add_cart_lines(request.cart_id, _line_inputs(request.lines))


async def update_lines(storefront: StorefrontClient, request: CartLinesUpdateRequest) -> CartOut:
    lines = [{"id": line.id, "quantity": line.quantity} for line in request.lines]
    return await storefront.update_cart_lines(request.cart_id, lines)


async def remove_lines(storefront: StorefrontClient, request: CartLinesRemoveRequest) -> CartOut:
    return await storefront.remove_cart_lines(request.cart_id, request.line_ids)
