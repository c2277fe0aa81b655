from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_storefront
from storefront.platform import StorefrontClient
from storefront.schemas.cart import (
    CartCreateRequest,
    CartLinesAddRequest,
    CartLinesRemoveRequest,
    CartLinesUpdateRequest,
    CartOut,
)
from storefront.services import cart as cart_service

router = APIRouter(prefix="/v1/cart", tags=["cart"])


@router.post("", response_model=CartOut)
async def create_cart(payload: CartCreateRequest, storefront: StorefrontClient = Depends(get_storefront)) -> CartOut:
    return await cart_service.create_cart(storefront, payload)


@router.get("", response_model=CartOut)
async def get_cart(
    cart_id: str = Query(..., alias="cartId", min_length=1),
    storefront: StorefrontClient = Depends(get_storefront),
) -> CartOut:
    return await cart_service.get_cart(storefront, cart_id)


@router.post("/lines", response_model=CartOut)
async def add_lines(payload: CartLinesAddRequest, storefront: StorefrontClient = Depends(get_storefront)) -> CartOut:
    return await cart_service.add_lines(storefront, payload)


@router.patch("/lines", response_model=CartOut)
async def update_lines(
    payload: CartLinesUpdateRequest,
    storefront: StorefrontClient = Depends(get_storefront),
) -> CartOut:
    return await cart_service.update_lines(storefront, payload)


@router.post("/lines/remove", response_model=CartOut)
async def remove_lines(
    payload: CartLinesRemoveRequest,
    storefront: StorefrontClient = Depends(get_storefront),
) -> CartOut:
    return await cart_service.remove_lines(storefront, payload)
