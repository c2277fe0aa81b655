from pydantic import Field

from storefront.schemas.base import CamelModel
from storefront.schemas.products import ImageOut, MoneyOut


class CartLineIn(CamelModel):
    merchandise_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1, le=99)


class CartLineUpdateIn(CamelModel):
    id: str = Field(min_length=1)
    quantity: int = Field(ge=0, le=99)


class CartCreateRequest(CamelModel):
    lines: list[CartLineIn] = Field(default_factory=list)


class CartLinesAddRequest(CamelModel):
    cart_id: str = Field(min_length=1)
    lines: list[CartLineIn] = Field(min_length=1)


class CartLinesUpdateRequest(CamelModel):
    cart_id: str = Field(min_length=1)
    lines: list[CartLineUpdateIn] = Field(min_length=1)


class CartLinesRemoveRequest(CamelModel):
    cart_id: str = Field(min_length=1)
    line_ids: list[str] = Field(min_length=1)


class CartLineOut(CamelModel):
    id: str
    quantity: int
    merchandise_id: str
    merchandise_title: str = ""
    product_handle: str | None = None
    product_title: str | None = None
    price: MoneyOut | None = None
    image: ImageOut | None = None


class CartOut(CamelModel):
    id: str
    checkout_url: str | None = None
    total_quantity: int = 0
    subtotal: MoneyOut | None = None
    total: MoneyOut | None = None
    lines: list[CartLineOut] = Field(default_factory=list)
