from typing import Any

from pydantic import Field, field_validator

from storefront.schemas.base import CamelModel


class MoneyOut(CamelModel):
    amount: str
    currency_code: str


class PriceRangeOut(CamelModel):
    min_variant_price: MoneyOut


class ImageOut(CamelModel):
    url: str
    alt_text: str | None = None
    width: int | None = None
    height: int | None = None


class ProductSummary(CamelModel):
    id: str
    handle: str
    title: str = ""
    tags: list[str] = Field(default_factory=list)
    vendor: str | None = None
    product_type: str | None = None
    price_range: PriceRangeOut | None = None
    featured_image: ImageOut | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_or_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("vendor", "product_type", mode="before")
    @classmethod
    def _blank_as_absent(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SelectedOptionOut(CamelModel):
    name: str
    value: str


class ProductVariantOut(CamelModel):
    id: str
    title: str
    available_for_sale: bool = False
    price: MoneyOut | None = None
    compare_at_price: MoneyOut | None = None
    sku: str | None = None
    selected_options: list[SelectedOptionOut] = Field(default_factory=list)
    image: ImageOut | None = None


class FabricOut(CamelModel):
    fabric_type: str | None = None
    description: str | None = None
    stretch_percentage: int | None = None


class ProductDetailOut(ProductSummary):
    description: str = ""
    description_html: str = ""
    images: list[ImageOut] = Field(default_factory=list)
    variants: list[ProductVariantOut] = Field(default_factory=list)
    material: str | None = None
    fabric: FabricOut | None = None
    similar_products: list[ProductSummary] = Field(default_factory=list)


class SimilarProductsRequest(CamelModel):
    tags: list[str] = Field(default_factory=list)
    current_handle: str = Field(min_length=1)
    vendor: str | None = None
    product_type: str | None = None
    allow_one_tag_fallback: bool | None = None
    fallback_enabled: bool | None = None
    overlap: int | None = Field(default=None, ge=1)
    image_url: str | None = None


class SimilarProductsMeta(CamelModel):
    type: str = "success"
    used_fallback: bool
    tier: str


class SimilarProductsOut(CamelModel):
    products: list[ProductSummary]
    meta: SimilarProductsMeta
