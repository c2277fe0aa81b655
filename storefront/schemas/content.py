from pydantic import Field

from storefront.schemas.base import CamelModel
from storefront.schemas.products import ImageOut, ProductSummary


class PageInfoOut(CamelModel):
    has_next_page: bool = False
    end_cursor: str | None = None


class CollectionSummaryOut(CamelModel):
    id: str
    handle: str
    title: str
    description: str = ""
    image: ImageOut | None = None


class CollectionOut(CollectionSummaryOut):
    products: list[ProductSummary] = Field(default_factory=list)
    page_info: PageInfoOut = Field(default_factory=PageInfoOut)


class SearchOut(CamelModel):
    term: str
    products: list[ProductSummary] = Field(default_factory=list)
    total_count: int = 0
    page_info: PageInfoOut = Field(default_factory=PageInfoOut)


class PredictiveQueryOut(CamelModel):
    text: str
    styled_text: str | None = None


class PredictiveSearchOut(CamelModel):
    term: str
    products: list[ProductSummary] = Field(default_factory=list)
    collections: list[CollectionSummaryOut] = Field(default_factory=list)
    queries: list[PredictiveQueryOut] = Field(default_factory=list)


class PolicyOut(CamelModel):
    id: str
    handle: str
    title: str
    body: str = ""
    url: str | None = None
