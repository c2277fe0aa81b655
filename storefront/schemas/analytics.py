from storefront.schemas.base import CamelModel


class AnalyticsIngestOut(CamelModel):
    success: bool = True
    message: str
    count: int | None = None
