from typing import Literal

from pydantic import Field

from storefront.schemas.base import CamelModel
from storefront.schemas.products import FabricOut

BodyFit = Literal["slim", "regular", "athletic", "relaxed"]


class SizeDimensionsIn(CamelModel):
    chest: float | None = Field(default=None, gt=0)
    length: float | None = Field(default=None, gt=0)
    arm: float | None = Field(default=None, gt=0)


class SizeRecommendationRequest(CamelModel):
    height: float = Field(gt=0, le=300)
    weight: float = Field(gt=0, le=500)
    gender: Literal["male", "female"]
    body_fit: BodyFit = "regular"
    size_dimensions: dict[str, SizeDimensionsIn] | None = None
    vendor: str | None = None
    material: str | None = None


class BrandFitOut(CamelModel):
    vendor: str
    adjustment: float
    note: str


class SizeMeasurementsOut(CamelModel):
    estimated_chest_width: float
    target_garment_width: float | None = None


class SizeRecommendationOut(CamelModel):
    size: str
    confidence: float
    reasoning: str
    measurements: SizeMeasurementsOut
    brand_fit: BrandFitOut | None = None
    fabric: FabricOut | None = None


class SupportedMaterialsOut(CamelModel):
    materials: list[str]
