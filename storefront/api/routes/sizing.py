from fastapi import APIRouter

from storefront.core.errors import not_found
from storefront.matching.brand_fit import get_brand_fit_profile
from storefront.matching.fabric import supported_materials
from storefront.schemas.sizing import BrandFitOut, SizeRecommendationOut, SizeRecommendationRequest, SupportedMaterialsOut
from storefront.services.sizing import recommend_size

router = APIRouter(prefix="/v1/sizing", tags=["sizing"])


@router.post("/recommend", response_model=SizeRecommendationOut)
def recommend(payload: SizeRecommendationRequest) -> SizeRecommendationOut:
    return recommend_size(payload)


@router.get("/materials", response_model=SupportedMaterialsOut)
def materials() -> SupportedMaterialsOut:
    return SupportedMaterialsOut(materials=supported_materials())


@router.get("/brands/{vendor}", response_model=BrandFitOut)
def brand_fit(vendor: str) -> BrandFitOut:
    profile = get_brand_fit_profile(vendor)
    if profile is None:
        raise not_found("No fit profile for brand", vendor=vendor)
    return BrandFitOut(vendor=vendor, adjustment=profile.adjustment, note=profile.note)
