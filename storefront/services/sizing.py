"""Size recommendation from height, weight and a garment size chart.

All widths are half-chest (flat-lay) centimetres. Charts whose smallest chest
value is 80 cm or more are read as full circumference and halved first.
"""

import logging
import math

from storefront.matching.brand_fit import apply_brand_adjustment, get_brand_fit_profile
from storefront.schemas.sizing import (
    BodyFit,
    BrandFitOut,
    SizeDimensionsIn,
    SizeMeasurementsOut,
    SizeRecommendationOut,
    SizeRecommendationRequest,
)
from storefront.services.catalog import describe_fabric

MIN_CHEST_WIDTH = 35
MAX_CHEST_WIDTH = 60
CIRCUMFERENCE_THRESHOLD_CM = 80
OVERSIZED_THRESHOLD_CM = 55
GENERIC_CONFIDENCE = 0.6

BODY_FIT_ADJUSTMENTS: dict[str, float] = {"slim": -2, "regular": 0, "athletic": 1, "relaxed": 2}
# Garment wider than the body.
OVERSIZED_EASE: dict[str, float] = {"slim": 8, "regular": 12, "athletic": 10, "relaxed": 15}
# Garment narrower than the body.
FITTED_EASE: dict[str, float] = {"slim": 5, "regular": 8, "athletic": 7, "relaxed": 10}

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def estimate_chest_width(height_cm: float, weight_kg: float, gender: str, body_fit: BodyFit = "regular") -> int:
    height_m = height_cm / 100
    bmi = weight_kg / (height_m * height_m)

    if gender == "male":
        chest_width = height_cm * 0.26 + (bmi - 23) * 0.5
    else:
        chest_width = height_cm * 0.25 + (bmi - 22) * 0.4

    chest_width += BODY_FIT_ADJUSTMENTS[body_fit]
    return max(MIN_CHEST_WIDTH, min(MAX_CHEST_WIDTH, _round_half_up(chest_width)))


def _chest_values(dimensions: dict[str, SizeDimensionsIn]) -> list[float]:
    return [dims.chest for dims in dimensions.values() if dims.chest is not None]


def is_flat_lay_chart(dimensions: dict[str, SizeDimensionsIn]) -> bool:
    chests = _chest_values(dimensions)
    if not chests:
        return True
    return min(chests) < CIRCUMFERENCE_THRESHOLD_CM


def is_oversized_chart(dimensions: dict[str, SizeDimensionsIn]) -> bool:
    chests = _chest_values(dimensions)
    if not chests:
        return False
    return min(chests) >= OVERSIZED_THRESHOLD_CM


def _confidence(difference: float) -> float:
    if difference <= 2:
        return 0.95
    if difference <= 4:
        return 0.80
    if difference <= 6:
        return 0.65
    return 0.50


def _reasoning(confidence: float, target_width: float, chosen_chest: float | None, body_fit: str) -> str:
    if confidence >= 0.85:
        reasoning = "Excellent fit based on your measurements"
    elif confidence >= 0.70:
        reasoning = "Good fit - recommended for your measurements"
    elif confidence >= 0.55:
        reasoning = "Acceptable fit - may vary by style"
    else:
        reasoning = "Best available option - check size chart carefully"

    if chosen_chest and target_width > chosen_chest + 5:
        reasoning += ". May be slightly tight."
    elif chosen_chest and target_width < chosen_chest - 5:
        reasoning += ". May be slightly loose."

    if body_fit != "regular":
        reasoning += f" ({body_fit} fit)"
    return reasoning


def generic_size(estimated_chest_width: float) -> str:
    if estimated_chest_width < 42:
        return "S"
    if estimated_chest_width < 47:
        return "M"
    if estimated_chest_width < 52:
        return "L"
    return "XL"


def recommend_size(request: SizeRecommendationRequest) -> SizeRecommendationOut:
    estimated = estimate_chest_width(request.height, request.weight, request.gender, request.body_fit)
    fabric = describe_fabric(request.material)
    profile = get_brand_fit_profile(request.vendor)
    brand_fit = (
        BrandFitOut(vendor=request.vendor.strip(), adjustment=profile.adjustment, note=profile.note)
        if profile and request.vendor
        else None
    )

    if not request.size_dimensions:
        return SizeRecommendationOut(
            size=generic_size(estimated),
            confidence=GENERIC_CONFIDENCE,
            reasoning="Generic recommendation - product size data not available",
            measurements=SizeMeasurementsOut(estimated_chest_width=estimated),
            brand_fit=brand_fit,
            fabric=fabric,
        )

    flat_lay = is_flat_lay_chart(request.size_dimensions)
    normalized = {
        size: dims.model_copy(
            update={"chest": dims.chest if flat_lay or dims.chest is None else dims.chest / 2}
        )
        for size, dims in request.size_dimensions.items()
    }
    oversized = is_oversized_chart(normalized)
    if oversized:
        target_width = estimated + OVERSIZED_EASE[request.body_fit]
    else:
        target_width = estimated - FITTED_EASE[request.body_fit]
    target_width = apply_brand_adjustment(target_width, request.vendor).adjusted_width

    logger.debug(
        "Sizing: flat_lay=%s oversized=%s estimated=%s target=%s vendor=%s",
        flat_lay,
        oversized,
        estimated,
        target_width,
        request.vendor,
    )

    best_size = ""
    smallest_diff = math.inf
    for size, dims in normalized.items():
        if not dims.chest:
            continue
        diff = abs(dims.chest - target_width)
        if diff < smallest_diff:
            smallest_diff = diff
            best_size = size

    if not best_size:
        sizes = list(normalized)
        best_size = sizes[len(sizes) // 2] if sizes else "M"

    confidence = _confidence(smallest_diff)
    chosen_chest = normalized[best_size].chest if best_size in normalized else None
    return SizeRecommendationOut(
        size=best_size,
        confidence=confidence,
        reasoning=_reasoning(confidence, target_width, chosen_chest, request.body_fit),
        measurements=SizeMeasurementsOut(estimated_chest_width=estimated, target_garment_width=target_width),
        brand_fit=brand_fit,
        fabric=fabric,
    )
