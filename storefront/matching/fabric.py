"""Fabric classification for free-text material names.

Material names come straight from the ``custom.material`` product metafield, so
they are messy: mixed case, extra spaces, typos. ``classify_material`` maps them
onto the closed ``FabricType`` set used by the size recommendation. Unknown
materials yield ``None``; classification never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from storefront.matching.normalization import normalize_phrase


class FabricType(str, Enum):
    COTTON = "cotton"
    COTTON_BLEND = "cotton_blend"
    JERSEY_KNIT = "jersey_knit"
    HIGHLY_ELASTIC = "highly_elastic"


@dataclass(frozen=True)
class FabricMapping:
    fabric_type: FabricType
    description: str
    stretch_percentage: int


_COTTON_LYCRA = FabricMapping(FabricType.HIGHLY_ELASTIC, "Cotton-Lycra blend, high stretch and comfort", 15)
_PURE_COTTON = FabricMapping(FabricType.COTTON, "Pure cotton, no stretch", 0)
_POLYESTER = FabricMapping(FabricType.JERSEY_KNIT, "Polyester, moderate stretch", 10)

# Ordered: the fuzzy pass returns the first phrase that contains, or is
# contained in, the input. Cotton + lycra phrases must stay ahead of the
# plain cotton phrases.
MATERIAL_MAPPINGS: tuple[tuple[str, FabricMapping], ...] = (
    ("100% pure cotton + lycra", _COTTON_LYCRA),
    ("pure cotton + lycra", _COTTON_LYCRA),
    ("100% cotton + lycra", _COTTON_LYCRA),
    ("cotton + lycra", _COTTON_LYCRA),
    ("pure 100% cotton", _PURE_COTTON),
    ("pure cotton", _PURE_COTTON),
    ("100% cotton", _PURE_COTTON),
    ("milton", FabricMapping(FabricType.COTTON_BLEND, "Milton cotton blend, slight stretch", 5)),
    ("refined summer milton", FabricMapping(FabricType.COTTON_BLEND, "Refined summer Milton, breathable with slight stretch", 5)),
    ("summer milton", FabricMapping(FabricType.COTTON_BLEND, "Summer Milton, lightweight with slight stretch", 5)),
    ("polyester", _POLYESTER),
    ("polyesteer", _POLYESTER),
    ("lycra", FabricMapping(FabricType.HIGHLY_ELASTIC, "Lycra/Spandex, high stretch", 15)),
    ("spandex", FabricMapping(FabricType.HIGHLY_ELASTIC, "Spandex, high stretch", 15)),
    ("elastane", FabricMapping(FabricType.HIGHLY_ELASTIC, "Elastane, high stretch", 15)),
    ("cotton lycra", FabricMapping(FabricType.HIGHLY_ELASTIC, "Cotton-Lycra blend, high stretch", 15)),
    ("cotton spandex", FabricMapping(FabricType.HIGHLY_ELASTIC, "Cotton-Spandex blend, high stretch", 15)),
    ("poly cotton", FabricMapping(FabricType.COTTON_BLEND, "Poly-cotton blend, slight stretch", 5)),
    ("cotton polyester", FabricMapping(FabricType.COTTON_BLEND, "Cotton-polyester blend, slight stretch", 5)),
)

_EXACT_MAPPINGS: dict[str, FabricMapping] = dict(MATERIAL_MAPPINGS)

ELASTIC_KEYWORDS = ("lycra", "spandex", "elastane")
COTTON_KEYWORDS = ("cotton", "coton")
_HIDDEN_MATERIALS = {"polyesteer", "pure cotton"}


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def _table_lookup(normalized: str) -> FabricMapping | None:
    exact = _EXACT_MAPPINGS.get(normalized)
    if exact:
        return exact
    for phrase, mapping in MATERIAL_MAPPINGS:
        if phrase in normalized or normalized in phrase:
            return mapping
    return None


def classify_material(material: str | None) -> FabricType | None:
    normalized = normalize_phrase(material)
    if not normalized:
        return None

    exact = _EXACT_MAPPINGS.get(normalized)
    if exact:
        return exact.fabric_type

    # Blends with an elastic fibre stretch like the fibre, not like cotton.
    if _contains_any(normalized, COTTON_KEYWORDS) and _contains_any(normalized, ELASTIC_KEYWORDS):
        return FabricType.HIGHLY_ELASTIC

    fuzzy = _table_lookup(normalized)
    if fuzzy:
        return fuzzy.fabric_type

    if _contains_any(normalized, ELASTIC_KEYWORDS):
        return FabricType.HIGHLY_ELASTIC
    if "polyester" in normalized or "poly" in normalized:
        return FabricType.JERSEY_KNIT
    if "milton" in normalized:
        return FabricType.COTTON_BLEND
    if "cotton" in normalized and "blend" not in normalized and "poly" not in normalized:
        return FabricType.COTTON
    return None


def get_fabric_details(material: str | None) -> FabricMapping | None:
    """Descriptive details for table hits only; keyword-fallback hits have none."""
    normalized = normalize_phrase(material)
    if not normalized:
        return None
    return _table_lookup(normalized)


def supported_materials() -> list[str]:
    return [phrase for phrase, _ in MATERIAL_MAPPINGS if "100%" not in phrase and phrase not in _HIDDEN_MATERIALS]
