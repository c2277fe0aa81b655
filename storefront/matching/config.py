from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_OVERLAP = 2


@dataclass(frozen=True)
class SimilarProductsConfig:
    overlap: int = DEFAULT_OVERLAP
    fallback_enabled: bool = True
    allow_one_tag_fallback: bool = True


class SimilarProductsSettings(BaseSettings):
    tag_overlap: int = DEFAULT_OVERLAP
    fallback: bool = True
    allow_one_tag_fallback: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SIMILAR_PRODUCTS_",
        env_ignore_empty=True,
        extra="ignore",
    )

    @field_validator("tag_overlap", mode="before")
    @classmethod
    def _parse_overlap(cls, value: Any) -> int:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return DEFAULT_OVERLAP
        if not math.isfinite(number):
            return DEFAULT_OVERLAP
        return max(1, math.floor(number))

    @field_validator("fallback", "allow_one_tag_fallback", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> bool:
        # Only the literal "true" enables a flag set through the environment.
        if isinstance(value, str):
            return value == "true"
        return bool(value)


def load_similar_products_config() -> SimilarProductsConfig:
    settings = SimilarProductsSettings()
    return SimilarProductsConfig(
        overlap=settings.tag_overlap,
        fallback_enabled=settings.fallback,
        allow_one_tag_fallback=settings.allow_one_tag_fallback,
    )
