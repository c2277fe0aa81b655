from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Talla Storefront API"
    env: str = "dev"
    log_level: str = "INFO"
    database_url: str = Field(default="sqlite:///./storefront.db")
    redis_url: str = Field(default="redis://localhost:6379/0")
    cache_enabled: bool = True
    cache_schema_version: str = "1"
    admin_token: str = "dev-admin-token"
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    shopify_store_domain: str = "talla.myshopify.com"
    shopify_storefront_api_version: str = "2025-01"
    shopify_storefront_token: str = ""
    storefront_timeout_seconds: float = 10.0
    storefront_max_retries: int = 2
    storefront_retry_backoff_seconds: float = 0.5

    analytics_enabled: bool = False
    analytics_data_api_url: str = ""
    analytics_data_api_key: str = ""
    analytics_data_source: str = "Cluster0"
    analytics_database: str = "analytics"
    analytics_timeout_seconds: float = 10.0
    analytics_max_retries: int = 2
    analytics_retry_backoff_seconds: float = 0.5

    model_config = SettingsConfigDict(env_file=".env", env_prefix="STOREFRONT_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
