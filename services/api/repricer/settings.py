"""Application settings via Pydantic Settings."""

from functools import lru_cache
import json

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Variant Repricer API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8080

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # CORS
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        validation_alias=AliasChoices("CORS_ORIGINS", "ALLOWED_ORIGINS"),
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v: object) -> list[str]:
        """
        Accept either:
        - JSON array string: '["https://a.com","http://localhost:3000"]'
        - Comma-separated string: "https://a.com,http://localhost:3000"
        - Already-parsed list[str]
        """
        if v is None:
            return []
        if isinstance(v, list):
            return [str(x).strip() for x in v if str(x).strip()]
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return []
            if s.startswith("["):
                try:
                    parsed = json.loads(s)
                except json.JSONDecodeError:
                    parsed = s.split(",")
                if isinstance(parsed, list):
                    return [str(x).strip() for x in parsed if str(x).strip()]
                return [str(parsed).strip()]
            return [part.strip() for part in s.split(",") if part.strip()]
        return [str(v).strip()] if str(v).strip() else []

    # GoldAPI (reference metal rate)
    goldapi_key: str = Field(
        default="",
        validation_alias=AliasChoices("GOLDAPI_KEY", "GOLDAPI_API_KEY"),
    )
    metal_rate_symbol: str = Field(
        default="XAU",
        validation_alias=AliasChoices("METAL_RATE_SYMBOL"),
    )
    metal_rate_currency: str = Field(
        default="INR",
        validation_alias=AliasChoices("METAL_RATE_CURRENCY"),
    )
    metal_rate_premium: float = Field(
        default=0.05,
        validation_alias=AliasChoices("METAL_RATE_PREMIUM"),
        ge=0.0,
        le=1.0,
        description="Premium added on top of the 24k per-gram spot rate when suggesting a base price.",
    )

    # Repricing
    reprice_group_size: int = Field(
        default=5,
        validation_alias=AliasChoices("REPRICE_GROUP_SIZE"),
        ge=1,
        le=50,
        description="Products repriced concurrently per group (bounds load on the catalog API).",
    )
    attribute_namespace: str = Field(
        default="custom",
        validation_alias=AliasChoices("ATTRIBUTE_NAMESPACE"),
    )
    gem_cost_attribute_key: str = Field(
        default="diamond_price",
        validation_alias=AliasChoices("GEM_COST_ATTRIBUTE_KEY"),
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
