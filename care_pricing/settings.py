"""Configuration settings for the care pricing estimator."""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PricingAPISettings(BaseSettings):
    """Marketplace backend REST API configuration."""

    base_url: str = "http://localhost:3000"
    timeout: float = Field(default=5.0, gt=0.0, le=60.0)
    night_duty_path: str = "/api/admin/dynamic-pricing/night-duty"
    emergency_path: str = "/api/admin/dynamic-pricing/emergency"
    nursing_prices_path: str = "/api/nursing-prices"
    physiotherapy_prices_path: str = "/api/physiotherapy-prices"
    ambulance_prices_path: str = "/api/ambulance-prices"

    model_config = SettingsConfigDict(env_prefix="PRICING_API_")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Pricing API base URL must start with http:// or https://")
        return v.rstrip("/")


class SurchargeSettings(BaseSettings):
    """Fallback surcharge percentages and the night window."""

    night_duty_percentage: int = Field(
        default=20,
        ge=0,
        le=100,
        description="Night duty surcharge used when the backend setting cannot be fetched",
    )
    emergency_percentage: int = Field(
        default=15,
        ge=0,
        le=100,
        description="Emergency surcharge used when the backend setting cannot be fetched",
    )
    night_start_hour: int = Field(default=18, ge=0, le=23)
    night_end_hour: int = Field(default=7, ge=0, le=23)

    model_config = SettingsConfigDict(env_prefix="SURCHARGE_")

    @model_validator(mode="after")
    def validate_window(self) -> "SurchargeSettings":
        if self.night_start_hour <= self.night_end_hour:
            raise ValueError(
                f"night_start_hour ({self.night_start_hour}) must be after "
                f"night_end_hour ({self.night_end_hour}); the window wraps midnight"
            )
        return self


class TierSettings(BaseSettings):
    """City keyword lists for tier uplift."""

    tier1_cities: list[str] = Field(
        default_factory=lambda: ["vizag", "visakhapatnam", "vijayawada", "guntur"]
    )
    tier2_cities: list[str] = Field(
        default_factory=lambda: ["kakinada", "rajahmundry", "tirupati", "nellore"]
    )

    model_config = SettingsConfigDict(env_prefix="TIER_")

    @field_validator("tier1_cities", "tier2_cities")
    @classmethod
    def normalize_keywords(cls, v: list[str]) -> list[str]:
        keywords = [keyword.strip().lower() for keyword in v]
        if any(not keyword for keyword in keywords):
            raise ValueError("Tier keywords must be non-empty")
        return keywords


class Settings(BaseSettings):
    """Root settings container."""

    api: PricingAPISettings = Field(default_factory=PricingAPISettings)
    surcharges: SurchargeSettings = Field(default_factory=SurchargeSettings)
    tiers: TierSettings = Field(default_factory=TierSettings)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"
    environment: str = "development"

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
