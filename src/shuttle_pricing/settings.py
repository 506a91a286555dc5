from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Input surfaces that each own a debounce timer.
InputSurface = Literal["route", "geocoding", "places"]


def _validate_http_url(v: str, name: str) -> str:
    if not v.startswith(("http://", "https://")):
        raise ValueError(f"{name} must start with http:// or https://")
    return v.rstrip("/")


class MapsSettings(BaseSettings):
    """Geocoding and directions provider."""

    api_key: str = ""
    base_url: str = "https://maps.googleapis.com/maps/api"
    timeout_seconds: float = Field(default=10.0, gt=0, le=60.0)

    model_config = SettingsConfigDict(env_prefix="MAPS_")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _validate_http_url(v, "Maps base URL")

    @model_validator(mode="after")
    def validate_credentials_provided(self) -> "MapsSettings":
        if not self.api_key:
            raise ValueError("Required credential not provided: MAPS_API_KEY")
        return self


class RouteCacheSettings(BaseSettings):
    route_ttl_seconds: float = Field(
        default=300.0,
        ge=60.0,
        le=900.0,
        description="Seconds a resolved route stays valid for pricing",
    )
    route_cache_maxsize: int = Field(default=1000, ge=10)
    coordinate_cache_maxsize: int = Field(
        default=200,
        ge=10,
        le=10000,
        description="Maximum address coordinates kept before oldest-first eviction",
    )

    model_config = SettingsConfigDict(env_prefix="ROUTE_CACHE_")


class DebounceSettings(BaseSettings):
    """Quiet periods per input surface before a provider call is issued."""

    route_calculation_seconds: float = Field(default=2.0, ge=0.1, le=5.0)
    geocoding_seconds: float = Field(default=1.0, ge=0.1, le=5.0)
    places_autocomplete_seconds: float = Field(default=0.8, ge=0.1, le=5.0)

    model_config = SettingsConfigDict(env_prefix="DEBOUNCE_")

    def quiet_period(self, surface: InputSurface) -> float:
        match surface:
            case "route":
                return self.route_calculation_seconds
            case "geocoding":
                return self.geocoding_seconds
            case "places":
                return self.places_autocomplete_seconds
        raise ValueError(f"Unknown input surface: {surface}")


class ProviderLimitSettings(BaseSettings):
    route_calls_per_minute: int = Field(default=5, ge=1)
    geocoding_calls_per_minute: int = Field(default=10, ge=1)
    max_consecutive_errors: int = Field(default=5, ge=1)
    error_cooldown_seconds: float = Field(default=30.0, ge=0.0)

    # Retry configuration
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_base_delay: float = Field(default=2.0, ge=0.0, le=30.0)
    retry_multiplier: float = Field(default=2.0, ge=1.0, le=5.0)

    model_config = SettingsConfigDict(env_prefix="PROVIDER_")


class RecalculationSettings(BaseSettings):
    route_wait_attempts: int = Field(
        default=10,
        ge=1,
        le=60,
        description="Wait intervals allowed for an in-flight route before giving up",
    )
    route_wait_interval_seconds: float = Field(default=1.0, gt=0.0, le=10.0)

    model_config = SettingsConfigDict(env_prefix="RECALC_")

    @property
    def route_wait_timeout_seconds(self) -> float:
        return self.route_wait_attempts * self.route_wait_interval_seconds


class PricingServiceSettings(BaseSettings):
    base_url: str = "http://localhost:5001/api"
    timeout_seconds: float = Field(default=10.0, gt=0, le=60.0)

    model_config = SettingsConfigDict(env_prefix="PRICING_")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return _validate_http_url(v, "Pricing service base URL")


class LoggingSettings(BaseSettings):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["text", "json"] = "text"
    environment: str = "development"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    maps: MapsSettings = Field(default_factory=MapsSettings)
    route_cache: RouteCacheSettings = Field(default_factory=RouteCacheSettings)
    debounce: DebounceSettings = Field(default_factory=DebounceSettings)
    provider: ProviderLimitSettings = Field(default_factory=ProviderLimitSettings)
    recalculation: RecalculationSettings = Field(default_factory=RecalculationSettings)
    pricing: PricingServiceSettings = Field(default_factory=PricingServiceSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
