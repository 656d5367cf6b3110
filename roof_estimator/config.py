from typing import Dict, List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    env: str = Field(default="local")
    log_level: str = Field(default="INFO")

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    cors_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed origins",
    )
    request_id_header: str = Field(default="X-Request-Id")

    # Geocoding + building insights (roof measurement)
    google_maps_api_key: str = Field(default="")
    geocode_url: str = Field(default="https://maps.googleapis.com/maps/api/geocode/json")
    building_insights_url: str = Field(
        default="https://solar.googleapis.com/v1/buildingInsights:findClosest",
    )
    solar_required_quality: str = Field(default="HIGH")
    measurement_timeout_seconds: float = Field(default=8.0)

    # CRM contact write-back
    crm_base_url: str = Field(default="https://services.leadconnectorhq.com")
    crm_api_token: str = Field(default="")
    crm_estimate_field_id: str = Field(default="")
    crm_api_version: str = Field(default="2021-07-28")
    crm_timeout_seconds: float = Field(default=10.0)
    crm_max_attempts: int = Field(default=2, ge=1, le=5)
    crm_backoff_seconds: float = Field(default=0.5, ge=0)

    # Pricing
    pricing_strategy: Literal["story", "material"] = Field(default="story")
    price_per_square: Dict[int, float] = Field(
        default_factory=lambda: {1: 500.0, 2: 575.0, 3: 650.0},
    )
    material_base_prices: Dict[str, float] = Field(
        default_factory=lambda: {
            "asphalt": 500.0,
            "metal": 950.0,
            "tile": 1200.0,
            "clay": 1200.0,
        },
    )
    story_multipliers: Dict[int, float] = Field(
        default_factory=lambda: {1: 1.0, 2: 1.15, 3: 1.30},
    )
    currency: str = Field(default="USD")

    # Callback result store
    result_store_backend: Literal["memory", "s3"] = Field(default="memory")
    result_store_ttl_seconds: int = Field(default=3600, ge=1)
    result_store_max_entries: int = Field(default=10_000, ge=1)

    s3_endpoint: str = Field(default="http://minio:9000")
    s3_access_key: str = Field(default="minioadmin")
    s3_secret_key: str = Field(default="minioadmin")
    s3_region: str = Field(default="us-east-1")
    s3_secure: bool = Field(default=False)

    s3_bucket_results: str = Field(default="roof-estimates")
    s3_results_prefix: str = Field(default="callbacks")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RFE_",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


settings = Settings()
