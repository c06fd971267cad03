"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Secure defaults (no service keys in code)
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()


class DataStoreConfig(BaseModel):
    """Connection settings for the upstream clinical data store."""

    url: str = Field(..., description="Base URL of the data store")
    service_key: str | None = Field(None, description="Server-side service key (optional)")

    timeout_seconds: float = Field(
        default=10.0, gt=0.0, description="Timeout for an individual fetch"
    )
    max_concurrent_fetches: int = Field(
        default=8, gt=0, description="Maximum number of fetches in flight per request"
    )

    @field_validator("url")
    def validate_url(cls, v: str) -> str:
        if not v:
            raise ValueError("Data store URL must be set in environment or .env file")
        if not v.startswith(("http://", "https://")):
            raise ValueError("Data store URL must start with 'http://' or 'https://'")
        return v.rstrip("/")


class AggregationConfig(BaseModel):
    """Limits and defaults applied when composing dashboard payloads."""

    region_top_n: int = Field(default=5, gt=0, description="Regions kept in a distribution")
    needs_attention_limit: int = Field(
        default=3, ge=0, description="Departments listed as needing attention"
    )
    critical_alert_limit: int = Field(default=10, gt=0, description="Critical alert feed size")
    monitoring_alert_limit: int = Field(
        default=20, gt=0, description="Patient alerts grouped in the monitoring feed"
    )
    icu_alert_limit: int = Field(default=10, gt=0, description="Alerts shown on the ICU view")
    live_vitals_limit: int = Field(default=50, gt=0, description="Readings in the live feed")

    default_timeframe: str = Field(default="24h", description="Operational views timeframe")
    default_kpi_timeframe: str = Field(default="30d", description="KPI report timeframe")
    default_department_days: int = Field(
        default=30, gt=0, description="Lookback for department performance"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    data_store: DataStoreConfig
    aggregation: AggregationConfig
    logging: LoggingConfig

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    data_store_config = DataStoreConfig(
        url=os.getenv("DATA_STORE_URL", ""),
        service_key=os.getenv("DATA_STORE_SERVICE_KEY") or None,
        timeout_seconds=float(os.getenv("FETCH_TIMEOUT_SECONDS", "10.0")),
        max_concurrent_fetches=int(os.getenv("MAX_CONCURRENT_FETCHES", "8")),
    )

    aggregation_config = AggregationConfig(
        region_top_n=int(os.getenv("REGION_TOP_N", "5")),
        critical_alert_limit=int(os.getenv("CRITICAL_ALERT_LIMIT", "10")),
        live_vitals_limit=int(os.getenv("LIVE_VITALS_LIMIT", "50")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        data_store=data_store_config,
        aggregation=aggregation_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"✅ Configuration loaded for {config.environment} environment")

        if config.data_store.service_key:
            print("✅ Data store service key configured")

    except Exception as e:
        print(f"❌ Configuration validation failed: {e}")
        raise


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\n🔧 CONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\n🗄️ DATA STORE")
    print(f"URL: {config.data_store.url}")
    print(f"Fetch Timeout: {config.data_store.timeout_seconds}s")
    print(f"Max Concurrent Fetches: {config.data_store.max_concurrent_fetches}")

    print("\n📊 AGGREGATION")
    print(f"Top Regions: {config.aggregation.region_top_n}")
    print(f"Critical Alert Feed: {config.aggregation.critical_alert_limit}")
    print(f"Default Timeframe: {config.aggregation.default_timeframe}")


if __name__ == "__main__":
    # Test configuration loading
    validate_config()
    print_config_summary()
