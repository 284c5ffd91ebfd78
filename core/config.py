"""
Configuration management using Pydantic Settings
Handles environment variables and validation
"""
from functools import lru_cache
from typing import Optional

from pydantic import ConfigDict, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Environment
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    testing: bool = Field(default=False)

    # Application
    app_name: str = "OPR Digital"
    app_version: str = "0.1.0"
    organization: str = Field(default="SMA MAIWP Labuan")

    # Database
    database_url: str = Field(default="sqlite:///./opr_digital.db")
    database_echo: bool = Field(default=False)

    # Remote sync gateway (document store + metadata sheet web app)
    gateway_url: Optional[str] = Field(default=None, description="Web app endpoint receiving synced reports")
    gateway_token: Optional[SecretStr] = Field(default=None)
    request_timeout: int = Field(default=30)
    sync_timeout_seconds: float = Field(default=60.0, gt=0)

    # Lifecycle timings
    sync_return_delay_seconds: float = Field(default=2.0, ge=0)
    toast_duration_seconds: float = Field(default=3.0, gt=0)

    # Dashboard
    dashboard_recent_limit: int = Field(default=5, ge=1)

    # Rendering
    render_scale: float = Field(default=2.0)
    render_timeout_ms: int = Field(default=15000)

    # Distribution hosts
    export_dir: str = Field(default="exports")
    share_dir: Optional[str] = Field(default=None, description="Parent directory for session share links")

    # Monitoring
    prometheus_enabled: bool = Field(default=True)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        allowed = ["development", "test", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v, info):
        if info.data.get("testing") and not v.startswith("sqlite"):
            # Force SQLite for testing
            return "sqlite:///:memory:"
        return v

    @field_validator("render_scale")
    @classmethod
    def validate_render_scale(cls, v):
        if v < 2.0:
            raise ValueError("render_scale must be at least 2 for legible output")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Validate production-specific settings after all fields are set"""
        if self.environment == "production" and not self.gateway_url:
            raise ValueError("gateway_url is required in production")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def gateway_configured(self) -> bool:
        return bool(self.gateway_url)

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="OPR_",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    def model_dump(self, **kwargs):
        """Override to mask sensitive fields when serializing"""
        data = super().model_dump(**kwargs)

        for field in ["gateway_token"]:
            if field in data and data[field]:
                if hasattr(data[field], "get_secret_value"):
                    value = data[field].get_secret_value()
                else:
                    value = str(data[field])

                # Keep first 4 chars for identification
                if len(value) > 4:
                    data[field] = value[:4] + "*" * (len(value) - 4)
                else:
                    data[field] = "*" * len(value)

        return data


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
