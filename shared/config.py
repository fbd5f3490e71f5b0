"""
Shared configuration management for the Kong Adapter.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AdapterConfig(BaseSettings):
    """Process configuration, read from KONG_ADAPTER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KONG_ADAPTER_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Service
    service_name: str = Field(default="kong-adapter")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3002)

    # Remote services
    portal_api_url: str = Field(default="http://portal-api:3001/")
    kong_admin_url: str = Field(default="http://kong:8001/")
    http_timeout: float = Field(default=10.0)

    # Portal impersonation
    impersonation_header: str = Field(default="X-UserId")
    admin_user_id: str = Field(default="1")


def get_config(**overrides) -> AdapterConfig:
    """Get the adapter configuration."""
    return AdapterConfig(**overrides)
