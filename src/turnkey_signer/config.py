"""Client configuration using pydantic-settings.

Values are read from environment variables (or a local .env file).
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TURNKEY_API_BASE_URL = "https://api.turnkey.com"


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Service
    # ======================
    turnkey_base_url: str = Field(
        default=TURNKEY_API_BASE_URL, description="Signing service base URL"
    )
    turnkey_organization_id: str = Field(default="", description="Organization ID")

    # ======================
    # API credentials
    # ======================
    turnkey_api_private_key: Optional[str] = Field(
        default=None, description="P-256 API private key (hex) used to stamp requests"
    )
    turnkey_api_public_key: Optional[str] = Field(
        default=None, description="Compressed API public key (hex), checked against the private key"
    )
    stamp_header: str = Field(default="X-Stamp", description="Header carrying the request stamp")

    # ======================
    # Signer
    # ======================
    turnkey_sign_with: str = Field(
        default="", description="Address (or key ID) the service signs raw payloads with"
    )
    chain_id: Optional[int] = Field(default=None, description="EIP-155 chain ID for recovery ids")

    # ======================
    # Timing (seconds)
    # ======================
    activity_poll_interval: float = Field(
        default=1.0, description="Delay between activity status queries"
    )
    activity_timeout: float = Field(
        default=30.0, description="Maximum time to wait for an activity to finish"
    )
    http_timeout: float = Field(default=30.0, description="Per-request HTTP timeout")

    debug: bool = Field(default=False, description="Enable debug logging")

    @property
    def has_credentials(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.turnkey_api_private_key)

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "base_url": self.turnkey_base_url,
            "organization_id": self.turnkey_organization_id or "(not set)",
            "api_private_key": "***" if self.turnkey_api_private_key else "(not set)",
            "api_public_key": self.turnkey_api_public_key or "(not set)",
            "sign_with": self.turnkey_sign_with or "(not set)",
            "chain_id": self.chain_id,
            "stamp_header": self.stamp_header,
            "polling": {
                "interval": self.activity_poll_interval,
                "timeout": self.activity_timeout,
            },
            "http_timeout": self.http_timeout,
            "debug": self.debug,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging for applications embedding the client."""
    settings = settings or get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
