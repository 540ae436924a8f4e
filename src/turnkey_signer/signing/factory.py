"""Signer factory.

Creates the remote signer from configuration:
- TURNKEY_ORGANIZATION_ID: organization holding the signing key
- TURNKEY_API_PRIVATE_KEY (+ optional TURNKEY_API_PUBLIC_KEY): stamping key
- TURNKEY_SIGN_WITH: address the service signs with
- CHAIN_ID: optional chain for EIP-155 recovery values
"""

import logging
from typing import Optional

from turnkey_signer.activity.client import ActivityClient
from turnkey_signer.config import Settings, get_settings
from turnkey_signer.errors import ConfigurationError
from turnkey_signer.signing.turnkey import TurnkeySigner

logger = logging.getLogger(__name__)

_signer_instance: Optional[TurnkeySigner] = None


def create_signer(settings: Settings) -> TurnkeySigner:
    """Build a signer from explicit settings.

    Raises:
        ConfigurationError: If a required setting is missing
    """
    missing = []
    if not settings.turnkey_organization_id:
        missing.append("TURNKEY_ORGANIZATION_ID")
    if not settings.turnkey_api_private_key:
        missing.append("TURNKEY_API_PRIVATE_KEY")
    if not settings.turnkey_sign_with:
        missing.append("TURNKEY_SIGN_WITH")
    if missing:
        raise ConfigurationError(f"Missing settings: {', '.join(missing)}")

    client = ActivityClient.from_settings(settings)
    return TurnkeySigner(client, settings.turnkey_sign_with, settings.chain_id)


def get_signer() -> TurnkeySigner:
    """Get the configured signer instance.

    Returns singleton instance built from environment settings.
    """
    global _signer_instance

    if _signer_instance is not None:
        return _signer_instance

    settings = get_settings()
    logger.info(
        f"Initializing remote signer for organization {settings.turnkey_organization_id}"
    )
    _signer_instance = create_signer(settings)
    return _signer_instance


def reset_signer():
    """Reset the signer instance (for testing)."""
    global _signer_instance
    _signer_instance = None
    get_settings.cache_clear()


def get_signer_info() -> dict:
    """Get information about the current signer configuration."""
    signer = get_signer()

    return {
        "class": signer.__class__.__name__,
        "address": signer.address,
        "chain_id": signer.chain_id,
        "base_url": signer.client.base_url,
        "organization_id": signer.client.organization_id,
    }
