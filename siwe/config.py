"""Library settings loaded from the environment."""

import os
from typing import Optional

from pydantic import BaseModel, Field


class SiweSettings(BaseModel):
    """Defaults used when building and verifying messages.

    Environment variables:
        SIWE_DEFAULT_CHAIN_ID: Chain ID used when none is given (default "1")
        SIWE_NONCE_LENGTH: Length of generated nonces (default 11, at least 8)
        SIWE_WEB3_PROVIDER_URI: HTTP provider used for EIP-1271 checks
    """

    default_chain_id: str = Field(default="1", pattern="^[0-9]+$")
    nonce_length: int = Field(default=11, ge=8)
    provider_uri: Optional[str] = None


def load_settings() -> SiweSettings:
    """Load the settings from the environment variables."""
    kwargs: dict = {}

    chain_id = os.environ.get("SIWE_DEFAULT_CHAIN_ID")
    if chain_id:
        kwargs["default_chain_id"] = chain_id

    nonce_length = os.environ.get("SIWE_NONCE_LENGTH")
    if nonce_length:
        kwargs["nonce_length"] = nonce_length

    provider_uri = os.environ.get("SIWE_WEB3_PROVIDER_URI")
    if provider_uri:
        kwargs["provider_uri"] = provider_uri

    return SiweSettings(**kwargs)
