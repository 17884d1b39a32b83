"""Library for EIP-4361 Sign-In with Ethereum."""

# flake8: noqa: F401
from .config import SiweSettings, load_settings
from .fields import ISO8601Datetime, generate_nonce
from .options import MessageOptions
from .siwe import (
    DomainMismatch,
    ExpiredMessage,
    InvalidMessage,
    InvalidSignature,
    NonceMismatch,
    NotYetValidMessage,
    SiweMessage,
    VerificationError,
    create_message,
    parse_message,
    prepare_message,
    validate_message,
)
