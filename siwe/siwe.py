"""Main module for SIWE messages construction and validation."""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple, Union

import eth_utils
import structlog
from eth_account import Account
from eth_account.messages import SignableMessage, _hash_eip191_message, encode_defunct
from eth_keys.exceptions import BadSignature
from eth_typing import ChecksumAddress
from pydantic import BaseModel, ConfigDict, Field, field_validator
from web3 import HTTPProvider, Web3
from web3.exceptions import BadFunctionCallOutput

from .config import load_settings
from .defs import BODY, PREAMBLE, RESOURCE_BULLET, RESOURCES_LABEL
from .fields import (
    AnyUrlStr,
    ChainId,
    ISO8601Datetime,
    Nonce,
    OptionalDatetime,
    RequestId,
    Resources,
    Statement,
    VersionEnum,
    datetime_from_iso8601_string,
    utc_now,
)
from .options import MessageOptions, resolve_options
from .parsed import ABNFParsedMessage, RegExpParsedMessage

logger = structlog.get_logger()

EIP1271_CONTRACT_ABI = [
    {
        "inputs": [
            {"internalType": "bytes32", "name": " _message", "type": "bytes32"},
            {"internalType": "bytes", "name": " _signature", "type": "bytes"},
        ],
        "name": "isValidSignature",
        "outputs": [{"internalType": "bytes4", "name": "", "type": "bytes4"}],
        "stateMutability": "view",
        "type": "function",
    }
]
EIP1271_MAGICVALUE = bytes.fromhex("1626ba7e")

EMPTY_SIGNATURE = "Signature cannot be empty"
RECOVERY_FAILED = "Failed to recover public key from signature"
ADDRESS_MISMATCH = "Signer address must match message address"

Signature = Union[str, bytes]


class VerificationError(Exception):
    """Top-level validation and verification exception."""

    pass


class InvalidMessage(VerificationError, ValueError):
    """The message is malformed or cannot be accepted yet."""

    pass


class InvalidSignature(VerificationError):
    """The signature does not match the message."""

    def __init__(self, reason: str = ADDRESS_MISMATCH):
        """Construct the exception with the cause of the failure."""
        super().__init__(reason)
        self.reason = reason


class ExpiredMessage(VerificationError):
    """The message is not valid any more."""

    pass


class NotYetValidMessage(InvalidMessage):
    """The message is not yet valid."""

    pass


class DomainMismatch(VerificationError):
    """The message does not contain the expected domain."""

    pass


class NonceMismatch(VerificationError):
    """The message does not contain the expected nonce."""

    pass


def _is_present(value: Any) -> bool:
    return value is not None and bool(str(value).strip())


def _is_empty_signature(signature: Optional[Signature]) -> bool:
    if signature is None:
        return True
    if isinstance(signature, str):
        return not signature.strip()
    return len(signature) == 0


def _signature_preview(signature: Optional[Signature]) -> Optional[str]:
    if isinstance(signature, (bytes, bytearray)):
        return bytes(signature[:4]).hex()
    return signature[:10] if signature else signature


def _as_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


class SiweMessage(BaseModel):
    """A Sign-in with Ethereum (EIP-4361) message."""

    model_config = ConfigDict(frozen=True)

    domain: str = Field(pattern="^[^/?#\\s]+$")
    """RFC 4501 dns authority that is requesting the signing."""
    address: ChecksumAddress
    """Ethereum address performing the signing conformant to capitalization encoded
    checksum specified in EIP-55 where applicable.
    """
    uri: AnyUrlStr
    """RFC 3986 URI referring to the resource that is the subject of the signing."""
    version: VersionEnum
    """Current version of the message."""
    chain_id: ChainId
    """EIP-155 Chain ID to which the session is bound, kept as the decimal string
    found in the message.
    """
    issued_at: ISO8601Datetime
    """ISO 8601 datetime string of the current time."""
    nonce: Nonce
    """Randomized token used to prevent replay attacks, at least 8 alphanumeric
    characters. Use generate_nonce() to generate a secure nonce and store it for
    verification later.
    """
    statement: Statement = None
    """Human-readable assertion that the user will sign, it must not contain
    control characters such as `\n`.
    """
    expiration_time: OptionalDatetime = None
    """ISO 8601 datetime string that, if present, indicates when the signed
    authentication message is no longer valid.
    """
    not_before: OptionalDatetime = None
    """ISO 8601 datetime string that, if present, indicates when the signed
    authentication message will become valid.
    """
    request_id: RequestId = None
    """System-specific identifier that may be used to uniquely refer to the sign-in
    request.
    """
    resources: Resources = None
    """List of information or references to information the user wishes to have resolved
    as part of authentication by the relying party. They are expressed as RFC 3986 URIs
    separated by `\n- `.
    """

    @field_validator("address")
    @classmethod
    def address_is_checksum_address(cls, v: str) -> str:
        """Validate the address follows EIP-55 formatting."""
        if not Web3.is_checksum_address(v):
            raise ValueError("Message `address` must be in EIP-55 format")
        return v

    @classmethod
    def from_message(cls, message: str, abnf: bool = True) -> "SiweMessage":
        """Parse a message in its EIP-4361 format.

        :raises InvalidMessage: if the text does not follow the grammar or one of
        its fields is invalid.
        """
        try:
            if abnf:
                parsed_message = ABNFParsedMessage(message=message)
            else:
                parsed_message = RegExpParsedMessage(message=message)
            return cls(**vars(parsed_message))
        except ValueError as e:
            logger.debug("siwe_parse_failed", abnf=abnf, error=str(e))
            raise InvalidMessage(str(e)) from e

    def replace(self, **changes: Any) -> "SiweMessage":
        """Return a new, validated message with some of the fields replaced."""
        return type(self).model_validate({**self.model_dump(), **changes})

    def prepare_message(self) -> str:
        """Serialize to the EIP-4361 format for signing.

        It can then be passed to an EIP-191 signing function.

        :return: EIP-4361 formatted message, ready for EIP-191 signing.
        """
        header = f"{self.domain}{PREAMBLE}"
        prefix = "\n".join([header, self.address])

        if _is_present(self.statement):
            prefix = "\n\n".join([prefix, self.statement])
        else:
            prefix += "\n"

        suffix_array = []
        for line in BODY:
            value = getattr(self, line.name)
            if _is_present(value):
                suffix_array.append(line.render(value))

        if self.resources:
            resources_field = "\n".join(
                [RESOURCES_LABEL]
                + [f"{RESOURCE_BULLET}{resource}" for resource in self.resources]
            )
            suffix_array.append(resources_field)

        suffix = "\n".join(suffix_array)

        return "\n\n".join([prefix, suffix])

    def verify(
        self,
        signature: Signature,
        *,
        domain: Optional[str] = None,
        nonce: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        provider: Optional[HTTPProvider] = None,
    ) -> None:
        """Verify the validity of the message and its signature.

        :param signature: Signature to check against the current message, as bytes
        or as a hex string.
        :param domain: Domain expected to be in the current message.
        :param nonce: Nonce expected to be in the current message.
        :param timestamp: Timestamp used to verify the expiry date and other dates
        fields. Uses the current time by default.
        :param provider: A Web3 provider able to perform a contract check, this is
        required if support for Smart Contract Wallets that implement EIP-1271 is
        needed. It is also configurable with the environment variable
        `SIWE_WEB3_PROVIDER_URI`
        :return: None if the message is valid and raises an exception otherwise
        """
        verification_time = utc_now() if timestamp is None else _as_utc(timestamp)
        log = logger.bind(domain=self.domain, address=self.address, nonce=self.nonce)
        log.debug(
            "siwe_verification_attempt",
            signature_prefix=_signature_preview(signature),
            verification_time=verification_time.isoformat(),
        )

        try:
            self._verify(signature, domain, nonce, verification_time, provider)
        except VerificationError as e:
            log.warning(
                "siwe_verification_failed",
                error_type=type(e).__name__,
                reason=str(e) or None,
            )
            raise

        log.info("siwe_verification_success")

    def _verify(
        self,
        signature: Signature,
        domain: Optional[str],
        nonce: Optional[str],
        verification_time: datetime,
        provider: Optional[HTTPProvider],
    ) -> None:
        if domain is not None and self.domain != domain:
            raise DomainMismatch()
        if nonce is not None and self.nonce != nonce:
            raise NonceMismatch()

        if _is_present(self.expiration_time):
            if verification_time >= datetime_from_iso8601_string(self.expiration_time):
                raise ExpiredMessage()
        if _is_present(self.not_before):
            if verification_time < datetime_from_iso8601_string(self.not_before):
                raise NotYetValidMessage()

        if _is_empty_signature(signature):
            raise InvalidSignature(EMPTY_SIGNATURE)

        message = encode_defunct(text=self.prepare_message())

        if provider is None:
            provider_uri = load_settings().provider_uri
            if provider_uri:
                provider = HTTPProvider(endpoint_uri=provider_uri)

        try:
            address = Account.recover_message(message, signature=signature)
        except (
            ValueError,
            TypeError,
            BadSignature,
            eth_utils.exceptions.ValidationError,
        ) as e:
            # contract wallet signatures are not recoverable
            if provider is None:
                raise InvalidSignature(RECOVERY_FAILED) from e
            address = None

        if address == self.address:
            return

        if provider is not None and check_contract_wallet_signature(
            address=self.address,
            message=message,
            signature=signature,
            w3=Web3(provider=provider),
        ):
            return

        if address is None:
            raise InvalidSignature(RECOVERY_FAILED)
        raise InvalidSignature(ADDRESS_MISMATCH)


def check_contract_wallet_signature(
    address: ChecksumAddress, message: SignableMessage, signature: Signature, w3: Web3
) -> bool:
    """Call the EIP-1271 method for a Smart Contract wallet.

    :param address: The address of the contract
    :param message: The EIP-4361 formatted message
    :param signature: The EIP-1271 signature
    :param w3: A Web3 provider able to perform a contract check.
    :return: True if the signature is valid per EIP-1271.
    """
    try:
        signature_bytes = (
            bytes(signature)
            if isinstance(signature, (bytes, bytearray))
            else eth_utils.decode_hex(signature)
        )
    except ValueError:
        return False

    contract = w3.eth.contract(address=address, abi=EIP1271_CONTRACT_ABI)
    hash_ = _hash_eip191_message(message)
    try:
        response = contract.caller.isValidSignature(hash_, signature_bytes)
        return bytes(response) == EIP1271_MAGICVALUE
    except BadFunctionCallOutput:
        return False


def create_message(
    domain: str,
    address: str,
    uri: str,
    version: str = "1",
    options: Union[MessageOptions, Mapping[str, Any], None] = None,
) -> SiweMessage:
    """Build a message, filling the missing options with their defaults.

    :param options: A `MessageOptions` or a mapping of its fields, in snake_case or
    camelCase.
    """
    resolved = resolve_options(options)
    return SiweMessage(
        domain=domain,
        address=address,
        uri=uri,
        version=version,
        **resolved.model_dump(),
    )


def parse_message(message: str, abnf: bool = True) -> SiweMessage:
    """Parse an EIP-4361 message, raising `InvalidMessage` on failure."""
    return SiweMessage.from_message(message, abnf=abnf)


def prepare_message(message: SiweMessage) -> str:
    """Serialize a message to the exact text to be signed."""
    return message.prepare_message()


def validate_message(
    message: SiweMessage, signature: Signature, **kwargs: Any
) -> Tuple[bool, Optional[Exception]]:
    """Verify a message and return the verdict instead of raising.

    Takes the same keyword arguments as `SiweMessage.verify`.

    :return: `(True, None)` if valid, `(False, error)` otherwise.
    """
    try:
        message.verify(signature, **kwargs)
    except (VerificationError, ValueError) as e:
        return False, e
    return True, None
