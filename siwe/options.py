"""Construction options of SIWE messages and their defaults."""

from typing import Any, Mapping, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .config import load_settings
from .fields import (
    ChainId,
    ISO8601Datetime,
    Nonce,
    OptionalDatetime,
    RequestId,
    Resources,
    Statement,
    generate_nonce,
    utc_now,
)


def _default_issued_at() -> ISO8601Datetime:
    return ISO8601Datetime.from_datetime(utc_now())


def _default_chain_id() -> str:
    return load_settings().default_chain_id


class MessageOptions(BaseModel):
    """Optional parameters of a message, resolved to their defaults.

    Keys may be given in snake_case or camelCase. Values of the wrong type
    are rejected rather than coerced.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    issued_at: ISO8601Datetime = Field(default_factory=_default_issued_at)
    """Defaults to the current UTC time."""
    nonce: Nonce = Field(default_factory=generate_nonce)
    """Defaults to a freshly generated random nonce."""
    chain_id: ChainId = Field(default_factory=_default_chain_id)
    """Defaults to the configured chain, Ethereum mainnet unless overridden."""
    statement: Statement = None
    expiration_time: OptionalDatetime = None
    not_before: OptionalDatetime = None
    request_id: RequestId = Field(
        None, validation_alias=AliasChoices("request_id", "requestId", "requestID")
    )
    resources: Resources = None


def resolve_options(
    options: Union[MessageOptions, Mapping[str, Any], None] = None
) -> MessageOptions:
    """Resolve a partial option bag into a complete set of options."""
    if isinstance(options, MessageOptions):
        return options
    return MessageOptions.model_validate(dict(options or {}))

