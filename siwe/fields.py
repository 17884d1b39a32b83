"""Field types shared by messages and message options."""

import re
import secrets
import string
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from pydantic import AnyUrl, BeforeValidator, Field, TypeAdapter
from pydantic_core import core_schema
from typing_extensions import Annotated

from .config import load_settings
from .defs import DATETIME, REQUEST_ID, STATEMENT

_ALPHANUMERICS = string.ascii_letters + string.digits
_DATETIME = re.compile(DATETIME)
_FRACTION = re.compile(r"\.([0-9]+)")


def generate_nonce(length: Optional[int] = None) -> str:
    """Generate a cryptographically sound nonce."""
    if length is None:
        length = load_settings().nonce_length
    if length < 8:
        raise ValueError("Nonce must be at least 8 characters long")
    return "".join(secrets.choice(_ALPHANUMERICS) for _ in range(length))


class VersionEnum(str, Enum):
    """EIP-4361 versions."""

    one = "1"

    def __str__(self):
        """EIP-4361 representation of the enum field."""
        return self.value


# NOTE: Do not override the original uri string, just do validation
# https://github.com/pydantic/pydantic/issues/7186#issuecomment-1874338146
AnyUrlTypeAdapter = TypeAdapter(AnyUrl)
AnyUrlStr = Annotated[
    str,
    BeforeValidator(lambda value: AnyUrlTypeAdapter.validate_python(value) and value),
]


def datetime_from_iso8601_string(val: str) -> datetime:
    """Convert an RFC 3339 date-time string into an aware datetime object."""
    if not isinstance(val, str) or not _DATETIME.fullmatch(val):
        raise ValueError(f"Invalid RFC 3339 date-time: {val!r}")
    value = val.upper().replace("Z", "+00:00")
    # fromisoformat only reads 3 or 6 fractional digits before Python 3.11
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value)
    return datetime.fromisoformat(value)


def utc_now() -> datetime:
    """Get the current datetime as UTC timezone."""
    return datetime.now(tz=timezone.utc)


# NOTE: Do not override the original string, but ensure we do timestamp validation
class ISO8601Datetime(str):
    """A special field class used to denote ISO-8601 Datetime strings."""

    def __init__(self, val: str):
        """Validate ISO-8601 string."""
        # NOTE: `self` is already this class, we are just running our validation here
        datetime_from_iso8601_string(val)

    @classmethod
    def __get_pydantic_core_schema__(cls, source, handler):
        """Create valid pydantic schema object for this type."""
        return core_schema.no_info_before_validator_function(
            _datetime_to_string,
            core_schema.no_info_after_validator_function(
                cls, core_schema.str_schema()
            ),
        )

    @classmethod
    def from_datetime(
        cls, dt: datetime, timespec: str = "milliseconds"
    ) -> "ISO8601Datetime":
        """Create an ISO-8601 formatted string from a datetime object."""
        # NOTE: Only a useful classmethod for creating these objects
        return ISO8601Datetime(
            dt.astimezone(tz=timezone.utc)
            .isoformat(timespec=timespec)
            .replace("+00:00", "Z")
        )


def _datetime_to_string(value: Any) -> Any:
    if isinstance(value, datetime):
        return ISO8601Datetime.from_datetime(value)
    return value


def _blank_to_none(value: Any) -> Any:
    # blank optional fields are treated as absent everywhere
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, (list, tuple)) and not value:
        return None
    return value


def _chain_id_to_string(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


ChainId = Annotated[
    str, Field(pattern="^[0-9]+$"), BeforeValidator(_chain_id_to_string)
]
Nonce = Annotated[str, Field(pattern="^[a-zA-Z0-9]{8,}$")]
Statement = Annotated[
    Optional[str], Field(pattern=f"^{STATEMENT}$"), BeforeValidator(_blank_to_none)
]
RequestId = Annotated[
    Optional[str], Field(pattern=f"^{REQUEST_ID}$"), BeforeValidator(_blank_to_none)
]
OptionalDatetime = Annotated[
    Optional[ISO8601Datetime], BeforeValidator(_blank_to_none)
]
Resources = Annotated[Optional[List[AnyUrlStr]], BeforeValidator(_blank_to_none)]
