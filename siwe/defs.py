"""Layout of the EIP-4361 message and the regexes for its fields.

The body lines are described once in ``BODY``; the serializer, the regex and
the ABNF grammar are all built from it.
"""

import re
from typing import Any, NamedTuple

PREAMBLE = " wants you to sign in with your Ethereum account:"
RESOURCES_LABEL = "Resources:"
RESOURCE_BULLET = "- "

URI = (
    "(([^\\s:/?#]+):)?(//([^\\s/?#]*))?([^\\s?#]*)"
    "(\\?([^\\s#]*))?(#(\\S*))?"
)
DATETIME = (
    "([0-9]+)-(0[1-9]|1[012])-(0[1-9]|[12][0-9]|3[01])[Tt]"
    "([01][0-9]|2[0-3]):([0-5][0-9]):([0-5][0-9]|60)(\\.[0-9]+)?"
    "(([Zz])|([+-]([01][0-9]|2[0-3]):[0-5][0-9]))"
)
# These patterns are also used as pydantic field patterns, so they stay within
# the syntax shared by `re` and the Rust regex engine.
STATEMENT = "[^\\x00-\\x1f\\x7f]+"
REQUEST_ID = "(?:[-._~!$&'()*+,;=:@a-zA-Z0-9]|%[0-9a-fA-F]{2})*"


class Line(NamedTuple):
    """A ``<label>: <value>`` line in the body of the message."""

    name: str
    label: str
    regex: str
    abnf: str
    optional: bool = False

    @property
    def rule(self) -> str:
        """Name of the ABNF rule matching the value."""
        return self.name.replace("_", "-")

    def render(self, value: Any) -> str:
        return f"{self.label}: {value}"


BODY = (
    Line("uri", "URI", URI, "URI"),
    Line("version", "Version", "1", '"1"'),
    Line("chain_id", "Chain ID", "[0-9]+", "1*DIGIT"),
    Line("nonce", "Nonce", "[a-zA-Z0-9]{8,}", "8*( ALPHA / DIGIT )"),
    Line("issued_at", "Issued At", DATETIME, "date-time"),
    Line("expiration_time", "Expiration Time", DATETIME, "date-time", True),
    Line("not_before", "Not Before", DATETIME, "date-time", True),
    Line("request_id", "Request ID", REQUEST_ID, "*pchar", True),
)

DOMAIN = f"(?P<domain>[^/?#\\s]+){re.escape(PREAMBLE)}\\n"
ADDRESS = "(?P<address>0x[a-fA-F0-9]{40})\\n\\n"
STATEMENT_LINE = f"((?P<statement>{STATEMENT})\\n)?\\n"
RESOURCES = (
    f"(\\n{re.escape(RESOURCES_LABEL)}"
    f"(?P<resources>(\\n{re.escape(RESOURCE_BULLET)}{URI})+))?"
)


def _body_regex() -> str:
    parts = []
    for index, line in enumerate(BODY):
        part = f"{re.escape(line.label)}: (?P<{line.name}>{line.regex})"
        if index:
            part = f"\\n{part}"
        parts.append(f"({part})?" if line.optional else part)
    return "".join(parts)


REGEX_MESSAGE = f"{DOMAIN}{ADDRESS}{STATEMENT_LINE}{_body_regex()}{RESOURCES}"
