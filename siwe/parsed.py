"""SIWE message parsers."""

import re

import abnf

from .defs import BODY, REGEX_MESSAGE, RESOURCE_BULLET
from .grammars import eip4361

FIELDS = ("domain", "address", "statement", *[line.name for line in BODY])

_EXPR = re.compile(REGEX_MESSAGE)


class RegExpParsedMessage:
    """Regex parsed SIWE message."""

    def __init__(self, message: str):
        """Parse a SIWE message."""
        match = _EXPR.fullmatch(message)

        if not match:
            raise ValueError("Message did not match the regular expression.")

        for name in FIELDS:
            setattr(self, name, match.group(name))

        self.resources = match.group("resources")
        if self.resources:
            self.resources = self.resources.split(f"\n{RESOURCE_BULLET}")[1:]


class ABNFParsedMessage:
    """ABNF parsed SIWE message."""

    def __init__(self, message: str):
        """Parse a SIWE message."""
        parser = eip4361.Rule("sign-in-with-ethereum")
        try:
            node = parser.parse_all(message)
        except abnf.ParseError as e:
            raise ValueError("Message did not match the ABNF grammar.") from e

        for name in FIELDS:
            setattr(self, name, None)
        self.resources = None

        for child in node.children:
            name = child.name.lower().replace("-", "_")
            if name in FIELDS:
                setattr(self, name, child.value)

            if name == "resources":
                resources = []
                for resource in child.children:
                    resources.extend(
                        [r.value for r in resource.children if r.name.lower() == "uri"]
                    )
                self.resources = resources
