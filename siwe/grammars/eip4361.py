"""Top-level ABNF definition."""

from typing import ClassVar, List

from abnf.grammars import rfc3986, rfc5234
from abnf.grammars.misc import load_grammar_rules
from abnf.parser import Rule as _Rule

from ..defs import BODY, PREAMBLE, RESOURCE_BULLET, RESOURCES_LABEL
from . import rfc3339


def _body_rule() -> str:
    parts = []
    for index, line in enumerate(BODY):
        part = f'%s"{line.label}: " {line.rule}'
        if index:
            part = f"LF {part}"
        parts.append(f"[ {part} ]" if line.optional else part)
    return " ".join(parts)


@load_grammar_rules(
    [
        # RFC 3986
        ("URI", rfc3986.Rule("URI")),
        ("authority", rfc3986.Rule("authority")),
        ("pchar", rfc3986.Rule("pchar")),
        # RFC 5234
        ("LF", rfc5234.Rule("LF")),
        ("HEXDIG", rfc5234.Rule("HEXDIG")),
        ("ALPHA", rfc5234.Rule("ALPHA")),
        ("DIGIT", rfc5234.Rule("DIGIT")),
        # RFC 3339
        ("date-time", rfc3339.Rule("date-time")),
    ]
)
class Rule(_Rule):
    """Rules from EIP-4361."""

    grammar: ClassVar[List] = [
        f'sign-in-with-ethereum = domain %s"{PREAMBLE}" LF address LF LF '
        f"[ statement LF ] LF {_body_rule()} "
        f'[ LF %s"{RESOURCES_LABEL}" resources ]',
        "domain = authority",
        'address = "0x" 40HEXDIG',
        "statement = 1*( %x20-7E / %x80-10FFFF )",
        # "uri" resolves to the imported RFC 3986 rule, names are case-insensitive
        *[
            f"{line.rule} = {line.abnf}"
            for line in BODY
            if line.rule.lower() != line.abnf.lower()
        ],
        # at least one resource must follow the keyword
        "resources = 1*( LF resource )",
        f'resource = "{RESOURCE_BULLET}" URI',
    ]
