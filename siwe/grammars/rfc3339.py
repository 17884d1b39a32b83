"""Date ABNF definition.

Ranges are narrowed to those accepted by ``defs.DATETIME`` so that both
parsers reject the same timestamps.
"""

from typing import ClassVar, List

from abnf.grammars import rfc5234
from abnf.grammars.misc import load_grammar_rules
from abnf.parser import Rule as _Rule


@load_grammar_rules(
    [
        # RFC 5234
        ("DIGIT", rfc5234.Rule("DIGIT")),
    ]
)
class Rule(_Rule):
    """Rules from RFC 3339."""

    grammar: ClassVar[List] = [
        "date-fullyear = 1*DIGIT",
        'date-month = "0" %x31-39 / "1" %x30-32',
        'date-mday = "0" %x31-39 / ( "1" / "2" ) DIGIT / "3" %x30-31',
        'time-hour = ( "0" / "1" ) DIGIT / "2" %x30-33',
        "time-minute = %x30-35 DIGIT",
        # leap second
        'time-second = %x30-35 DIGIT / "60"',
        'time-secfrac = "." 1*DIGIT',
        'time-numoffset = ( "+" / "-" ) time-hour ":" time-minute',
        'time-offset = "Z" / time-numoffset',
        'partial-time = time-hour ":" time-minute ":" time-second [ time-secfrac ]',
        'full-date = date-fullyear "-" date-month "-" date-mday',
        "full-time = partial-time time-offset",
        'date-time = full-date "T" full-time',
    ]
