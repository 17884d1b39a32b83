import importlib
import re
import warnings

import abnf
import pytest

from siwe.defs import BODY, REGEX_MESSAGE
from siwe.grammars import eip4361

MESSAGE = (
    "service.org wants you to sign in with your Ethereum account:\n"
    "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2\n\n\n"
    "URI: https://service.org/login\n"
    "Version: 1\n"
    "Chain ID: 1\n"
    "Nonce: 32891757\n"
    "Issued At: 2021-09-30T16:25:24.000Z"
)


class TestBody:
    def test_field_order(self):
        assert [line.label for line in BODY] == [
            "URI",
            "Version",
            "Chain ID",
            "Nonce",
            "Issued At",
            "Expiration Time",
            "Not Before",
            "Request ID",
        ]

    def test_required_fields_come_first(self):
        optional = [line.optional for line in BODY]
        assert optional == sorted(optional)

    def test_render(self):
        assert BODY[2].render("137") == "Chain ID: 137"

    def test_rule_names(self):
        assert [line.rule for line in BODY][2:5] == ["chain-id", "nonce", "issued-at"]


class TestRegex:
    expr = re.compile(REGEX_MESSAGE)

    def test_captures(self):
        match = self.expr.fullmatch(MESSAGE)
        assert match.group("domain") == "service.org"
        assert match.group("chain_id") == "1"
        assert match.group("statement") is None

    @pytest.mark.parametrize(
        "timestamp",
        [
            "2021-09-30T16:25:24Z",
            "2021-09-30T16:25:24.123456Z",
            "2021-09-30t16:25:24z",
            "2021-09-30T16:25:24+02:00",
            "2021-09-30T16:25:24-11:30",
        ],
    )
    def test_timestamps(self, timestamp):
        message = MESSAGE.replace("2021-09-30T16:25:24.000Z", timestamp)
        assert self.expr.fullmatch(message).group("issued_at") == timestamp

    @pytest.mark.parametrize(
        "timestamp",
        ["2021-09-30 16:25:24Z", "2021-09-30T16:25:24", "2021-09-30T24:00:00Z"],
    )
    def test_invalid_timestamps(self, timestamp):
        message = MESSAGE.replace("2021-09-30T16:25:24.000Z", timestamp)
        assert self.expr.fullmatch(message) is None

    def test_resources_split_from_each_other(self):
        message = f"{MESSAGE}\nResources:\n- https://a.example\n- https://b.example"
        match = self.expr.fullmatch(message)
        assert match.group("resources") == "\n- https://a.example\n- https://b.example"

    @pytest.mark.parametrize(
        "statement,valid",
        [('Say "hi" – café', True), ("ok? #1 [x]!", True), ("tab\there", False)],
    )
    def test_statement(self, statement, valid):
        message = MESSAGE.replace("\n\n\n", f"\n\n{statement}\n\n")
        match = self.expr.fullmatch(message)
        if valid:
            assert match.group("statement") == statement
        else:
            assert match is None

    @pytest.mark.parametrize(
        "request_id,valid", [("a%20b", True), ("a%zz", False), ("a%", False)]
    )
    def test_request_id(self, request_id, valid):
        message = f"{MESSAGE}\nRequest ID: {request_id}"
        assert (self.expr.fullmatch(message) is not None) == valid


class TestABNF:
    def test_grammar_follows_body(self):
        rule = eip4361.Rule.grammar[0]
        positions = [rule.index(f'"{line.label}: "') for line in BODY]
        assert positions == sorted(positions)

    def test_parse(self):
        node = eip4361.Rule("sign-in-with-ethereum").parse_all(MESSAGE)
        values = {child.name.lower(): child.value for child in node.children}
        assert values["domain"] == "service.org"
        assert values["chain-id"] == "1"
        assert values["issued-at"] == "2021-09-30T16:25:24.000Z"
        assert values["uri"] == "https://service.org/login"

    def test_no_rule_shadows_an_imported_rule(self):
        defined = [rule.split("=")[0].strip().lower() for rule in eip4361.Rule.grammar]
        imported = [
            "uri",
            "authority",
            "pchar",
            "lf",
            "hexdig",
            "alpha",
            "digit",
            "date-time",
        ]
        assert len(set(defined)) == len(defined)
        assert not set(defined) & set(imported)

    def test_loads_without_warnings(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            importlib.reload(eip4361)
            eip4361.Rule("sign-in-with-ethereum").parse_all(MESSAGE)
        assert not [w for w in caught if "uri" in str(w.message).lower()]

    @pytest.mark.parametrize(
        "statement,valid",
        [('Say "hi" – café', True), ("ok? #1 [x]!", True), ("tab\there", False)],
    )
    def test_statement(self, statement, valid):
        message = MESSAGE.replace("\n\n\n", f"\n\n{statement}\n\n")
        parser = eip4361.Rule("sign-in-with-ethereum")
        if valid:
            node = parser.parse_all(message)
            values = {child.name: child.value for child in node.children}
            assert values["statement"] == statement
        else:
            with pytest.raises(abnf.ParseError):
                parser.parse_all(message)
