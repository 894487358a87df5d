"""
tests/test_identity.py
"""

import pytest

from flightsurety import Identity, ValidationError


HEX = "627306090abab3a6e1400e9345bc60c78a8bef57"


class TestIdentity:

    @pytest.mark.parametrize("raw", [
        HEX,
        "0x" + HEX,
        "0X" + HEX.upper(),
        bytes.fromhex(HEX),
    ])
    def test_parse_forms_are_equal(self, raw):
        assert Identity.parse(raw) == Identity(HEX)

    def test_parse_identity_is_identity(self):
        ident = Identity(HEX)
        assert Identity.parse(ident) is ident

    def test_str_and_bytes(self):
        ident = Identity.parse(HEX)
        assert str(ident) == "0x" + HEX
        assert ident.to_bytes() == bytes.fromhex(HEX)

    def test_usable_as_mapping_key(self):
        balances = {Identity.parse(HEX): 1}
        assert balances[Identity.parse("0x" + HEX)] == 1

    def test_zero(self):
        assert Identity.zero().value == "0" * 40

    @pytest.mark.parametrize("raw", [
        "",
        "0x1234",
        "z" * 40,
        b"\x00" * 19,
        12345,
        None,
    ])
    def test_malformed_rejected(self, raw):
        with pytest.raises(ValidationError):
            Identity.parse(raw)
