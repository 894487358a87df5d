"""
flightsurety/core/identity.py

Opaque account identity.

An Identity is a fixed-width (20-byte) token supplied by the caller. It is an
equality-comparable mapping key and nothing more: the ledger never issues
identities and never dereferences them.
"""

import re
from dataclasses import dataclass
from typing import Union

from flightsurety.core.exceptions import ValidationError


IDENTITY_BYTES = 20

_HEX_RE = re.compile(r"^[0-9a-f]{%d}$" % (IDENTITY_BYTES * 2))


@dataclass(frozen=True, order=True)
class Identity:
    """Account token rendered as 0x-prefixed lowercase hex."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _HEX_RE.match(self.value):
            raise ValidationError(
                "Identity must be exactly "
                f"{IDENTITY_BYTES * 2} lowercase hex characters",
                {"value": self.value},
            )

    @classmethod
    def parse(cls, raw: Union["Identity", str, bytes]) -> "Identity":
        """
        Normalize caller input into an Identity.

        Accepts an Identity, a hex string with or without the 0x prefix
        (any case), or exactly 20 raw bytes.
        """
        if isinstance(raw, Identity):
            return raw
        if isinstance(raw, (bytes, bytearray)):
            if len(raw) != IDENTITY_BYTES:
                raise ValidationError(
                    f"Identity bytes must be {IDENTITY_BYTES} long",
                    {"length": len(raw)},
                )
            return cls(bytes(raw).hex())
        if isinstance(raw, str):
            text = raw.strip().lower()
            if text.startswith("0x"):
                text = text[2:]
            return cls(text)
        raise ValidationError(
            "Identity must be str, bytes or Identity",
            {"type": type(raw).__name__},
        )

    @classmethod
    def zero(cls) -> "Identity":
        return cls("0" * (IDENTITY_BYTES * 2))

    def to_bytes(self) -> bytes:
        return bytes.fromhex(self.value)

    def __str__(self) -> str:
        return "0x" + self.value

    def __repr__(self) -> str:
        return f"Identity({str(self)})"


IdentityLike = Union[Identity, str, bytes]
