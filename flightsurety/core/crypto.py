"""
flightsurety/core/crypto.py

Ed25519 key that signs audit events. Signatures travel as base64url text
without padding; public keys as 64 hex characters. Account identities are
opaque tokens and never come from here.
"""

import base64
from pathlib import Path

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_pem_private_key,
)


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _unb64url(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


class Ed25519KeyManager:
    """Audit signing key, optionally persisted as an unencrypted PKCS8 PEM."""

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._private_key = private_key
        self.public_key_hex: str = (
            private_key.public_key()
            .public_bytes(Encoding.Raw, PublicFormat.Raw)
            .hex()
        )

    @classmethod
    def generate(cls) -> "Ed25519KeyManager":
        return cls(Ed25519PrivateKey.generate())

    @classmethod
    def load_or_generate(cls, path: Path) -> "Ed25519KeyManager":
        """
        Load the PEM key at path, or create one there if the file is missing.

        Raises ValueError if the file exists but does not hold an Ed25519
        private key.
        """
        path = Path(path)
        if not path.exists():
            key = cls.generate()
            key.save(path)
            return key

        try:
            loaded = load_pem_private_key(path.read_bytes(), password=None)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Unreadable audit key {path}: {exc}") from exc
        if not isinstance(loaded, Ed25519PrivateKey):
            raise ValueError(f"{path} does not hold an Ed25519 private key")
        return cls(loaded)

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self._private_key.private_bytes(
            encoding=             Encoding.PEM,
            format=               PrivateFormat.PKCS8,
            encryption_algorithm= NoEncryption(),
        ))

    def sign(self, data: bytes) -> str:
        return _b64url(self._private_key.sign(data))

    @staticmethod
    def verify_detached(data: bytes, signature: str, public_key_hex: str) -> bool:
        """
        Check a signature against a hex public key alone.

        Any malformed input counts as a failed check, so this never raises.
        """
        try:
            public_key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
            public_key.verify(_unb64url(signature), data)
        except (InvalidSignature, TypeError, ValueError):
            return False
        return True
