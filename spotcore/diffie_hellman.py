"""Diffie-Hellman key agreement over the 768-bit Oakley group."""

from __future__ import annotations

import secrets

DH_GENERATOR = 2
DH_PRIME = int.from_bytes(
    bytes.fromhex(
        "ffffffffffffffffc90fdaa22168c234c4c6628b80dc1cd1"
        "29024e088a67cc74020bbea63b139b22514a08798e3404dd"
        "ef9519b3cd3a431b302b0a6df25f14374fe1356d6d51c245"
        "e485b576625e7ec6f44c42e9a63a3620ffffffffffffffff"
    ),
    "big",
)

_PRIVATE_KEY_BITS = 95 * 8


def _to_bytes_be(value: int) -> bytes:
    """Minimal big-endian encoding; zero encodes as a single zero byte."""
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


class DhLocalKeys:
    """A local private/public Diffie-Hellman key pair."""

    __slots__ = ("_private_key", "_public_key")

    def __init__(self, private_key: int) -> None:
        if private_key < 0:
            raise ValueError("private key must not be negative")
        self._private_key = private_key
        self._public_key = pow(DH_GENERATOR, private_key, DH_PRIME)

    @classmethod
    def random(cls) -> DhLocalKeys:
        """Generate a key pair from a cryptographically secure random private key."""
        return cls(secrets.randbits(_PRIVATE_KEY_BITS))

    def public_key(self) -> bytes:
        """Return the public key as big-endian bytes."""
        return _to_bytes_be(self._public_key)

    def shared_secret(self, remote_key: bytes) -> bytes:
        """Combine the remote public key with the local private key."""
        remote = int.from_bytes(bytes(remote_key), "big")
        return _to_bytes_be(pow(remote, self._private_key, DH_PRIME))