"""Login credentials and the encrypted credential blob format."""

from __future__ import annotations

import base64
import binascii
import hashlib
import io
import json
from dataclasses import dataclass

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

AUTH_USER_PASS = 0

_BLOCK_SIZE = 16


class CredentialsError(ValueError):
    """Raised when credentials cannot be decoded."""


class _BlobReader:
    def __init__(self, data: bytes) -> None:
        self._stream = io.BytesIO(data)

    def read_u8(self) -> int:
        chunk = self._stream.read(1)
        if len(chunk) != 1:
            raise CredentialsError("unexpected end of credential blob")
        return chunk[0]

    def read_int(self) -> int:
        lo = self.read_u8()
        if lo & 0x80 == 0:
            return lo
        hi = self.read_u8()
        return (lo & 0x7F) | (hi << 7)

    def read_bytes(self) -> bytes:
        length = self.read_int()
        data = self._stream.read(length)
        if len(data) != length:
            raise CredentialsError("unexpected end of credential blob")
        return data


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode() if isinstance(value, str) else bytes(value)


def _b64decode(value: str | bytes) -> bytes:
    try:
        return base64.b64decode(_as_bytes(value), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise CredentialsError(f"invalid base64 data: {exc}") from exc


def _blob_key(username: str, device_id: str | bytes) -> bytes:
    secret = hashlib.sha1(_as_bytes(device_id)).digest()
    derived = hashlib.pbkdf2_hmac("sha1", secret, username.encode(), 0x100, 20)
    return hashlib.sha1(derived).digest() + (20).to_bytes(4, "big")


@dataclass
class Credentials:
    """Credentials used to log in."""

    username: str
    auth_type: int
    auth_data: bytes

    @classmethod
    def with_password(cls, username: str, password: str) -> Credentials:
        """Credentials from a plain username and password."""
        return cls(username, AUTH_USER_PASS, password.encode())

    @classmethod
    def with_blob(
        cls, username: str, encrypted_blob: str | bytes, device_id: str | bytes
    ) -> Credentials:
        """Decode a base64, AES-192-ECB encrypted credential blob."""
        data = bytearray(_b64decode(encrypted_blob))
        if not data or len(data) % _BLOCK_SIZE:
            raise CredentialsError(
                f"blob length {len(data)} is not a positive multiple of {_BLOCK_SIZE}"
            )
        decryptor = Cipher(algorithms.AES(_blob_key(username, device_id)), modes.ECB()).decryptor()
        data = bytearray(decryptor.update(bytes(data)) + decryptor.finalize())

        length = len(data)
        for i in range(length - _BLOCK_SIZE):
            data[length - i - 1] ^= data[length - i - 0x11]

        reader = _BlobReader(bytes(data))
        reader.read_u8()
        reader.read_bytes()
        reader.read_u8()
        auth_type = reader.read_int()
        reader.read_u8()
        auth_data = reader.read_bytes()
        return cls(username, auth_type, auth_data)

    def to_json(self) -> str:
        """Serialise to compact JSON with base64 encoded auth data."""
        return json.dumps(
            {
                "username": self.username,
                "auth_type": self.auth_type,
                "auth_data": base64.b64encode(self.auth_data).decode("ascii"),
            },
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, text: str) -> Credentials:
        """Parse JSON written by :meth:`to_json`; accepts ``encoded_auth_blob`` too."""
        try:
            obj = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CredentialsError(f"invalid JSON: {exc}") from exc
        if not isinstance(obj, dict):
            raise CredentialsError("credentials must be a JSON object")

        username = obj.get("username")
        if not isinstance(username, str):
            raise CredentialsError("missing or invalid field 'username'")

        auth_type = obj.get("auth_type")
        if isinstance(auth_type, bool) or not isinstance(auth_type, int):
            raise CredentialsError("missing or invalid field 'auth_type'")

        encoded = obj.get("auth_data", obj.get("encoded_auth_blob"))
        if not isinstance(encoded, str):
            raise CredentialsError("missing or invalid field 'auth_data'")

        return cls(username, auth_type, _b64decode(encoded))