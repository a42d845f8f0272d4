"""Spotify item and file identifiers and their textual encodings."""

from __future__ import annotations

import enum
from dataclasses import dataclass

BASE62_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
BASE16_DIGITS = "0123456789abcdef"

_BASE62_VALUES = {c: i for i, c in enumerate(BASE62_DIGITS)}
_BASE16_VALUES = {c: i for i, c in enumerate(BASE16_DIGITS)}

_ID_BITS = 128
_ID_MASK = (1 << _ID_BITS) - 1


class SpotifyIdError(ValueError):
    """Raised when an identifier cannot be parsed."""


class SpotifyAudioType(enum.Enum):
    """Kind of item a :class:`SpotifyId` refers to; the value is its URI name."""

    TRACK = "track"
    PODCAST = "episode"
    NON_PLAYABLE = "unknown"

    @classmethod
    def from_name(cls, value: str) -> SpotifyAudioType:
        """Map a URI type name to an audio type; unknown names are non-playable."""
        if value == "track":
            return cls.TRACK
        if value == "episode":
            return cls.PODCAST
        return cls.NON_PLAYABLE


@dataclass(frozen=True)
class SpotifyId:
    """A 128-bit Spotify identifier together with its audio type."""

    SIZE = 16
    SIZE_BASE16 = 32
    SIZE_BASE62 = 22

    id: int
    audio_type: SpotifyAudioType = SpotifyAudioType.TRACK

    def __post_init__(self) -> None:
        if not 0 <= self.id <= _ID_MASK:
            raise SpotifyIdError(f"id {self.id} does not fit in {_ID_BITS} bits")

    @classmethod
    def from_base16(cls, src: str) -> SpotifyId:
        """Parse a lower-case hex encoded id."""
        value = 0
        for char in src:
            digit = _BASE16_VALUES.get(char)
            if digit is None:
                raise SpotifyIdError(f"invalid base16 character {char!r}")
            value = ((value << 4) + digit) & _ID_MASK
        return cls(value)

    @classmethod
    def from_base62(cls, src: str) -> SpotifyId:
        """Parse a base62 encoded id."""
        value = 0
        for char in src:
            digit = _BASE62_VALUES.get(char)
            if digit is None:
                raise SpotifyIdError(f"invalid base62 character {char!r}")
            value = value * 62 + digit
            if value > _ID_MASK:
                raise SpotifyIdError("base62 id exceeds 128 bits")
        return cls(value)

    @classmethod
    def from_raw(cls, src: bytes) -> SpotifyId:
        """Build an id from exactly 16 big-endian bytes."""
        raw = bytes(src)
        if len(raw) != cls.SIZE:
            raise SpotifyIdError(f"raw id must be {cls.SIZE} bytes, got {len(raw)}")
        return cls(int.from_bytes(raw, "big"))

    @classmethod
    def from_uri(cls, src: str) -> SpotifyId:
        """Parse a URI of the form ``spotify:{type}:{base62 id}``."""
        prefix = "spotify:"
        if not src.startswith(prefix):
            raise SpotifyIdError("URI does not start with 'spotify:'")
        rest = src[len(prefix):]
        if len(rest) <= cls.SIZE_BASE62:
            raise SpotifyIdError("URI is too short")
        colon_index = len(rest) - cls.SIZE_BASE62 - 1
        if rest[colon_index] != ":":
            raise SpotifyIdError("URI has no colon before the id")
        parsed = cls.from_base62(rest[colon_index + 1:])
        return cls(parsed.id, SpotifyAudioType.from_name(rest[:colon_index]))

    def to_base16(self) -> str:
        """Return the id as 32 lower-case hex characters."""
        return format(self.id, f"0{self.SIZE_BASE16}x")

    def to_base62(self) -> str:
        """Return the id as 22 base62 characters."""
        digits = []
        remaining = self.id
        for _ in range(self.SIZE_BASE62):
            remaining, digit = divmod(remaining, 62)
            digits.append(BASE62_DIGITS[digit])
        return "".join(reversed(digits))

    def to_raw(self) -> bytes:
        """Return the id as 16 big-endian bytes."""
        return self.id.to_bytes(self.SIZE, "big")

    def to_uri(self) -> str:
        """Return the canonical ``spotify:{type}:{id}`` URI."""
        return f"spotify:{self.audio_type.value}:{self.to_base62()}"


@dataclass(frozen=True, order=True)
class FileId:
    """A 20-byte identifier of a stored file."""

    SIZE = 20

    raw: bytes

    def __post_init__(self) -> None:
        raw = bytes(self.raw)
        if len(raw) != self.SIZE:
            raise ValueError(f"file id must be {self.SIZE} bytes, got {len(raw)}")
        object.__setattr__(self, "raw", raw)

    def to_base16(self) -> str:
        """Return the file id as 40 lower-case hex characters."""
        return self.raw.hex()

    def __str__(self) -> str:
        return self.to_base16()

    def __repr__(self) -> str:
        return f"FileId({self.to_base16()!r})"