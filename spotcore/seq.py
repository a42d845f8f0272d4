"""Wrapping sequence number generator."""

from __future__ import annotations


class SeqGenerator:
    """Hands out consecutive sequence numbers that wrap around at ``2**bits``."""

    __slots__ = ("_value", "_modulus")

    def __init__(self, value: int = 0, bits: int = 32) -> None:
        if bits <= 0:
            raise ValueError(f"bit width must be positive, got {bits}")
        modulus = 1 << bits
        if not 0 <= value < modulus:
            raise ValueError(f"initial value {value} does not fit in {bits} bits")
        self._value = value
        self._modulus = modulus

    def get(self) -> int:
        """Return the current number and advance to the next one."""
        value = self._value
        self._value = (value + 1) % self._modulus
        return value

    def __repr__(self) -> str:
        bits = self._modulus.bit_length() - 1
        return f"SeqGenerator(value={self._value}, bits={bits})"