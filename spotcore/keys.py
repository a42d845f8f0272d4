"""Derivation of the connection keys from the handshake."""

from __future__ import annotations

import hashlib
import hmac


def compute_keys(shared_secret: bytes, packets: bytes) -> tuple[bytes, bytes, bytes]:
    """Derive ``(challenge, send_key, recv_key)`` from the Diffie-Hellman secret
    and the handshake packets exchanged so far."""
    shared_secret = bytes(shared_secret)
    packets = bytes(packets)
    data = b"".join(
        hmac.new(shared_secret, packets + bytes([i]), hashlib.sha1).digest()
        for i in range(1, 6)
    )
    challenge = hmac.new(data[:0x14], packets, hashlib.sha1).digest()
    return challenge, data[0x14:0x34], data[0x34:0x54]