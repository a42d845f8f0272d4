from spotcore.keys import compute_keys

SHARED_VALUE = bytes([1, 2, 3, 4]) * 24
PACKETS = b"\x00\x04\x00\x00\x00\x10hello handshake"


def test_key_lengths():
    challenge, send_key, recv_key = compute_keys(SHARED_VALUE, PACKETS)
    assert (len(challenge), len(send_key), len(recv_key)) == (20, 32, 32)


def test_deterministic():
    first = compute_keys(SHARED_VALUE, PACKETS)
    second = compute_keys(SHARED_VALUE, PACKETS)
    assert first == second
    assert len(first) == 3


def test_send_and_recv_keys_differ():
    _, send_key, recv_key = compute_keys(SHARED_VALUE, PACKETS)
    assert send_key != recv_key


def test_depends_on_packets():
    first = compute_keys(SHARED_VALUE, PACKETS)
    second = compute_keys(SHARED_VALUE, PACKETS + b"!")
    assert all(a != b for a, b in zip(first, second))


def test_depends_on_shared_value():
    first = compute_keys(SHARED_VALUE, PACKETS)
    second = compute_keys(bytes([0xFF]) + SHARED_VALUE[1:], PACKETS)
    assert all(a != b for a, b in zip(first, second))


def test_accepts_bytearray():
    assert compute_keys(bytearray(SHARED_VALUE), bytearray(PACKETS)) == compute_keys(
        SHARED_VALUE, PACKETS
    )