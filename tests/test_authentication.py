import base64
import hashlib
import json

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from spotcore.authentication import AUTH_USER_PASS, Credentials, CredentialsError

DEVICE_ID = "made-up-device-id"


def _encode_int(n):
    if n < 0x80:
        return bytes([n])
    return bytes([(n & 0x7F) | 0x80, n >> 7])


def _encode_bytes(data):
    return _encode_int(len(data)) + data


def _make_blob(username, device_id, auth_type, auth_data):
    plain = (
        b"\x49"
        + _encode_bytes(username.encode())
        + b"\x50"
        + _encode_int(auth_type)
        + b"\x51"
        + _encode_bytes(auth_data)
    )
    plain += b"\x00" * (-len(plain) % 16)
    mixed = bytearray(plain)
    for j in range(16, len(plain)):
        mixed[j] = plain[j] ^ mixed[j - 16]
    secret = hashlib.sha1(device_id.encode()).digest()
    derived = hashlib.pbkdf2_hmac("sha1", secret, username.encode(), 0x100, 20)
    key = hashlib.sha1(derived).digest() + (20).to_bytes(4, "big")
    encryptor = Cipher(algorithms.AES(key), modes.ECB()).encryptor()
    encrypted = encryptor.update(bytes(mixed)) + encryptor.finalize()
    return base64.b64encode(encrypted)


def test_with_password():
    password = "password"
    creds = Credentials.with_password("user", password)
    assert creds.username == "user"
    assert creds.auth_type == AUTH_USER_PASS
    assert creds.auth_data == b"password"


def test_to_json_format():
    password = "password"
    creds = Credentials.with_password("user", password)
    assert creds.to_json() == '{"username":"user","auth_type":0,"auth_data":"cGFzc3dvcmQ="}'


def test_json_round_trip():
    creds = Credentials("someone", 1, bytes(range(40)))
    assert Credentials.from_json(creds.to_json()) == creds


def test_from_json_accepts_alias():
    text = json.dumps({"username": "u", "auth_type": 1, "encoded_auth_blob": "AAEC"})
    creds = Credentials.from_json(text)
    assert creds.auth_data == b"\x00\x01\x02"
    assert creds.auth_type == 1


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        '{"auth_type":0,"auth_data":""}',
        '{"username":"u","auth_type":"zero","auth_data":""}',
        '{"username":"u","auth_type":0,"auth_data":"***"}',
        '{"username":"u","auth_type":0}',
    ],
)
def test_from_json_rejects_invalid(text):
    with pytest.raises(CredentialsError):
        Credentials.from_json(text)


def test_with_blob_round_trip():
    blob = _make_blob("someone", DEVICE_ID, 1, b"stored-data")
    creds = Credentials.with_blob("someone", blob, DEVICE_ID)
    assert creds.username == "someone"
    assert creds.auth_type == 1
    assert creds.auth_data == b"stored-data"


def test_with_blob_long_auth_data_uses_two_byte_length():
    auth_data = bytes(range(200))
    blob = _make_blob("someone", DEVICE_ID, 1, auth_data).decode()
    creds = Credentials.with_blob("someone", blob, DEVICE_ID)
    assert creds.auth_data == auth_data


def test_with_blob_accepts_text_and_bytes_alike():
    blob = _make_blob("someone", DEVICE_ID, 1, b"stored-data")
    from_bytes = Credentials.with_blob("someone", blob, DEVICE_ID)
    from_text = Credentials.with_blob("someone", blob.decode(), DEVICE_ID)
    assert from_bytes == from_text
    assert from_text.auth_data == b"stored-data"


@pytest.mark.parametrize("blob", [b"", base64.b64encode(b"short"), b"@@@@"])
def test_with_blob_rejects_bad_input(blob):
    with pytest.raises(CredentialsError):
        Credentials.with_blob("someone", blob, DEVICE_ID)