"""
Tests for encrypted booking references.
"""

import base64

import pytest

from courtbook.core.reference_codec import (
    BookingReference,
    ReferenceCodec,
    assert_encryption_ready,
    generate_key,
    get_reference_codec,
    parse_key,
)

KEY = bytes(range(32))
BOOKING_NUMBER = "BK-20261019-A1B2C3"
TOKEN = "f" * 64


@pytest.fixture
def codec() -> ReferenceCodec:
    return ReferenceCodec(KEY)


def _raw(reference: str) -> bytes:
    return base64.urlsafe_b64decode(reference + "=" * (-len(reference) % 4))


def _encode_raw(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def test_round_trip(codec):
    reference = codec.encode(BOOKING_NUMBER, TOKEN)
    assert codec.decode(reference) == BookingReference(BOOKING_NUMBER, TOKEN)


def test_reference_is_url_safe_and_unpadded(codec):
    reference = codec.encode(BOOKING_NUMBER, TOKEN)
    assert "=" not in reference
    assert "+" not in reference and "/" not in reference


def test_each_encoding_uses_a_fresh_nonce(codec):
    first = codec.encode(BOOKING_NUMBER, TOKEN)
    second = codec.encode(BOOKING_NUMBER, TOKEN)
    assert first != second
    assert codec.decode(first) == codec.decode(second)


def test_every_flipped_byte_is_rejected(codec):
    raw = _raw(codec.encode(BOOKING_NUMBER, TOKEN))
    for i in range(len(raw)):
        tampered = bytearray(raw)
        tampered[i] ^= 0x01
        assert codec.decode(_encode_raw(bytes(tampered))) is None, f"byte {i}"


def test_substituted_character_is_rejected(codec):
    reference = codec.encode(BOOKING_NUMBER, TOKEN)
    for i in (0, len(reference) // 2, len(reference) - 1):
        replacement = "A" if reference[i] != "A" else "B"
        tampered = reference[:i] + replacement + reference[i + 1:]
        assert codec.decode(tampered) is None


def test_truncated_and_extended_references_are_rejected(codec):
    reference = codec.encode(BOOKING_NUMBER, TOKEN)
    assert codec.decode(reference[:-4]) is None
    assert codec.decode(reference + "AAAA") is None
    assert codec.decode(reference[:20]) is None


@pytest.mark.parametrize("garbage", ["", "!!!!", "not a reference", "A", "====", "AAAA"])
def test_garbage_never_raises(codec, garbage):
    assert codec.decode(garbage) is None


def test_wrong_key_is_rejected(codec):
    reference = codec.encode(BOOKING_NUMBER, TOKEN)
    other = ReferenceCodec(bytes(reversed(range(32))))
    assert other.decode(reference) is None


def test_payload_without_delimiter_is_rejected():
    key = bytes(32)
    cipher = ReferenceCodec(key)
    # Build a validly sealed payload whose plaintext lacks the delimiter
    from cryptography.hazmat.primitives.ciphers.aead import AESGCM

    nonce = b"\x01" * 16
    sealed = AESGCM(key).encrypt(nonce, b"no-delimiter-here", None)
    assert cipher.decode(_encode_raw(nonce + sealed)) is None


def test_encode_rejects_delimiter_in_parts(codec):
    with pytest.raises(ValueError):
        codec.encode("BK|1", TOKEN)
    with pytest.raises(ValueError):
        codec.encode(BOOKING_NUMBER, "")


def test_parse_key():
    key = generate_key()
    assert len(key) == 64
    assert parse_key(key) == bytes.fromhex(key)
    for bad in ("", "zz" * 32, "ab" * 16):
        with pytest.raises(ValueError):
            parse_key(bad)


def test_assert_encryption_ready_fails_without_key(monkeypatch):
    from courtbook.core import reference_codec

    class _Settings:
        BOOKING_ENCRYPTION_KEY = ""

    get_reference_codec.cache_clear()
    monkeypatch.setattr(reference_codec, "get_settings", lambda: _Settings())
    try:
        with pytest.raises(RuntimeError):
            assert_encryption_ready()
    finally:
        get_reference_codec.cache_clear()
