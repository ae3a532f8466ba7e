"""
Encrypted booking references.

A reference packs ``booking_number|verification_token`` into one opaque,
URL-safe string: base64url(nonce || ciphertext || tag) using AES-256-GCM with
a fresh 16-byte nonce per reference. It is the only credential a customer
holds to look up their booking, so decoding fails closed: anything that does
not authenticate under the configured key decodes to ``None``.
"""

import base64
import binascii
import os
from functools import lru_cache
from typing import NamedTuple, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from courtbook.core.config import get_settings

KEY_LENGTH = 32
NONCE_LENGTH = 16
TAG_LENGTH = 16
DELIMITER = "|"


class BookingReference(NamedTuple):
    booking_number: str
    token: str


def _b64u_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64u_decode(payload: str) -> bytes:
    padding_len = (-len(payload)) % 4
    return base64.urlsafe_b64decode(payload + "=" * padding_len)


def parse_key(key: str) -> bytes:
    """Decode a hex-encoded 256-bit key, raising ValueError when unusable."""
    if not key:
        raise ValueError("BOOKING_ENCRYPTION_KEY is not set")
    try:
        key_bytes = bytes.fromhex(key.strip())
    except ValueError as exc:
        raise ValueError("BOOKING_ENCRYPTION_KEY must be hex encoded") from exc
    if len(key_bytes) != KEY_LENGTH:
        raise ValueError(f"BOOKING_ENCRYPTION_KEY must decode to {KEY_LENGTH} bytes")
    return key_bytes


class ReferenceCodec:
    def __init__(self, key: bytes) -> None:
        if len(key) != KEY_LENGTH:
            raise ValueError(f"Reference key must be {KEY_LENGTH} bytes")
        self._cipher = AESGCM(key)

    def encode(self, booking_number: str, token: str) -> str:
        if not booking_number or not token:
            raise ValueError("booking_number and token are required")
        if DELIMITER in booking_number or DELIMITER in token:
            raise ValueError("booking_number and token must not contain the delimiter")

        nonce = os.urandom(NONCE_LENGTH)
        plaintext = f"{booking_number}{DELIMITER}{token}".encode("utf-8")
        # AESGCM appends the 16-byte tag to the ciphertext
        sealed = self._cipher.encrypt(nonce, plaintext, None)
        return _b64u_encode(nonce + sealed)

    def decode(self, reference: str) -> Optional[BookingReference]:
        if not reference:
            return None

        try:
            raw = _b64u_decode(reference)
        except (binascii.Error, ValueError):
            return None

        # Reject alternate spellings of the same bytes (stray characters,
        # non-zero padding bits) so every accepted reference is canonical.
        if _b64u_encode(raw) != reference:
            return None

        if len(raw) <= NONCE_LENGTH + TAG_LENGTH:
            return None

        nonce, sealed = raw[:NONCE_LENGTH], raw[NONCE_LENGTH:]
        try:
            plaintext = self._cipher.decrypt(nonce, sealed, None).decode("utf-8")
        except (InvalidTag, UnicodeDecodeError):
            return None

        booking_number, sep, token = plaintext.partition(DELIMITER)
        if not sep or not booking_number or not token:
            return None
        return BookingReference(booking_number, token)


@lru_cache()
def get_reference_codec() -> ReferenceCodec:
    """Process-wide codec built from settings on first use."""
    return ReferenceCodec(parse_key(get_settings().BOOKING_ENCRYPTION_KEY))


def assert_encryption_ready() -> None:
    """Fail startup when the reference key is missing or malformed."""
    try:
        get_reference_codec()
    except ValueError as exc:
        raise RuntimeError(f"Booking reference encryption unavailable: {exc}") from exc


def generate_key() -> str:
    return os.urandom(KEY_LENGTH).hex()
