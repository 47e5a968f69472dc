"""Text encodings for the fixed 8-byte uid representation.

Provides:
- base16: lowercase hex, 16 chars
- base32: RFC 4648 alphabet, 16 chars padded / 13 chars unpadded
- base58: Bitcoin alphabet, leading zero bytes kept as '1'
- base64: RFC 4648 standard alphabet, 12 chars padded / 11 chars unpadded

Encoders take exactly 8 bytes and never fail. Decoders return exactly 8 bytes
or raise InvalidFormat. Decoders only accept the canonical form, so decoding
and re-encoding always reproduces the input text.
"""

import base64
import binascii
import re

from auid.errors import InvalidFormat

UID_BYTES = 8

BASE16_LENGTH = 16
BASE32_LENGTH = 16
BASE32_UNPADDED_LENGTH = 13
BASE64_LENGTH = 12
BASE64_UNPADDED_LENGTH = 11

BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
BASE58_MAX_LENGTH = 11
_BASE58_INDEX = {ch: i for i, ch in enumerate(BASE58_ALPHABET)}

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def _check_length(value: str, expected: int, name: str) -> None:
    if not isinstance(value, str):
        raise InvalidFormat(f"{name} input must be str, not {type(value).__name__}")
    if len(value) != expected:
        raise InvalidFormat(
            f"{name} input must be {expected} characters, but was {len(value)}"
        )


def _check_bytes(data: bytes) -> bytes:
    if len(data) != UID_BYTES:
        raise InvalidFormat(f"expected len to be {UID_BYTES}, but was {len(data)}")
    return data


# ---------------------------------------------------------------------------
# base16
# ---------------------------------------------------------------------------

def encode_base16(data: bytes) -> str:
    """Encode 8 bytes as 16 lowercase hex digits."""
    return base64.b16encode(data).decode("ascii").lower()


def decode_base16(value: str) -> bytes:
    """Decode 16 hex digits (either case) into 8 bytes."""
    _check_length(value, BASE16_LENGTH, "base16")
    if not _HEX_RE.fullmatch(value):
        raise InvalidFormat(f"invalid base16 input: {value!r}")
    try:
        return base64.b16decode(value, casefold=True)
    except binascii.Error as e:
        raise InvalidFormat(f"invalid base16 input: {e}") from e


# ---------------------------------------------------------------------------
# base32
# ---------------------------------------------------------------------------

def encode_base32(data: bytes) -> str:
    return base64.b32encode(data).decode("ascii")


def encode_base32_unpadded(data: bytes) -> str:
    return encode_base32(data).rstrip("=")


def decode_base32(value: str) -> bytes:
    """Decode the 16 character padded base32 form."""
    _check_length(value, BASE32_LENGTH, "base32")
    if not value.isascii():
        raise InvalidFormat(f"invalid base32 input: {value!r}")
    try:
        data = base64.b32decode(value)
    except binascii.Error as e:
        raise InvalidFormat(f"invalid base32 input: {e}") from e
    _check_bytes(data)
    if encode_base32(data) != value:
        raise InvalidFormat(f"non-canonical base32 input: {value!r}")
    return data


def decode_base32_unpadded(value: str) -> bytes:
    """Decode the 13 character unpadded base32 form."""
    _check_length(value, BASE32_UNPADDED_LENGTH, "unpadded base32")
    if "=" in value:
        raise InvalidFormat(f"unexpected padding in unpadded base32 input: {value!r}")
    return decode_base32(value + "===")


# ---------------------------------------------------------------------------
# base58
# ---------------------------------------------------------------------------

def encode_base58(data: bytes) -> str:
    """Encode bytes with the Bitcoin base58 alphabet.

    Every leading zero byte becomes a leading '1', so the 8 byte width
    survives a round trip even when the high-order bytes are zero.
    """
    zeros = len(data) - len(data.lstrip(b"\x00"))
    n = int.from_bytes(data, byteorder="big")

    chars = []
    while n > 0:
        n, remainder = divmod(n, 58)
        chars.append(BASE58_ALPHABET[remainder])

    return BASE58_ALPHABET[0] * zeros + "".join(reversed(chars))


def decode_base58(value: str) -> bytes:
    """Decode Bitcoin base58 text that holds exactly 8 bytes."""
    if not isinstance(value, str):
        raise InvalidFormat(f"base58 input must be str, not {type(value).__name__}")
    if not value:
        raise InvalidFormat("base58 input is empty")
    if len(value) > BASE58_MAX_LENGTH:
        raise InvalidFormat(
            f"base58 input must be at most {BASE58_MAX_LENGTH} characters, but was {len(value)}"
        )

    n = 0
    for ch in value:
        digit = _BASE58_INDEX.get(ch)
        if digit is None:
            raise InvalidFormat(f"invalid base58 character {ch!r}")
        n = n * 58 + digit

    zeros = len(value) - len(value.lstrip(BASE58_ALPHABET[0]))
    size = zeros + (n.bit_length() + 7) // 8
    if size != UID_BYTES:
        raise InvalidFormat(f"expected len to be {UID_BYTES}, but was {size}")
    return n.to_bytes(UID_BYTES, byteorder="big")


# ---------------------------------------------------------------------------
# base64
# ---------------------------------------------------------------------------

def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def encode_base64_unpadded(data: bytes) -> str:
    return encode_base64(data).rstrip("=")


def decode_base64(value: str) -> bytes:
    """Decode the 12 character padded base64 form."""
    _check_length(value, BASE64_LENGTH, "base64")
    if not value.isascii():
        raise InvalidFormat(f"invalid base64 input: {value!r}")
    try:
        data = base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise InvalidFormat(f"invalid base64 input: {e}") from e
    _check_bytes(data)
    if encode_base64(data) != value:
        raise InvalidFormat(f"non-canonical base64 input: {value!r}")
    return data


def decode_base64_unpadded(value: str) -> bytes:
    """Decode the 11 character unpadded base64 form."""
    _check_length(value, BASE64_UNPADDED_LENGTH, "unpadded base64")
    if "=" in value:
        raise InvalidFormat(f"unexpected padding in unpadded base64 input: {value!r}")
    return decode_base64(value + "=")
