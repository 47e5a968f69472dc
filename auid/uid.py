"""64 bit timestamp-first unique identifier.

Layout (unsigned, big-endian):
- 40 bits: whole seconds since the configured epoch
- 24 bits: discriminator within the same second

The canonical text form is the unsigned decimal numeral.
"""

import functools
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from auid import encoding
from auid.clock import DISCRIMINATOR_BITS, DISCRIMINATOR_MAX, get_generator
from auid.config import settings
from auid.errors import InvalidFormat

UID_MAX = (1 << 64) - 1

_DECIMAL_MAX_DIGITS = len(str(UID_MAX))
_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@functools.total_ordering
class Uid:
    """Immutable 64 bit identifier ordered by creation time."""

    __slots__ = ("_value",)

    def __init__(self, value: int = 0):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidFormat(f"uid value must be int, not {type(value).__name__}")
        if not 0 <= value <= UID_MAX:
            raise InvalidFormat(f"uid value out of 64 bit unsigned range: {value}")
        object.__setattr__(self, "_value", value)

    @classmethod
    def new(cls) -> "Uid":
        """Create a uid from the current time and a per-second discriminator."""
        return cls(get_generator().next_value())

    # --- Raw value ---

    @property
    def value(self) -> int:
        return self._value

    @property
    def seconds(self) -> int:
        """Timestamp component: seconds since the configured epoch."""
        return self._value >> DISCRIMINATOR_BITS

    @property
    def discriminator(self) -> int:
        return self._value & DISCRIMINATOR_MAX

    @property
    def timestamp(self) -> datetime:
        """Creation time (UTC) at one second resolution.

        Raises OverflowError when the seconds field lies past datetime.max
        (year 9999); such values are valid uids, they just have no datetime.
        """
        try:
            return _UNIX_EPOCH + timedelta(seconds=settings.epoch + self.seconds)
        except OverflowError as e:
            raise OverflowError(
                f"uid timestamp {self.seconds}s is outside the datetime range"
            ) from e

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    # --- Immutability, equality, ordering ---

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Uid is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("Uid is immutable")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Uid):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Uid):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __reduce__(self):
        return (type(self), (self._value,))

    # --- Canonical text ---

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"Uid({self._value})"

    @classmethod
    def parse(cls, text: str) -> "Uid":
        """Parse the canonical unsigned decimal form.

        Only ASCII digits are accepted: no sign, whitespace or underscores.
        """
        if not isinstance(text, str):
            raise InvalidFormat(f"uid text must be str, not {type(text).__name__}")
        if not text or not (text.isascii() and text.isdigit()):
            raise InvalidFormat(f"invalid uid numeral: {text!r}")
        digits = text.lstrip("0") or "0"
        if len(digits) > _DECIMAL_MAX_DIGITS:
            raise InvalidFormat(f"uid numeral does not fit in 64 bits: {text!r}")
        value = int(digits)
        if value > UID_MAX:
            raise InvalidFormat(f"uid numeral does not fit in 64 bits: {text!r}")
        return cls(value)

    # --- Bytes ---

    def to_bytes(self) -> bytes:
        """8 bytes, big-endian."""
        return self._value.to_bytes(encoding.UID_BYTES, byteorder="big")

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> "Uid":
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidFormat(f"uid bytes must be bytes, not {type(data).__name__}")
        if len(data) != encoding.UID_BYTES:
            raise InvalidFormat(
                f"expected len to be {encoding.UID_BYTES}, but was {len(data)}"
            )
        return cls(int.from_bytes(data, byteorder="big"))

    # --- base16 ---

    def to_base16(self) -> str:
        return encoding.encode_base16(self.to_bytes())

    def to_hex(self) -> str:
        """Alias for to_base16."""
        return self.to_base16()

    @classmethod
    def from_base16(cls, value: str) -> "Uid":
        return cls.from_bytes(encoding.decode_base16(value))

    @classmethod
    def from_hex(cls, value: str) -> "Uid":
        """Alias for from_base16."""
        return cls.from_base16(value)

    # --- base32 ---

    def to_base32(self) -> str:
        return encoding.encode_base32(self.to_bytes())

    def to_unpadded_base32(self) -> str:
        return encoding.encode_base32_unpadded(self.to_bytes())

    @classmethod
    def from_base32(cls, value: str) -> "Uid":
        return cls.from_bytes(encoding.decode_base32(value))

    @classmethod
    def from_unpadded_base32(cls, value: str) -> "Uid":
        return cls.from_bytes(encoding.decode_base32_unpadded(value))

    # --- base58 ---

    def to_base58(self) -> str:
        return encoding.encode_base58(self.to_bytes())

    @classmethod
    def from_base58(cls, value: str) -> "Uid":
        return cls.from_bytes(encoding.decode_base58(value))

    # --- base64 ---

    def to_base64(self) -> str:
        return encoding.encode_base64(self.to_bytes())

    def to_unpadded_base64(self) -> str:
        return encoding.encode_base64_unpadded(self.to_bytes())

    @classmethod
    def from_base64(cls, value: str) -> "Uid":
        return cls.from_bytes(encoding.decode_base64(value))

    @classmethod
    def from_unpadded_base64(cls, value: str) -> "Uid":
        return cls.from_bytes(encoding.decode_base64_unpadded(value))

    # --- Pydantic integration ---

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Validate from a Uid, a strict int or a decimal string; dump as int."""
        from_int = core_schema.chain_schema([
            core_schema.int_schema(ge=0, le=UID_MAX, strict=True),
            core_schema.no_info_plain_validator_function(cls),
        ])
        from_str = core_schema.chain_schema([
            core_schema.str_schema(strict=True),
            core_schema.no_info_plain_validator_function(cls.parse),
        ])
        return core_schema.json_or_python_schema(
            json_schema=core_schema.union_schema([from_int, from_str]),
            python_schema=core_schema.union_schema([
                core_schema.is_instance_schema(cls),
                from_int,
                from_str,
            ]),
            serialization=core_schema.plain_serializer_function_ser_schema(
                _serialize_uid,
                info_arg=False,
                return_schema=core_schema.int_schema(),
            ),
        )


def _serialize_uid(uid: Uid) -> int:
    return uid.value


def new_uid() -> Uid:
    """Generate a new uid."""
    return Uid.new()
