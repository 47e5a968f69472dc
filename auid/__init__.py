"""auid: 64 bit timestamp-first unique identifier."""

from auid.errors import InvalidFormat
from auid.uid import UID_MAX, Uid, new_uid

__all__ = ["InvalidFormat", "UID_MAX", "Uid", "new_uid"]
