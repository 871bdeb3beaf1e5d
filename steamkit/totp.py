"""Steam Guard style time-based one-time codes."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Union

_CHARS = "23456789BCDFGHJKMNPQRTVWXY"
_CODE_LENGTH = 5
_U64_MAX = (1 << 64) - 1

When = Union[datetime, int, float]


class InvalidSharedSecretError(ValueError):
    """The shared secret is not valid base64."""

    def __init__(self, message: str = "invalid base64 shared secret") -> None:
        super().__init__(message)


def _unix_seconds(when: When) -> int:
    if isinstance(when, datetime):
        return math.floor(when.timestamp())
    return math.floor(when)


def generate_code(shared_secret: str, when: When) -> str:
    """Return the five-character code for ``shared_secret`` at ``when``."""
    try:
        key = base64.b64decode(shared_secret, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidSharedSecretError() from None

    counter = (_unix_seconds(when) & _U64_MAX) // 30
    digest = hmac.new(key, counter.to_bytes(8, "big"), hashlib.sha1).digest()
    start = digest[19] & 0xF
    full = int.from_bytes(digest[start : start + 4], "big") & 0x7FFFFFFF

    chars = []
    for _ in range(_CODE_LENGTH):
        full, index = divmod(full, len(_CHARS))
        chars.append(_CHARS[index])
    return "".join(chars)


@dataclass
class Totp:
    """A shared secret together with the moment to generate a code for."""

    shared_secret: str
    time: When = field(default_factory=lambda: datetime.now(timezone.utc))

    def generate_code(self) -> str:
        return generate_code(self.shared_secret, self.time)