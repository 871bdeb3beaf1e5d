"""64-bit Steam account identifiers."""

from __future__ import annotations

import enum
import re

_U64_MAX = (1 << 64) - 1

_TYPE_INVALID = 0
_TYPE_INDIVIDUAL = 1
_TYPE_CLAN = 7
_TYPE_CHAT = 8
_UNIVERSE_PUBLIC = 1

_LEGACY_PATTERN = re.compile(r"STEAM_[0-5]:[01]:\d+")
_UNSIGNED = re.compile(r"[0-9]+")
_SIGNED = re.compile(r"[+-]?[0-9]+")


class ChatInstanceFlag(enum.IntFlag):
    """Instance flags carried by chat Steam IDs."""

    CLAN = 0x100000 >> 1
    LOBBY = 0x100000 >> 2
    MMS_LOBBY = 0x100000 >> 3


def _lenient_int(text: str, bits: int, signed: bool) -> int:
    """Parse a decimal number, yielding 0 on bad syntax and clamping on overflow."""
    pattern = _SIGNED if signed else _UNSIGNED
    if not pattern.fullmatch(text):
        return 0
    value = int(text)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    return max(low, min(high, value))


class SteamId(int):
    """A Steam ID: account id, instance, account type and universe packed in 64 bits."""

    def __new__(cls, value: int = 0) -> "SteamId":
        value = int(value)
        if not 0 <= value <= _U64_MAX:
            raise ValueError(f"Steam ID out of range: {value}")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"SteamId({int(self)})"

    @classmethod
    def parse(cls, text: str) -> "SteamId":
        """Parse either a legacy ``STEAM_X:Y:Z`` form or a decimal 64-bit id."""
        if _LEGACY_PATTERN.search(text):
            parts = text.replace("STEAM_", "").split(":")
            universe = _lenient_int(parts[0], 32, signed=True)
            if universe == 0:
                universe = _UNIVERSE_PUBLIC
            auth_server = _lenient_int(parts[1], 32, signed=False)
            account = _lenient_int(parts[2], 32, signed=False)
            account_id = ((account << 1) | auth_server) & 0xFFFFFFFF
            return cls.from_components(account_id, 1, universe, _TYPE_INDIVIDUAL)
        if not _UNSIGNED.fullmatch(text):
            raise ValueError(f"invalid Steam ID: {text!r}")
        value = int(text)
        if value > _U64_MAX:
            raise ValueError(f"Steam ID out of range: {text!r}")
        return cls(value)

    @classmethod
    def from_components(
        cls, account_id: int, instance: int, universe: int, account_type: int
    ) -> "SteamId":
        """Build a Steam ID from its parts."""
        return (
            cls(0)
            .with_account_id(account_id)
            .with_instance(instance)
            .with_universe(universe)
            .with_account_type(account_type)
        )

    def _get(self, offset: int, mask: int) -> int:
        return (int(self) >> offset) & mask

    def _set(self, offset: int, mask: int, value: int) -> "SteamId":
        cleared = int(self) & ~(mask << offset) & _U64_MAX
        return SteamId(cleared | ((value & mask) << offset))

    @property
    def account_id(self) -> int:
        return self._get(0, 0xFFFFFFFF)

    @property
    def instance(self) -> int:
        return self._get(32, 0xFFFFF)

    @property
    def account_type(self) -> int:
        return self._get(52, 0xF)

    @property
    def universe(self) -> int:
        return self._get(56, 0xF)

    def with_account_id(self, value: int) -> "SteamId":
        return self._set(0, 0xFFFFFFFF, value)

    def with_instance(self, value: int) -> "SteamId":
        return self._set(32, 0xFFFFF, value)

    def with_account_type(self, value: int) -> "SteamId":
        return self._set(52, 0xF, value)

    def with_universe(self, value: int) -> "SteamId":
        return self._set(56, 0xF, value)

    def clan_to_chat(self) -> "SteamId":
        """Turn a clan id into the id of the clan's chat room; other ids pass through."""
        if self.account_type == _TYPE_CLAN:
            return self.with_instance(ChatInstanceFlag.CLAN).with_account_type(_TYPE_CHAT)
        return self

    def chat_to_clan(self) -> "SteamId":
        """Turn a chat room id back into its clan id; other ids pass through."""
        if self.account_type == _TYPE_CHAT:
            return self.with_instance(0).with_account_type(_TYPE_CLAN)
        return self

    def rendered(self) -> str:
        """Legacy ``STEAM_X:Y:Z`` text for individuals, decimal text otherwise."""
        if self.account_type in (_TYPE_INVALID, _TYPE_INDIVIDUAL):
            account = self.account_id
            universe = self.universe
            if universe <= _UNIVERSE_PUBLIC:
                universe = 0
            return f"STEAM_{universe}:{account & 1}:{account >> 1}"
        return str(int(self))