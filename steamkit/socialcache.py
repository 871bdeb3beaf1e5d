"""Thread-safe caches of friends, groups and chat rooms."""

from __future__ import annotations

import copy
import dataclasses
import threading
from dataclasses import dataclass, field
from typing import Dict, Generic, TypeVar

from .steamid import SteamId


@dataclass
class ChatMember:
    steam_id: SteamId
    chat_permissions: int = 0
    clan_permissions: int = 0


@dataclass
class Chat:
    steam_id: SteamId
    group_id: SteamId = SteamId(0)
    members: Dict[SteamId, ChatMember] = field(default_factory=dict)


@dataclass
class Friend:
    steam_id: SteamId
    name: str = ""
    avatar: bytes = b""
    relationship: int = 0
    persona_state: int = 0
    persona_state_flags: int = 0
    game_app_id: int = 0
    game_id: int = 0
    game_name: str = ""


@dataclass
class Group:
    steam_id: SteamId
    name: str = ""
    avatar: bytes = b""
    relationship: int = 0
    member_total_count: int = 0
    member_online_count: int = 0
    member_chatting_count: int = 0
    member_in_game_count: int = 0


T = TypeVar("T")


def _clone(entry):
    duplicate = copy.copy(entry)
    if isinstance(duplicate, Chat):
        duplicate.members = dict(duplicate.members)
    return duplicate


class _Cache(Generic[T]):
    _kind = "Entry"
    # When set, chat ids given to lookups and updates are folded to their clan id.
    _fold_chat_ids = False

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_id: Dict[SteamId, T] = {}

    def _key(self, steam_id: SteamId) -> SteamId:
        if self._fold_chat_ids:
            return SteamId(steam_id).chat_to_clan()
        return steam_id

    def add(self, entry: T) -> None:
        """Store a copy of ``entry`` unless one with the same id is already present."""
        with self._lock:
            self._by_id.setdefault(entry.steam_id, _clone(entry))

    def remove(self, steam_id: SteamId) -> None:
        with self._lock:
            self._by_id.pop(steam_id, None)

    def copy(self) -> Dict[SteamId, T]:
        """Return a snapshot of all entries."""
        with self._lock:
            return {key: _clone(value) for key, value in self._by_id.items()}

    def by_id(self, steam_id: SteamId) -> T:
        """Return a copy of the entry; raise KeyError if there is none."""
        with self._lock:
            try:
                return _clone(self._by_id[self._key(steam_id)])
            except KeyError:
                raise KeyError(f"{self._kind} not found") from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)

    def __contains__(self, steam_id: object) -> bool:
        with self._lock:
            return steam_id in self._by_id


class _UpdatableCache(_Cache[T]):
    _fields: frozenset = frozenset()

    def update(self, steam_id: SteamId, **kwargs) -> None:
        """Set the given fields of an existing entry; unknown ids are ignored."""
        unknown = set(kwargs) - self._fields
        if unknown:
            raise TypeError(f"unknown {self._kind.lower()} fields: {sorted(unknown)}")
        with self._lock:
            entry = self._by_id.get(self._key(steam_id))
            if entry is not None:
                for name, value in kwargs.items():
                    setattr(entry, name, value)


def _mutable_fields(cls) -> frozenset:
    return frozenset(f.name for f in dataclasses.fields(cls) if f.name != "steam_id")


class FriendsList(_UpdatableCache[Friend]):
    """Friends keyed by Steam ID."""

    _kind = "Friend"
    _fields = _mutable_fields(Friend)

    def add(self, friend: Friend) -> None:
        super().add(friend)

    def remove(self, steam_id: SteamId) -> None:
        super().remove(steam_id)

    def copy(self) -> Dict[SteamId, Friend]:
        return super().copy()

    def by_id(self, steam_id: SteamId) -> Friend:
        return super().by_id(steam_id)

    def update(self, steam_id: SteamId, **kwargs) -> None:
        super().update(steam_id, **kwargs)

    def __len__(self) -> int:
        return super().__len__()


class GroupsList(_UpdatableCache[Group]):
    """Groups keyed by clan Steam ID; lookups also accept the clan's chat id."""

    _kind = "Group"
    _fields = _mutable_fields(Group)
    _fold_chat_ids = True

    def add(self, group: Group) -> None:
        super().add(group)

    def remove(self, steam_id: SteamId) -> None:
        super().remove(steam_id)

    def copy(self) -> Dict[SteamId, Group]:
        return super().copy()

    def by_id(self, steam_id: SteamId) -> Group:
        return super().by_id(steam_id)

    def update(self, steam_id: SteamId, **kwargs) -> None:
        super().update(steam_id, **kwargs)

    def __len__(self) -> int:
        return super().__len__()


class ChatsList(_Cache[Chat]):
    """Chat rooms and their members keyed by chat Steam ID."""

    _kind = "Chat"

    def add(self, chat: Chat) -> None:
        super().add(chat)

    def remove(self, steam_id: SteamId) -> None:
        super().remove(steam_id)

    def add_member(self, chat_id: SteamId, member: ChatMember) -> None:
        """Add or replace a member, creating the chat if it is not known yet."""
        with self._lock:
            chat = self._by_id.get(chat_id)
            if chat is None:
                chat = Chat(steam_id=chat_id)
                self._by_id[chat_id] = chat
            chat.members[member.steam_id] = copy.copy(member)

    def remove_member(self, chat_id: SteamId, member_id: SteamId) -> None:
        with self._lock:
            chat = self._by_id.get(chat_id)
            if chat is not None:
                chat.members.pop(member_id, None)

    def copy(self) -> Dict[SteamId, Chat]:
        return super().copy()

    def by_id(self, steam_id: SteamId) -> Chat:
        return super().by_id(steam_id)

    def __len__(self) -> int:
        return super().__len__()