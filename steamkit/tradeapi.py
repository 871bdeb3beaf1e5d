"""Typed wrapper around the HTTP endpoints of a Steam trade session."""

from __future__ import annotations

import enum
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import requests

from .steamid import SteamId

_TRADE_URL = "https://steamcommunity.com/trade/{}/"
_COMMUNITY_DOMAIN = "steamcommunity.com"
_TIMEOUT = 10.0
_U32_MAX = 0xFFFFFFFF
_PROBATION = re.compile(rb"var g_bTradePartnerProbation = (\w+);")

JsonInput = Union[str, bytes, Mapping[str, Any]]


class TradeApiError(Exception):
    """A trade page or endpoint answered with something that cannot be used."""


class TradeStatus(enum.IntEnum):
    OPEN = 0
    COMPLETE = 1
    EMPTY = 2  # both parties trade no items
    CANCELLED = 3
    TIMEOUT = 4  # the partner timed out
    FAILED = 5


class Action(enum.IntEnum):
    ADD_ITEM = 0
    REMOVE_ITEM = 1
    READY = 2
    UNREADY = 3
    ACCEPT = 4
    SET_CURRENCY = 6
    CHAT_MESSAGE = 7


def _decode(data: Any) -> Any:
    if isinstance(data, (str, bytes, bytearray)):
        return json.loads(data)
    return data


def _load(data: Any) -> Mapping[str, Any]:
    data = _decode(data)
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _lookup(data: Mapping[str, Any], name: str) -> Any:
    """Find a key exactly, or else ignoring case."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if key.lower() == lowered:
            return value
    return None


def _uint(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"expected an unsigned number, got {value!r}")
    if isinstance(value, str):
        if not value.isdigit():
            raise ValueError(f"expected an unsigned number, got {value!r}")
        return int(value)
    if isinstance(value, int) and value >= 0:
        return value
    if isinstance(value, float) and value.is_integer() and value >= 0:
        return int(value)
    raise ValueError(f"expected an unsigned number, got {value!r}")


def _int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    return int(value)


def _flag(value: Any) -> bool:
    return bool(value) if value is not None else False


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _enum(cls, value: int):
    try:
        return cls(value)
    except ValueError:
        return value


@dataclass
class Event:
    steam_id: SteamId = SteamId(0)
    action: Union[Action, int] = Action.ADD_ITEM
    timestamp: int = 0
    app_id: int = 0
    context_id: int = 0
    asset_id: int = 0
    text: str = ""  # chat messages only
    currency_id: int = 0
    old_amount: int = 0
    new_amount: int = 0

    @classmethod
    def from_json(cls, data: JsonInput) -> "Event":
        obj = _load(data)
        return cls(
            steam_id=SteamId(_uint(_lookup(obj, "SteamId"))),
            action=_enum(Action, _uint(_lookup(obj, "Action"))),
            timestamp=_uint(_lookup(obj, "Timestamp")),
            app_id=_uint(_lookup(obj, "AppId")),
            context_id=_uint(_lookup(obj, "ContextId")),
            asset_id=_uint(_lookup(obj, "AssetId")),
            text=_text(_lookup(obj, "Text")),
            currency_id=_uint(_lookup(obj, "CurrencyId")),
            old_amount=_uint(_lookup(obj, "old_amount")),
            new_amount=_uint(_lookup(obj, "amount")),
        )


def parse_event_list(data: Any) -> Dict[int, Event]:
    """Read an event list given either as an array or as an object of id -> event."""
    decoded = _decode(data)
    if decoded is None:
        return {}
    if isinstance(decoded, Mapping):
        events: Dict[int, Event] = {}
        for key, value in decoded.items():
            if not key.isdigit() or int(key) > _U32_MAX:
                raise ValueError(f"invalid event index: {key!r}")
            if value is not None:
                events[int(key)] = Event.from_json(value)
        return events
    if isinstance(decoded, list):
        return {
            index: Event.from_json(value)
            for index, value in enumerate(decoded)
            if value is not None
        }
    raise ValueError(f"expected a JSON array or object, got {type(decoded).__name__}")


@dataclass
class User:
    ready: bool = False
    confirmed: bool = False
    sec_since_touch: int = 0
    connection_pending: bool = False
    assets: Any = None
    currency: Any = None  # a list of currencies or an empty string

    @classmethod
    def from_json(cls, data: JsonInput) -> "User":
        obj = _load(data)
        return cls(
            ready=_flag(_lookup(obj, "Ready")),
            confirmed=_flag(_lookup(obj, "Confirmed")),
            sec_since_touch=_int(_lookup(obj, "sec_since_touch")),
            connection_pending=_flag(_lookup(obj, "connection_pending")),
            assets=_lookup(obj, "Assets"),
            currency=_lookup(obj, "Currency"),
        )


@dataclass
class Currency:
    app_id: int = 0
    context_id: int = 0
    currency_id: int = 0
    amount: int = 0

    @classmethod
    def from_json(cls, data: JsonInput) -> "Currency":
        obj = _load(data)
        return cls(
            app_id=_uint(_lookup(obj, "AppId")),
            context_id=_uint(_lookup(obj, "ContextId")),
            currency_id=_uint(_lookup(obj, "CurrencyId")),
            amount=_uint(_lookup(obj, "Amount")),
        )


@dataclass
class Status:
    success: bool = False
    error: str = ""
    new_version: bool = False
    trade_status: Union[TradeStatus, int] = TradeStatus.OPEN
    version: int = 0
    log_pos: int = 0
    me: User = field(default_factory=User)
    them: User = field(default_factory=User)
    events: Dict[int, Event] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: JsonInput) -> "Status":
        obj = _load(data)
        return cls(
            success=_flag(_lookup(obj, "Success")),
            error=_text(_lookup(obj, "Error")),
            new_version=_flag(_lookup(obj, "newversion")),
            trade_status=_enum(TradeStatus, _uint(_lookup(obj, "trade_status"))),
            version=_uint(_lookup(obj, "Version")),
            log_pos=_int(_lookup(obj, "LogPos")),
            me=User.from_json(_lookup(obj, "Me")),
            them=User.from_json(_lookup(obj, "Them")),
            events=parse_event_list(_lookup(obj, "Events")),
        )


@dataclass
class Main:
    partner_on_probation: bool


class TradeApi:
    """One trade session with a partner, authenticated by web cookies.

    ``log_pos`` and ``version`` are not updated automatically.
    """

    def __init__(
        self,
        session_id: str,
        steam_login: str,
        steam_login_secure: str,
        other: SteamId,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.other = SteamId(other)
        self.log_pos = 0
        self.version = 1
        self.base_url = _TRADE_URL.format(int(self.other))
        self._session_id = session_id
        self._session = session if session is not None else requests.Session()
        cookies = {
            "sessionid": session_id,
            "steamLogin": steam_login,
            "steamLoginSecure": steam_login_secure,
        }
        for name, value in cookies.items():
            self._session.cookies.set(name, value, domain=_COMMUNITY_DOMAIN, path="/")

    def get_main(self) -> Main:
        """Fetch the trade page and read the partner's probation flag."""
        with self._session.get(self.base_url, timeout=_TIMEOUT) as response:
            body = response.content
        match = _PROBATION.search(body)
        if match is None:
            raise TradeApiError("tradeapi.get_main: could not find probation info")
        return Main(partner_on_probation=match.group(1) == b"true")

    def _post_with_status(self, url: str, data: Dict[str, str]) -> Status:
        # Steam rejects these requests without the Referer header.
        with self._session.post(
            url, data=data, headers={"Referer": self.base_url}, timeout=_TIMEOUT
        ) as response:
            return Status.from_json(response.json())

    def get_status(self) -> Status:
        return self._post_with_status(
            self.base_url + "tradestatus/",
            {
                "sessionid": self._session_id,
                "logpos": str(self.log_pos),
                "version": str(self.version),
            },
        )

    def chat(self, message: str) -> Status:
        return self._post_with_status(
            self.base_url + "chat",
            {
                "sessionid": self._session_id,
                "logpos": str(self.log_pos),
                "version": str(self.version),
                "message": message,
            },
        )

    def _item_form(self, slot: int, item_id: int, context_id: int, app_id: int) -> Dict[str, str]:
        return {
            "sessionid": self._session_id,
            "slot": str(slot),
            "itemid": str(item_id),
            "contextid": str(context_id),
            "appid": str(app_id),
        }

    def add_item(self, slot: int, item_id: int, context_id: int, app_id: int) -> Status:
        return self._post_with_status(
            self.base_url + "additem", self._item_form(slot, item_id, context_id, app_id)
        )

    def remove_item(self, slot: int, item_id: int, context_id: int, app_id: int) -> Status:
        return self._post_with_status(
            self.base_url + "removeitem", self._item_form(slot, item_id, context_id, app_id)
        )

    def set_currency(self, amount: int, currency_id: int, context_id: int, app_id: int) -> Status:
        return self._post_with_status(
            self.base_url + "setcurrency",
            {
                "sessionid": self._session_id,
                "amount": str(amount),
                "currencyid": str(currency_id),
                "contextid": str(context_id),
                "appid": str(app_id),
            },
        )

    def set_ready(self, ready: bool) -> Status:
        return self._post_with_status(
            self.base_url + "toggleready",
            {
                "sessionid": self._session_id,
                "version": str(self.version),
                "ready": "true" if ready else "false",
            },
        )

    def confirm(self) -> Status:
        return self._post_with_status(
            self.base_url + "confirm",
            {"sessionid": self._session_id, "version": str(self.version)},
        )

    def cancel(self) -> Status:
        return self._post_with_status(
            self.base_url + "cancel", {"sessionid": self._session_id}
        )