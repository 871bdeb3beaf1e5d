"""Trade offer records, escrow durations and trade receipt parsing."""

from __future__ import annotations

import enum
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from .steamid import SteamId

_ACCOUNT_ID_BASE = 76561197960265728
_U32_MAX = 0xFFFFFFFF

_MY_ESCROW = re.compile(rb"g_daysMyEscrow[\s=]+(\d+);", re.IGNORECASE)
_THEIR_ESCROW = re.compile(rb"g_daysTheirEscrow[\s=]+(\d+);", re.IGNORECASE)
_NOT_FRIENDS = re.compile(rb">You are not friends with this user<")
_RECEIPT_ITEM = re.compile(rb"oItem =\s+(.+?});")

JsonInput = Union[str, bytes, Mapping[str, Any]]


class SteamError(Exception):
    """Steam answered, but in an unknown format or by declining the request."""


class TradeOfferState(enum.IntEnum):
    INVALID = 1
    ACTIVE = 2
    ACCEPTED = 3
    COUNTERED = 4
    EXPIRED = 5
    CANCELED = 6
    DECLINED = 7
    INVALID_ITEMS = 8
    CREATED_NEEDS_CONFIRMATION = 9
    CANCELED_BY_SECOND_FACTOR = 10
    IN_ESCROW = 11


class TradeOfferConfirmationMethod(enum.IntEnum):
    INVALID = 0
    EMAIL = 1
    MOBILE_APP = 2


def _as_bytes(data: Union[str, bytes]) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def _load(data: JsonInput) -> Mapping[str, Any]:
    if isinstance(data, (str, bytes, bytearray)):
        data = json.loads(data)
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
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"expected an unsigned number, got {value!r}")
        return value
    if isinstance(value, float) and value.is_integer() and value >= 0:
        return int(value)
    raise ValueError(f"expected an unsigned number, got {value!r}")


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _flag(value: Any) -> bool:
    return bool(value) if value is not None else False


def _enum(cls, value: int):
    try:
        return cls(value)
    except ValueError:
        return value


@dataclass
class EscrowDuration:
    days_my_escrow: int
    days_their_escrow: int


def _escrow_days(match: "re.Match[bytes]", whose: str) -> int:
    value = int(match.group(1))
    if value > _U32_MAX:
        raise ValueError(f"failed to parse {whose} duration into uint: value out of range")
    return value


def parse_escrow_duration(data: Union[str, bytes]) -> EscrowDuration:
    """Read the escrow day counts embedded in a trade offer page."""
    raw = _as_bytes(data)
    mine = _MY_ESCROW.search(raw)
    theirs = _THEIR_ESCROW.search(raw)
    if mine is None or theirs is None:
        if _NOT_FRIENDS.search(raw):
            raise ValueError("you are not friends with this user")
        raise ValueError("regexp does not match")
    return EscrowDuration(
        days_my_escrow=_escrow_days(mine, "my"),
        days_their_escrow=_escrow_days(theirs, "their"),
    )


_RECEIPT_KEYS = {"id", "appid", "contextid", "owner", "pos"}


@dataclass
class TradeReceiptItem:
    asset_id: int = 0
    app_id: int = 0
    context_id: int = 0
    owner: int = 0
    pos: int = 0
    description: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: JsonInput) -> "TradeReceiptItem":
        obj = _load(data)
        return cls(
            asset_id=_uint(_lookup(obj, "id")),
            app_id=_uint(_lookup(obj, "AppId")),
            context_id=_uint(_lookup(obj, "ContextId")),
            owner=_uint(_lookup(obj, "Owner")),
            pos=_uint(_lookup(obj, "Pos")),
            description={k: v for k, v in obj.items() if k.lower() not in _RECEIPT_KEYS},
        )


def parse_trade_receipt(data: Union[str, bytes]) -> List[TradeReceiptItem]:
    """Extract the items listed on a trade receipt page."""
    matches = _RECEIPT_ITEM.findall(_as_bytes(data))
    if not matches:
        raise ValueError("items not found")
    return [TradeReceiptItem.from_json(match) for match in matches]


@dataclass
class Asset:
    app_id: int = 0
    context_id: int = 0
    asset_id: int = 0
    currency_id: int = 0
    class_id: int = 0
    instance_id: int = 0
    amount: int = 0
    missing: bool = False

    @classmethod
    def from_json(cls, data: JsonInput) -> "Asset":
        obj = _load(data)
        return cls(
            context_id=_uint(_lookup(obj, "ContextId")),
            asset_id=_uint(_lookup(obj, "AssetId")),
            currency_id=_uint(_lookup(obj, "CurrencyId")),
            class_id=_uint(_lookup(obj, "ClassId")),
            instance_id=_uint(_lookup(obj, "InstanceId")),
            amount=_uint(_lookup(obj, "Amount")),
            missing=_flag(_lookup(obj, "Missing")),
        )


@dataclass
class Description:
    app_id: int = 0
    class_id: int = 0
    instance_id: int = 0
    icon_url: str = ""
    icon_url_large: str = ""
    name: str = ""
    market_name: str = ""
    market_hash_name: str = ""
    name_color: str = ""
    background_color: str = ""
    type: str = ""
    tradable: bool = False
    commodity: bool = False
    market_tradable_restriction: int = 0
    descriptions: List[Any] = field(default_factory=list)
    actions: List[Any] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: JsonInput) -> "Description":
        obj = _load(data)
        return cls(
            app_id=_uint(_lookup(obj, "appid")),
            class_id=_uint(_lookup(obj, "classid")),
            instance_id=_uint(_lookup(obj, "instanceid")),
            icon_url=_text(_lookup(obj, "icon_url")),
            icon_url_large=_text(_lookup(obj, "icon_url_large")),
            name=_text(_lookup(obj, "Name")),
            market_name=_text(_lookup(obj, "market_name")),
            market_hash_name=_text(_lookup(obj, "market_hash_name")),
            name_color=_text(_lookup(obj, "name_color")),
            background_color=_text(_lookup(obj, "background_color")),
            type=_text(_lookup(obj, "Type")),
            tradable=_flag(_lookup(obj, "tradable")),
            commodity=_flag(_lookup(obj, "commodity")),
            market_tradable_restriction=_uint(_lookup(obj, "market_tradable_restriction")),
            descriptions=list(_lookup(obj, "descriptions") or []),
            actions=list(_lookup(obj, "actions") or []),
        )


def _assets(value: Any) -> List[Asset]:
    return [Asset.from_json(item) for item in (value or []) if item is not None]


def _descriptions(value: Any) -> List[Description]:
    return [Description.from_json(item) for item in (value or []) if item is not None]


@dataclass
class TradeOffer:
    trade_offer_id: int = 0
    trade_id: int = 0
    other_account_id: int = 0
    other_steam_id: SteamId = SteamId(0)
    message: str = ""
    expiration_time: int = 0
    state: Union[TradeOfferState, int] = 0
    to_give: List[Asset] = field(default_factory=list)
    to_receive: List[Asset] = field(default_factory=list)
    is_our_offer: bool = False
    time_created: int = 0
    time_updated: int = 0
    escrow_end_date: int = 0
    confirmation_method: Union[TradeOfferConfirmationMethod, int] = (
        TradeOfferConfirmationMethod.INVALID
    )

    @classmethod
    def from_json(cls, data: JsonInput) -> "TradeOffer":
        obj = _load(data)
        account_id = _uint(_lookup(obj, "accountid_other"))
        other = SteamId(account_id + _ACCOUNT_ID_BASE) if account_id else SteamId(0)
        return cls(
            trade_offer_id=_uint(_lookup(obj, "TradeOfferId")),
            trade_id=_uint(_lookup(obj, "TradeId")),
            other_account_id=account_id,
            other_steam_id=other,
            message=_text(_lookup(obj, "message")),
            expiration_time=_uint(_lookup(obj, "expiraton_time")),
            state=_enum(TradeOfferState, _uint(_lookup(obj, "trade_offer_state"))),
            to_give=_assets(_lookup(obj, "items_to_give")),
            to_receive=_assets(_lookup(obj, "items_to_receive")),
            is_our_offer=_flag(_lookup(obj, "is_our_offer")),
            time_created=_uint(_lookup(obj, "time_created")),
            time_updated=_uint(_lookup(obj, "time_updated")),
            escrow_end_date=_uint(_lookup(obj, "escrow_end_date")),
            confirmation_method=_enum(
                TradeOfferConfirmationMethod, _uint(_lookup(obj, "confirmation_method"))
            ),
        )


def _offers(value: Any) -> List[TradeOffer]:
    return [TradeOffer.from_json(item) for item in (value or []) if item is not None]


@dataclass
class TradeOffersResult:
    sent: List[TradeOffer] = field(default_factory=list)
    received: List[TradeOffer] = field(default_factory=list)
    descriptions: List[Description] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: JsonInput) -> "TradeOffersResult":
        obj = _load(data)
        return cls(
            sent=_offers(_lookup(obj, "trade_offers_sent")),
            received=_offers(_lookup(obj, "trade_offers_received")),
            descriptions=_descriptions(_lookup(obj, "Descriptions")),
        )


@dataclass
class TradeOfferResult:
    offer: Optional[TradeOffer] = None
    descriptions: List[Description] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: JsonInput) -> "TradeOfferResult":
        obj = _load(data)
        offer = _lookup(obj, "Offer")
        return cls(
            offer=TradeOffer.from_json(offer) if offer is not None else None,
            descriptions=_descriptions(_lookup(obj, "Descriptions")),
        )