"""Event-driven automation of a Steam trade.

Call :meth:`Trade.poll` until a :class:`TradeEndedEvent` comes back; keep the
gap between polls below the client timeout or Steam closes the trade.
Instances are not thread-safe.
"""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from .steamid import SteamId
from .tradeapi import Action, Event, Main, Status, TradeApi, TradeStatus

POLL_INTERVAL = 1.0


class TradeEndReason(enum.IntEnum):
    COMPLETE = 1
    CANCELLED = 2
    TIMEOUT = 3
    FAILED = 4


_END_REASONS = {
    TradeStatus.COMPLETE: TradeEndReason.COMPLETE,
    TradeStatus.CANCELLED: TradeEndReason.CANCELLED,
    TradeStatus.TIMEOUT: TradeEndReason.TIMEOUT,
    TradeStatus.FAILED: TradeEndReason.FAILED,
}


@dataclass
class TradeEndedEvent:
    reason: TradeEndReason


@dataclass
class Item:
    app_id: int
    context_id: int
    asset_id: int

    @classmethod
    def _from_event(cls, event: Event) -> "Item":
        return cls(event.app_id, event.context_id, event.asset_id)


@dataclass
class ItemAddedEvent:
    item: Item


@dataclass
class ItemRemovedEvent:
    item: Item


@dataclass
class ReadyEvent:
    pass


@dataclass
class UnreadyEvent:
    pass


@dataclass
class Currency:
    app_id: int
    context_id: int
    currency_id: int

    @classmethod
    def _from_event(cls, event: Event) -> "Currency":
        return cls(event.app_id, event.context_id, event.currency_id)


@dataclass
class SetCurrencyEvent:
    currency: Currency
    old_amount: int
    new_amount: int


@dataclass
class ChatEvent:
    message: str


class Trade:
    """A trade with one partner, turning status updates into queued events."""

    def __init__(
        self,
        session_id: str,
        steam_login: str,
        steam_login_secure: str,
        other: SteamId,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.them_id = SteamId(other)
        self.me_ready = False
        self.them_ready = False
        self.api = TradeApi(session_id, steam_login, steam_login_secure, other, session)
        self._last_poll: Optional[float] = None
        self._queued: Optional[List[Any]] = None

    @property
    def version(self) -> int:
        return self.api.version

    def events(self) -> List[Any]:
        """Return and clear the queued events without contacting Steam."""
        queued = self._queued or []
        self._queued = None
        return queued

    def poll(self) -> List[Any]:
        """Return queued events, or fetch the trade status (waiting out the poll interval)."""
        if self._queued is not None:
            return self.events()
        if self._last_poll is not None:
            elapsed = time.monotonic() - self._last_poll
            if elapsed < POLL_INTERVAL:
                time.sleep(POLL_INTERVAL - elapsed)
        self._last_poll = time.monotonic()
        self._on_status(self.api.get_status())
        return self.events()

    def get_main(self) -> Main:
        return self.api.get_main()

    def add_item(self, slot: int, item: Item) -> None:
        self._on_status(self.api.add_item(slot, item.asset_id, item.context_id, item.app_id))

    def remove_item(self, slot: int, item: Item) -> None:
        self._on_status(self.api.remove_item(slot, item.asset_id, item.context_id, item.app_id))

    def chat(self, message: str) -> None:
        self._on_status(self.api.chat(message))

    def set_currency(self, amount: int, currency: Currency) -> None:
        self._on_status(
            self.api.set_currency(amount, currency.currency_id, currency.context_id, currency.app_id)
        )

    def set_ready(self, ready: bool) -> None:
        self._on_status(self.api.set_ready(ready))

    def confirm(self) -> None:
        """Confirm the trade; only valid after a successful ``set_ready(True)``."""
        self._on_status(self.api.confirm())

    def cancel(self) -> None:
        self._on_status(self.api.cancel())

    def _add_event(self, event: Any) -> None:
        if self._queued is None:
            self._queued = []
        self._queued.append(event)

    def _on_status(self, status: Status) -> None:
        # Unsuccessful statuses carry nothing to act on and are dropped.
        if not status.success:
            return
        if status.new_version:
            self.api.version = status.version
            self.me_ready = status.me.ready
            self.them_ready = status.them.ready
        reason = _END_REASONS.get(status.trade_status)
        if reason is not None:
            self._add_event(TradeEndedEvent(reason))
        self._update_events(status.events)

    def _update_events(self, events: Dict[int, Event]) -> None:
        if not events:
            return
        last_log_pos = 0
        for index, event in sorted(events.items()):
            if index < self.api.log_pos or event.steam_id != self.them_id:
                continue
            last_log_pos = max(last_log_pos, index)
            if event.action == Action.ADD_ITEM:
                self._add_event(ItemAddedEvent(Item._from_event(event)))
            elif event.action == Action.REMOVE_ITEM:
                self._add_event(ItemRemovedEvent(Item._from_event(event)))
            elif event.action == Action.READY:
                self.them_ready = True
                self._add_event(ReadyEvent())
            elif event.action == Action.UNREADY:
                self.them_ready = False
                self._add_event(UnreadyEvent())
            elif event.action == Action.SET_CURRENCY:
                self._add_event(
                    SetCurrencyEvent(Currency._from_event(event), event.old_amount, event.new_amount)
                )
            elif event.action == Action.CHAT_MESSAGE:
                self._add_event(ChatEvent(event.text))
        self.api.log_pos = last_log_pos + 1