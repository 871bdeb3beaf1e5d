import json
from urllib.parse import parse_qsl

import pytest
import responses

from steamkit.steamid import SteamId
from steamkit.tradeapi import (
    Action,
    Currency,
    Event,
    Status,
    TradeApi,
    TradeApiError,
    TradeStatus,
    parse_event_list,
)

OTHER = SteamId.from_components(12345, 1, 1, 1)
BASE = f"https://steamcommunity.com/trade/{int(OTHER)}/"
SESSION_ID = "token"


def make_api():
    return TradeApi(SESSION_ID, "token", "token", OTHER)


def status_body(**overrides):
    body = {
        "success": True,
        "newversion": False,
        "trade_status": 0,
        "version": 1,
        "logpos": 0,
        "me": {"ready": 0},
        "them": {"ready": 0},
        "events": [],
    }
    body.update(overrides)
    return body


def form_of(call):
    return dict(parse_qsl(call.request.body))


def test_parse_event_list_from_array():
    events = parse_event_list(
        [
            {"steamid": str(int(OTHER)), "action": "0", "assetid": "42"},
            {"steamid": str(int(OTHER)), "action": "1", "assetid": "43"},
        ]
    )
    assert sorted(events) == [0, 1]
    assert events[0].action == Action.ADD_ITEM
    assert events[1].action == Action.REMOVE_ITEM
    assert events[1].asset_id == 43
    assert events[0].steam_id == OTHER


def test_parse_event_list_from_object():
    events = parse_event_list({"3": {"action": "2"}, "7": {"action": "3"}})
    assert set(events) == {3, 7}
    assert events[3].action == Action.READY
    assert events[7].action == Action.UNREADY


def test_parse_event_list_from_text():
    events = parse_event_list(json.dumps([{"action": "7", "text": "hi"}]))
    assert events[0].text == "hi"


def test_parse_event_list_null_is_empty():
    assert parse_event_list(None) == {}


def test_parse_event_list_rejects_bad_index():
    with pytest.raises(ValueError):
        parse_event_list({"abc": {"action": "0"}})


def test_parse_event_list_rejects_scalar():
    with pytest.raises(ValueError):
        parse_event_list(5)


def test_event_set_currency_amounts():
    event = Event.from_json(
        {"action": "6", "appid": 753, "contextid": "6", "currencyid": "11", "old_amount": "1", "amount": "3"}
    )
    assert event.action == Action.SET_CURRENCY
    assert event.app_id == 753
    assert event.context_id == 6
    assert event.currency_id == 11
    assert event.old_amount == 1
    assert event.new_amount == 3


def test_event_rejects_non_numeric_id():
    with pytest.raises(ValueError):
        Event.from_json({"assetid": "not-a-number"})


def test_status_from_json():
    status = Status.from_json(
        status_body(newversion=True, trade_status=1, version=4, me={"ready": 1}, error="boom")
    )
    assert status.success is True
    assert status.new_version is True
    assert status.trade_status == TradeStatus.COMPLETE
    assert status.version == 4
    assert status.me.ready is True
    assert status.them.ready is False
    assert status.error == "boom"
    assert status.events == {}


def test_status_from_text_keeps_unknown_trade_status():
    status = Status.from_json(json.dumps(status_body(trade_status=99)))
    assert status.trade_status == 99


def test_currency_from_json():
    currency = Currency.from_json({"appid": "753", "contextid": "6", "currencyid": "11", "amount": "5"})
    assert currency == Currency(app_id=753, context_id=6, currency_id=11, amount=5)


def test_base_url_contains_partner_id():
    assert make_api().base_url == BASE


@pytest.mark.parametrize("flag, expected", [("true", True), ("false", False)])
def test_get_main_reads_probation(flag, expected):
    api = make_api()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, BASE, body=f"<script>var g_bTradePartnerProbation = {flag};</script>")
        assert api.get_main().partner_on_probation is expected


def test_get_main_without_probation_info():
    api = make_api()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, BASE, body="<html></html>")
        with pytest.raises(TradeApiError):
            api.get_main()


def test_get_status_sends_form_and_headers():
    api = make_api()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, BASE + "tradestatus/", json=status_body(trade_status=3))
        status = api.get_status()
        call = rsps.calls[0]
    assert status.trade_status == TradeStatus.CANCELLED
    assert form_of(call) == {"sessionid": SESSION_ID, "logpos": "0", "version": "1"}
    assert call.request.headers["Referer"] == BASE
    assert f"sessionid={SESSION_ID}" in call.request.headers["Cookie"]


def test_chat_uses_current_log_position():
    api = make_api()
    api.log_pos = 5
    api.version = 3
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, BASE + "chat", json=status_body())
        api.chat("hello")
        form = form_of(rsps.calls[0])
    assert form == {"sessionid": SESSION_ID, "logpos": "5", "version": "3", "message": "hello"}


@pytest.mark.parametrize("method, endpoint", [("add_item", "additem"), ("remove_item", "removeitem")])
def test_item_endpoints(method, endpoint):
    api = make_api()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, BASE + endpoint, json=status_body())
        getattr(api, method)(2, 42, 6, 753)
        form = form_of(rsps.calls[0])
    assert form == {"sessionid": SESSION_ID, "slot": "2", "itemid": "42", "contextid": "6", "appid": "753"}


def test_set_currency_form():
    api = make_api()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, BASE + "setcurrency", json=status_body())
        api.set_currency(3, 11, 6, 753)
        form = form_of(rsps.calls[0])
    assert form == {"sessionid": SESSION_ID, "amount": "3", "currencyid": "11", "contextid": "6", "appid": "753"}


@pytest.mark.parametrize("ready, text", [(True, "true"), (False, "false")])
def test_set_ready_form(ready, text):
    api = make_api()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, BASE + "toggleready", json=status_body())
        api.set_ready(ready)
        form = form_of(rsps.calls[0])
    assert form == {"sessionid": SESSION_ID, "version": "1", "ready": text}


def test_confirm_and_cancel_forms():
    api = make_api()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, BASE + "confirm", json=status_body())
        rsps.add(responses.POST, BASE + "cancel", json=status_body(trade_status=3))
        api.confirm()
        status = api.cancel()
        confirm_form = form_of(rsps.calls[0])
        cancel_form = form_of(rsps.calls[1])
    assert confirm_form == {"sessionid": SESSION_ID, "version": "1"}
    assert cancel_form == {"sessionid": SESSION_ID}
    assert status.trade_status == TradeStatus.CANCELLED


def test_invalid_json_response_raises():
    api = make_api()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, BASE + "cancel", body="not json")
        with pytest.raises(ValueError):
            api.cancel()