import pytest
import requests
import responses

from steamkit import directory
from steamkit.directory import (
    SteamDirectory,
    SteamDirectoryError,
    initialize_steam_directory,
)

URL = "https://api.steampowered.com/ISteamDirectory/GetCMList/v1/"
SERVERS = ["192.0.2.1:27017", "192.0.2.2:27018", "198.51.100.7:443"]


def _expected():
    return {(host, int(port)) for host, port in (s.rsplit(":", 1) for s in SERVERS)}


def test_uninitialized_directory():
    sd = SteamDirectory()
    assert sd.is_initialized() is False
    with pytest.raises(RuntimeError, match="not initialized"):
        sd.get_random_cm()


def test_initialize_and_pick_server():
    sd = SteamDirectory()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json={"response": {
            "serverlist": SERVERS, "result": 1, "message": ""}})
        sd.initialize(requests.Session())
    assert sd.is_initialized() is True
    picks = {sd.get_random_cm() for _ in range(50)}
    assert picks <= _expected()


def test_bad_result_is_reported():
    sd = SteamDirectory()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json={"response": {
            "serverlist": SERVERS, "result": 2, "message": "busy"}})
        with pytest.raises(SteamDirectoryError, match="result: 2, message: busy"):
            sd.initialize()
    assert sd.is_initialized() is False


def test_empty_server_list_is_reported():
    sd = SteamDirectory()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json={"response": {"serverlist": [], "result": 1}})
        with pytest.raises(SteamDirectoryError, match="zero servers"):
            sd.initialize()
    assert sd.is_initialized() is False


def test_invalid_json_is_an_error():
    sd = SteamDirectory()
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, body="not json")
        with pytest.raises(ValueError):
            sd.initialize()
    assert sd.is_initialized() is False


def test_shared_directory_initialization():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json={"response": {
            "serverlist": SERVERS[:1], "result": 1}})
        initialize_steam_directory()
    assert directory.steam_directory.is_initialized() is True
    assert directory.steam_directory.get_random_cm() in _expected()