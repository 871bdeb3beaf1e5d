"""List of connection manager servers fetched from the Steam directory."""

from __future__ import annotations

import random
import threading
from typing import List, Optional, Tuple

import requests

_CM_LIST_URL = "https://api.steampowered.com/ISteamDirectory/GetCMList/v1/?cellId=0"


class SteamDirectoryError(Exception):
    """The directory answered, but without a usable server list."""


def _lookup(data, name: str):
    if not isinstance(data, dict):
        return None
    lowered = name.lower()
    for key, value in data.items():
        if key.lower() == lowered:
            return value
    return None


def _parse_address(address: str) -> Tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"invalid server address: {address!r}")
    return host, int(port)


class SteamDirectory:
    """Holds the server list once it has been loaded."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._servers: List[str] = []
        self._initialized = False

    def initialize(self, session: Optional[requests.Session] = None) -> None:
        """Fetch the server list and keep it for later connections."""
        http = session if session is not None else requests
        with self._lock:
            response = http.get(_CM_LIST_URL)
            try:
                payload = _lookup(response.json(), "response") or {}
            finally:
                response.close()
            result = _lookup(payload, "result") or 0
            message = _lookup(payload, "message") or ""
            if result != 1:
                raise SteamDirectoryError(
                    f"Failed to get steam directory, result: {result}, message: {message}"
                )
            servers = list(_lookup(payload, "serverlist") or [])
            if not servers:
                raise SteamDirectoryError(
                    "Steam returned zero servers for steam directory request"
                )
            self._servers = servers
            self._initialized = True

    def get_random_cm(self) -> Tuple[str, int]:
        """Return a random server as ``(host, port)``."""
        with self._lock:
            if not self._initialized:
                raise RuntimeError("steam directory is not initialized")
            return _parse_address(random.choice(self._servers))

    def is_initialized(self) -> bool:
        with self._lock:
            return self._initialized


steam_directory = SteamDirectory()


def initialize_steam_directory() -> None:
    """Load the shared server list from the Steam directory."""
    steam_directory.initialize()