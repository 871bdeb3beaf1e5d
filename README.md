# steamkit

A small Python library for working with Steam:

- `steamkit.steamid`: pack and unpack 64-bit Steam IDs, parse `STEAM_X:Y:Z` strings and convert between clan and chat IDs.
- `steamkit.totp`: produce the five-character codes of the Steam mobile authenticator from a base64 shared secret.
- `steamkit.socialcache`: thread-safe caches for friends, groups and chat rooms.
- `steamkit.tradeoffer`: models for the Trade Offer Web API, plus parsers for escrow durations and trade receipts.
- `steamkit.tf2_messages`: binary serialisation of TF2 Game Coordinator item messages.
- `steamkit.directory`: fetch the list of connection-manager servers from the Steam Directory.
- `steamkit.tradeapi` and `steamkit.trade`: automate a live web trade by polling the trade endpoints and receiving events.

## Installation

```
pip install .
```

## Examples

Steam IDs:

```python
from steamkit.steamid import SteamId

sid = SteamId.parse("STEAM_0:1:12345")
print(int(sid), sid.account_id(), sid.rendered())
```

Authenticator codes:

```python
from datetime import datetime, timezone
from steamkit.totp import generate_code

print(generate_code("c2VjcmV0", datetime.now(timezone.utc)))
```

A web trade. The session cookies come from a logged-in Steam web session:

```python
from steamkit.steamid import SteamId
from steamkit.trade import Trade, ChatEvent, TradeEndedEvent

trade = Trade("token", "token", "token", SteamId(76561197960287930))
while True:
    for event in trade.poll():
        if isinstance(event, ChatEvent):
            trade.chat("Trading is awesome!")
        elif isinstance(event, TradeEndedEvent):
            raise SystemExit
```

Call `poll()` at least every few seconds. If the gap is longer, Steam warns the partner and then closes the trade.

## Running the tests

```
pip install .[test]
pytest
```