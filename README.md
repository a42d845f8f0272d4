# spotcore

Building blocks for a Spotify Connect client, written for asyncio.

## What is in the package

- `spotcore.spotify_id` – `SpotifyId` parses and formats track and episode
  IDs as base16, base62, 16 raw bytes and `spotify:{type}:{id}` URIs;
  `SpotifyAudioType` tells tracks, episodes and other items apart; `FileId`
  holds a 20-byte file ID and formats it as hex. Parse failures raise
  `SpotifyIdError` (a `ValueError`).
- `spotcore.seq` – `SeqGenerator`, a sequence number counter that wraps at a
  given bit width.
- `spotcore.config` – `SessionConfig`, `ConnectConfig` and `DeviceType`,
  the device category shown to other clients.
- `spotcore.authentication` – `Credentials`, built from a username and
  password or from an encrypted blob received through discovery, with a JSON
  round trip (`to_json` / `from_json`). Decoding problems raise
  `CredentialsError`.
- `spotcore.cache` – `Cache` stores credentials, the last volume and audio
  files on disk; with a size limit, `FsSizeLimiter` evicts the least recently
  used audio files. `SizeLimiter` is the in-memory bookkeeping behind it.
- `spotcore.diffie_hellman` – `DhLocalKeys`, a Diffie-Hellman key pair over
  the 768-bit group used by the access point handshake.
- `spotcore.keys` – `compute_keys(shared_secret, packets)` derives the
  handshake challenge and the send and receive keys.
- `spotcore.channel` – `ChannelManager` allocates channel IDs and routes
  incoming channel packets; each `Channel` is an async iterator of
  `HeaderEvent` and `DataEvent` items, with `headers()` and `data()` views.
  A failing or shut-down channel raises `ChannelError`.
- `spotcore.apresolve` – `apresolve` asks the resolver service for an access
  point and falls back to `AP_FALLBACK` on failure; `try_apresolve` raises
  instead; `select_access_point` picks an entry from a list by port.
- `spotcore.proxytunnel` – `proxy_connect` opens an HTTP `CONNECT` tunnel over
  an asyncio stream pair and raises `ProxyError` if the proxy refuses.
- `spotcore.discovery` – an HTTP endpoint answering `getInfo` and `addUser`
  requests from clients on the local network and yielding the credentials it
  receives.
- `spotcore.metadata` – `MetadataKind.request_url` builds metadata request
  URLs, `parse_restrictions` and `countrylist_contains` evaluate country
  restrictions, and `request_cover` asks for cover art on a new channel.

Python 3.10 or later is required. Runtime dependencies are `aiohttp` and
`cryptography`.

## Spotify IDs

```python
from spotcore.spotify_id import SpotifyAudioType, SpotifyId, SpotifyIdError

track = SpotifyId.from_uri("spotify:track:5sWHDYs0csV6RS48xBl0tH")
assert track.audio_type is SpotifyAudioType.TRACK
assert track.to_base16() == "b39fe8081e1f4c54be38e8d6f9f12bb9"
assert track.to_base62() == "5sWHDYs0csV6RS48xBl0tH"
assert SpotifyId.from_raw(track.to_raw()).to_uri() == track.to_uri()

try:
    SpotifyId.from_base62("!!!!!Ys0csV6RS48xBl0tH")
except SpotifyIdError:
    print("not a valid ID")
```

## Credentials and cache

```python
from spotcore.authentication import Credentials
from spotcore.cache import Cache

password = "password"
credentials = Credentials.with_password("user", password)

cache = Cache("cache", "cache", "cache/audio", 512 * 1024 * 1024)
cache.save_credentials(credentials)
cache.save_volume(32768)

restored = cache.credentials()
assert restored.username == "user"
assert cache.volume() == 32768
```

Audio files are stored under the audio directory by their hex file ID, split
into a two-character subdirectory and the rest. `Cache.file` returns an open
binary file or `None`; `Cache.save_file` accepts bytes or a readable binary
stream and prunes old files when the size limit is exceeded;
`Cache.remove_file` raises `RemoveFileError` when the file cannot be removed.
Unreadable credentials or volume files are logged and reported as `None`.

## Device types

```python
from spotcore.config import ConnectConfig, DeviceType

device = DeviceType.from_name("speaker")
print(str(device))              # "Speaker"
print(ConnectConfig().name)     # "Librespot"
```

`DeviceType.from_name` ignores case and raises `ValueError` for names it does
not know.

## Key exchange

```python
from spotcore.diffie_hellman import DhLocalKeys
from spotcore.keys import compute_keys

local, remote = DhLocalKeys.random(), DhLocalKeys.random()
shared = local.shared_secret(remote.public_key())
assert shared == remote.shared_secret(local.public_key())

challenge, send_key, recv_key = compute_keys(shared, b"handshake packets")
```

## Channels

```python
from spotcore.channel import ChannelManager, DataEvent, HeaderEvent

manager = ChannelManager()
channel_id, channel = manager.allocate()

# Packets arriving from the connection: 2-byte channel id, then the payload.
manager.dispatch(0x9, channel_id.to_bytes(2, "big") + b"\x00\x03\x01ab\x00\x00")
manager.dispatch(0x9, channel_id.to_bytes(2, "big") + b"payload")
manager.dispatch(0x9, channel_id.to_bytes(2, "big"))   # empty payload ends the channel

async def read():
    return [event async for event in channel]
# -> [HeaderEvent(header_id=1, data=b"ab"), DataEvent(data=b"payload")]
```

`ChannelManager.shutdown` closes every open channel and makes later channels
fail at once; `download_rate_estimate` reports bytes per second seen by
`dispatch`.

## Discovery

```python
import asyncio

from spotcore.config import DeviceType
from spotcore.discovery import Builder

async def main():
    server = await (
        Builder("0123456789abcdef")
        .name("Living Room")
        .device_type(DeviceType.COMPUTER)
        .port(0)
        .launch()
    )
    print("listening on port", server.port)
    async for credentials in server:
        print("received credentials for", credentials.username)
        break
    await server.close()

asyncio.run(main())
```

`DiscoveryServer` can also be used as an async context manager, and
`RequestHandler` answers requests without a running server: `handle(method,
params)` returns an HTTP status and a JSON body.

## Metadata helpers

`MetadataKind.TRACK.request_url(track_id)` and its siblings build the URLs
from which metadata is fetched. `request_cover(session, file_id)` works with
any object whose `channel()` returns a `ChannelManager` and which has a
`send_packet(cmd, data)` method; it returns an async iterator over the image
data.

## What the package does not do

- It does not connect to or log in with an access point, and has no session
  object that sends and receives packets; `apresolve`, `proxy_connect`,
  `DhLocalKeys` and `compute_keys` are the pieces such a connection is built
  from, and `ChannelManager.dispatch` expects packets handed to it.
- It does not request audio decryption keys, fetch or parse metadata
  messages, or play audio.
- The discovery server only serves HTTP; it does not announce itself through
  mDNS / DNS-SD.
- It provides no command-line program.

## Running the tests

Install the `test` extra, then run `pytest` from the project directory.