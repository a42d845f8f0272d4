"""Building blocks for a Spotify Connect client: IDs, credentials, cache,
key exchange, channels, discovery and metadata helpers."""

__version__ = "0.1.0"

__all__ = [
    "apresolve",
    "authentication",
    "cache",
    "channel",
    "config",
    "diffie_hellman",
    "discovery",
    "keys",
    "metadata",
    "proxytunnel",
    "seq",
    "spotify_id",
]