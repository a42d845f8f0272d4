"""Metadata lookup helpers: availability rules, request URLs and cover downloads."""

from __future__ import annotations

import enum
from collections.abc import AsyncIterator, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from .spotify_id import FileId, SpotifyId

CMD_IMAGE = 0x19

_COUNTRY_CODE_SIZE = 2


def _country_codes(countries: str) -> Iterator[str]:
    for start in range(0, len(countries), _COUNTRY_CODE_SIZE):
        yield countries[start:start + _COUNTRY_CODE_SIZE]


def countrylist_contains(countries: str, country: str) -> bool:
    """Whether ``country`` is one of the two-letter codes packed into ``countries``."""
    return any(code == country for code in _country_codes(countries))


@dataclass(frozen=True)
class Restriction:
    """An availability restriction of an item for some catalogues."""

    catalogue_str: tuple[str, ...] = field(default_factory=tuple)
    countries_allowed: str | None = None
    countries_forbidden: str | None = None


def parse_restrictions(
    restrictions: Iterable[Restriction], country: str, catalogue: str
) -> bool:
    """Decide whether an item is available in ``country`` for ``catalogue``.

    Only restrictions naming the catalogue count. An item with no matching
    country rule is unavailable.
    """
    forbidden: list[str] = []
    allowed: list[str] = []
    has_forbidden = False
    has_allowed = False

    for restriction in restrictions:
        if catalogue not in restriction.catalogue_str:
            continue
        if restriction.countries_forbidden is not None:
            forbidden.append(restriction.countries_forbidden)
            has_forbidden = True
        if restriction.countries_allowed is not None:
            allowed.append(restriction.countries_allowed)
            has_allowed = True

    return (
        (has_forbidden or has_allowed)
        and (not has_forbidden or not countrylist_contains("".join(forbidden), country))
        and (not has_allowed or countrylist_contains("".join(allowed), country))
    )


class MetadataKind(enum.Enum):
    """Kinds of metadata that can be requested; the value is the URL path part."""

    TRACK = "track"
    ALBUM = "album"
    PLAYLIST = "playlist"
    ARTIST = "artist"
    EPISODE = "episode"
    SHOW = "show"

    def request_url(self, spotify_id: SpotifyId) -> str:
        """The URL from which the metadata of ``spotify_id`` is fetched."""
        if self is MetadataKind.PLAYLIST:
            return f"hm://playlist/v2/playlist/{spotify_id.to_base62()}"
        return f"hm://metadata/3/{self.value}/{spotify_id.to_base16()}"


def request_cover(session: Any, file_id: FileId) -> AsyncIterator[bytes]:
    """Ask for the image ``file_id`` on a new channel and return its data stream."""
    channel_id, channel = session.channel().allocate()
    packet = channel_id.to_bytes(2, "big") + b"\x00\x00" + file_id.raw
    session.send_packet(CMD_IMAGE, packet)
    return channel.data()