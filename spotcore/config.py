"""Session and Connect device configuration."""

from __future__ import annotations

import enum
import secrets
import string
import uuid
from dataclasses import dataclass, field

SEMVER = "0.2.0"
SHA_SHORT = "0000000"
VERSION_STRING = f"librespot-{SHA_SHORT}"
BUILD_ID = "".join(secrets.choice(string.ascii_letters + string.digits) for _ in range(8))


class DeviceType(enum.IntEnum):
    """Device category shown as an icon to other clients."""

    UNKNOWN = 0
    COMPUTER = 1
    TABLET = 2
    SMARTPHONE = 3
    SPEAKER = 4
    TV = 5
    AVR = 6
    STB = 7
    AUDIO_DONGLE = 8
    GAME_CONSOLE = 9
    CAST_AUDIO = 10
    CAST_VIDEO = 11
    AUTOMOBILE = 12
    SMARTWATCH = 13
    CHROMEBOOK = 14
    UNKNOWN_SPOTIFY = 100
    CAR_THING = 101
    OBSERVER = 102
    HOME_THING = 103

    @classmethod
    def from_name(cls, name: str) -> DeviceType:
        """Parse a device type name, ignoring case."""
        try:
            return _PARSEABLE[name.lower()]
        except KeyError:
            raise ValueError(f"unknown device type {name!r}") from None

    def __str__(self) -> str:
        return _DISPLAY_NAMES[self]

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_DISPLAY_NAMES = {
    DeviceType.UNKNOWN: "Unknown",
    DeviceType.COMPUTER: "Computer",
    DeviceType.TABLET: "Tablet",
    DeviceType.SMARTPHONE: "Smartphone",
    DeviceType.SPEAKER: "Speaker",
    DeviceType.TV: "TV",
    DeviceType.AVR: "AVR",
    DeviceType.STB: "STB",
    DeviceType.AUDIO_DONGLE: "AudioDongle",
    DeviceType.GAME_CONSOLE: "GameConsole",
    DeviceType.CAST_AUDIO: "CastAudio",
    DeviceType.CAST_VIDEO: "CastVideo",
    DeviceType.AUTOMOBILE: "Automobile",
    DeviceType.SMARTWATCH: "Smartwatch",
    DeviceType.CHROMEBOOK: "Chromebook",
    DeviceType.UNKNOWN_SPOTIFY: "UnknownSpotify",
    DeviceType.CAR_THING: "CarThing",
    DeviceType.OBSERVER: "Observer",
    DeviceType.HOME_THING: "HomeThing",
}

_NOT_PARSEABLE = {DeviceType.UNKNOWN, DeviceType.UNKNOWN_SPOTIFY, DeviceType.OBSERVER}

_PARSEABLE = {
    display.lower(): member
    for member, display in _DISPLAY_NAMES.items()
    if member not in _NOT_PARSEABLE
}


def _new_device_id() -> str:
    return str(uuid.uuid4())


@dataclass
class SessionConfig:
    """Settings used when opening a session."""

    user_agent: str = VERSION_STRING
    device_id: str = field(default_factory=_new_device_id)
    proxy: str | None = None
    ap_port: int | None = None


@dataclass
class ConnectConfig:
    """Settings for how this device presents itself to Connect clients."""

    name: str = "Librespot"
    device_type: DeviceType = DeviceType.SPEAKER
    initial_volume: int | None = 50
    has_volume_ctrl: bool = True
    autoplay: bool = False