"""Multiplexed data channels carried over the session connection."""

from __future__ import annotations

import asyncio
import enum
import logging
import threading
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass

from .seq import SeqGenerator

logger = logging.getLogger(__name__)

CMD_CHANNEL_ERROR = 0xA

_ONE_SECOND_IN_MS = 1000

_DISCONNECTED = object()


class ChannelError(Exception):
    """Raised when a channel fails or is closed by the session."""


@dataclass(frozen=True)
class HeaderEvent:
    """A header sent at the start of a channel."""

    header_id: int
    data: bytes


@dataclass(frozen=True)
class DataEvent:
    """A chunk of channel payload."""

    data: bytes


class _State(enum.Enum):
    HEADER = enum.auto()
    DATA = enum.auto()
    CLOSED = enum.auto()


class Channel:
    """The receiving end of one channel: a stream of header and data events."""

    def __init__(self, queue: asyncio.Queue) -> None:
        self._queue = queue
        self._state = _State.HEADER
        self._pending = b""
        self._disconnected = False
        self._lock = asyncio.Lock()

    async def _recv_packet(self) -> bytes:
        if self._disconnected:
            raise ChannelError("channel closed")
        item = await self._queue.get()
        if item is _DISCONNECTED:
            self._disconnected = True
            raise ChannelError("channel closed")
        cmd, packet = item
        if cmd == CMD_CHANNEL_ERROR:
            code = int.from_bytes(packet[:2], "big")
            logger.error("channel error: %d %d", len(packet), code)
            self._state = _State.CLOSED
            raise ChannelError(f"channel error code {code}")
        return packet

    async def _next_event(self, headers_only: bool) -> HeaderEvent | DataEvent | None:
        while True:
            if self._state is _State.CLOSED:
                raise RuntimeError("polling already terminated channel")

            if self._state is _State.HEADER:
                data = self._pending or await self._recv_packet()
                if len(data) < 2:
                    raise ChannelError("truncated header length")
                length = int.from_bytes(data[:2], "big")
                data = data[2:]
                if length == 0:
                    if data:
                        raise ChannelError("unexpected data after the last header")
                    self._pending = b""
                    self._state = _State.DATA
                    if headers_only:
                        return None
                    continue
                if len(data) < length:
                    raise ChannelError("truncated header")
                self._pending = data[length:]
                return HeaderEvent(data[0], bytes(data[1:length]))

            if headers_only:
                return None
            data = await self._recv_packet()
            if not data:
                self._state = _State.CLOSED
                return None
            return DataEvent(data)

    def __aiter__(self) -> Channel:
        return self

    async def __anext__(self) -> HeaderEvent | DataEvent:
        async with self._lock:
            event = await self._next_event(headers_only=False)
        if event is None:
            raise StopAsyncIteration
        return event

    async def headers(self) -> AsyncIterator[HeaderEvent]:
        """Yield the channel's headers, stopping where the data begins."""
        while True:
            async with self._lock:
                event = await self._next_event(headers_only=True)
            if event is None:
                return
            yield event

    async def data(self) -> AsyncIterator[bytes]:
        """Yield the channel's data chunks, skipping any headers."""
        while True:
            async with self._lock:
                event = await self._next_event(headers_only=False)
            if event is None:
                return
            if isinstance(event, DataEvent):
                yield event.data


class ChannelManager:
    """Allocates channel ids and routes incoming packets to their channels."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sequence = SeqGenerator(0, 16)
        self._channels: dict[int, asyncio.Queue] = {}
        self._rate_estimate = 0
        self._measurement_start: float | None = None
        self._measurement_bytes = 0
        self._invalid = False

    def allocate(self) -> tuple[int, Channel]:
        """Reserve a new channel id and return it with the channel."""
        queue: asyncio.Queue = asyncio.Queue()
        with self._lock:
            seq = self._sequence.get()
            if self._invalid:
                queue.put_nowait(_DISCONNECTED)
            else:
                self._channels[seq] = queue
        return seq, Channel(queue)

    def dispatch(self, cmd: int, data: bytes) -> None:
        """Route a channel packet and update the download rate estimate."""
        data = bytes(data)
        if len(data) < 2:
            raise ValueError("channel packet is shorter than its channel id")
        channel_id = int.from_bytes(data[:2], "big")
        payload = data[2:]

        with self._lock:
            now = time.monotonic()
            if self._measurement_start is None:
                self._measurement_start = now
            else:
                elapsed_ms = int((now - self._measurement_start) * 1000)
                if elapsed_ms > _ONE_SECOND_IN_MS:
                    self._rate_estimate = (
                        _ONE_SECOND_IN_MS * self._measurement_bytes // elapsed_ms
                    )
                    self._measurement_start = now
                    self._measurement_bytes = 0

            self._measurement_bytes += len(payload)

            queue = self._channels.get(channel_id)
            if queue is not None:
                queue.put_nowait((cmd, payload))

    def download_rate_estimate(self) -> int:
        """Estimated download rate in bytes per second."""
        with self._lock:
            return self._rate_estimate

    def shutdown(self) -> None:
        """Close every channel and refuse new ones."""
        with self._lock:
            self._invalid = True
            for queue in self._channels.values():
                queue.put_nowait(_DISCONNECTED)
            self._channels.clear()