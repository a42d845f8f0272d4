"""Opening a tunnel through an HTTP proxy with the CONNECT method."""

from __future__ import annotations

import asyncio
import re

_MAX_HEADERS = 16
_HEADER_END = b"\r\n\r\n"
_STATUS_LINE = re.compile(r"HTTP/1\.[01] ([0-9]{3})(?: (.*))?")
_HEADER_LINE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+:.*")


class ProxyError(ConnectionError):
    """Raised when the proxy refuses or breaks the tunnel."""


def _parse_status(head: bytes) -> tuple[int, str]:
    lines = head.decode("latin-1").split("\r\n")
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        raise ProxyError("Malformed response from proxy")
    match = _STATUS_LINE.fullmatch(lines[0])
    if match is None:
        raise ProxyError(f"Malformed response from proxy: {lines[0]!r}")
    headers = lines[1:]
    if len(headers) > _MAX_HEADERS:
        raise ProxyError("Malformed response from proxy: too many headers")
    for line in headers:
        if not _HEADER_LINE.fullmatch(line):
            raise ProxyError(f"Malformed response from proxy: bad header {line!r}")
    return int(match.group(1)), match.group(2) or ""


async def proxy_connect(
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
    host: str,
    port: int | str,
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Ask the proxy on ``reader``/``writer`` to connect to ``host:port``.

    Returns the same stream pair, now tunnelled, on a 200 answer.
    """
    writer.write(f"CONNECT {host}:{port} HTTP/1.1\r\n\r\n".encode())
    await writer.drain()

    try:
        head = await reader.readuntil(_HEADER_END)
    except asyncio.IncompleteReadError as exc:
        raise ProxyError("Early EOF from proxy") from exc
    except asyncio.LimitOverrunError as exc:
        raise ProxyError("Malformed response from proxy: header too large") from exc

    code, reason = _parse_status(head)
    if code != 200:
        raise ProxyError(f"Proxy responded with {code}: {reason or 'no reason'}")
    return reader, writer