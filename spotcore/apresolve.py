"""Looking up the address of an access point to connect to."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from urllib.parse import urlsplit

import aiohttp

logger = logging.getLogger(__name__)

APRESOLVE_ENDPOINT = "http://apresolve.spotify.com:80"
AP_FALLBACK = "ap.spotify.com:443"
DEFAULT_AP_PORT = 443


def _port_of(ap: str) -> int | None:
    try:
        return urlsplit(f"//{ap}").port
    except ValueError:
        return None


def select_access_point(
    ap_list: Iterable[str], ap_port: int | None = None, proxy: str | None = None
) -> str:
    """Pick an access point from the resolver's list.

    Without a port or proxy the first entry wins; otherwise the first entry
    whose port equals ``ap_port`` (443 by default). Raises :class:`LookupError`
    when nothing fits.
    """
    if ap_port is not None or proxy is not None:
        port = DEFAULT_AP_PORT if ap_port is None else ap_port
        chosen = next((ap for ap in ap_list if _port_of(ap) == port), None)
    else:
        chosen = next(iter(ap_list), None)
    if chosen is None:
        raise LookupError("empty AP List")
    return chosen


async def try_apresolve(proxy: str | None = None, ap_port: int | None = None) -> str:
    """Ask the resolver service for an access point, raising on any failure."""
    async with aiohttp.ClientSession() as session:
        async with session.get(APRESOLVE_ENDPOINT, proxy=proxy) as response:
            body = await response.read()

    data = json.loads(body)
    if not isinstance(data, dict):
        raise ValueError("resolver answer is not a JSON object")
    ap_list = data.get("ap_list")
    if not isinstance(ap_list, list) or not all(isinstance(ap, str) for ap in ap_list):
        raise ValueError("resolver answer has no valid 'ap_list'")
    return select_access_point(ap_list, ap_port, proxy)


async def apresolve(proxy: str | None = None, ap_port: int | None = None) -> str:
    """Resolve an access point, falling back to a well-known one on failure."""
    try:
        return await try_apresolve(proxy, ap_port)
    except (aiohttp.ClientError, OSError, ValueError, LookupError, asyncio.TimeoutError) as exc:
        logger.warning("Failed to resolve Access Point: %s", exc)
        logger.warning('Using fallback "%s"', AP_FALLBACK)
        return AP_FALLBACK