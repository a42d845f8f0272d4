"""Zeroconf login endpoint: hands out device info and receives credentials."""

from __future__ import annotations

import asyncio
import base64
import binascii
import hashlib
import hmac
import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any
from urllib.parse import parse_qsl

from aiohttp import web
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .authentication import Credentials
from .config import SEMVER, DeviceType
from .diffie_hellman import DhLocalKeys

logger = logging.getLogger(__name__)

_IV_SIZE = 16
_MAC_SIZE = 20


@dataclass
class DiscoveryConfig:
    """How this device presents itself to clients on the local network."""

    device_id: str
    name: str = "Librespot"
    device_type: DeviceType = DeviceType.SPEAKER


def _b64decode(value: str, what: str) -> bytes:
    try:
        return base64.b64decode(value.encode(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid base64 in {what}: {exc}") from exc


def _require(params: dict[str, str], key: str) -> str:
    try:
        return params[key]
    except KeyError:
        raise ValueError(f"missing parameter {key!r}") from None


class RequestHandler:
    """Answers discovery requests; received credentials go to :attr:`credentials`."""

    def __init__(self, config: DiscoveryConfig) -> None:
        self.config = config
        self._keys = DhLocalKeys.random()
        self.credentials: asyncio.Queue[Credentials | None] = asyncio.Queue()

    def get_info(self) -> dict[str, Any]:
        """The device description sent to clients."""
        return {
            "status": 101,
            "statusString": "ERROR-OK",
            "spotifyError": 0,
            "version": "2.7.1",
            "deviceID": self.config.device_id,
            "remoteName": self.config.name,
            "activeUser": "",
            "publicKey": base64.b64encode(self._keys.public_key()).decode("ascii"),
            "deviceType": str(self.config.device_type),
            "libraryVersion": SEMVER,
            "accountReq": "PREMIUM",
            "brandDisplayName": "librespot",
            "modelDisplayName": "librespot",
            "resolverVersion": "0",
            "groupStatus": "NONE",
            "voiceSupport": "NO",
        }

    def add_user(self, params: dict[str, str]) -> dict[str, Any]:
        """Decrypt a login blob sent by a client and queue the credentials.

        Raises :class:`ValueError` when parameters are missing or malformed.
        """
        username = _require(params, "userName")
        encrypted_blob = _b64decode(_require(params, "blob"), "blob")
        client_key = _b64decode(_require(params, "clientKey"), "clientKey")
        if len(encrypted_blob) < _IV_SIZE + _MAC_SIZE:
            raise ValueError("blob is too short")

        shared_key = self._keys.shared_secret(client_key)
        iv = encrypted_blob[:_IV_SIZE]
        encrypted = encrypted_blob[_IV_SIZE:-_MAC_SIZE]
        checksum = encrypted_blob[-_MAC_SIZE:]

        base_key = hashlib.sha1(shared_key).digest()[:16]
        checksum_key = hmac.new(base_key, b"checksum", hashlib.sha1).digest()
        encryption_key = hmac.new(base_key, b"encryption", hashlib.sha1).digest()

        expected = hmac.new(checksum_key, encrypted, hashlib.sha1).digest()
        if not hmac.compare_digest(expected, checksum):
            logger.warning("Login error for user %r: MAC mismatch", username)
            return {"status": 102, "spotifyError": 1, "statusString": "ERROR-MAC"}

        decryptor = Cipher(algorithms.AES(encryption_key[:16]), modes.CTR(iv)).decryptor()
        decrypted = decryptor.update(encrypted) + decryptor.finalize()

        credentials = Credentials.with_blob(username, decrypted, self.config.device_id)
        self.credentials.put_nowait(credentials)
        return {"status": 101, "spotifyError": 0, "statusString": "ERROR-OK"}

    def handle(self, method: str, params: dict[str, str]) -> tuple[int, dict[str, Any] | None]:
        """Route a request; returns the HTTP status and the JSON body, if any."""
        action = params.get("action")
        if method == "GET" and action == "getInfo":
            return HTTPStatus.OK, self.get_info()
        if method == "POST" and action == "addUser":
            return HTTPStatus.OK, self.add_user(params)
        return HTTPStatus.NOT_FOUND, None


class DiscoveryServer:
    """HTTP server for discovery requests; async-iterates over received credentials."""

    def __init__(self, config: DiscoveryConfig, port: int = 0) -> None:
        self.config = config
        self.port = port
        self.handler = RequestHandler(config)
        self._runner: web.AppRunner | None = None
        self._closed = False

    async def _serve(self, request: web.Request) -> web.Response:
        params = dict(parse_qsl(request.query_string, keep_blank_values=True))
        if request.method != "GET":
            logger.debug("%s %s %s", request.method, request.path, params)
        body = await request.read()
        params.update(parse_qsl(body.decode("utf-8", "replace"), keep_blank_values=True))
        try:
            status, payload = self.handler.handle(request.method, params)
        except ValueError as exc:
            logger.warning("Rejected discovery request: %s", exc)
            return web.Response(status=HTTPStatus.BAD_REQUEST)
        if payload is None:
            return web.Response(status=status)
        return web.json_response(payload, status=status)

    async def start(self) -> DiscoveryServer:
        """Start listening on all interfaces; :attr:`port` is then the bound port."""
        if self._runner is not None:
            raise RuntimeError("discovery server already started")
        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self._serve)
        runner = web.AppRunner(app, access_log=None)
        await runner.setup()
        try:
            site = web.TCPSite(runner, "0.0.0.0", self.port)
            await site.start()
        except BaseException:
            await runner.cleanup()
            raise
        self._runner = runner
        self.port = runner.addresses[0][1]
        logger.debug("Zeroconf server listening on 0.0.0.0:%d", self.port)
        return self

    async def close(self) -> None:
        """Stop the server and end iteration over credentials."""
        if self._runner is not None:
            logger.debug("Shutting down discovery server")
            runner, self._runner = self._runner, None
            await runner.cleanup()
        if not self._closed:
            self._closed = True
            self.handler.credentials.put_nowait(None)

    async def __aenter__(self) -> DiscoveryServer:
        return await self.start()

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def __aiter__(self) -> DiscoveryServer:
        return self

    async def __anext__(self) -> Credentials:
        item = await self.handler.credentials.get()
        if item is None:
            self.handler.credentials.put_nowait(None)
            raise StopAsyncIteration
        return item


class Builder:
    """Configures and launches a :class:`DiscoveryServer`."""

    def __init__(self, device_id: str) -> None:
        self._config = DiscoveryConfig(device_id=device_id)
        self._port = 0

    def name(self, name: str) -> Builder:
        """Set the displayed name; default ``"Librespot"``."""
        self._config.name = name
        return self

    def device_type(self, device_type: DeviceType) -> Builder:
        """Set the device type shown as an icon; default speaker."""
        self._config.device_type = device_type
        return self

    def port(self, port: int) -> Builder:
        """Set the listening port; ``0`` means any free port."""
        self._port = port
        return self

    async def launch(self) -> DiscoveryServer:
        """Start the HTTP endpoint and return the running server."""
        server = DiscoveryServer(self._config, self._port)
        return await server.start()