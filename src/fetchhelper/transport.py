# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed Transport implementation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Mapping
from contextlib import suppress
from typing import Any

import httpx

from .body import aiter_file
from .client import Transport
from .config import HttpSettings, load_http_settings
from .errors import AbortError, FetchError, UnsupportedBodyTypeError
from .headers import set_default_header
from .models import FetchResponse

logger = logging.getLogger(__name__)

REDIRECT_MODES = ("follow", "manual", "error")


def _request_content(body: Any) -> Any:
    """Convert a prepared body into something ``httpx.AsyncClient`` accepts as ``content``."""
    if body is None or isinstance(body, (bytes, str)):
        return body
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, AsyncIterable):
        return body
    if callable(getattr(body, "read", None)):
        return aiter_file(body)
    raise UnsupportedBodyTypeError(body)


def _proxy_key(proxy: Any) -> str:
    if proxy is True:
        return "env"
    if isinstance(proxy, Mapping):
        return "mounts:" + ",".join(f"{key}={value}" for key, value in sorted(proxy.items()))
    if isinstance(proxy, str) and proxy:
        return f"proxy:{proxy}"
    return "direct"


async def _wait_or_abort(pending: Any, signal: asyncio.Event) -> httpx.Response:
    if signal.is_set():
        pending.close()
        raise AbortError()
    send_task = asyncio.ensure_future(pending)
    abort_task = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait({send_task, abort_task}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        abort_task.cancel()
    if send_task in done:
        return send_task.result()
    send_task.cancel()
    with suppress(asyncio.CancelledError):
        await send_task
    raise AbortError()


class HttpxTransport(Transport):
    """
    Asynchronous httpx transport.

    Clients are created lazily, one per proxy setting and redirect limit, and
    reused across calls. A caller-owned ``httpx.AsyncClient`` passed as the
    ``agent`` option (or as ``client`` here) bypasses that pool and its
    proxy handling.
    """

    def __init__(self, settings: HttpSettings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = settings or load_http_settings()
        self._client = client
        self._clients: dict[tuple[str, int], httpx.AsyncClient] = {}

    def _pooled_client(self, proxy: Any, max_redirects: int) -> httpx.AsyncClient:
        key = (_proxy_key(proxy), max_redirects)
        client = self._clients.get(key)
        if client is None:
            kwargs: dict[str, Any] = {
                "timeout": self.settings.timeout,
                "verify": self.settings.verify_ssl,
                "max_redirects": max_redirects,
                "trust_env": proxy is True,
            }
            if isinstance(proxy, Mapping):
                kwargs["mounts"] = {
                    pattern: httpx.AsyncHTTPTransport(proxy=url, verify=self.settings.verify_ssl)
                    for pattern, url in proxy.items()
                }
            elif isinstance(proxy, str) and proxy:
                kwargs["proxy"] = proxy
            client = httpx.AsyncClient(**kwargs)
            self._clients[key] = client
            logger.debug("Created httpx client for %s (max_redirects=%d)", key[0], max_redirects)
        return client

    def _build_headers(self, options: Mapping[str, Any]) -> dict[str, str]:
        headers = {str(key): str(value) for key, value in (options.get("headers") or {}).items() if value is not None}
        set_default_header(headers, "User-Agent", self.settings.user_agent)
        if options.get("compress") is False:
            set_default_header(headers, "Accept-Encoding", "identity")
        return headers

    async def fetch(self, url: str, options: Mapping[str, Any]) -> FetchResponse:
        method = str(options.get("method") or "GET").upper()
        redirect = options.get("redirect") or "follow"
        if redirect not in REDIRECT_MODES:
            raise ValueError(f"Unknown redirect mode {redirect!r}")
        follow = options.get("follow")
        max_redirects = follow if isinstance(follow, int) and follow >= 0 else self.settings.max_redirects
        timeout = options.get("timeout") or self.settings.timeout
        size = options.get("size") or 0

        client = options.get("agent") or self._client or self._pooled_client(options.get("proxy"), max_redirects)
        logger.debug("Request: %s %s", method, url)

        try:
            request = client.build_request(
                method,
                url,
                headers=self._build_headers(options),
                content=_request_content(options.get("body")),
                timeout=timeout,
            )
            pending = client.send(request, stream=True, follow_redirects=redirect == "follow")
            signal = options.get("signal")
            raw = await (_wait_or_abort(pending, signal) if signal is not None else pending)
        except httpx.HTTPError as exc:
            raise FetchError.from_exception(exc) from exc
        except httpx.InvalidURL as exc:
            raise FetchError(str(exc)) from exc

        logger.debug("Response: %s %s -> %d", method, url, raw.status_code)
        if redirect == "error" and raw.is_redirect:
            await raw.aclose()
            raise FetchError(f"uri requested responds with a redirect, redirect mode is set to error: {url}")

        return FetchResponse(raw, size_limit=size, redirected=bool(raw.history))

    async def aclose(self) -> None:
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()


__all__ = ["HttpxTransport"]
