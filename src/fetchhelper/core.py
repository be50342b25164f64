# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""FetchHelper: persistent request options, auth injection and status gating."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import suppress
from typing import Any

from .auth import AuthDescriptor, prepare_auth, resolve_auth
from .client import Transport, create_default_transport
from .errors import FetchError, HttpStatusError
from .headers import find_header
from .models import FetchResponse
from .options import HELPER_OPTIONS, Options, deep_merge, ensure_mapping_member, extract_options, valid_options

logger = logging.getLogger(__name__)

DECODERS = ("json", "text", "blob", "array_buffer", "buffer")


class FetchHelper:
    """
    Wrapper around a transport with options persisted for the whole lifetime
    of the object.

    Recognized helper options are ``baseurl``, ``onlysuccessful``, ``auth``,
    ``proxy`` and ``agent``; everything else is handed to the transport.
    Per-call options are deep-merged onto the persisted ones for that call
    only.
    """

    def __init__(self, options: Mapping[str, Any] | None = None, *, transport: Transport | None = None):
        self.defaults: Options = deep_merge({}, valid_options(options))
        ensure_mapping_member(self.defaults, "headers")
        ensure_mapping_member(self.defaults, "auth")
        # separate helper settings from transport options
        helper_options = extract_options(self.defaults, HELPER_OPTIONS)
        self.transport: Transport = transport or create_default_transport()
        self._owns_transport = transport is None
        self.agent = helper_options.get("agent")
        self.set_auth(helper_options.get("auth"))
        self.set_only_successful(helper_options.get("onlysuccessful"))
        self.set_base_url(helper_options.get("baseurl"))
        self.set_proxy(helper_options.get("proxy"))

    async def fetch(self, url: str, options: Mapping[str, Any] | None = None) -> FetchResponse:
        """Perform a request; ``url`` is appended to the effective base url."""
        return await self._fetch(url, self._prepare_options(options))

    def set_auth(self, auth: AuthDescriptor | None) -> None:
        self.auth = prepare_auth(auth)

    def set_basic_auth(self, username: str, password: str | None = None) -> None:
        self.auth = prepare_auth({"username": username, "password": password})

    def set_base_url(self, url: str | None) -> None:
        self.baseurl = url if isinstance(url, str) else ""

    def set_only_successful(self, onlysuccessful: bool | None) -> None:
        self.onlysuccessful = bool(onlysuccessful)

    def set_proxy(self, proxy: bool | str | Mapping[str, str] | None) -> None:
        self.proxy = proxy

    async def aclose(self) -> None:
        if self._owns_transport:
            await self.transport.aclose()

    async def __aenter__(self) -> "FetchHelper":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    def _prepare_options(self, options: Mapping[str, Any] | None) -> Options:
        result = deep_merge(self.defaults, valid_options(options))
        ensure_mapping_member(result, "headers")
        auth = self.auth
        # a per-call auth descriptor replaces the persisted one
        if isinstance(result.get("auth"), Mapping):
            auth = prepare_auth(result["auth"])
        result.pop("auth", None)
        value = resolve_auth(auth)
        if value:
            headers = result["headers"]
            existing = find_header(headers, "Authorization")
            if existing is not None:
                del headers[existing]
            headers["Authorization"] = value
        if result.get("agent") is None and self.agent is not None:
            result["agent"] = self.agent
        if result.get("proxy") is None and self.proxy is not None:
            result["proxy"] = self.proxy
        return result

    async def _fetch(self, url: str, options: Options) -> FetchResponse:
        baseurl = options.pop("baseurl", None)
        if not isinstance(baseurl, str) or not baseurl:
            baseurl = self.baseurl
        onlysuccessful = options.pop("onlysuccessful", None)
        if not isinstance(onlysuccessful, bool):
            onlysuccessful = self.onlysuccessful

        response = await self.transport.fetch(f"{baseurl}{url}", options)
        if onlysuccessful and response.status >= 400:
            logger.debug("Rejecting %s with status %d", response.url, response.status)
            # keep the body readable on the error's response
            with suppress(FetchError):
                await response.buffer()
            raise HttpStatusError(response.status_text, response.status, response)
        return response

    async def _fetch_decoded(self, url: str, options: Options, decoder: str) -> Any:
        if decoder not in DECODERS:
            raise ValueError(f"Unknown decoder {decoder!r}")
        options["onlysuccessful"] = True
        response = await self._fetch(url, options)
        return await getattr(response, decoder)()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} baseurl={self.baseurl!r} onlysuccessful={self.onlysuccessful}>"


__all__ = ["FetchHelper"]
