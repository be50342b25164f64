# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request body and response data models."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import DecodeError, FetchError


@dataclass(frozen=True)
class Blob:
    """Binary payload tagged with its media type."""

    content: bytes = b""
    type: str = ""

    @property
    def size(self) -> int:
        return len(self.content)


class FetchResponse:
    """
    Response ticket returned by the transport.

    Status line and headers are available immediately; the body stays on the
    wire until one of the read methods is awaited. The body can be read once;
    later reads return the cached bytes. ``size_limit`` (bytes, ``0`` for
    unlimited) aborts reading with :class:`FetchError` once exceeded.
    """

    def __init__(self, raw: httpx.Response, *, size_limit: int = 0, redirected: bool = False):
        self.raw = raw
        self.size_limit = size_limit
        self.redirected = redirected
        self._content: bytes | None = None

    @property
    def status(self) -> int:
        return self.raw.status_code

    @property
    def status_text(self) -> str:
        return self.raw.reason_phrase

    @property
    def ok(self) -> bool:
        return 200 <= self.raw.status_code < 300

    @property
    def headers(self) -> httpx.Headers:
        return self.raw.headers

    @property
    def url(self) -> str:
        return str(self.raw.url)

    @property
    def body_used(self) -> bool:
        return self._content is not None

    async def buffer(self) -> bytes:
        if self._content is not None:
            return self._content
        content = bytearray()
        try:
            async for chunk in self.raw.aiter_bytes():
                content.extend(chunk)
                if self.size_limit and len(content) > self.size_limit:
                    raise FetchError(f"content size at {self.url} over limit: {self.size_limit}")
        except httpx.HTTPError as exc:
            raise FetchError.from_exception(exc) from exc
        finally:
            await self.raw.aclose()
        self._content = bytes(content)
        return self._content

    async def array_buffer(self) -> bytearray:
        return bytearray(await self.buffer())

    async def blob(self) -> Blob:
        content = await self.buffer()
        return Blob(content=content, type=self.headers.get("content-type", ""))

    async def text(self) -> str:
        content = await self.buffer()
        encoding = self.raw.charset_encoding or "utf-8"
        try:
            return content.decode(encoding, errors="replace")
        except LookupError:
            return content.decode("utf-8", errors="replace")

    async def json(self) -> Any:
        content = await self.buffer()
        try:
            return json.loads(content)
        except (ValueError, UnicodeDecodeError) as exc:
            raise DecodeError(f"invalid json response body at {self.url} reason: {exc}", self) from exc

    async def aclose(self) -> None:
        await self.raw.aclose()

    def __repr__(self) -> str:
        return f"<FetchResponse [{self.status} {self.status_text}] {self.url}>"


__all__ = ["Blob", "FetchResponse"]
