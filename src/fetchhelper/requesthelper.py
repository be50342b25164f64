# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""RequestHelper: GET/POST/DELETE with query string and body encoding."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .body import prepare_body
from .client import Transport
from .core import FetchHelper
from .models import Blob, FetchResponse
from .options import QUERY_OPTIONS, Options, deep_merge, extract_options
from .querystring import stringify


class RequestHelper(FetchHelper):
    """
    Handy interface for GET requests with query parameters and POST/DELETE
    requests with encoded bodies.

    Query string options (``strict``, ``encode``, ``sort``, ``array_format``,
    ``array_format_separator``, ``skip_null``, ``skip_empty_string``) can be
    given at construction and overridden per call. The ``*_json``,
    ``*_text``, ``*_blob``, ``*_array_buffer`` and ``*_buffer`` variants raise
    :class:`~fetchhelper.errors.HttpStatusError` for status >= 400 and return
    the decoded body.
    """

    def __init__(self, options: Mapping[str, Any] | None = None, *, transport: Transport | None = None):
        super().__init__(options, transport=transport)
        self.query_options: Options = extract_options(self.defaults, QUERY_OPTIONS)

    # GET: params go to the query string

    async def get(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> FetchResponse:
        return await self._fetch(*self._query_call("GET", url, params, options))

    async def get_json(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> Any:
        return await self._fetch_decoded(*self._query_call("GET", url, params, options), "json")

    async def get_text(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> str:
        return await self._fetch_decoded(*self._query_call("GET", url, params, options), "text")

    async def get_blob(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> Blob:
        return await self._fetch_decoded(*self._query_call("GET", url, params, options), "blob")

    async def get_array_buffer(
        self, url: str, params: Any = None, options: Mapping[str, Any] | None = None
    ) -> bytearray:
        return await self._fetch_decoded(*self._query_call("GET", url, params, options), "array_buffer")

    async def get_buffer(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> bytes:
        return await self._fetch_decoded(*self._query_call("GET", url, params, options), "buffer")

    # POST: params become the request body

    async def post(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> FetchResponse:
        """
        Perform a POST request with ``params`` encoded into the body.

        Strings are sent as ``text/plain``, bytes, blobs and streams as binary,
        and mappings or lists as JSON unless the ``Content-Type`` header asks
        for ``application/x-www-form-urlencoded``.
        """
        return await self._fetch(*self._body_call("POST", url, params, options))

    async def post_json(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> Any:
        return await self._fetch_decoded(*self._body_call("POST", url, params, options), "json")

    async def post_text(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> str:
        return await self._fetch_decoded(*self._body_call("POST", url, params, options), "text")

    async def post_blob(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> Blob:
        return await self._fetch_decoded(*self._body_call("POST", url, params, options), "blob")

    async def post_array_buffer(
        self, url: str, params: Any = None, options: Mapping[str, Any] | None = None
    ) -> bytearray:
        return await self._fetch_decoded(*self._body_call("POST", url, params, options), "array_buffer")

    async def post_buffer(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> bytes:
        return await self._fetch_decoded(*self._body_call("POST", url, params, options), "buffer")

    # DELETE: params become the request body, same rules as POST

    async def delete(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> FetchResponse:
        return await self._fetch(*self._body_call("DELETE", url, params, options))

    async def delete_json(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> Any:
        return await self._fetch_decoded(*self._body_call("DELETE", url, params, options), "json")

    async def delete_text(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> str:
        return await self._fetch_decoded(*self._body_call("DELETE", url, params, options), "text")

    async def delete_blob(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> Blob:
        return await self._fetch_decoded(*self._body_call("DELETE", url, params, options), "blob")

    async def delete_array_buffer(
        self, url: str, params: Any = None, options: Mapping[str, Any] | None = None
    ) -> bytearray:
        return await self._fetch_decoded(*self._body_call("DELETE", url, params, options), "array_buffer")

    async def delete_buffer(self, url: str, params: Any = None, options: Mapping[str, Any] | None = None) -> bytes:
        return await self._fetch_decoded(*self._body_call("DELETE", url, params, options), "buffer")

    def _query_options(self, options: Options) -> Options:
        return deep_merge(self.query_options, extract_options(options, QUERY_OPTIONS))

    def _prepare_params(self, options: Options, params: Any) -> str:
        """Return ``""`` or ``"?"`` followed by the encoded ``params``."""
        query_options = self._query_options(options)
        if not isinstance(params, Mapping):
            return ""
        encoded = stringify(params, **query_options)
        return f"?{encoded}" if encoded else ""

    def _query_call(self, method: str, url: str, params: Any, options: Mapping[str, Any] | None) -> tuple[str, Options]:
        prepared = self._prepare_options(options)
        prepared["method"] = method
        query = self._prepare_params(prepared, params)
        if query and "?" in url:
            query = "&" + query[1:]
        return f"{url}{query}", prepared

    def _body_call(self, method: str, url: str, params: Any, options: Mapping[str, Any] | None) -> tuple[str, Options]:
        prepared = self._prepare_options(options)
        prepare_body(prepared, params, self._query_options(prepared))
        prepared["method"] = method
        return url, prepared


__all__ = ["RequestHelper"]
