# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""FormHelper: multipart form submission with a reusable form session."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .client import Transport
from .core import FetchHelper
from .formdata import FormData
from .headers import set_default_header
from .models import FetchResponse
from .options import FORM_OPTIONS, Options, extract_options


class FormHelper(FetchHelper):
    """
    Submits ``multipart/form-data`` forms, file uploads included.

    The instance owns one form session. Fields accumulate through
    :meth:`append` until :meth:`reset` swaps in a fresh session; concurrent
    appends or a reset during an in-flight submission must be serialized by
    the caller.
    """

    def __init__(self, options: Mapping[str, Any] | None = None, *, transport: Transport | None = None):
        super().__init__(options, transport=transport)
        self.form_options: Options = extract_options(self.defaults, FORM_OPTIONS)
        self.form_data = FormData(**self.form_options)

    def reset(self) -> None:
        """Discard all appended fields so the helper can submit a new form."""
        self.form_data = FormData(**self.form_options)

    async def post(self, url: str = "", options: Mapping[str, Any] | None = None) -> FetchResponse:
        prepared = self._prepare_options(options)
        prepared["method"] = "POST"
        self._attach_form(prepared)
        return await self._fetch(url, prepared)

    async def post_json(self, url: str = "", options: Mapping[str, Any] | None = None) -> Any:
        prepared = self._prepare_options(options)
        prepared["method"] = "POST"
        prepared["headers"]["Accept"] = "application/json"
        self._attach_form(prepared)
        return await self._fetch_decoded(url, prepared, "json")

    async def submit(self, url: str = "", options: Mapping[str, Any] | None = None) -> FetchResponse:
        return await self.post(url, options)

    async def submit_json(self, url: str = "", options: Mapping[str, Any] | None = None) -> Any:
        return await self.post_json(url, options)

    def _attach_form(self, options: Options) -> None:
        form = self.form_data
        headers = options["headers"]
        set_default_header(headers, "Content-Type", f"multipart/form-data; boundary={form.get_boundary()}")
        if form.has_known_length():
            set_default_header(headers, "Content-Length", str(form.get_length_sync()))
        options["body"] = form

    # form session passthroughs

    def append(self, field: str, value: Any, options: Mapping[str, Any] | str | None = None) -> None:
        self.form_data.append(field, value, options)

    def get_headers(self, user_headers: Mapping[str, str] | None = None) -> dict[str, str]:
        return self.form_data.get_headers(user_headers)

    def get_boundary(self) -> str:
        return self.form_data.get_boundary()

    def set_boundary(self, boundary: str) -> None:
        self.form_data.set_boundary(boundary)

    def get_buffer(self) -> bytes:
        return self.form_data.get_buffer()

    def get_length_sync(self) -> int:
        return self.form_data.get_length_sync()

    async def get_length(self) -> int:
        return await self.form_data.get_length()

    def has_known_length(self) -> bool:
        return self.form_data.has_known_length()


__all__ = ["FormHelper"]
