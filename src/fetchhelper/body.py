# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request body encoding.

``prepare_body`` picks a wire representation for a Python value and fills in
a default ``Content-Type`` when the caller has not set one.
"""

from __future__ import annotations

import asyncio
import io
import json
from collections.abc import AsyncIterable, AsyncIterator, Mapping, MutableMapping
from typing import Any

from .errors import UnsupportedBodyTypeError, UnsupportedContentTypeError
from .headers import header_value, is_json_media_type, media_type, set_default_header
from .models import Blob
from .querystring import stringify

OCTET_STREAM = "application/octet-stream"
JSON_TYPE = "application/json"
FORM_URLENCODED = "application/x-www-form-urlencoded"
CHUNK_SIZE = 64 * 1024


def is_stream(value: Any) -> bool:
    """Binary file objects and async byte iterables count as streams."""
    if isinstance(value, io.IOBase):
        return True
    if isinstance(value, AsyncIterable):
        return True
    return callable(getattr(value, "read", None))


async def aiter_file(stream: Any, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Read a blocking file object chunk by chunk in a worker thread."""
    while True:
        chunk = await asyncio.to_thread(stream.read, chunk_size)
        if not chunk:
            break
        yield chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)


def to_json(value: Any) -> str:
    """Compact JSON, the same bytes ``JSON.stringify`` would produce for plain data."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _ensure_content_type(headers: MutableMapping[str, Any], default: str | None = None) -> None:
    set_default_header(headers, "Content-Type", default or OCTET_STREAM)


def _encode_record(headers: MutableMapping[str, Any], data: Any, query_options: Mapping[str, Any]) -> str:
    content_type = header_value(headers, "Content-Type")
    if content_type is None:
        set_default_header(headers, "Content-Type", JSON_TYPE)
        return to_json(data)

    kind = media_type(content_type)
    if kind == JSON_TYPE:
        return to_json(data)
    if kind == FORM_URLENCODED:
        if not isinstance(data, Mapping):
            raise UnsupportedBodyTypeError(data)
        return stringify(data, **query_options)
    if is_json_media_type(content_type):
        return to_json(data)
    raise UnsupportedContentTypeError(content_type)


def prepare_body(options: MutableMapping[str, Any], data: Any, query_options: Mapping[str, Any] | None = None) -> MutableMapping[str, Any]:
    """
    Store ``data`` as ``options["body"]`` in a transport-ready form.

    ``options["headers"]`` must be a mutable mapping. Raises
    :class:`UnsupportedBodyTypeError` for values that have no body form and
    :class:`UnsupportedContentTypeError` for records paired with a content
    type that cannot represent them.
    """
    headers = options.setdefault("headers", {})
    if data is None:
        options["body"] = None
    elif isinstance(data, str):
        _ensure_content_type(headers, "text/plain")
        options["body"] = data
    elif isinstance(data, Blob):
        _ensure_content_type(headers, data.type)
        options["body"] = data.content
    elif isinstance(data, (bytes, bytearray, memoryview)):
        _ensure_content_type(headers)
        options["body"] = bytes(data)
    elif is_stream(data):
        _ensure_content_type(headers)
        options["body"] = data
    elif isinstance(data, (Mapping, list, tuple)):
        options["body"] = _encode_record(headers, data, query_options or {})
    else:
        raise UnsupportedBodyTypeError(data)
    return options


__all__ = ["aiter_file", "is_stream", "prepare_body", "to_json"]
