# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""multipart/form-data encoder.

A ``FormData`` session accumulates fields and serializes them as
``multipart/form-data`` on demand, either as one buffer or as an async byte
stream suitable for ``httpx`` request content. Fields with the same name are
kept as separate parts.
"""

from __future__ import annotations

import io
import mimetypes
import os
import secrets
from collections.abc import AsyncIterable, AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .body import CHUNK_SIZE, aiter_file
from .config import load_http_settings

LINE_BREAK = b"\r\n"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class _Part:
    name: str
    value: Any
    filename: str | None = None
    content_type: str | None = None
    known_length: int | None = None
    extra_headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_stream(self) -> bool:
        return not isinstance(self.value, bytes)


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\r", "%0D").replace("\n", "%0A")


def _stream_name(value: Any) -> str | None:
    name = getattr(value, "name", None)
    if isinstance(name, str) and name:
        return os.path.basename(name)
    return None


def _seekable_length(stream: Any) -> int | None:
    seekable = getattr(stream, "seekable", None)
    if not callable(seekable) or not seekable():
        return None
    position = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(position)
    return end - position


class FormData:
    """Mutable multipart/form-data session."""

    def __init__(self, max_data_size: int | None = None, pause_streams: bool = True):
        self.max_data_size = max_data_size if max_data_size is not None else load_http_settings().form_max_data_size
        self.pause_streams = pause_streams
        self._boundary: str | None = None
        self._parts: list[_Part] = []

    def append(self, field_name: str, value: Any, options: Mapping[str, Any] | str | None = None) -> None:
        """
        Add a field.

        ``value`` may be a string, a bytes-like object, a number, a bool or a
        binary stream. ``options`` is a filename or a mapping with
        ``filename``, ``content_type``, ``known_length`` and ``header``.
        """
        if isinstance(options, str):
            options = {"filename": options}
        options = dict(options or {})

        if isinstance(value, (list, tuple, dict, set)):
            raise TypeError("Arrays are not supported.")
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (int, float)):
            value = str(value)
        if isinstance(value, str):
            value = value.encode("utf-8")
        elif isinstance(value, (bytearray, memoryview)):
            value = bytes(value)
        elif not isinstance(value, bytes) and not (
            callable(getattr(value, "read", None)) or isinstance(value, AsyncIterable)
        ):
            raise TypeError(f"Unsupported form value type {type(value).__name__}")

        filename = options.get("filename") or _stream_name(value)
        content_type = options.get("content_type")
        if content_type is None and filename:
            content_type = mimetypes.guess_type(filename)[0]
        if content_type is None and (filename or not isinstance(value, bytes)):
            content_type = DEFAULT_CONTENT_TYPE

        known_length = options.get("known_length")
        if isinstance(value, bytes):
            known_length = len(value)

        self._parts.append(
            _Part(
                name=str(field_name),
                value=value,
                filename=filename,
                content_type=content_type,
                known_length=known_length,
                extra_headers=dict(options.get("header") or {}),
            )
        )

    def get_boundary(self) -> str:
        if self._boundary is None:
            self._boundary = "-" * 26 + "".join(str(secrets.randbelow(10)) for _ in range(24))
        return self._boundary

    def set_boundary(self, boundary: str) -> None:
        if not isinstance(boundary, str) or not boundary:
            raise TypeError("FormData boundary must be a non-empty string")
        self._boundary = boundary

    def get_headers(self, user_headers: Mapping[str, str] | None = None) -> dict[str, str]:
        headers = {"content-type": f"multipart/form-data; boundary={self.get_boundary()}"}
        for key, value in (user_headers or {}).items():
            headers[str(key).lower()] = value
        return headers

    def _part_header(self, part: _Part) -> bytes:
        disposition = f'form-data; name="{_escape(part.name)}"'
        if part.filename:
            disposition += f'; filename="{_escape(part.filename)}"'
        lines = [f"--{self.get_boundary()}", f"Content-Disposition: {disposition}"]
        if part.content_type:
            lines.append(f"Content-Type: {part.content_type}")
        lines.extend(f"{key}: {value}" for key, value in part.extra_headers.items())
        return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8")

    def _last_boundary(self) -> bytes:
        return f"--{self.get_boundary()}--\r\n".encode("utf-8")

    def has_known_length(self) -> bool:
        return all(part.known_length is not None for part in self._parts)

    def _length(self, lengths: list[int]) -> int:
        if not self._parts:
            return 0
        total = sum(len(self._part_header(part)) + len(LINE_BREAK) for part in self._parts)
        return total + sum(lengths) + len(self._last_boundary())

    def get_length_sync(self) -> int:
        """Total body length; every stream needs an explicit ``known_length``."""
        if not self.has_known_length():
            raise ValueError("Cannot calculate proper length in synchronous way.")
        return self._length([part.known_length for part in self._parts])  # type: ignore[misc]

    async def get_length(self) -> int:
        """Total body length, measuring seekable streams without a ``known_length``."""
        lengths: list[int] = []
        for part in self._parts:
            length = part.known_length
            if length is None:
                length = _seekable_length(part.value)
            if length is None:
                raise ValueError(f"Unknown length for form field {part.name!r}")
            lengths.append(length)
        return self._length(lengths)

    def _read_buffered(self, part: _Part, remaining: int) -> bytes:
        data: list[bytes] = []
        size = 0
        while True:
            chunk = part.value.read(CHUNK_SIZE)
            if not chunk:
                break
            chunk = chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)
            size += len(chunk)
            if size > remaining:
                raise ValueError(f"maxDataSize of {self.max_data_size} bytes exceeded")
            data.append(chunk)
        return b"".join(data)

    def get_buffer(self) -> bytes:
        """
        Serialize the whole form at once.

        Stream values are read to the end into memory; together they may not
        exceed ``max_data_size``. In-memory values are not counted.
        """
        if not self._parts:
            return b""
        chunks: list[bytes] = []
        buffered = 0
        for part in self._parts:
            chunks.append(self._part_header(part))
            if part.is_stream:
                if isinstance(part.value, AsyncIterable) and not callable(getattr(part.value, "read", None)):
                    raise TypeError(f"Form field {part.name!r} is an async stream; use aiter_bytes()")
                data = self._read_buffered(part, self.max_data_size - buffered)
                buffered += len(data)
                chunks.append(data)
            else:
                chunks.append(part.value)
            chunks.append(LINE_BREAK)
        chunks.append(self._last_boundary())
        return b"".join(chunks)

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        """Yield the encoded form piece by piece without buffering streams."""
        if not self._parts:
            return
        for part in self._parts:
            yield self._part_header(part)
            value = part.value
            if not part.is_stream:
                yield value
            elif isinstance(value, AsyncIterable):
                async for chunk in value:
                    yield chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)
            else:
                async for chunk in aiter_file(value):
                    yield chunk
            yield LINE_BREAK
        yield self._last_boundary()

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self.aiter_bytes()

    def __repr__(self) -> str:
        return f"<FormData fields={len(self._parts)} boundary={self._boundary!r}>"


__all__ = ["FormData"]
