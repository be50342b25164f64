# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header lookup utilities.

Option records keep header names exactly as the caller spelled them, but HTTP
field names are case-insensitive (RFC 9110). The helpers below read and fill
headers without creating a second entry that differs only in case.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any


def find_header(headers: Mapping[Any, Any] | None, name: str) -> str | None:
    """Return the stored key matching ``name`` case-insensitively, if any."""
    if not headers or not name:
        return None
    if name in headers:
        return name
    lower = name.lower()
    for key in headers:
        if key is not None and str(key).lower() == lower:
            return key
    return None


def header_value(headers: Mapping[Any, Any] | None, name: str, default: str | None = None) -> str | None:
    """
    Return a header value using case-insensitive key matching.

    ``None`` values count as absent.
    """
    key = find_header(headers, name)
    if key is None:
        return default
    value = headers[key]  # type: ignore[index]
    return default if value is None else str(value)


def set_default_header(headers: MutableMapping[str, Any], name: str, value: str) -> None:
    """Set ``name`` unless a header with that name (any casing) is already present."""
    if header_value(headers, name) is None:
        key = find_header(headers, name)
        if key is not None:
            del headers[key]
        headers[name] = value


def media_type(content_type: str | None) -> str:
    """Return the lowercased media type without parameters (``; charset=...``)."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_json_media_type(content_type: str | None) -> bool:
    """True for ``application/json`` and structured-syntax variants like ``application/vnd.api+json``."""
    parts = media_type(content_type).split("/")
    if len(parts) < 2:
        return False
    return "json" in parts[1].split("+")


__all__ = ["find_header", "header_value", "is_json_media_type", "media_type", "set_default_header"]
