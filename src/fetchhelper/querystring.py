# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Query string serialization.

Mirrors the conventions of the widely used JavaScript ``query-string``
package so that servers written against it see identical URLs and
``application/x-www-form-urlencoded`` bodies.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable, Mapping
from typing import Any
from urllib.parse import quote

ARRAY_FORMATS = ("none", "bracket", "index", "comma", "separator", "bracket-separator")

# encodeURIComponent leaves these alone; strict mode escapes !'()* as well.
_SAFE_LOOSE = "-_.!~*'()"
_SAFE_STRICT = "-_.~"


def _to_text(value: Any) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


class _Encoder:
    def __init__(self, strict: bool, encode: bool):
        self._safe = _SAFE_STRICT if strict else _SAFE_LOOSE
        self._encode = encode

    def __call__(self, value: Any) -> str:
        text = _to_text(value)
        if not self._encode:
            return text
        return quote(text, safe=self._safe, encoding="utf-8", errors="strict")


def _skip(value: Any, skip_null: bool, skip_empty_string: bool) -> bool:
    return (skip_null and value is None) or (skip_empty_string and value == "")


def _format_list(
    key: str,
    values: Iterable[Any],
    *,
    enc: _Encoder,
    array_format: str,
    separator: str,
    skip_null: bool,
    skip_empty_string: bool,
) -> list[str]:
    items = [value for value in values if not _skip(value, skip_null, skip_empty_string)]

    if array_format in ("comma", "separator", "bracket-separator"):
        if not items:
            return []
        joiner = "," if array_format == "comma" else separator
        key_sep = "[]=" if array_format == "bracket-separator" else "="
        joined = joiner.join(enc("" if value is None else value) for value in items)
        return [f"{enc(key)}{key_sep}{joined}"]

    parts: list[str] = []
    for index, value in enumerate(items):
        if array_format == "index":
            name = f"{enc(key)}[{enc(index)}]"
        elif array_format == "bracket":
            name = f"{enc(key)}[]"
        else:
            name = enc(key)
        parts.append(name if value is None else f"{name}={enc(value)}")
    return parts


def stringify(
    params: Mapping[str, Any] | None,
    *,
    strict: bool = True,
    encode: bool = True,
    sort: bool | Callable[[str, str], int] = True,
    array_format: str = "none",
    array_format_separator: str = ",",
    skip_null: bool = False,
    skip_empty_string: bool = False,
) -> str:
    """
    Serialize ``params`` into a query string without the leading ``?``.

    ``sort`` may be ``True`` (code-point order of keys), ``False`` (insertion
    order) or a ``cmp(a, b) -> int`` comparator. Lists and tuples are encoded
    according to ``array_format``; ``None`` scalars render as a bare key
    unless ``skip_null`` drops them.
    """
    if not params:
        return ""
    if array_format not in ARRAY_FORMATS:
        raise ValueError(f"Unknown array format {array_format!r}")

    enc = _Encoder(strict, encode)
    keys = [key for key, value in params.items() if not _skip(value, skip_null, skip_empty_string)]
    if callable(sort):
        keys.sort(key=functools.cmp_to_key(sort))
    elif sort is not False:
        keys.sort(key=str)

    parts: list[str] = []
    for key in keys:
        value = params[key]
        if isinstance(value, (list, tuple)):
            if not value and array_format == "bracket-separator":
                parts.append(f"{enc(key)}[]")
                continue
            parts.extend(
                _format_list(
                    key,
                    value,
                    enc=enc,
                    array_format=array_format,
                    separator=array_format_separator,
                    skip_null=skip_null,
                    skip_empty_string=skip_empty_string,
                )
            )
        elif value is None:
            parts.append(enc(key))
        else:
            parts.append(f"{enc(key)}={enc(value)}")

    return "&".join(part for part in parts if part)


__all__ = ["ARRAY_FORMATS", "stringify"]
