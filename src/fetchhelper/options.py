# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Option record helpers: deep merge, extraction and normalization."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any

Options = dict[str, Any]

# Keys consumed by the helpers themselves; never forwarded to the transport.
HELPER_OPTIONS = ("auth", "onlysuccessful", "baseurl", "proxy", "agent")
QUERY_OPTIONS = (
    "strict",
    "encode",
    "sort",
    "array_format",
    "array_format_separator",
    "skip_null",
    "skip_empty_string",
)
FORM_OPTIONS = ("max_data_size", "pause_streams")


def _clone(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _clone(item) for key, item in value.items()}
    if isinstance(value, list):
        return list(value)
    return value


def deep_merge(base: Mapping[str, Any] | None, override: Mapping[str, Any] | None) -> Options:
    """
    Return a new dict with ``override`` merged onto ``base``.

    Nested mappings merge recursively, anything else (lists included) is
    replaced by the override value. Neither input is modified.
    """
    result: Options = {key: _clone(value) for key, value in (base or {}).items()}
    for key, value in (override or {}).items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = _clone(value)
    return result


def valid_options(options: Any) -> Options:
    """Coerce anything that is not a mapping into an empty option record."""
    return dict(options) if isinstance(options, Mapping) else {}


def extract_options(options: MutableMapping[str, Any], keys: Iterable[str]) -> Options:
    """Remove ``keys`` from ``options`` and return them as a separate record."""
    extracted: Options = {}
    for key in keys:
        if key in options:
            extracted[key] = options.pop(key)
    return extracted


def ensure_mapping_member(options: MutableMapping[str, Any], key: str) -> None:
    """Replace a missing or non-mapping member with an empty dict."""
    if not isinstance(options.get(key), Mapping):
        options[key] = {}


__all__ = [
    "FORM_OPTIONS",
    "HELPER_OPTIONS",
    "Options",
    "QUERY_OPTIONS",
    "deep_merge",
    "ensure_mapping_member",
    "extract_options",
    "valid_options",
]
