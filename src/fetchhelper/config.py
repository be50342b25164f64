# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for fetchhelper."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_USER_AGENT = "fetchhelper/1.0 (+https://pypi.org/project/fetchhelper/)"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """Transport defaults applied when a call does not specify its own."""

    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    max_redirects: int = 20
    verify_ssl: bool = True
    form_max_data_size: int = 2 * 1024 * 1024

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        timeout = _float_env("FETCHHELPER_HTTP_TIMEOUT", cls.timeout)
        if timeout <= 0:
            timeout = cls.timeout
        max_redirects = _int_env("FETCHHELPER_HTTP_MAX_REDIRECTS", cls.max_redirects)
        if max_redirects < 0:
            max_redirects = cls.max_redirects
        form_max_data_size = _int_env("FETCHHELPER_FORM_MAX_DATA_SIZE", cls.form_max_data_size)
        if form_max_data_size <= 0:
            form_max_data_size = cls.form_max_data_size
        return cls(
            timeout=timeout,
            user_agent=os.getenv("FETCHHELPER_USER_AGENT", cls.user_agent),
            max_redirects=max_redirects,
            verify_ssl=_bool_env("FETCHHELPER_HTTP_VERIFY_SSL", cls.verify_ssl),
            form_max_data_size=form_max_data_size,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()
