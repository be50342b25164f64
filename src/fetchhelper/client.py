# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport abstraction and factory."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from .config import HttpSettings, load_http_settings
from .models import FetchResponse


class Transport(Protocol):
    """Minimal protocol for issuing one HTTP request from an effective option record."""

    async def fetch(self, url: str, options: Mapping[str, Any]) -> FetchResponse: ...

    async def aclose(self) -> None:  # pragma: no cover - optional for adapters
        ...


def create_default_transport(settings: HttpSettings | None = None) -> Transport:
    """Factory for the default httpx-backed transport."""
    from .transport import HttpxTransport

    return HttpxTransport(settings or load_http_settings())
