# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authorization header synthesis."""

from __future__ import annotations

import base64
import logging
from collections.abc import Callable, Mapping
from typing import Any, TypedDict, Union

logger = logging.getLogger(__name__)

DEFAULT_AUTH_TYPE = "Bearer"


class TokenAuth(TypedDict, total=False):
    credentials: Union[str, Callable[[], str]]
    authtype: str


class BasicAuth(TypedDict, total=False):
    username: str
    password: str


AuthDescriptor = Union[TokenAuth, BasicAuth, Mapping[str, Any]]


def basic_auth_value(username: str, password: str | None = None) -> str:
    token = base64.b64encode(f"{username}:{password or ''}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def _auth_type(auth: Mapping[str, Any]) -> str:
    authtype = auth.get("authtype")
    return authtype if isinstance(authtype, str) and authtype else DEFAULT_AUTH_TYPE


def prepare_auth(auth: AuthDescriptor | None) -> str | Callable[[], str | None] | None:
    """
    Turn an auth descriptor into an ``Authorization`` value.

    Static descriptors resolve immediately to a string. A callable
    ``credentials`` resolves to a zero-argument function so the secret is
    fetched again on every request; see :func:`resolve_auth`.
    Anything unusable resolves to ``None`` (no header).
    """
    if not isinstance(auth, Mapping):
        return None
    username = auth.get("username")
    if isinstance(username, str) and username:
        password = auth.get("password")
        return basic_auth_value(username, password if isinstance(password, str) else None)

    credentials = auth.get("credentials")
    authtype = _auth_type(auth)
    if callable(credentials):

        def provider() -> str | None:
            secret = credentials()
            if secret is None:
                return None
            return f"{authtype} {secret}"

        return provider
    if isinstance(credentials, str) and credentials:
        return f"{authtype} {credentials}"

    if auth:
        logger.debug("Ignoring auth descriptor without usable credentials (keys: %s)", sorted(auth))
    return None


def resolve_auth(prepared: str | Callable[[], str | None] | None) -> str | None:
    """Evaluate a prepared auth value for the current request."""
    if callable(prepared):
        return prepared()
    return prepared


__all__ = [
    "AuthDescriptor",
    "BasicAuth",
    "TokenAuth",
    "basic_auth_value",
    "prepare_auth",
    "resolve_auth",
]
