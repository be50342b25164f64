# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum
from typing import Any

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    ABORTED = "ABORTED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    # httpx wraps low-level socket errors; look at the cause as well.
    cause = exc.__cause__ or exc.__context__
    for candidate in (exc, cause):
        if candidate is None:
            continue
        if isinstance(candidate, (ssl_module.SSLError, ssl_module.CertificateError)):
            return ErrorCategory.SSL_ERROR
        if isinstance(candidate, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


class FetchHelperError(Exception):
    """Base class of every error raised by fetchhelper."""


class HttpStatusError(FetchHelperError):
    """Raised by the status gate for responses with status >= 400."""

    def __init__(self, message: str, status: int, response: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.response = response

    @property
    def code(self) -> int:
        return self.status

    def __str__(self) -> str:
        return f"{self.status} {self.message}".strip()


class DecodeError(FetchHelperError):
    """The response status was fine but the body could not be decoded."""

    def __init__(self, message: str, response: Any = None):
        super().__init__(message)
        self.response = response


class UnsupportedBodyTypeError(FetchHelperError, TypeError):
    def __init__(self, value: Any):
        self.type_name = type(value).__name__
        super().__init__(f"Unsupported data type {self.type_name}")


class UnsupportedContentTypeError(FetchHelperError, ValueError):
    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"Invalid Content-Type {content_type}")


class FetchError(FetchHelperError):
    """The transport failed before a response status was available."""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR):
        super().__init__(message)
        self.category = category

    @classmethod
    def from_exception(cls, exc: BaseException) -> "FetchError":
        return cls(str(exc) or type(exc).__name__, categorize_exception(exc))


class AbortError(FetchError):
    """The request was aborted through its ``signal`` option."""

    def __init__(self, message: str = "The operation was aborted."):
        super().__init__(message, ErrorCategory.ABORTED)


__all__ = [
    "AbortError",
    "DecodeError",
    "ErrorCategory",
    "FetchError",
    "FetchHelperError",
    "HttpStatusError",
    "UnsupportedBodyTypeError",
    "UnsupportedContentTypeError",
    "categorize_exception",
]
