# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
fetchhelper package entrypoint.

Convenience helpers over an asynchronous httpx transport: persistent request
options, authentication headers, query string and body encoding, multipart
forms and optional raising on HTTP error statuses.
"""

from .client import Transport, create_default_transport
from .config import HttpSettings, load_http_settings
from .core import FetchHelper
from .errors import (
    AbortError,
    DecodeError,
    ErrorCategory,
    FetchError,
    FetchHelperError,
    HttpStatusError,
    UnsupportedBodyTypeError,
    UnsupportedContentTypeError,
)
from .formdata import FormData
from .formhelper import FormHelper
from .log import setup_logging
from .models import Blob, FetchResponse
from .querystring import stringify
from .requesthelper import RequestHelper
from .transport import HttpxTransport

__all__ = [
    "AbortError",
    "Blob",
    "DecodeError",
    "ErrorCategory",
    "FetchError",
    "FetchHelper",
    "FetchHelperError",
    "FetchResponse",
    "FormData",
    "FormHelper",
    "HttpSettings",
    "HttpStatusError",
    "HttpxTransport",
    "RequestHelper",
    "Transport",
    "UnsupportedBodyTypeError",
    "UnsupportedContentTypeError",
    "create_default_transport",
    "load_http_settings",
    "setup_logging",
    "stringify",
]
