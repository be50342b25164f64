# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Opt-in logging for applications that want to see fetchhelper's debug lines.

The library itself only emits through module loggers under ``fetchhelper``
and never configures handlers on import. ``setup_logging`` attaches a single
stream handler to the package logger; the root logger is left untouched.
"""

from __future__ import annotations

import logging
import os
from typing import TextIO

LOG_LEVEL_ENV = "FETCHHELPER_LOG_LEVEL"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | None = None, stream: TextIO | None = None) -> logging.Logger:
    """
    Route ``fetchhelper.*`` records to ``stream`` (stderr by default).

    ``level`` falls back to ``FETCHHELPER_LOG_LEVEL`` and then ``WARNING``.
    Calling it again only adjusts the level and stream.
    """
    name = (level or os.getenv(LOG_LEVEL_ENV) or "WARNING").upper()
    effective_level = logging.getLevelName(name)
    if not isinstance(effective_level, int):
        effective_level = logging.WARNING

    logger = logging.getLogger("fetchhelper")
    logger.setLevel(effective_level)
    handler = next((h for h in logger.handlers if getattr(h, "_fetchhelper", False)), None)
    if handler is None:
        handler = logging.StreamHandler(stream)
        handler._fetchhelper = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    elif stream is not None:
        handler.setStream(stream)
    return logger


__all__ = ["setup_logging"]
