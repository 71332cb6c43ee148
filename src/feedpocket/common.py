#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-14 19:02:11 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/common.py
# created on 03. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.common

(c) 2026 Benjamin Walkenhorst

Constants, the exception base class, and logging helpers shared by the
rest of the application.
"""


import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from threading import Lock
from typing import Any, Final, Iterator, MutableMapping, Optional

AppName: Final[str] = "feedpocket"
AppVersion: Final[str] = "0.4.0"
Debug: bool = False
TimeFmt: Final[str] = "%Y-%m-%d %H:%M:%S"
LogFmt: Final[str] = "%(asctime)s %(levelname)-8s %(name)-16s %(message)s"
indent_width: Final[int] = 4

_log_lock: Final[Lock] = Lock()
_log_ready: bool = False


class FeedPocketError(Exception):
    """Base class for all exceptions raised by the application."""


def _setup_logging() -> None:
    global _log_ready  # pylint: disable-msg=W0603
    with _log_lock:
        if _log_ready:
            return
        root = logging.getLogger(AppName)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LogFmt))
        root.addHandler(handler)
        root.setLevel(logging.DEBUG if Debug else logging.INFO)
        root.propagate = False
        _log_ready = True


def get_logger(name: str) -> logging.Logger:
    """Return a Logger for the given component."""
    _setup_logging()
    return logging.getLogger(f"{AppName}.{name}")


def set_verbose(flag: bool) -> None:
    """Switch verbose (debug) logging on or off."""
    global Debug  # pylint: disable-msg=W0603
    Debug = flag
    _setup_logging()
    logging.getLogger(AppName).setLevel(logging.DEBUG if flag else logging.INFO)


class Scribe(logging.LoggerAdapter):
    """Scribe prefixes log messages with an indentation that reflects how
    deeply nested the current operation is.

    A Scribe is never modified after creation. nested() hands out a new one
    with a deeper indentation, so leaving the block restores the previous
    level without any bookkeeping.
    """

    def __init__(self, logger: logging.Logger, depth: int = 0) -> None:
        super().__init__(logger, {"depth": depth})

    @property
    def depth(self) -> int:
        """Return the indentation level."""
        return self.extra["depth"]  # type: ignore

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return (" " * (self.depth * indent_width)) + str(msg), kwargs

    @contextmanager
    def nested(self) -> Iterator['Scribe']:
        """Yield a Scribe one level deeper than this one."""
        yield Scribe(self.logger, self.depth + 1)


def parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    """Attempt to parse a timestamp as found in feeds and mail headers.

    ISO 8601 is tried first, then RFC 822. Timestamps without a time zone
    are taken to be UTC. If nothing works, return None.
    """
    if text is None:
        return None
    text = text.strip()
    if text == "":
        return None

    stamp: Optional[datetime] = None
    try:
        stamp = datetime.fromisoformat(text)
    except ValueError:
        try:
            stamp = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return None

    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp


# Local Variables: #
# python-indent: 4 #
# End: #
