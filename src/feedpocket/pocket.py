#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-17 22:40:08 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/pocket.py
# created on 05. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.pocket

(c) 2026 Benjamin Walkenhorst

A minimal client for the Pocket API, just enough to add Items.
"""


import json
import logging
from typing import Any, Final, Optional

import requests

from feedpocket import common
from feedpocket.common import FeedPocketError, Scribe
from feedpocket.config import PocketConfig, default_batch
from feedpocket.model import NewItem

masked: Final[str] = "********"


class DeliveryError(FeedPocketError):
    """DeliveryError indicates that Pocket did not accept our Items."""


class PocketClient:
    """PocketClient adds Items to Pocket in batches."""

    __slots__ = [
        "log",
        "cfg",
        "session",
    ]

    log: logging.Logger
    cfg: PocketConfig
    session: requests.Session

    def __init__(self, cfg: PocketConfig, session: Optional[requests.Session] = None) -> None:
        self.log = common.get_logger("pocket")
        self.cfg = cfg
        self.session = session if session is not None else requests.Session()

    @property
    def batch_size(self) -> int:
        """Return the number of Items to send per request."""
        return self.cfg.batch if self.cfg.batch > 0 else default_batch

    def add_items(self, items: list[NewItem], log: Optional[Scribe] = None) -> None:
        """Add Items to Pocket.

        The Items are sent in batches, if a batch fails, a DeliveryError is
        raised and the remaining batches are not sent.
        """
        if len(items) == 0:
            return
        if log is None:
            log = Scribe(self.log)

        size: Final[int] = self.batch_size
        log.info("Adding %d new items to Pocket", len(items))

        for idx in range(0, len(items), size):
            chunk = items[idx:idx+size]
            if size <= len(items):
                log.info("(Batch %d) %d items", (idx // size) + 1, len(chunk))
            body: dict[str, Any] = {
                "consumer_key": self.cfg.consumer_key,
                "access_token": self.cfg.access_token,
                "actions": [i.as_action() for i in chunk],
            }
            with log.nested() as rlog:
                self._send(body, rlog)

    def _send(self, body: dict[str, Any], log: Scribe) -> None:
        """Send one batch of actions to Pocket."""
        if log.isEnabledFor(logging.DEBUG):
            shown = dict(body, consumer_key=masked, access_token=masked)
            log.debug("Request Body: %s", json.dumps(shown))

        try:
            res = self.session.post(self.cfg.endpoint,
                                    data=json.dumps(body).encode(),
                                    headers={
                                        "Content-Type": "application/json; charset=UTF-8",
                                        "X-Accept": "application/json",
                                    },
                                    timeout=self.cfg.timeout)
        except requests.RequestException as err:
            raise DeliveryError(f"API request error: {err}") from err

        if res.status_code != 200:
            log.error("Response status code: %d", res.status_code)
            for key, val in res.headers.items():
                log.error("Response header[%s]: %s", key, val)
            raise DeliveryError(f"API response failure: {res.status_code} {res.reason}")


# Local Variables: #
# python-indent: 4 #
# End: #
