#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-16 18:20:44 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/fetch.py
# created on 04. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.fetch

(c) 2026 Benjamin Walkenhorst

Downloading and parsing of RSS/Atom feeds.
"""


import logging
from typing import Final, Optional

import fastfeedparser as ffp  # type: ignore # pylint: disable-msg=E0401
import requests

from feedpocket import common
from feedpocket.common import FeedPocketError, Scribe
from feedpocket.model import CandidateItem, FeedSnapshot, Source

user_agent: Final[str] = f"{common.AppName}/{common.AppVersion}"


class FetchError(FeedPocketError):
    """FetchError indicates a failure to download or parse a feed."""


def _item_body(article) -> str:
    """Try to get a description/summary from an Atom/RSS item."""
    desc = article.get("description")
    if desc:
        return desc
    content = article.get("content")
    if content:
        return content[0].get("value", "")
    return ""


def parse_feed(raw: bytes) -> list[CandidateItem]:
    """Parse a feed document into a list of CandidateItems, preserving their order."""
    try:
        rss = ffp.parse(raw)
    except Exception as err:  # noqa: F841 # pylint: disable-msg=W0718
        cname: Final[str] = err.__class__.__name__
        raise FetchError(f"Cannot parse feed: {cname}: {err}") from err

    items: list[CandidateItem] = []
    for art in rss.get("entries", []):
        item = CandidateItem(
            link=(art.get("link") or "").strip(),
            title=art.get("title") or "",
            body=_item_body(art),
            guid=(art.get("id") or "").strip(),
            published=common.parse_timestamp(art.get("published")),
            updated=common.parse_timestamp(art.get("updated")),
        )
        items.append(item)

    return items


class Fetcher:
    """Fetcher downloads RSS feeds."""

    __slots__ = [
        "log",
        "timeout",
        "session",
    ]

    log: logging.Logger
    timeout: float
    session: requests.Session

    def __init__(self, timeout: float = 30, session: Optional[requests.Session] = None) -> None:
        self.log = common.get_logger("fetch")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers["User-Agent"] = user_agent

    def download(self, url: str) -> bytes:
        """Download the document at <url>."""
        try:
            res = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as err:
            raise FetchError(f"Cannot download {url}: {err}") from err

        if res.status_code != 200:
            raise FetchError(f"Bad download status for {url}: {res.status_code} {res.reason}")

        return res.content

    def fetch(self, source: Source, log: Optional[Scribe] = None) -> FeedSnapshot:
        """Download and parse the current state of a Source."""
        if log is None:
            log = Scribe(self.log)
        log.info("Downloading new feed from %s", source.url)
        raw = self.download(source.url)
        log.info("Parsing new downloaded feed (%d bytes)", len(raw))
        items = parse_feed(raw)
        log.debug("Feed %s has %d items", source.sid, len(items))
        return FeedSnapshot(raw=raw, items=items)


# Local Variables: #
# python-indent: 4 #
# End: #
