#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-15 21:17:40 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/model.py
# created on 03. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.model

(c) 2026 Benjamin Walkenhorst
"""


from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from feedpocket import common

epoch: datetime = datetime.fromtimestamp(0, timezone.utc)


@dataclass(kw_only=True, slots=True, frozen=True)
class Source:
    """Source is an RSS/Atom feed we forward to Pocket."""

    sid: str
    name: str = ""
    url: str
    start_date: datetime = epoch
    use_server: bool = False

    @property
    def title(self) -> str:
        """Return the name of the Source, or its ID if it has no name."""
        return self.name or self.sid


@dataclass(kw_only=True, slots=True)
class CandidateItem:
    """CandidateItem is an entry from a freshly downloaded feed."""

    link: str = ""
    title: str = ""
    body: str = ""
    guid: str = ""
    published: Optional[datetime] = None
    updated: Optional[datetime] = None

    @property
    def effective_time(self) -> Optional[datetime]:
        """Return the publication time, or the update time if the former is missing."""
        if self.published is not None:
            return self.published
        return self.updated

    @property
    def ident(self) -> str:
        """Return the GUID, or the link if the Item has no GUID."""
        return self.guid or self.link


@dataclass(kw_only=True, slots=True, frozen=True)
class FeedEntry:
    """FeedEntry is what we remember about an Item from a previous run."""

    guid: str = ""
    link: str = ""
    timestamp: Optional[datetime] = None


@dataclass(kw_only=True, slots=True)
class FeedSnapshot:
    """FeedSnapshot is the state of a feed at one point in time.

    raw holds the feed document as it was downloaded, this is what gets
    written to disk. items holds the parsed entries in feed order.
    """

    raw: bytes = b""
    items: list[CandidateItem] = field(default_factory=list)

    @property
    def entries(self) -> list[FeedEntry]:
        """Return the identifying bits of the snapshot's Items."""
        return [FeedEntry(guid=i.guid, link=i.link, timestamp=i.effective_time)
                for i in self.items]

    def __len__(self) -> int:
        return len(self.items)


@dataclass(kw_only=True, slots=True)
class NewItem:
    """NewItem is an Item that is to be added to Pocket."""

    item_id: str
    url: str
    title: str = ""
    timestamp: Optional[datetime] = None
    tags: list[str] = field(default_factory=list)
    body: str = ""

    @property
    def stamp(self) -> int:
        """Return the timestamp as seconds since the epoch, 0 if it is unknown."""
        if self.timestamp is None:
            return 0
        return int(self.timestamp.timestamp())

    @property
    def stamp_str(self) -> str:
        """Return the timestamp as a human-readable string."""
        if self.timestamp is None:
            return ""
        return self.timestamp.strftime(common.TimeFmt)

    def as_action(self) -> dict[str, Any]:
        """Return the Item as an "add" action for the Pocket API."""
        action: dict[str, Any] = {
            "action": "add",
            "url": self.url,
        }
        if self.title != "":
            action["title"] = self.title
        if self.stamp != 0:
            action["time"] = self.stamp
        if len(self.tags) > 0:
            action["tags"] = ",".join(self.tags)
        return action


@dataclass(kw_only=True, slots=True)
class Summary:
    """Summary counts what happened during a run."""

    sources: int = 0
    sources_failed: int = 0
    items: int = 0
    delivered: int = 0
    failed: int = 0
    mails: int = 0


# Local Variables: #
# python-indent: 4 #
# End: #
