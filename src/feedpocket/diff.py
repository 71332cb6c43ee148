#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-17 16:03:55 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/diff.py
# created on 05. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.diff

(c) 2026 Benjamin Walkenhorst

Compare a freshly downloaded feed against the snapshot from the previous
run and figure out which Items are new.

An Item is new if neither its GUID nor its link occurs in the previous
snapshot, and it was not published before the Source's cutoff date.
Feeds are not exactly consistent in handing out stable GUIDs, so both are
checked. The GUID is checked first, a feed that rotates GUIDs but recycles
links is caught by the second check.
"""


from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Final, Optional

from feedpocket import common
from feedpocket.common import Scribe
from feedpocket.model import CandidateItem, FeedSnapshot, NewItem


class Match(Enum):
    """Match tells how a CandidateItem was recognized as already seen."""

    Nothing = auto()
    Guid = auto()
    Link = auto()


@dataclass(kw_only=True, slots=True)
class Seen:
    """Seen holds the GUIDs and links of a previous snapshot."""

    guids: set[str] = field(default_factory=set)
    links: set[str] = field(default_factory=set)

    @classmethod
    def from_snapshot(cls, previous: Optional[FeedSnapshot]) -> 'Seen':
        """Collect the non-empty GUIDs and links of a snapshot."""
        seen = cls()
        if previous is None:
            return seen
        for entry in previous.entries:
            if entry.guid != "":
                seen.guids.add(entry.guid)
            if entry.link != "":
                seen.links.add(entry.link)
        return seen

    def match(self, item: CandidateItem) -> Match:
        """Check if an Item was seen before. GUIDs take priority over links."""
        if item.guid != "" and item.guid in self.guids:
            return Match.Guid
        if item.link != "" and item.link in self.links:
            return Match.Link
        return Match.Nothing


def find_new_items(previous: Optional[FeedSnapshot],
                   current: list[CandidateItem],
                   cutoff: datetime,
                   tag: str,
                   log: Optional[Scribe] = None) -> list[NewItem]:
    """Return the Items from <current> that are not in <previous>, in feed order."""
    if log is None:
        log = Scribe(common.get_logger("diff"))

    log.info("Comparing items - old=%d, new=%d",
             0 if previous is None else len(previous),
             len(current))

    seen: Final[Seen] = Seen.from_snapshot(previous)
    fresh: list[NewItem] = []

    with log.nested() as ilog:
        for item in current:
            ident = item.ident
            if item.link == "":
                ilog.debug("[%s] Item has no link", ident)
                continue

            stamp = item.effective_time
            if stamp is not None and stamp < cutoff:
                ilog.debug("[%s] Item was %s (%s) before start date (%s)",
                           ident,
                           "published" if item.published is not None else "updated",
                           stamp.strftime(common.TimeFmt),
                           cutoff.strftime(common.TimeFmt))
                continue

            match seen.match(item):
                case Match.Guid:
                    ilog.debug("[%s] Item GUID matched in old feed - guid=%s", ident, item.guid)
                    continue
                case Match.Link:
                    ilog.debug("[%s] Item link matched in old feed", ident)
                    continue

            fresh.append(NewItem(
                item_id=ident,
                url=item.link,
                title=item.title,
                timestamp=stamp,
                tags=[tag],
                body=item.body,
            ))

    return fresh


# Local Variables: #
# python-indent: 4 #
# End: #
