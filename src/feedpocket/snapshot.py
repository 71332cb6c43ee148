#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-16 18:48:19 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/snapshot.py
# created on 04. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.snapshot

(c) 2026 Benjamin Walkenhorst

The SnapshotStore keeps the last feed document we processed successfully
for each Source. Snapshots are replaced atomically: a new snapshot is
written to a temporary file next to the old one and then renamed over it.
"""


import logging
import os
import tempfile
from pathlib import Path
from typing import Final, Optional, Union

from feedpocket import common
from feedpocket.common import FeedPocketError
from feedpocket.fetch import FetchError, parse_feed
from feedpocket.model import FeedSnapshot

snapshot_name: Final[str] = "feed.xml"
dir_mode: Final[int] = 0o750


class SnapshotError(FeedPocketError):
    """SnapshotError indicates a failure to read or write a snapshot."""


class SnapshotStore:
    """SnapshotStore reads and writes snapshot files below a data directory."""

    __slots__ = [
        "log",
        "root",
    ]

    log: logging.Logger
    root: Path

    def __init__(self, root: Union[str, Path]) -> None:
        self.log = common.get_logger("snapshot")
        self.root = Path(root)

    def dir_for(self, source_id: str) -> Path:
        """Return the directory a Source's snapshot lives in."""
        return self.root.joinpath("rss", source_id)

    def path_for(self, source_id: str) -> Path:
        """Return the path of a Source's snapshot file."""
        return self.dir_for(source_id).joinpath(snapshot_name)

    def load(self, source_id: str) -> Optional[FeedSnapshot]:
        """Load the previous snapshot for a Source.

        If there is no snapshot, yet, return None.
        """
        path: Final[Path] = self.path_for(source_id)
        self.log.debug("Reading old feed at %s", path)
        try:
            with open(path, "rb") as fh:
                raw = fh.read()
        except FileNotFoundError:
            return None
        except OSError as err:
            raise SnapshotError(f"Cannot read snapshot {path}: {err}") from err

        try:
            items = parse_feed(raw)
        except FetchError as err:
            raise SnapshotError(f"Cannot parse snapshot {path}: {err}") from err

        return FeedSnapshot(raw=raw, items=items)

    def save(self, source_id: str, snapshot: FeedSnapshot) -> None:
        """Replace the snapshot of a Source with a new one."""
        folder: Final[Path] = self.dir_for(source_id)
        path: Final[Path] = self.path_for(source_id)
        self.log.debug("Saving new feed file at %s", path)

        try:
            folder.mkdir(mode=dir_mode, parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".feed-", suffix=".tmp", dir=folder)
        except OSError as err:
            raise SnapshotError(f"Cannot create temporary file in {folder}: {err}") from err

        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(snapshot.raw)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, path)
        except OSError as err:
            try:
                os.unlink(tmp)
            except FileNotFoundError:
                pass
            raise SnapshotError(f"Cannot save snapshot {path}: {err}") from err


# Local Variables: #
# python-indent: 4 #
# End: #
