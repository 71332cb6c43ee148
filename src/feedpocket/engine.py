#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-18 22:05:16 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/engine.py
# created on 03. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.engine

(c) 2026 Benjamin Walkenhorst

Engine implements one run: for each Source, download the feed, find the
new Items, send them to Pocket, and remember what we have seen.

The snapshot of a Source is only replaced after Pocket accepted the new
Items and, for Sources that go through the content server, after every
published Document was fetched at least once. If anything goes wrong
before that, the old snapshot stays and the same Items come up again on
the next run.
"""


import logging
from typing import Final, Optional

from feedpocket import common
from feedpocket.common import FeedPocketError, Scribe
from feedpocket.config import Config
from feedpocket.diff import find_new_items
from feedpocket.fetch import Fetcher
from feedpocket.mail import MailReader
from feedpocket.model import NewItem, Source, Summary
from feedpocket.pocket import DeliveryError, PocketClient
from feedpocket.render import Renderer
from feedpocket.server import ContentServer, Document, ServerError, wait_for_pickup
from feedpocket.snapshot import SnapshotStore


class Engine:
    """Engine runs the Sources through the pipeline."""

    __slots__ = [
        "log",
        "cfg",
        "dry_run",
        "fetcher",
        "sink",
        "store",
        "server",
        "renderer",
        "mail",
        "summary",
        "_started",
    ]

    log: logging.Logger
    cfg: Config
    dry_run: bool
    fetcher: Fetcher
    sink: PocketClient
    store: SnapshotStore
    server: ContentServer
    renderer: Renderer
    mail: MailReader
    summary: Summary
    _started: bool

    def __init__(self,
                 cfg: Config,
                 dry_run: bool = False,
                 fetcher: Optional[Fetcher] = None,
                 sink: Optional[PocketClient] = None,
                 store: Optional[SnapshotStore] = None,
                 server: Optional[ContentServer] = None,
                 mail: Optional[MailReader] = None) -> None:
        self.log = common.get_logger("engine")
        self.cfg = cfg
        self.dry_run = dry_run
        self.fetcher = fetcher if fetcher is not None else Fetcher(cfg.fetch_timeout)
        self.sink = sink if sink is not None else PocketClient(cfg.pocket)
        self.store = store if store is not None else SnapshotStore(cfg.data_dir)
        self.server = server if server is not None else ContentServer(cfg.http_server)
        self.mail = mail if mail is not None else MailReader(cfg.email)
        self.renderer = Renderer()
        self.summary = Summary()
        self._started = False

    @property
    def needs_server(self) -> bool:
        """Return True if any Source wants its Items served by us."""
        return any(s.use_server for s in self.cfg.sources())

    def run(self) -> Summary:
        """Process all Sources and the mailbox, return a Summary of what happened.

        Failing to start the content server is fatal, everything else is
        logged and confined to the Source it happened in.
        """
        self.summary = Summary()
        top: Final[Scribe] = Scribe(self.log)

        if self.needs_server:
            self.server.start()
            self._started = True

        try:
            for src in self.cfg.sources():
                top.info("Processing rss source (%s)", src.sid)
                self.summary.sources += 1
                with top.nested() as slog:
                    try:
                        self.process_source(src, slog)
                    except FeedPocketError as err:
                        self.summary.sources_failed += 1
                        slog.error("processing rss source(%s): %s", src.sid, err)

            if self.cfg.email.enabled:
                self.process_mail(top)
        finally:
            if self._started:
                self._started = False
                try:
                    self.server.shutdown()
                except ServerError as err:
                    top.error("%s", err)

        return self.summary

    def process_source(self, src: Source, log: Scribe) -> bool:
        """Run one Source through the pipeline.

        Return True if the snapshot was replaced.
        """
        previous = self.store.load(src.sid)
        current = self.fetcher.fetch(src, log)
        items: Final[list[NewItem]] = find_new_items(previous,
                                                     current.items,
                                                     src.start_date,
                                                     src.sid,
                                                     log)

        log.info("Found %d new items", len(items))
        if len(items) == 0:
            return False

        self.summary.items += len(items)
        with log.nested() as dlog:
            if self.dry_run:
                dlog.info("Skip adding to pocket because of dry-run mode")
                return False

            docs: list[Document] = []
            if src.use_server:
                for item in items:
                    doc = self.server.publish(item.item_id, self.renderer.render(item))
                    item.url = doc.url
                    docs.append(doc)

            try:
                self.sink.add_items(items, dlog)
            except DeliveryError as err:
                self.summary.failed += len(items)
                raise FeedPocketError(f"consuming new items: {err}") from err
            self.summary.delivered += len(items)

            if len(docs) > 0:
                dlog.info("Waiting for %d documents to be fetched", len(docs))
                missing = wait_for_pickup(docs, self.cfg.http_server.pickup_timeout)
                if len(missing) > 0:
                    dlog.warning("%d documents were not fetched within %s seconds, "
                                 "keeping the old snapshot",
                                 len(missing),
                                 self.cfg.http_server.pickup_timeout)
                    for doc in missing:
                        dlog.warning("Not fetched: %s", doc.url)
                    return False

        log.info("Saving new feed file for %s", src.sid)
        self.store.save(src.sid, current)
        return True

    def _consume_mail(self, items: list[NewItem], log: Scribe) -> bool:
        """Send Items from the mailbox to Pocket. Return True if they were delivered."""
        self.summary.items += len(items)
        if self.dry_run:
            log.info("Skip adding to pocket because of dry-run mode")
            return False
        try:
            self.sink.add_items(items, log)
        except DeliveryError as err:
            self.summary.failed += len(items)
            log.error("consuming new email items: %s", err)
            return False
        self.summary.delivered += len(items)
        return True

    def process_mail(self, log: Scribe) -> None:
        """Look for new Items in the mailbox."""
        with log.nested() as mlog:
            try:
                self.summary.mails = self.mail.find_new_items(
                    lambda items: self._consume_mail(items, mlog), mlog)
            except FeedPocketError as err:
                mlog.error("processing email: %s", err)


# Local Variables: #
# python-indent: 4 #
# End: #
