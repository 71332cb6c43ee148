#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-18 23:12:40 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/test_engine.py
# created on 10. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.test_engine

(c) 2026 Benjamin Walkenhorst
"""

import os
import shutil
import unittest
from datetime import datetime
from pathlib import Path
from threading import Thread
from typing import Final, Optional
from urllib.parse import urlsplit

import requests

from feedpocket import common
from feedpocket.common import Scribe
from feedpocket.config import Config, HttpServerConfig, PocketConfig
from feedpocket.engine import Engine
from feedpocket.fetch import FetchError, parse_feed
from feedpocket.model import FeedSnapshot, NewItem, Source
from feedpocket.pocket import DeliveryError
from feedpocket.server import ContentServer
from feedpocket.snapshot import SnapshotStore
from feedpocket.testdata import make_rss

test_root: Final[str] = os.path.join(
    "/tmp",
    datetime.now().strftime(f"{common.AppName.lower()}_test_engine_%Y%m%d_%H%M%S"))

base_url: Final[str] = "https://pocket-content.example.org"

feed_one: Final[bytes] = make_rss(
    ("g1", "https://example.com/1", "One", "Mon, 01 Jun 2026 12:00:00 +0000"))
feed_two: Final[bytes] = make_rss(
    ("g2", "https://example.com/2", "Two", "Tue, 02 Jun 2026 12:00:00 +0000"),
    ("g1", "https://example.com/1", "One", "Mon, 01 Jun 2026 12:00:00 +0000"))


class FakeFetcher:
    """FakeFetcher hands out canned feeds."""

    def __init__(self, feeds: dict[str, bytes]) -> None:
        self.feeds = feeds

    def fetch(self, source: Source, _log: Optional[Scribe] = None) -> FeedSnapshot:
        """Return the canned feed for a Source."""
        raw = self.feeds.get(source.sid)
        if raw is None:
            raise FetchError(f"Cannot download {source.url}: 404 Not Found")
        return FeedSnapshot(raw=raw, items=parse_feed(raw))


class FakePocket:
    """FakePocket records Items and, like the real thing, fetches served content
    some time after accepting it.
    """

    def __init__(self,
                 server: Optional[ContentServer] = None,
                 reject: Optional[set[str]] = None,
                 fetch: bool = True) -> None:
        self.server = server
        self.reject = reject or set()
        self.fetch = fetch
        self.received: list[NewItem] = []
        self.fetchers: list[Thread] = []

    def _download(self, url: str) -> None:
        assert self.server is not None
        path = urlsplit(url).path
        requests.get(f"http://127.0.0.1:{self.server.port}{path}", timeout=5)

    def add_items(self, items: list[NewItem], _log: Optional[Scribe] = None) -> None:
        """Accept or reject the Items."""
        if any(t in self.reject for i in items for t in i.tags):
            raise DeliveryError("API response failure: 403 Forbidden")
        self.received.extend(items)
        if self.fetch and self.server is not None:
            for item in items:
                if item.url.startswith(base_url):
                    t = Thread(target=self._download, args=(item.url, ))
                    t.start()
                    self.fetchers.append(t)


class TestEngine(unittest.TestCase):
    """Run the Engine against fake feeds and a fake Pocket."""

    @classmethod
    def tearDownClass(cls) -> None:
        """Clean up afterwards."""
        shutil.rmtree(test_root, ignore_errors=True)

    def _config(self,
                name: str,
                sources: list[Source],
                pickup_timeout: float = 10) -> Config:
        return Config(
            data_dir=Path(test_root, name),
            http_server=HttpServerConfig(listen="127.0.0.1:0",
                                         base_url=base_url,
                                         pickup_timeout=pickup_timeout),
            pocket=PocketConfig(consumer_key="ck", access_token="at"),
            source_map={s.sid: s for s in sources},
        )

    def test_01_served_item(self) -> None:
        """An Item that goes through the content server is persisted once it was fetched."""
        cfg = self._config("served", [Source(sid="alpha", url="https://a", use_server=True)])
        store = SnapshotStore(cfg.data_dir)
        server = ContentServer(cfg.http_server)
        pocket = FakePocket(server)
        eng = Engine(cfg,
                     fetcher=FakeFetcher({"alpha": feed_one}),
                     sink=pocket,
                     store=store,
                     server=server)

        summary = eng.run()
        for t in pocket.fetchers:
            t.join()

        self.assertEqual(summary.sources, 1)
        self.assertEqual(summary.items, 1)
        self.assertEqual(summary.delivered, 1)
        self.assertEqual(summary.failed, 0)
        self.assertEqual(len(pocket.received), 1)
        item = pocket.received[0]
        self.assertTrue(item.url.startswith(f"{base_url}/content/"))
        self.assertTrue(item.url.endswith(".html"))
        self.assertEqual(item.tags, ["alpha"])

        snap = store.load("alpha")
        self.assertIsNotNone(snap)
        assert snap is not None
        self.assertEqual([(e.guid, e.link) for e in snap.entries],
                         [("g1", "https://example.com/1")])
        self.assertFalse(server.running)

    def test_02_second_run(self) -> None:
        """A second run only delivers what is new since the first one."""
        cfg = self._config("rerun", [Source(sid="plain", url="https://p")])
        store = SnapshotStore(cfg.data_dir)
        pocket = FakePocket()

        Engine(cfg, fetcher=FakeFetcher({"plain": feed_one}), sink=pocket, store=store).run()
        summary = Engine(cfg,
                         fetcher=FakeFetcher({"plain": feed_two}),
                         sink=pocket,
                         store=store).run()

        self.assertEqual([i.item_id for i in pocket.received], ["g1", "g2"])
        self.assertEqual(pocket.received[1].url, "https://example.com/2")
        self.assertEqual(summary.delivered, 1)
        self.assertEqual(store.path_for("plain").read_bytes(), feed_two)

    def test_03_delivery_failure(self) -> None:
        """A failed delivery keeps the old snapshot and does not affect other Sources."""
        cfg = self._config("failure", [Source(sid="beta", url="https://b"),
                                       Source(sid="gamma", url="https://g")])
        store = SnapshotStore(cfg.data_dir)
        store.save("beta", FeedSnapshot(raw=feed_one))
        before: Final[bytes] = store.path_for("beta").read_bytes()

        pocket = FakePocket(reject={"beta"})
        summary = Engine(cfg,
                         fetcher=FakeFetcher({"beta": feed_two, "gamma": feed_two}),
                         sink=pocket,
                         store=store).run()

        self.assertEqual(store.path_for("beta").read_bytes(), before)
        self.assertEqual(store.path_for("gamma").read_bytes(), feed_two)
        self.assertEqual(summary.sources, 2)
        self.assertEqual(summary.sources_failed, 1)
        self.assertEqual(summary.items, 3)
        self.assertEqual(summary.failed, 1)
        self.assertEqual(summary.delivered, 2)

    def test_04_fetch_failure(self) -> None:
        """A Source that cannot be fetched is skipped."""
        cfg = self._config("fetchfail", [Source(sid="broken", url="https://x"),
                                         Source(sid="fine", url="https://f")])
        store = SnapshotStore(cfg.data_dir)
        pocket = FakePocket()
        summary = Engine(cfg,
                         fetcher=FakeFetcher({"fine": feed_one}),
                         sink=pocket,
                         store=store).run()

        self.assertIsNone(store.load("broken"))
        self.assertIsNotNone(store.load("fine"))
        self.assertEqual(summary.sources_failed, 1)
        self.assertEqual(summary.delivered, 1)

    def test_05_dry_run(self) -> None:
        """A dry run counts new Items, but neither delivers nor persists them."""
        cfg = self._config("dry", [Source(sid="delta", url="https://d", use_server=True)])
        store = SnapshotStore(cfg.data_dir)
        server = ContentServer(cfg.http_server)
        pocket = FakePocket(server)
        summary = Engine(cfg,
                         dry_run=True,
                         fetcher=FakeFetcher({"delta": feed_two}),
                         sink=pocket,
                         store=store,
                         server=server).run()

        self.assertEqual(summary.items, 2)
        self.assertEqual(summary.delivered, 0)
        self.assertEqual(pocket.received, [])
        self.assertIsNone(store.load("delta"))
        self.assertFalse(server.running)

    def test_06_nothing_new(self) -> None:
        """Without new Items, the snapshot file is not touched."""
        cfg = self._config("unchanged", [Source(sid="eps", url="https://e")])
        store = SnapshotStore(cfg.data_dir)
        store.save("eps", FeedSnapshot(raw=feed_one))
        # Same Items, different document
        refetched = feed_one.replace(b"News from nowhere", b"Still nothing new")

        pocket = FakePocket()
        summary = Engine(cfg,
                         fetcher=FakeFetcher({"eps": refetched}),
                         sink=pocket,
                         store=store).run()

        self.assertEqual(summary.items, 0)
        self.assertEqual(pocket.received, [])
        self.assertEqual(store.path_for("eps").read_bytes(), feed_one)

    def test_07_never_fetched(self) -> None:
        """If nobody fetches the served content in time, the snapshot is kept."""
        cfg = self._config("unfetched",
                           [Source(sid="zeta", url="https://z", use_server=True)],
                           pickup_timeout=0.3)
        store = SnapshotStore(cfg.data_dir)
        server = ContentServer(cfg.http_server)
        pocket = FakePocket(server, fetch=False)
        summary = Engine(cfg,
                         fetcher=FakeFetcher({"zeta": feed_one}),
                         sink=pocket,
                         store=store,
                         server=server).run()

        self.assertEqual(summary.delivered, 1)
        self.assertIsNone(store.load("zeta"))
        self.assertFalse(server.running)

    def test_08_no_server_needed(self) -> None:
        """The content server is only started if a Source needs it."""
        cfg = self._config("noserver", [Source(sid="eta", url="https://h")])
        server = ContentServer(HttpServerConfig(listen="127.0.0.1:0", base_url=""))
        eng = Engine(cfg,
                     fetcher=FakeFetcher({"eta": feed_one}),
                     sink=FakePocket(),
                     store=SnapshotStore(cfg.data_dir),
                     server=server)
        self.assertFalse(eng.needs_server)
        summary = eng.run()
        self.assertEqual(summary.delivered, 1)
        self.assertFalse(server.running)


# Local Variables: #
# python-indent: 4 #
# End: #
