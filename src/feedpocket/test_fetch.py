#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-17 18:25:13 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/test_fetch.py
# created on 07. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.test_fetch

(c) 2026 Benjamin Walkenhorst
"""

import unittest
from datetime import datetime, timezone
from unittest import mock

import requests

from feedpocket.fetch import Fetcher, FetchError, parse_feed
from feedpocket.model import Source
from feedpocket.testdata import atom_feed, make_rss


class TestParse(unittest.TestCase):
    """Test parsing feeds."""

    def test_rss(self) -> None:
        """Parse an RSS feed, keeping the order of the Items."""
        raw = make_rss(
            ("g1", "https://example.com/1", "One", "Mon, 01 Jun 2026 12:00:00 +0000"),
            ("g2", "https://example.com/2", "Two", "Tue, 02 Jun 2026 08:30:00 +0000"),
        )
        items = parse_feed(raw)
        self.assertEqual(len(items), 2)
        self.assertEqual([i.link for i in items],
                         ["https://example.com/1", "https://example.com/2"])
        self.assertEqual([i.guid for i in items], ["g1", "g2"])
        self.assertEqual(items[0].title, "One")
        self.assertIn("One in detail.", items[0].body)
        self.assertEqual(items[0].effective_time,
                         datetime(2026, 6, 1, 12, 0, 0, tzinfo=timezone.utc))

    def test_atom(self) -> None:
        """Parse an Atom feed, the body comes from the content element."""
        items = parse_feed(atom_feed)
        self.assertEqual(len(items), 1)
        item = items[0]
        self.assertEqual(item.link, "https://example.org/2026/06/03/atom")
        self.assertEqual(item.guid, "urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a")
        self.assertIn("Some text.", item.body)
        self.assertEqual(item.effective_time,
                         datetime(2026, 6, 3, 18, 30, 2, tzinfo=timezone.utc))


class TestFetcher(unittest.TestCase):
    """Test downloading feeds."""

    src = Source(sid="example", url="https://example.com/feed.xml")

    def test_fetch(self) -> None:
        """A successful download is parsed, the raw document is kept."""
        raw = make_rss(("g1", "https://example.com/1", "One",
                        "Mon, 01 Jun 2026 12:00:00 +0000"))
        session = mock.Mock(spec=requests.Session)
        session.headers = {}
        session.get.return_value = mock.Mock(status_code=200, content=raw, reason="OK")

        fetcher = Fetcher(5, session)
        snap = fetcher.fetch(self.src)

        session.get.assert_called_once_with(self.src.url, timeout=5)
        self.assertEqual(snap.raw, raw)
        self.assertEqual(len(snap), 1)
        self.assertEqual(snap.entries[0].guid, "g1")

    def test_bad_status(self) -> None:
        """A non-200 response is an error."""
        session = mock.Mock(spec=requests.Session)
        session.headers = {}
        session.get.return_value = mock.Mock(status_code=503, content=b"", reason="Busy")

        with self.assertRaises(FetchError):
            Fetcher(5, session).fetch(self.src)

    def test_network_error(self) -> None:
        """Network errors are reported as FetchError."""
        session = mock.Mock(spec=requests.Session)
        session.headers = {}
        session.get.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(FetchError):
            Fetcher(5, session).fetch(self.src)


# Local Variables: #
# python-indent: 4 #
# End: #
