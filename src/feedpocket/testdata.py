#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-17 18:02:45 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/testdata.py
# created on 07. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.testdata

(c) 2026 Benjamin Walkenhorst

Sample feeds for the test suite.
"""

from typing import Final

rss_head: Final[str] = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example News</title>
    <link>https://example.com/</link>
    <description>News from nowhere</description>
"""

rss_tail: Final[str] = """  </channel>
</rss>
"""

rss_item: Final[str] = """    <item>
      <title>{title}</title>
      <link>{link}</link>
      <guid isPermaLink="false">{guid}</guid>
      <pubDate>{date}</pubDate>
      <description>&lt;p&gt;{title} in detail.&lt;/p&gt;</description>
    </item>
"""


def make_rss(*items: tuple[str, str, str, str]) -> bytes:
    """Build an RSS 2.0 document from (guid, link, title, pubDate) tuples."""
    body = "".join(rss_item.format(guid=guid, link=link, title=title, date=date)
                   for guid, link, title, date in items)
    return (rss_head + body + rss_tail).encode()


atom_feed: Final[bytes] = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Atom</title>
  <link href="https://example.org/"/>
  <id>urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6</id>
  <updated>2026-06-03T18:30:02Z</updated>
  <entry>
    <title>Atom powered robots run amok</title>
    <link href="https://example.org/2026/06/03/atom"/>
    <id>urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a</id>
    <updated>2026-06-03T18:30:02Z</updated>
    <content type="html">&lt;p&gt;Some text.&lt;/p&gt;</content>
  </entry>
</feed>
"""

# Local Variables: #
# python-indent: 4 #
# End: #
