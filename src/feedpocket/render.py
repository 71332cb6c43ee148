#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-17 20:11:23 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/render.py
# created on 08. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.render

(c) 2026 Benjamin Walkenhorst

This module turns news Items into standalone HTML documents for the
content server.
"""


import logging
import pathlib
from typing import Final, Union

from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, select_autoescape

from feedpocket import common
from feedpocket.model import NewItem

tmpl_root: Final[pathlib.Path] = pathlib.Path(__file__).parent.joinpath("templates")
unwanted: Final[list[str]] = ["script", "style", "iframe"]


class Renderer:
    """Renderer sanitizes the HTML of RSS Items and wraps it in a document:

    - Remove Javascript, stylesheets and iframes
    - Change links to open in new tabs/windows
    """

    __slots__ = [
        "log",
        "env",
    ]

    log: logging.Logger
    env: Environment

    def __init__(self, root: Union[str, pathlib.Path] = tmpl_root) -> None:
        self.log = common.get_logger("render")
        self.env = Environment(loader=FileSystemLoader(str(root)),
                               autoescape=select_autoescape(["html", "jinja"]))
        self.env.globals["app_string"] = f"{common.AppName} {common.AppVersion}"

    def scrub_html(self, content: str) -> str:
        """Attempt to sanitize the given HTML content."""
        soup = BeautifulSoup(content, "html.parser")
        for link in soup.find_all("a"):
            link.attrs["target"] = "_blank"

        for tag in soup.find_all(unwanted):
            tag.decompose()

        return str(soup)

    def render(self, item: NewItem) -> str:
        """Render an Item into an HTML document."""
        tmpl = self.env.get_template("article.jinja")
        doc: Final[str] = tmpl.render(item=item, body=self.scrub_html(item.body))
        self.log.debug("Rendered %s into %d characters of HTML", item.item_id, len(doc))
        return doc


# Local Variables: #
# python-indent: 4 #
# End: #
