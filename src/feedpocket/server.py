#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-18 15:36:50 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/server.py
# created on 06. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.server

(c) 2026 Benjamin Walkenhorst

The content server publishes rendered articles under unguessable URLs, so
Pocket fetches our copy instead of the original page. Each published
Document carries a Pickup that fires the first time the Document is
requested. The Engine waits for those before it considers a batch done.
"""


import hashlib
import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from socketserver import ThreadingMixIn
from threading import Event, Lock, Thread
from typing import Final, Optional, Union
from urllib.parse import urlsplit
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

import bottle
from bottle import request, response

from feedpocket import common
from feedpocket.common import FeedPocketError
from feedpocket.config import HttpServerConfig

salt_len: Final[int] = 8
salt_chars: Final[str] = string.ascii_letters
html_suffix: Final[str] = ".html"


class ServerError(FeedPocketError):
    """ServerError indicates a problem starting or stopping the content server."""


class Pickup:
    """Pickup is a one-shot signal. It fires at most once, no matter how often
    fire() is called or from how many threads, and any number of waiters can
    observe it afterwards.
    """

    __slots__ = [
        "_lock",
        "_event",
        "_fired",
    ]

    _lock: Lock
    _event: Event
    _fired: bool

    def __init__(self) -> None:
        self._lock = Lock()
        self._event = Event()
        self._fired = False

    def fire(self) -> bool:
        """Fire the signal. Return True if this call was the one that fired it."""
        with self._lock:
            if self._fired:
                return False
            self._fired = True
        self._event.set()
        return True

    @property
    def fired(self) -> bool:
        """Return True if the signal has fired."""
        with self._lock:
            return self._fired

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the signal fires or the timeout expires.

        Return True if the signal has fired.
        """
        return self._event.wait(timeout)


@dataclass(kw_only=True, slots=True)
class Document:
    """Document is a rendered article published by the ContentServer."""

    item_id: str
    key: str
    body: str
    url: str
    pickup: Pickup = field(default_factory=Pickup)
    fetch_count: int = 0


def wait_for_pickup(documents: list[Document],
                    timeout: Union[int, float, None] = None) -> list[Document]:
    """Wait until all Documents have been fetched at least once.

    If timeout is None or not positive, wait as long as it takes. Otherwise,
    all Documents share one deadline. Return the Documents that were not
    fetched in time.
    """
    if timeout is None or timeout <= 0:
        for doc in documents:
            doc.pickup.wait()
        return []

    deadline: Final[float] = time.monotonic() + timeout
    missing: list[Document] = []
    for doc in documents:
        remaining = max(0.0, deadline - time.monotonic())
        if not doc.pickup.wait(remaining):
            missing.append(doc)
    return missing


def parse_listen_address(addr: str) -> tuple[str, int]:
    """Split a listen address like "localhost:8484" or ":8484" into host and port."""
    host, sep, port = addr.strip().rpartition(":")
    if sep == "":
        raise ServerError(f"Listen address {addr!r} lacks a port")
    try:
        num = int(port)
    except ValueError as err:
        raise ServerError(f"Invalid port in listen address {addr!r}") from err
    if not 0 <= num <= 65535:
        raise ServerError(f"Port {num} in listen address {addr!r} is out of range")
    return host.strip("[]"), num


def check_base_url(url: str) -> str:
    """Make sure the base URL is usable, return it without a trailing slash."""
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or parts.netloc == "":
        raise ServerError(f"http_server.base_url is not valid: {url!r}")
    return url.rstrip("/")


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = False
    block_on_close = True


class _RequestHandler(WSGIRequestHandler):
    """Send the access log to our logger instead of stderr."""

    def log_message(self, format, *args) -> None:  # pylint: disable-msg=W0622
        common.get_logger("server.http").debug("%s - %s",
                                               self.address_string(),
                                               format % args)


class ContentServer:
    """ContentServer serves rendered articles over HTTP."""

    __slots__ = [
        "log",
        "lock",
        "cfg",
        "base_url",
        "app",
        "documents",
        "httpd",
        "thread",
    ]

    log: logging.Logger
    lock: Lock
    cfg: HttpServerConfig
    base_url: str
    app: bottle.Bottle
    documents: dict[str, Document]
    httpd: Optional[WSGIServer]
    thread: Optional[Thread]

    def __init__(self, cfg: HttpServerConfig) -> None:
        self.log = common.get_logger("server")
        self.lock = Lock()
        self.cfg = cfg
        self.base_url = ""
        self.documents = {}
        self.httpd = None
        self.thread = None

        self.app = bottle.Bottle()
        self.app.route("/content/<name>", method="GET", callback=self._handle_content)

    def __enter__(self) -> 'ContentServer':
        self.start()
        return self

    def __exit__(self, _ex_type, _ex_val, _trace) -> None:
        self.shutdown()

    @property
    def running(self) -> bool:
        """Return True if the server is listening."""
        with self.lock:
            return self.httpd is not None

    @property
    def port(self) -> int:
        """Return the port the server is listening on."""
        with self.lock:
            if self.httpd is None:
                raise ServerError("Content server is not running")
            return self.httpd.server_address[1]

    def start(self) -> None:
        """Bind the listening socket and start serving in a background thread."""
        base: Final[str] = check_base_url(self.cfg.base_url)
        host, port = parse_listen_address(self.cfg.listen)

        self.log.info("Starting content HTTP server on %s", self.cfg.listen)
        with self.lock:
            if self.httpd is not None:
                raise ServerError("Content server is already running")
            try:
                httpd = make_server(host, port, self.app,
                                    server_class=_ThreadingWSGIServer,
                                    handler_class=_RequestHandler)
            except OSError as err:
                raise ServerError(f"Cannot listen on {self.cfg.listen}: {err}") from err

            self.base_url = base
            self.httpd = httpd
            self.thread = Thread(name="ContentServer",
                                 target=self._serve,
                                 args=(httpd, ),
                                 daemon=True)
            self.thread.start()
        self.log.info("Started content HTTP server on %s", self.cfg.listen)

    def _serve(self, httpd: WSGIServer) -> None:
        """Run the request loop until shutdown() is called."""
        try:
            httpd.serve_forever()
        except Exception as err:  # noqa: F841 # pylint: disable-msg=W0718
            cname: Final[str] = err.__class__.__name__
            self.log.error("%s while serving HTTP content: %s",
                           cname,
                           err)
        finally:
            # Waits for in-flight requests to finish.
            httpd.server_close()

    def shutdown(self) -> None:
        """Stop the server and wait for the serving thread to finish."""
        with self.lock:
            httpd, thread = self.httpd, self.thread
            self.httpd = None
            self.thread = None

        if httpd is None or thread is None:
            return

        self.log.info("Shutting down content HTTP server")
        try:
            httpd.shutdown()
        except OSError as err:
            raise ServerError(f"Error shutting down content server: {err}") from err

        timeout = self.cfg.shutdown_timeout if self.cfg.shutdown_timeout > 0 else None
        thread.join(timeout)
        if thread.is_alive():
            raise ServerError(f"Content server did not stop within {timeout} seconds")

    def _make_key(self, item_id: str) -> str:
        """Derive the key a Document is published under. Caller must hold the lock."""
        text: str = item_id
        if self.cfg.random_url:
            text += "".join(secrets.choice(salt_chars) for _ in range(salt_len))

        key = hashlib.md5(text.encode()).hexdigest()
        cnt: int = 1
        while key in self.documents:
            cnt += 1
            key = hashlib.md5(f"{text}#{cnt}".encode()).hexdigest()
        return key

    def publish(self, item_id: str, body: str) -> Document:
        """Publish a document, return a handle to it."""
        with self.lock:
            if self.httpd is None:
                raise ServerError("Content server is not running")
            key = self._make_key(item_id)
            doc = Document(
                item_id=item_id,
                key=key,
                body=body,
                url=f"{self.base_url}/content/{key}{html_suffix}",
            )
            self.documents[key] = doc

        self.log.info("Serving content %s at %s", item_id, doc.url)
        return doc

    def _handle_content(self, name: str) -> str:
        """Return a published Document."""
        self.log.debug("Received %s content request: %s", request.method, name)
        response.set_header("Cache-Control", "no-store, max-age=0")

        key = name.removesuffix(html_suffix)
        doc: Optional[Document] = None
        if key != name:
            with self.lock:
                doc = self.documents.get(key)
                if doc is not None:
                    doc.fetch_count += 1

        if doc is None:
            response.status = 404
            return ""

        response.set_header("Content-Type", "text/html; charset=UTF-8")
        # Bottle answers HEAD requests with the GET handler, only a real GET counts.
        if request.method == "GET" and doc.pickup.fire():
            self.log.info("Content is served: %s", doc.item_id)
        return doc.body


# Local Variables: #
# python-indent: 4 #
# End: #
