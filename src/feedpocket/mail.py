#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-18 19:27:31 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/mail.py
# created on 09. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.mail

(c) 2026 Benjamin Walkenhorst

Read IFTTT notification emails from an IMAP mailbox. Each mail contains a
line like "via Twitter https://ift.tt/xyz", we follow that link to its
final destination and turn it into an Item. Mails are deleted once their
Items have been delivered.
"""


import email
import email.policy
import imaplib
import logging
import re
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Callable, Final, Optional

import requests

from feedpocket import common
from feedpocket.common import FeedPocketError, Scribe
from feedpocket.config import MailConfig
from feedpocket.model import NewItem

ifttt_pat: Final[re.Pattern] = re.compile(r"^via .+ (https://[^\r\n]*?)\s*$", re.M)
text_types: Final[tuple[str, ...]] = ("text/plain", "text/html")
mail_tag: Final[str] = "ifttt"
imap_port: Final[int] = 993

Consumer = Callable[[list[NewItem]], bool]


class MailError(FeedPocketError):
    """MailError indicates a problem talking to the mail server or reading a mail."""


@dataclass(kw_only=True, slots=True)
class MailItem:
    """MailItem is an Item plus the UID of the mail it came from."""

    uid: bytes
    item: NewItem


def find_link(body: str) -> str:
    """Find the IFTTT link in the body of a mail."""
    m = ifttt_pat.search(body)
    if m is None:
        raise MailError("No IFTTT link in the body")
    return m[1]


def message_text(msg: EmailMessage) -> str:
    """Return the first plain text or HTML part of a mail."""
    if msg.is_multipart():
        for part in msg.walk():
            if part.get_content_type() in text_types:
                return part.get_content()
        raise MailError("No text part in multipart mail")

    kind: Final[str] = msg.get_content_type()
    if kind not in text_types:
        raise MailError(f"Unsupported email content type: {kind}")
    return msg.get_content()


class MailReader:
    """MailReader scans an IMAP mailbox for IFTTT notifications."""

    __slots__ = [
        "log",
        "cfg",
        "session",
        "timeout",
    ]

    log: logging.Logger
    cfg: MailConfig
    session: requests.Session
    timeout: float

    def __init__(self,
                 cfg: MailConfig,
                 session: Optional[requests.Session] = None,
                 timeout: float = 30) -> None:
        self.log = common.get_logger("mail")
        self.cfg = cfg
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _connect(self) -> imaplib.IMAP4:
        host, _, port = self.cfg.server.partition(":")
        try:
            conn = imaplib.IMAP4_SSL(host, int(port) if port else imap_port)
        except (OSError, ValueError, imaplib.IMAP4.error) as err:
            raise MailError(f"Failed to connect to IMAP server {self.cfg.server}: {err}") from err
        try:
            conn.login(self.cfg.username, self.cfg.app_password)
        except imaplib.IMAP4.error as err:
            conn.shutdown()
            raise MailError(f"Failed to login as {self.cfg.username}: {err}") from err
        return conn

    def resolve(self, url: str) -> str:
        """Follow the redirects starting at <url>, return the final URL."""
        try:
            res = self.session.get(url, allow_redirects=True, timeout=self.timeout)
            res.close()
        except requests.RequestException as err:
            raise MailError(f"Failed to follow IFTTT url {url}: {err}") from err
        return res.url

    def convert(self, uid: bytes, raw: bytes, log: Scribe) -> MailItem:
        """Turn a raw mail into a MailItem."""
        msg = email.message_from_bytes(raw, policy=email.policy.default)
        subject: Final[str] = str(msg.get("Subject", ""))
        stamp = common.parse_timestamp(msg.get("Date"))

        log.info("UID: %s", uid.decode())
        log.info("Subject: %s", subject)
        log.debug("Date: %s", stamp.strftime(common.TimeFmt) if stamp else "")

        try:
            body = message_text(msg)
        except (LookupError, UnicodeError) as err:
            raise MailError(f"Cannot decode mail body: {err}") from err

        link = find_link(body)
        log.info("IFTTT url: %s", link)
        final = self.resolve(link)
        log.info("Final url: %s", final)

        item = NewItem(
            item_id=str(msg.get("Message-ID", "")).strip() or final,
            url=final,
            title=subject,
            timestamp=stamp,
            tags=[mail_tag],
        )
        return MailItem(uid=uid, item=item)

    def _fetch(self, conn: imaplib.IMAP4, log: Scribe) -> list[MailItem]:
        typ, data = conn.uid("SEARCH", None, "ALL")
        if typ != "OK":
            raise MailError(f"UID SEARCH command failed: {data}")
        uids: Final[list[bytes]] = data[0].split() if data and data[0] else []
        log.info("UIDs matching the search criteria: %d items", len(uids))

        items: list[MailItem] = []
        for idx, uid in enumerate(uids[:self.cfg.limit]):
            log.info("read item %d/%d", idx+1, len(uids))
            with log.nested() as mlog:
                typ, data = conn.uid("FETCH", uid, "(RFC822)")
                if typ != "OK" or not data or not isinstance(data[0], tuple):
                    mlog.error("Server did not return message body for UID %s", uid.decode())
                    continue
                try:
                    items.append(self.convert(uid, data[0][1], mlog))
                except MailError as err:
                    mlog.error("Error while converting email: %s", err)
        return items

    def _archive(self, conn: imaplib.IMAP4, items: list[MailItem]) -> None:
        if len(items) == 0:
            return
        uids = b",".join(i.uid for i in items)
        typ, data = conn.uid("STORE", uids, "+FLAGS.SILENT", r"(\Deleted)")
        if typ != "OK":
            raise MailError(f"deleting emails: {data}")
        typ, data = conn.expunge()
        if typ != "OK":
            raise MailError(f"expunging emails: {data}")

    def find_new_items(self, consumer: Consumer, log: Optional[Scribe] = None) -> int:
        """Hand the Items found in the mailbox to <consumer>.

        If the consumer returns True, the mails are deleted. Return the
        number of Items found.
        """
        if not self.cfg.enabled:
            return 0
        if log is None:
            log = Scribe(self.log)

        log.info("Read new emails from email server %s", self.cfg.server)
        with log.nested() as mlog:
            conn = self._connect()
            mlog.info("Connected and logged in to email server")
            try:
                typ, data = conn.select("INBOX")
                if typ != "OK":
                    raise MailError(f"Failed to select INBOX: {data}")
                mlog.info("INBOX contains %s messages", data[0].decode())
                if int(data[0]) == 0:
                    return 0

                items = self._fetch(conn, mlog)
                if len(items) == 0:
                    return 0

                if consumer([i.item for i in items]):
                    self._archive(conn, items)
                    mlog.info("Archive %d emails", len(items))
                return len(items)
            except imaplib.IMAP4.error as err:
                raise MailError(f"IMAP error: {err}") from err
            finally:
                try:
                    conn.logout()
                except (OSError, imaplib.IMAP4.error) as err:
                    mlog.debug("Error logging out: %s", err)


# Local Variables: #
# python-indent: 4 #
# End: #
