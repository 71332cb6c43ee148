#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-16 17:55:02 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/config.py
# created on 04. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.config

(c) 2026 Benjamin Walkenhorst

Loading the configuration file. The configuration is written in TOML and
mapped onto a handful of dataclasses.
"""


import os
import tomllib
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Final, Optional, Union

from feedpocket.common import FeedPocketError
from feedpocket.model import Source, epoch

default_endpoint: Final[str] = "https://getpocket.com/v3/send"
default_batch: Final[int] = 20
default_mail_limit: Final[int] = 30


class ConfigError(FeedPocketError):
    """ConfigError indicates a missing or invalid configuration file."""


@dataclass(kw_only=True, slots=True, frozen=True)
class HttpServerConfig:
    """Settings for the content server."""

    listen: str = "localhost:8484"
    base_url: str = ""
    random_url: bool = False
    pickup_timeout: float = 0  # 0 means wait forever
    shutdown_timeout: float = 10


@dataclass(kw_only=True, slots=True, frozen=True)
class PocketConfig:
    """Credentials and settings for the Pocket API."""

    consumer_key: str
    access_token: str
    batch: int = default_batch
    endpoint: str = default_endpoint
    timeout: float = 30


@dataclass(kw_only=True, slots=True, frozen=True)
class MailConfig:
    """Settings for the IMAP mailbox that receives IFTTT notifications."""

    server: str = ""
    username: str = ""
    app_password: str = ""
    limit: int = default_mail_limit

    @property
    def enabled(self) -> bool:
        """Return True if a mail server is configured."""
        return self.server != ""


@dataclass(kw_only=True, slots=True, frozen=True)
class Config:
    """Config is the complete configuration of one run."""

    data_dir: Path
    http_server: HttpServerConfig = field(default_factory=HttpServerConfig)
    pocket: PocketConfig
    start_date: datetime = epoch
    fetch_timeout: float = 30
    source_map: dict[str, Source] = field(default_factory=dict)
    email: MailConfig = field(default_factory=MailConfig)

    def sources(self) -> list[Source]:
        """Return all Sources, sorted by their ID."""
        return [self.source_map[k] for k in sorted(self.source_map)]


def _table(raw: dict[str, Any], key: str) -> dict[str, Any]:
    val = raw.get(key, {})
    if not isinstance(val, dict):
        raise ConfigError(f"[{key}] must be a table, not a {val.__class__.__name__}")
    return val


def _value(tbl: dict[str, Any], key: str, kind: Union[type, tuple[type, ...]],
           default: Any = None, where: str = "") -> Any:
    """Fetch a value from a table, checking its type."""
    if key not in tbl:
        if default is None:
            raise ConfigError(f"Missing required setting {where}{key}")
        return default
    val = tbl[key]
    # bool is a subclass of int, but we do not want to accept it where a number is expected.
    if isinstance(val, bool) and kind is not bool:
        raise ConfigError(f"Setting {where}{key} must not be a boolean")
    if not isinstance(val, kind):
        raise ConfigError(f"Setting {where}{key} has the wrong type ({val.__class__.__name__})")
    return val


def as_utc(stamp: Union[datetime, date, time, None], where: str = "") -> Optional[datetime]:
    """Turn a TOML date or datetime into a timezone-aware datetime."""
    match stamp:
        case None:
            return None
        case datetime() as dt if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        case datetime() as dt:
            return dt
        case date() as d:
            return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)
        case _:
            raise ConfigError(f"{where}start_date must be a date or datetime, not {stamp!r}")


def parse(raw: dict[str, Any]) -> Config:
    """Build a Config from the contents of a TOML document."""
    main = _table(raw, "main")
    srv = _table(main, "http_server")
    pocket = _table(raw, "pocket")
    rss = _table(raw, "rss")
    mail = _table(raw, "email")

    data_dir = _value(main, "data_dir", str, ".", "main.")
    start_date = as_utc(rss.get("start_date"), "rss.") or epoch

    sources: dict[str, Source] = {}
    for sid, tbl in _table(rss, "sources").items():
        where = f"rss.sources.{sid}."
        if not isinstance(tbl, dict):
            raise ConfigError(f"{where[:-1]} must be a table")
        sources[sid] = Source(
            sid=sid,
            name=_value(tbl, "name", str, "", where),
            url=_value(tbl, "url", str, where=where),
            start_date=as_utc(tbl.get("start_date"), where) or start_date,
            use_server=_value(tbl, "use_server", bool, False, where),
        )

    cfg = Config(
        data_dir=Path(os.path.expanduser(data_dir)).absolute(),
        http_server=HttpServerConfig(
            listen=_value(srv, "listen", str, "localhost:8484", "main.http_server."),
            base_url=_value(srv, "base_url", str, "", "main.http_server."),
            random_url=_value(srv, "random_url", bool, False, "main.http_server."),
            pickup_timeout=_value(srv, "pickup_timeout", (int, float), 0, "main.http_server."),
            shutdown_timeout=_value(srv, "shutdown_timeout", (int, float), 10,
                                    "main.http_server."),
        ),
        pocket=PocketConfig(
            consumer_key=_value(pocket, "consumer_key", str, where="pocket."),
            access_token=_value(pocket, "access_token", str, where="pocket."),
            batch=_value(pocket, "batch", int, default_batch, "pocket."),
            endpoint=_value(pocket, "endpoint", str, default_endpoint, "pocket."),
            timeout=_value(pocket, "timeout", (int, float), 30, "pocket."),
        ),
        start_date=start_date,
        fetch_timeout=_value(rss, "timeout", (int, float), 30, "rss."),
        source_map=sources,
        email=MailConfig(
            server=_value(mail, "server", str, "", "email."),
            username=_value(mail, "username", str, "", "email."),
            app_password=_value(mail, "app_password", str, "", "email."),
            limit=_value(mail, "limit", int, default_mail_limit, "email."),
        ),
    )

    return cfg


def load(path: Union[str, Path]) -> Config:
    """Read and parse the configuration file at <path>."""
    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except OSError as err:
        raise ConfigError(f"Cannot read config file {path}: {err}") from err
    except tomllib.TOMLDecodeError as err:
        raise ConfigError(f"Cannot parse config file {path}: {err}") from err

    return parse(raw)


# Local Variables: #
# python-indent: 4 #
# End: #
