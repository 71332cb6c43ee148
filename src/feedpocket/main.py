#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# Time-stamp: <2026-10-18 22:31:47 krylon>
#
# /data/code/python/feedpocket/src/feedpocket/main.py
# created on 03. 10. 2026
# (c) 2026 Benjamin Walkenhorst
#
# This file is part of the feedpocket bookmark feeder. It is distributed under the
# terms of the GNU General Public License 3. See the file LICENSE for details
# or find a copy online at https://www.gnu.org/licenses/gpl-3.0

"""
feedpocket.main

(c) 2026 Benjamin Walkenhorst
"""


import argparse
import logging
import sys
from typing import NoReturn, Optional

from feedpocket import common, config
from feedpocket.common import FeedPocketError
from feedpocket.engine import Engine
from feedpocket.model import Summary


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def report(lg: logging.Logger, summary: Summary) -> None:
    """Log the summary of a run."""
    lg.info("Summary:")
    lg.info("    Total %d feed sources (error=%d)", summary.sources, summary.sources_failed)
    lg.info("    Total %d new items (delivered=%d, error=%d)",
            summary.items,
            summary.delivered,
            summary.failed)
    if summary.mails > 0:
        lg.info("    Total %d items from email", summary.mails)


def main(argv: Optional[list[str]] = None) -> None:
    """Run the feedpocket application."""
    argp: ArgumentParser = ArgumentParser(
        prog=common.AppName,
        description="Add new items from RSS/Atom feeds to Pocket")
    argp.add_argument("-v", "--version",
                      action="version",
                      version=f"{common.AppName}-{common.AppVersion}")
    argp.add_argument("--verbose",
                      action="store_true",
                      help="Verbose output")
    argp.add_argument("--dry-run",
                      action="store_true",
                      help="Find new items, but do not add them to Pocket")
    argp.add_argument("-c", "--config",
                      required=True,
                      help="The configuration file")

    args = argp.parse_args(argv)

    common.set_verbose(args.verbose)
    lg: logging.Logger = common.get_logger("main")
    lg.info("%s-%s", common.AppName, common.AppVersion)
    lg.debug("%s", sys.argv if argv is None else argv)

    try:
        cfg = config.load(args.config)
        eng: Engine = Engine(cfg, args.dry_run)
        summary: Summary = eng.run()
    except FeedPocketError as err:
        if args.verbose:
            lg.exception("Fatal error: %s", err)
        else:
            lg.error("%s", err)
        sys.exit(1)

    report(lg, summary)


if __name__ == '__main__':
    main()


# Local Variables: #
# python-indent: 4 #
# End: #
