# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.
#
# ruff: noqa: T201

from __future__ import annotations
from typing import TYPE_CHECKING, Any

import argparse
import logging
import signal
import sys
import time

from pgephemeral import errors
from pgephemeral._internal import _server

if TYPE_CHECKING:
    from collections.abc import Sequence


def _setting(value: str) -> tuple[str, str]:
    name, sep, val = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(
            f"expected name=value, got {value!r}"
        )
    return name, val


parser = argparse.ArgumentParser(
    prog="python -m pgephemeral",
    description="Start a throwaway PostgreSQL server and print its DSN. "
    "The server and its data are removed on Ctrl-C or SIGTERM.",
)
parser.add_argument(
    "--bindir",
    metavar="DIR",
    help="Directory containing postgres, initdb, createdb and pg_isready "
    "(default: $PGEPHEMERAL_BINDIR, then PATH).",
)
parser.add_argument("-d", "--database", default=_server.DEFAULT_DATABASE)
parser.add_argument("-U", "--superuser", default=_server.DEFAULT_SUPERUSER)
parser.add_argument(
    "--timeout",
    type=float,
    metavar="SECONDS",
    help="Give up if the server is not ready in time (default: wait forever).",
)
parser.add_argument(
    "-c",
    dest="settings",
    action="append",
    type=_setting,
    default=[],
    metavar="NAME=VALUE",
    help="Server setting, may be repeated.",
)
parser.add_argument(
    "--fast",
    action="store_true",
    help="Disable fsync and friends, as the test base does.",
)
parser.add_argument("-v", "--verbose", action="store_true")


def _raise_interrupt(signum: int, frame: Any) -> None:
    raise KeyboardInterrupt


def main(argv: Sequence[str] | None = None) -> int:
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    cls = _server.TestInstance if args.fast else _server.TempInstance
    instance = cls(
        bindir=args.bindir,
        database=args.database,
        superuser=args.superuser,
        timeout=args.timeout,
        server_settings=dict(args.settings),
    )

    # Installed before start() so that an interrupted bootstrap is
    # rolled back too.
    previous_handler = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        instance.start()
        print(instance.get_dsn(), flush=True)
        while instance.running():
            time.sleep(1)
        print("error: postgres exited unexpectedly", file=sys.stderr)
        return 1
    except errors.InstanceError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    finally:
        signal.signal(signal.SIGTERM, previous_handler)
        instance.destroy()
