# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

"""Locating the PostgreSQL executables."""

from __future__ import annotations
from typing import NamedTuple

import logging
import os
import pathlib
import shutil

from pgephemeral import errors
from pgephemeral._internal import _config


logger = logging.getLogger("pgephemeral.server")


class ToolPaths(NamedTuple):
    postgres: pathlib.Path
    initdb: pathlib.Path
    createdb: pathlib.Path
    pg_isready: pathlib.Path


_REQUIRED: tuple[tuple[str, type[errors.ToolNotFoundError]], ...] = (
    ("postgres", errors.PostgresNotFoundError),
    ("initdb", errors.InitDbNotFoundError),
    ("createdb", errors.CreateDbNotFoundError),
    ("pg_isready", errors.PgIsReadyNotFoundError),
)


def which(
    command: str,
    error: type[errors.ToolNotFoundError],
    *,
    bindir: os.PathLike[str] | str | None = None,
) -> pathlib.Path:
    """Return the absolute path of *command*.

    If *bindir* is given, only that directory is searched, otherwise
    ``PATH`` is.  Raises *error* if nothing executable is found.
    """
    search_path = None if bindir is None else os.fspath(bindir)
    path = shutil.which(command, path=search_path)
    if not path:
        raise error(search_path)
    return pathlib.Path(path).absolute()


def find_tools(
    bindir: os.PathLike[str] | str | None = None,
) -> ToolPaths:
    if bindir is None:
        bindir = _config.bindir_from_env()

    found = {
        name: which(name, error, bindir=bindir) for name, error in _REQUIRED
    }
    tools = ToolPaths(**found)
    logger.debug("resolved tools: %s", tools)
    return tools
