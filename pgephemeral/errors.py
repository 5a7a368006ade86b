# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

"""Exceptions raised while starting or destroying an ephemeral instance.

Every error derives from :class:`InstanceError`, so callers that only care
whether an instance came up can catch that.  The subclasses identify the
stage that failed:

* :class:`ToolNotFoundError` and its per-tool subclasses are raised before
  anything is allocated;
* :class:`InitDbFailedError`, :class:`PostgresFailedError`,
  :class:`ReadinessTimeoutError` and :class:`CreateDbFailedError` are raised
  by the bootstrap stages, in that order;
* :class:`InstanceIOError` wraps operating system failures;
* :class:`TeardownError` is raised when an instance cannot be destroyed.
"""

from __future__ import annotations
from typing import ClassVar


__all__ = (
    "CreateDbFailedError",
    "CreateDbNotFoundError",
    "InitDbFailedError",
    "InitDbNotFoundError",
    "InstanceError",
    "InstanceIOError",
    "PgIsReadyNotFoundError",
    "PostgresFailedError",
    "PostgresNotFoundError",
    "ReadinessTimeoutError",
    "ServerSpawnError",
    "TeardownError",
    "ToolFailedError",
    "ToolNotFoundError",
)


class InstanceError(Exception):
    pass


class ToolNotFoundError(InstanceError):
    tool: ClassVar[str] = ""

    def __init__(self, search_path: str | None = None) -> None:
        where = "PATH" if search_path is None else search_path
        super().__init__(f"could not find `{self.tool}` command in {where}")
        self.search_path = search_path


class PostgresNotFoundError(ToolNotFoundError):
    tool = "postgres"


class InitDbNotFoundError(ToolNotFoundError):
    tool = "initdb"


class CreateDbNotFoundError(ToolNotFoundError):
    tool = "createdb"


class PgIsReadyNotFoundError(ToolNotFoundError):
    tool = "pg_isready"


class ToolFailedError(InstanceError):
    """A bootstrap tool exited with a non-zero status."""

    tool: ClassVar[str] = ""

    def __init__(self, returncode: int | None, output: str = "") -> None:
        msg = f"{self.tool} failed"
        if returncode is not None:
            msg += f" with exit code {returncode}"
        if output.strip():
            msg += f":\n{output.rstrip()}"
        super().__init__(msg)
        self.returncode = returncode
        self.output = output


class InitDbFailedError(ToolFailedError):
    tool = "initdb"


class CreateDbFailedError(ToolFailedError):
    tool = "createdb"


class PostgresFailedError(ToolFailedError):
    """The server process exited before it became ready.

    This is also how losing the race for the reserved port shows up.
    """

    tool = "postgres"


class ReadinessTimeoutError(InstanceError):
    def __init__(self, timeout: float) -> None:
        super().__init__(
            f"postgres did not become ready within {timeout} seconds"
        )
        self.timeout = timeout


class InstanceIOError(InstanceError):
    """An operating system call failed; the ``OSError`` is the cause."""


class ServerSpawnError(InstanceIOError):
    pass


class TeardownError(InstanceError):
    pass
