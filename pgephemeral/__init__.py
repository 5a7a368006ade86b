# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

"""Throwaway PostgreSQL servers for test suites."""

from ._version import __version__

from .errors import (
    CreateDbFailedError,
    CreateDbNotFoundError,
    InitDbFailedError,
    InitDbNotFoundError,
    InstanceError,
    InstanceIOError,
    PgIsReadyNotFoundError,
    PostgresFailedError,
    PostgresNotFoundError,
    ReadinessTimeoutError,
    ServerSpawnError,
    TeardownError,
    ToolFailedError,
    ToolNotFoundError,
)
from ._internal._server import (
    TempInstance,
    TestInstance,
    start_instance,
    temp_instance,
)
from ._internal._tools import ToolPaths, find_tools

__all__ = [
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
    "TempInstance",
    "TestInstance",
    "ToolFailedError",
    "ToolNotFoundError",
    "ToolPaths",
    "__version__",
    "find_tools",
    "start_instance",
    "temp_instance",
]
