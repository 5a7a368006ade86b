# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

"""Environment-driven defaults."""

from __future__ import annotations
from typing import TYPE_CHECKING

import os
import pathlib

if TYPE_CHECKING:
    from collections.abc import Mapping


BINDIR_ENV = "PGEPHEMERAL_BINDIR"
TEMP_ROOT_ENV = "PGEPHEMERAL_TEMP_ROOT"
DEBUG_SERVER_ENV = "PGEPHEMERAL_DEBUG_SERVER"


def _truthy(val: str) -> bool:
    return val.strip().lower() in {
        "1",
        "true",
        "t",
        "yes",
        "y",
    }


def debug_server_enabled() -> bool:
    return _truthy(os.environ.get(DEBUG_SERVER_ENV, ""))


def _path_from_env(var: str) -> pathlib.Path | None:
    if path := os.environ.get(var):
        return pathlib.Path(path)
    return None


def bindir_from_env() -> pathlib.Path | None:
    return _path_from_env(BINDIR_ENV)


def temp_root_from_env() -> pathlib.Path | None:
    return _path_from_env(TEMP_ROOT_ENV)


def tool_env(env: Mapping[str, str] | None = None, /) -> dict[str, str]:
    # Python-specific variables of the test process must not leak into
    # the server or tools (e.g. PYTHONPATH for plpython).
    res = {k: v for k, v in os.environ.items() if not k.startswith("PYTHON")}
    if env is not None:
        res |= env
    return res
