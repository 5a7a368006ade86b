# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

from __future__ import annotations
from typing import TYPE_CHECKING, Any, ClassVar

import os
import unittest

from pgephemeral import errors
from pgephemeral._internal import _server
from pgephemeral._internal import _tools

if TYPE_CHECKING:
    from collections.abc import Mapping


def postgres_available() -> bool:
    """Whether a real server can be started by this process."""
    # postgres refuses to run with root privileges
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        return False
    try:
        _tools.find_tools()
    except errors.ToolNotFoundError:
        return False
    return True


requires_postgres = unittest.skipUnless(
    postgres_available(),
    "needs PostgreSQL tools in PATH and a non-root user",
)


class InstanceTestCase(unittest.TestCase):
    """Test case sharing one ephemeral instance across its tests.

    The instance is started in ``setUpClass`` and destroyed by a class
    cleanup, so it goes away even when a later ``setUpClass`` step fails.
    """

    INSTANCE_CLASS: ClassVar[type[_server.TempInstance]] = (
        _server.TestInstance
    )
    INSTANCE_OPTIONS: ClassVar[Mapping[str, Any]] = {}

    instance: ClassVar[_server.TempInstance]

    @classmethod
    def get_instance_options(cls) -> dict[str, Any]:
        return dict(cls.INSTANCE_OPTIONS)

    @classmethod
    def setUpClass(cls) -> None:
        super().setUpClass()
        instance = cls.INSTANCE_CLASS(**cls.get_instance_options())
        instance.start()
        cls.addClassCleanup(instance.destroy)
        cls.instance = instance
