# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

import unittest

import pgephemeral
from pgephemeral import errors


class TestErrors(unittest.TestCase):
    def test_hierarchy(self) -> None:
        for name in errors.__all__:
            with self.subTest(name=name):
                cls = getattr(errors, name)
                self.assertTrue(issubclass(cls, errors.InstanceError))
                self.assertIs(getattr(pgephemeral, name), cls)

        self.assertTrue(
            issubclass(errors.ServerSpawnError, errors.InstanceIOError)
        )

    def test_tool_not_found(self) -> None:
        e = errors.CreateDbNotFoundError()
        self.assertEqual(e.tool, "createdb")
        self.assertIsNone(e.search_path)
        self.assertEqual(str(e), "could not find `createdb` command in PATH")

    def test_tool_failed(self) -> None:
        e = errors.InitDbFailedError(1, "initdb: error: bad locale\n")
        self.assertEqual(e.returncode, 1)
        self.assertEqual(
            str(e), "initdb failed with exit code 1:\ninitdb: error: bad locale"
        )

        e = errors.PostgresFailedError(-9)
        self.assertEqual(str(e), "postgres failed with exit code -9")
        self.assertEqual(e.output, "")

    def test_timeout(self) -> None:
        e = errors.ReadinessTimeoutError(2.5)
        self.assertEqual(e.timeout, 2.5)
        self.assertIn("2.5 seconds", str(e))
