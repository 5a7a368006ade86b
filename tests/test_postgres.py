# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

"""Tests against a real PostgreSQL installation."""

from __future__ import annotations

import subprocess
import unittest

import pgephemeral
from pgephemeral import testbase


def _psql_value(instance: pgephemeral.TempInstance, query: str) -> str:
    psql = pgephemeral.find_tools().postgres.parent / "psql"
    args = instance.get_connect_args()
    proc = subprocess.run(
        [
            str(psql),
            "-X",
            "-A",
            "-t",
            "-h",
            args["host"],
            "-p",
            str(args["port"]),
            "-U",
            args["user"],
            "-d",
            args["database"],
            "-c",
            query,
        ],
        capture_output=True,
        text=True,
        check=True,
    )
    return proc.stdout.strip()


@testbase.requires_postgres
class TestRealServer(testbase.InstanceTestCase):
    def test_ready(self) -> None:
        tools = pgephemeral.find_tools()
        proc = subprocess.run(
            [
                str(tools.pg_isready),
                "-h",
                "127.0.0.1",
                "-p",
                str(self.instance.port),
                "-U",
                "postgres",
            ],
            check=False,
            capture_output=True,
        )
        self.assertEqual(proc.returncode, 0)

    def test_database_and_settings(self) -> None:
        psql = pgephemeral.find_tools().postgres.parent / "psql"
        if not psql.exists():
            self.skipTest("psql is not installed next to postgres")

        self.assertEqual(
            _psql_value(self.instance, "SELECT current_database()"), "test"
        )
        self.assertEqual(_psql_value(self.instance, "SHOW fsync"), "off")


@testbase.requires_postgres
class TestRealLifecycle(unittest.TestCase):
    def test_destroy_removes_everything(self) -> None:
        instance = pgephemeral.start_instance()
        data_dir = instance.get_data_dir()
        assert data_dir is not None
        process = instance._process
        assert process is not None

        instance.destroy()

        self.assertIsNotNone(process.returncode)
        self.assertFalse(data_dir.parent.exists())

    def test_two_instances(self) -> None:
        with (
            pgephemeral.temp_instance() as a,
            pgephemeral.temp_instance() as b,
        ):
            self.assertNotEqual(a.port, b.port)
            self.assertNotEqual(a.get_data_dir(), b.get_data_dir())
