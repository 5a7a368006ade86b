# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

from __future__ import annotations
from typing import IO, TYPE_CHECKING, Any, Optional
from typing_extensions import Self

import contextlib
import enum
import logging
import os
import pathlib
import subprocess
import time

from pgephemeral import errors
from pgephemeral._internal import _config
from pgephemeral._internal import _ports
from pgephemeral._internal import _storage
from pgephemeral._internal import _tools

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence
    from types import TracebackType


logger = logging.getLogger("pgephemeral.server")


DEFAULT_HOST = "127.0.0.1"
DEFAULT_SUPERUSER = "postgres"
DEFAULT_DATABASE = "test"
DEFAULT_POLL_INTERVAL = 0.5


class _State(enum.Enum):
    NEW = enum.auto()
    RUNNING = enum.auto()
    DESTROYED = enum.auto()


class TempInstance:
    """A throwaway PostgreSQL server with its own port and data directory.

    Nothing is allocated until :meth:`start` is called.  ``start()`` either
    leaves a ready server with a freshly created database, or raises an
    :class:`~pgephemeral.errors.InstanceError` after undoing whatever it
    had done.  :meth:`destroy` kills the server, waits for it and removes
    its storage; using the instance as a context manager does both.

    Server output is discarded unless *server_output* says otherwise.  The
    output of a ``subprocess.PIPE`` is only read when the server exits
    before it is ready, so a server that keeps logging to a pipe blocks
    once the pipe is full.  Use ``PIPE`` for short runs only and a file
    for anything else.
    """

    def __init__(
        self,
        *,
        bindir: os.PathLike[str] | str | None = None,
        temp_root: os.PathLike[str] | str | None = None,
        host: str = DEFAULT_HOST,
        superuser: str = DEFAULT_SUPERUSER,
        database: str = DEFAULT_DATABASE,
        server_settings: Optional[Mapping[str, str]] = None,
        initdb_options: Sequence[str] = (),
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: Optional[float] = None,
        kill_timeout: float = 60.0,
        server_output: int | IO[Any] | None = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        if poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        if timeout is not None and timeout < 0:
            raise ValueError("timeout must not be negative")

        self._bindir = bindir
        self._temp_root = temp_root
        self._host = host
        self._superuser = superuser
        self._database = database
        self._server_settings = dict(server_settings or {})
        self._initdb_options = list(initdb_options)
        self._poll_interval = poll_interval
        self._timeout = timeout
        self._kill_timeout = kill_timeout
        self._server_output = server_output
        self._extra_env = dict(env) if env is not None else None
        self._env: dict[str, str] = {}

        self._storage: _storage.StorageRoot | None = None
        self._process: subprocess.Popen[str] | None = None
        self._port: int | None = None
        self._state = _State.NEW

    @property
    def port(self) -> int:
        if self._port is None or self._state is not _State.RUNNING:
            raise errors.InstanceError("instance is not running")
        return self._port

    def running(self) -> bool:
        return (
            self._state is _State.RUNNING
            and self._process is not None
            and self._process.poll() is None
        )

    def get_data_dir(self) -> pathlib.Path | None:
        if self._storage is None:
            return None
        return self._storage.data_dir

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "host": self._host,
            "port": self.port,
            "user": self._superuser,
            "database": self._database,
        }

    def get_dsn(self) -> str:
        args = self.get_connect_args()
        return (
            f"postgresql://{args['user']}@{args['host']}:{args['port']}"
            f"/{args['database']}"
        )

    def start(self) -> None:
        if self._state is _State.RUNNING:
            raise errors.InstanceError("instance is already running")
        if self._state is _State.DESTROYED:
            raise errors.InstanceError("instance has been destroyed")

        if self._has_leftovers():
            # A previous attempt could not be rolled back completely.
            self._teardown()

        tools = _tools.find_tools(self._bindir)
        self._env = _config.tool_env(self._extra_env)

        try:
            storage = _storage.StorageRoot.create(self._temp_root)
            self._storage = storage
            port = _ports.reserve_port(self._host)
            self._initdb(tools, storage)
            process = self._spawn(tools, storage, port)
            self._process = process
            self._wait_for_server(tools, process, port)
            self._createdb(tools, port)
        except BaseException as e:
            try:
                self._teardown()
            except errors.TeardownError as te:
                raise te from e
            raise

        self._port = port
        self._state = _State.RUNNING
        logger.debug(
            "postgres (pid %d) is ready on %s:%d", process.pid, self._host, port
        )

    def stop(self) -> None:
        """Kill the server and wait for it to exit; keep the storage."""
        process = self._process
        if process is not None:
            self._kill(process)
            self._process = None

    def destroy(self) -> None:
        if self._state is _State.DESTROYED and not self._has_leftovers():
            return
        self._state = _State.DESTROYED
        self._teardown()

    def _has_leftovers(self) -> bool:
        return self._process is not None or self._storage is not None

    def _teardown(self) -> None:
        # The storage must outlive the process: if the process cannot be
        # reaped, stop() raises and both stay recorded for the next try.
        self.stop()
        storage, self._storage = self._storage, None
        if storage is not None:
            storage.remove()
        self._port = None

    def _kill(self, process: subprocess.Popen[str]) -> None:
        logger.debug("killing postgres (pid %d)", process.pid)
        try:
            process.kill()
            process.wait(self._kill_timeout)
        except subprocess.TimeoutExpired as e:
            raise errors.TeardownError(
                f"postgres (pid {process.pid}) did not exit within "
                f"{self._kill_timeout} seconds after being killed"
            ) from e
        except OSError as e:
            raise errors.TeardownError(
                f"could not kill postgres (pid {process.pid}): {e}"
            ) from e
        finally:
            if process.stdout is not None:
                process.stdout.close()

    def _run_tool(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        logger.debug("running %s", " ".join(args))
        try:
            return subprocess.run(
                args,
                env=self._env,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise errors.InstanceIOError(
                f"could not execute {args[0]}: {e}"
            ) from e

    def _initdb(
        self,
        tools: _tools.ToolPaths,
        storage: _storage.StorageRoot,
    ) -> None:
        proc = self._run_tool(
            [
                str(tools.initdb),
                "-D",
                str(storage.data_dir),
                "--lc-messages=C",
                "-U",
                self._superuser,
                "-A",
                "trust",
                *self._initdb_options,
            ]
        )
        if proc.returncode != 0:
            raise errors.InitDbFailedError(
                proc.returncode, proc.stdout + proc.stderr
            )

    def _server_args(
        self,
        tools: _tools.ToolPaths,
        storage: _storage.StorageRoot,
        port: int,
    ) -> list[str]:
        args = [
            str(tools.postgres),
            "-p",
            str(port),
            "-D",
            str(storage.data_dir),
            "-k",
            str(storage.tmp_dir),
            "-h",
            self._host,
            "-F",
            "-c",
            "logging_collector=off",
        ]
        for name, value in self._server_settings.items():
            args.extend(["-c", f"{name}={value}"])
        return args

    def _spawn(
        self,
        tools: _tools.ToolPaths,
        storage: _storage.StorageRoot,
        port: int,
    ) -> subprocess.Popen[str]:
        args = self._server_args(tools, storage, port)

        output = self._server_output
        if output is None and not _config.debug_server_enabled():
            output = subprocess.DEVNULL

        logger.debug("running %s", " ".join(args))
        try:
            return subprocess.Popen(
                args,
                env=self._env,
                stdin=subprocess.DEVNULL,
                stdout=output,
                stderr=None if output is None else subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise errors.ServerSpawnError(
                f"could not spawn {tools.postgres}: {e}"
            ) from e

    def _wait_for_server(
        self,
        tools: _tools.ToolPaths,
        process: subprocess.Popen[str],
        port: int,
    ) -> None:
        probe = [
            str(tools.pg_isready),
            "-p",
            str(port),
            "-h",
            self._host,
            "-U",
            self._superuser,
        ]
        started = time.monotonic()
        while True:
            returncode = process.poll()
            if returncode is not None:
                output = ""
                if process.stdout is not None:
                    output = process.stdout.read()
                raise errors.PostgresFailedError(returncode, output)

            if self._run_tool(probe).returncode == 0:
                return

            if (
                self._timeout is not None
                and time.monotonic() - started >= self._timeout
            ):
                raise errors.ReadinessTimeoutError(self._timeout)

            time.sleep(self._poll_interval)

    def _createdb(self, tools: _tools.ToolPaths, port: int) -> None:
        proc = self._run_tool(
            [
                str(tools.createdb),
                "-p",
                str(port),
                "-h",
                self._host,
                "-U",
                self._superuser,
                self._database,
            ]
        )
        if proc.returncode != 0:
            raise errors.CreateDbFailedError(
                proc.returncode, proc.stdout + proc.stderr
            )

    def __enter__(self) -> Self:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.destroy()

    def __del__(self) -> None:
        if getattr(self, "_state", None) is None:
            return
        if self._state is _State.DESTROYED and not self._has_leftovers():
            return
        try:
            self.destroy()
        except errors.TeardownError:
            logger.exception("could not destroy %r", self)

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} port={self._port} "
            f"data_dir={self.get_data_dir()}>"
        )


class TestInstance(TempInstance):
    """A :class:`TempInstance` that trades durability for speed."""

    __test__ = False

    default_server_settings: Mapping[str, str] = {
        "fsync": "off",
        "synchronous_commit": "off",
        "full_page_writes": "off",
    }

    def __init__(
        self,
        *,
        server_settings: Optional[Mapping[str, str]] = None,
        initdb_options: Sequence[str] = ("--no-sync",),
        **kwargs: Any,
    ) -> None:
        settings = dict(self.default_server_settings)
        if server_settings is not None:
            settings |= server_settings

        super().__init__(
            server_settings=settings,
            initdb_options=initdb_options,
            **kwargs,
        )


def start_instance(**kwargs: Any) -> TempInstance:
    """Start a :class:`TempInstance` built from *kwargs* and return it.

    The caller owns the result and must call ``destroy()`` on it.
    """
    instance = TempInstance(**kwargs)
    instance.start()
    return instance


@contextlib.contextmanager
def temp_instance(**kwargs: Any) -> Iterator[TempInstance]:
    with TempInstance(**kwargs) as instance:
        yield instance
