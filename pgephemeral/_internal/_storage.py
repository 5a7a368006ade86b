# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

"""Per-instance storage roots."""

from __future__ import annotations
from typing import TYPE_CHECKING

import dataclasses
import logging
import pathlib
import shutil
import tempfile

from pgephemeral import errors
from pgephemeral._internal import _config

if TYPE_CHECKING:
    import os


logger = logging.getLogger("pgephemeral.server")

_PREFIX = "pgephemeral-"


@dataclasses.dataclass(frozen=True)
class StorageRoot:
    """A unique directory holding one instance's cluster and sockets."""

    path: pathlib.Path

    @property
    def data_dir(self) -> pathlib.Path:
        return self.path / "data"

    @property
    def tmp_dir(self) -> pathlib.Path:
        return self.path / "tmp"

    @classmethod
    def create(
        cls,
        temp_root: os.PathLike[str] | str | None = None,
    ) -> StorageRoot:
        if temp_root is None:
            temp_root = _config.temp_root_from_env()

        try:
            path = pathlib.Path(tempfile.mkdtemp(prefix=_PREFIX, dir=temp_root))
        except OSError as e:
            raise errors.InstanceIOError(
                f"could not create storage root: {e}"
            ) from e

        root = cls(path)
        try:
            root.data_dir.mkdir()
            root.tmp_dir.mkdir()
        except OSError as e:
            shutil.rmtree(path, ignore_errors=True)
            raise errors.InstanceIOError(
                f"could not create storage directories in {path}: {e}"
            ) from e

        logger.debug("created storage root %s", path)
        return root

    def remove(self) -> None:
        try:
            shutil.rmtree(self.path)
        except OSError as e:
            raise errors.TeardownError(
                f"could not delete storage root {self.path}: {e}"
            ) from e
        logger.debug("removed storage root %s", self.path)
