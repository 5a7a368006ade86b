# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.


from ._base import (
    InstanceTestCase,
    postgres_available,
    requires_postgres,
)


__all__ = (
    "InstanceTestCase",
    "postgres_available",
    "requires_postgres",
)
