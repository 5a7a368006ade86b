# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

from __future__ import annotations

import logging
import socket

from pgephemeral import errors


logger = logging.getLogger("pgephemeral.server")


def reserve_port(host: str = "127.0.0.1") -> int:
    """Return a TCP port on *host* that was unbound a moment ago.

    The address family follows *host*, so both IPv4 and IPv6 addresses
    work.  Nothing holds the port after this returns, so another process
    may grab it before the server binds it.
    """
    try:
        family, _, _, _, addr = socket.getaddrinfo(
            host, 0, type=socket.SOCK_STREAM
        )[0]
        with socket.socket(family, socket.SOCK_STREAM) as sock:
            sock.bind(addr)
            port: int = sock.getsockname()[1]
    except OSError as e:
        raise errors.InstanceIOError(
            f"could not reserve a port on {host}: {e}"
        ) from e

    logger.debug("reserved port %d on %s", port, host)
    return port
