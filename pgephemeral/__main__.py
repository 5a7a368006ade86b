# SPDX-PackageName: pgephemeral
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the pgephemeral contributors.

import sys

from pgephemeral.cli import main


if __name__ == "__main__":
    sys.exit(main())
