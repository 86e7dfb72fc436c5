"""Console entry point: startup banner, then the discovery CLI.

Examples:
  arpsweep discover
  arpsweep discover --ref 192.168.1.10 --format json
  arpsweep ip 192.168.1.20 192.168.1.30
  arpsweep mac b8:27:eb
  arpsweep type "Raspberry Pi"
"""

from __future__ import annotations

import os
import platform
import sys

from tabulate import tabulate

from arpsweep import __version__, configure_logging
from arpsweep import glogger
from arpsweep.discovery import cli


def _print_startup_banner() -> None:
    startup_rows = [
        ["version", __version__],
        ["platform", platform.system()],
        ["python", platform.python_version()],
    ]

    for var in ("ARPSWEEP_TIMEOUT", "ARPSWEEP_INCLUDE_ENDPOINTS", "ARPSWEEP_USE_CACHE", "ARPSWEEP_CACHE_TTL"):
        val = os.environ.get(var)
        if val:
            startup_rows.append([var, val])

    table_str = tabulate(startup_rows, tablefmt="mixed_grid")
    lines = table_str.split("\n")
    table_width = len(lines[0])
    title = "arpsweep starting up"
    title_border = "┍" + "━" * (table_width - 2) + "┑"
    title_row = "│ " + title.center(table_width - 4) + " │"
    separator = lines[0].replace("┍", "┝").replace("┑", "┥").replace("┯", "┿")

    glogger.opt(raw=True).info(
        "\n{}\n", title_border + "\n" + title_row + "\n" + separator + "\n" + "\n".join(lines[1:])
    )


def main() -> None:
    """Main entry point."""
    configure_logging()
    _print_startup_banner()
    cli.main(sys.argv[1:])


if __name__ == "__main__":
    main()
