"""IEEE OUI registry: vendor labels for hardware addresses."""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Callable, Iterable

from loguru import logger

from arpsweep.discovery._util import _run_cmd
from arpsweep.discovery.models import CommandResult

OUI_URL = "https://standards-oui.ieee.org/oui/oui.txt"
OUI_CACHE_PATH = Path(os.getenv("ARPSWEEP_OUI_PATH", "/tmp/oui.txt"))
_DOWNLOAD_TIMEOUT = 60

# Registry names shortened to the label hosts are searched by
VENDOR_LABELS: dict[str, str] = {
    "AVM Audiovisuelles Marketing und Computersysteme GmbH": "AVM",
    "Amazon Technologies Inc.": "Amazon",
    "Apple, Inc.": "Apple",
    "Brother Industries, LTD.": "Brother",
    "Cisco Systems, Inc": "Cisco",
    "Espressif Inc.": "Espressif",
    "Google, Inc.": "Google",
    "HP Inc.": "HP",
    "Hewlett Packard": "HP",
    "Intel Corporate": "Intel",
    "Microsoft Corporation": "Microsoft",
    "NETGEAR": "Netgear",
    "Nintendo Co.,Ltd": "Nintendo",
    "Philips Lighting BV": "Philips Hue",
    "REALTEK SEMICONDUCTOR CORP.": "Realtek",
    "Raspberry Pi (Trading) Ltd": "Raspberry Pi",
    "Raspberry Pi Trading Ltd": "Raspberry Pi",
    "Samsung Electronics Co.,Ltd": "Samsung",
    "Sonos, Inc.": "Sonos",
    "Sony Interactive Entertainment Inc.": "Sony",
    "TP-LINK TECHNOLOGIES CO.,LTD.": "TP-Link",
    "Ubiquiti Inc": "Ubiquiti",
}


def vendor_label(vendor: str) -> str:
    return VENDOR_LABELS.get(vendor, vendor)


def _oui_key(mac: str) -> str:
    """First three octets as ``xx:xx:xx``, whatever the separator."""
    return mac.strip().lower().replace("-", ":")[:8]


def parse_oui_lines(lines: Iterable[str]) -> dict[str, str]:
    """Parse ``AA-BB-CC   (hex)   Vendor`` rows of the IEEE registry text."""
    oui_db: dict[str, str] = {}
    for line in lines:
        prefix, sep, vendor = line.partition("(hex)")
        if not sep or not vendor.strip():
            continue
        oui_db[_oui_key(prefix)] = vendor.strip()
    return oui_db


def load_oui_db(
    oui_path: Path = OUI_CACHE_PATH,
    runner: Callable[[list[str], int], CommandResult] = _run_cmd,
) -> dict[str, str]:
    """Load the OUI registry from ``oui_path``, downloading it first if absent.

    A failed download or unreadable file yields an empty database, so every
    lookup reports an unknown vendor instead of failing the sweep.
    """
    if not oui_path.exists():
        logger.info(f"Downloading OUI database to {oui_path}...")
        result = runner(["curl", "-fsSL", "-o", str(oui_path), OUI_URL], _DOWNLOAD_TIMEOUT)
        if result.returncode != 0:
            logger.warning(f"Failed to download OUI database (exit {result.returncode}): {result.stderr.strip()}")
            return {}

    try:
        with open(oui_path, encoding="utf-8", errors="replace") as f:
            return parse_oui_lines(f)
    except OSError as e:
        logger.warning(f"Could not read OUI database {oui_path}: {e}")
        return {}


def lookup_vendor(mac: str, oui_db: dict[str, str]) -> str | None:
    """Vendor label for ``mac``, or None if its prefix is not registered."""
    vendor = oui_db.get(_oui_key(mac))
    return vendor_label(vendor) if vendor else None


class OuiVendorLookup:
    """Callable ``mac -> vendor label | None`` backed by the IEEE OUI database.

    The database is loaded on first use and kept for the lifetime of the object.
    """

    def __init__(self, oui_path: Path = OUI_CACHE_PATH, runner: Callable[[list[str], int], CommandResult] = _run_cmd):
        self.oui_path = oui_path
        self.runner = runner
        self._db: dict[str, str] | None = None
        self._lock = threading.Lock()

    @property
    def db(self) -> dict[str, str]:
        with self._lock:
            if self._db is None:
                self._db = load_oui_db(self.oui_path, self.runner)
                logger.debug(f"Loaded {len(self._db)} OUI prefixes from {self.oui_path}")
            return self._db

    def __call__(self, mac: str) -> str | None:
        return lookup_vendor(mac, self.db)
