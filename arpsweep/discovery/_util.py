"""Shared helper functions for host discovery."""

from __future__ import annotations

import ipaddress
import re
import subprocess

from loguru import logger

from arpsweep.discovery.models import CommandResult

_MAC_SPLIT_RE = re.compile(r"[:-]")
_HEX_OCTET_RE = re.compile(r"^[0-9a-f]{1,2}$")


def _run_cmd(cmd: list[str], timeout: int = 30) -> CommandResult:
    """Run a subprocess command and return its exit code and output.

    Timeouts and missing executables are reported as a non-zero return code
    so callers can fold them into their failure partitions.
    """
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        return CommandResult(returncode=result.returncode, stdout=result.stdout, stderr=result.stderr)
    except subprocess.TimeoutExpired as e:
        logger.debug(f"Command {cmd[0]} timed out after {timeout}s")
        return CommandResult(returncode=-1, stderr=str(e))
    except FileNotFoundError as e:
        logger.debug(f"Command {cmd[0]} failed: {e}")
        return CommandResult(returncode=127, stderr=str(e))


def _validate_ip(ip: str) -> bool:
    """Validate IPv4 address string."""
    try:
        ipaddress.IPv4Address(ip)
        return True
    except ValueError:
        return False


def normalize_mac(mac: str) -> str:
    """Normalize a MAC address to lowercase, colon separated, zero padded octets.

    Accepts hyphen separators (Windows) and the unpadded octets printed by
    BSD ``arp`` (``0:1b:2c:3:4:5``).

    Raises:
        ValueError: If ``mac`` is not a six-octet hardware address.
    """
    octets = _MAC_SPLIT_RE.split(mac.strip().lower())
    if len(octets) != 6 or not all(_HEX_OCTET_RE.match(o) for o in octets):
        raise ValueError(f"Invalid MAC address: {mac!r}")
    return ":".join(o.zfill(2) for o in octets)
