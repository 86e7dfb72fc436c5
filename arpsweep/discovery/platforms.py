"""Platform adapters: OS tool invocations and output parsing.

Each adapter knows which commands list the local interfaces, probe an address
and query the ARP table on its platform, and how to read their output. The
discovery engine itself never looks at raw tool output.
"""

from __future__ import annotations

import platform
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from arpsweep.discovery._util import _validate_ip, normalize_mac
from arpsweep.discovery.exceptions import (
    NoActiveInterface,
    ParseError,
    ResolveFailure,
    UnsupportedPlatform,
)
from arpsweep.discovery.models import CommandResult, SelfInfo

_PLATFORM_REGISTRY: dict[str, type[PlatformAdapter]] = {}


@dataclass
class _InterfaceBlock:
    name: str
    active: bool = False
    loopback: bool = False
    ip: str = ""
    mac: str = ""


class PlatformAdapter(ABC):
    """Abstract base class for per-OS command construction and output parsing."""

    name: str = ""

    # Probe output markers meaning no reply was received
    LOSS_MARKERS: tuple[str, ...] = ("100% packet loss",)
    # ARP output markers meaning the address has no table entry (lowercase)
    NO_ENTRY_MARKERS: tuple[str, ...] = ("no entry", "no such host")

    @abstractmethod
    def interface_command(self) -> list[str]:
        """Command listing all local interfaces with addresses and status."""

    @abstractmethod
    def probe_command(self, ip: str, timeout: int) -> list[str]:
        """Command sending a single echo request bounded by ``timeout`` seconds."""

    @abstractmethod
    def resolve_command(self, ip: str) -> list[str]:
        """Command querying the ARP table for ``ip``."""

    @abstractmethod
    def _parse_interface_blocks(self, output: str) -> list[_InterfaceBlock]:
        """Split interface listing output into per-interface blocks."""

    @abstractmethod
    def _extract_mac(self, ip: str, output: str) -> str:
        """Return the raw hardware address token from ARP output for ``ip``."""

    def parse_interface_info(self, output: str) -> SelfInfo:
        """Pick the first active, non-loopback interface with IPv4 and MAC.

        Raises:
            ParseError: If no interface block could be recognised at all.
            NoActiveInterface: If no block qualifies.
        """
        blocks = self._parse_interface_blocks(output)
        if not blocks:
            raise ParseError(f"No interface entries found in {self.name} interface listing")

        for block in blocks:
            if block.loopback or not block.active:
                logger.debug(f"Skipping interface {block.name} (loopback={block.loopback}, active={block.active})")
                continue
            if not block.ip or not block.mac:
                logger.debug(f"Skipping interface {block.name}: missing IPv4 or hardware address")
                continue
            try:
                mac = normalize_mac(block.mac)
            except ValueError:
                logger.debug(f"Skipping interface {block.name}: unparsable hardware address {block.mac!r}")
                continue
            return SelfInfo(ip=block.ip, mac=mac, interface=block.name)

        raise NoActiveInterface(f"No active network interface among: {', '.join(b.name for b in blocks)}")

    def parse_probe_result(self, result: CommandResult) -> bool:
        """Return True if the probe got an answer."""
        if result.returncode != 0:
            return False
        output = result.stdout.lower()
        return not any(marker.lower() in output for marker in self.LOSS_MARKERS)

    def parse_resolve_result(self, ip: str, result: CommandResult) -> str | None:
        """Return the normalized MAC for ``ip``, or None if the ARP table has no entry.

        Raises:
            ResolveFailure: If the tool failed or its output has no usable MAC.
        """
        text = (result.stdout + result.stderr).lower()
        if any(marker in text for marker in self.NO_ENTRY_MARKERS):
            return None
        if result.returncode != 0:
            raise ResolveFailure(f"arp exited with {result.returncode} for {ip}", ip=ip)

        try:
            raw_mac = self._extract_mac(ip, result.stdout)
            return normalize_mac(raw_mac)
        except (IndexError, ValueError) as e:
            raise ResolveFailure(f"No hardware address for {ip} in arp output: {e}", ip=ip) from e


def register_platform(name: str) -> Callable[[type[PlatformAdapter]], type[PlatformAdapter]]:
    """Decorator to register an adapter under a ``platform.system()`` name."""

    def decorator(cls: type[PlatformAdapter]) -> type[PlatformAdapter]:
        cls.name = name
        _PLATFORM_REGISTRY[name.lower()] = cls
        return cls

    return decorator


def get_platform(name: str | None = None) -> PlatformAdapter:
    """Create the adapter for ``name``, defaulting to the running OS.

    Raises:
        UnsupportedPlatform: If no adapter is registered for the platform.
    """
    system = name or platform.system()
    cls = _PLATFORM_REGISTRY.get(system.lower())
    if cls is None:
        available = ", ".join(list_platforms())
        raise UnsupportedPlatform(f"Unsupported platform '{system}'. Available: {available}", platform_name=system)
    return cls()


def list_platforms() -> list[str]:
    """Return a sorted list of registered platform names."""
    return sorted(cls.name for cls in _PLATFORM_REGISTRY.values())


@register_platform("Linux")
class LinuxPlatform(PlatformAdapter):
    """iproute2 ``ip addr`` for interfaces, iputils ``ping``, net-tools ``arp``."""

    _HEADER_RE = re.compile(r"^\d+:\s+([^:@\s]+)(?:@\S+)?:\s+<([^>]*)>(.*)$")

    def interface_command(self) -> list[str]:
        return ["ip", "addr", "show"]

    def probe_command(self, ip: str, timeout: int) -> list[str]:
        return ["ping", "-c", "1", "-w", str(timeout), ip]

    def resolve_command(self, ip: str) -> list[str]:
        return ["arp", "-n", ip]

    def _parse_interface_blocks(self, output: str) -> list[_InterfaceBlock]:
        # 2: eth0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc fq_codel state UP ...
        #     link/ether 52:54:00:12:34:56 brd ff:ff:ff:ff:ff:ff
        #     inet 192.168.1.23/24 brd 192.168.1.255 scope global dynamic eth0
        blocks: list[_InterfaceBlock] = []
        current: _InterfaceBlock | None = None

        for line in output.splitlines():
            m = self._HEADER_RE.match(line)
            if m:
                flags = m.group(2).split(",")
                current = _InterfaceBlock(
                    name=m.group(1),
                    active="UP" in flags and "LOWER_UP" in flags,
                    loopback="LOOPBACK" in flags,
                )
                blocks.append(current)
                continue
            if current is None:
                continue

            tokens = line.split()
            if len(tokens) < 2:
                continue
            if tokens[0] == "inet" and not current.ip:
                current.ip = tokens[1].split("/")[0]
            elif tokens[0] == "link/ether":
                current.mac = tokens[1]
            elif tokens[0] == "link/loopback":
                current.loopback = True

        return blocks

    def _extract_mac(self, ip: str, output: str) -> str:
        # Address   HWtype  HWaddress           Flags Mask  Iface
        # 10.0.0.1  ether   00:11:22:33:44:55   C           eth0
        line = output.splitlines()[1]
        return re.sub(r"\s+", " ", line.strip()).split(" ")[2]


@register_platform("Darwin")
class DarwinPlatform(PlatformAdapter):
    """BSD ``ifconfig``, ``ping`` and ``arp`` as shipped with macOS."""

    _HEADER_RE = re.compile(r"^([^\s:]+):\s+flags=\w+<([^>]*)>")

    def interface_command(self) -> list[str]:
        return ["ifconfig"]

    def probe_command(self, ip: str, timeout: int) -> list[str]:
        return ["ping", "-c", "1", "-t", str(timeout), ip]

    def resolve_command(self, ip: str) -> list[str]:
        return ["arp", "-n", ip]

    def _parse_interface_blocks(self, output: str) -> list[_InterfaceBlock]:
        # en0: flags=8863<UP,BROADCAST,SMART,RUNNING,SIMPLEX,MULTICAST> mtu 1500
        # \tether a4:83:e7:11:22:33
        # \tinet 192.168.1.42 netmask 0xffffff00 broadcast 192.168.1.255
        # \tstatus: active
        blocks: list[_InterfaceBlock] = []
        current: _InterfaceBlock | None = None
        running: dict[str, bool] = {}
        has_status: dict[str, bool] = {}

        for line in output.splitlines():
            m = self._HEADER_RE.match(line)
            if m:
                flags = m.group(2).split(",")
                current = _InterfaceBlock(name=m.group(1), loopback="LOOPBACK" in flags)
                running[current.name] = "UP" in flags and "RUNNING" in flags
                blocks.append(current)
                continue
            if current is None:
                continue

            tokens = line.split()
            if len(tokens) < 2:
                continue
            if tokens[0] == "inet" and not current.ip:
                current.ip = tokens[1]
            elif tokens[0] == "ether":
                current.mac = tokens[1]
            elif tokens[0] == "status:":
                has_status[current.name] = True
                current.active = tokens[1] == "active"

        # Interfaces without a status line (e.g. bridges) fall back to their flags
        for block in blocks:
            if not has_status.get(block.name):
                block.active = running[block.name]

        return blocks

    def _extract_mac(self, ip: str, output: str) -> str:
        # ? (10.0.0.1) at 0:11:22:33:44:55 on en0 ifscope [ethernet]
        return output.strip().split(" ")[3]


@register_platform("Windows")
class WindowsPlatform(PlatformAdapter):
    """``ipconfig /all``, ``ping`` and ``arp -a`` from a Windows install."""

    LOSS_MARKERS = ("100% packet loss", "(100% loss)", "destination host unreachable")
    NO_ENTRY_MARKERS = ("no entry", "no such host", "no arp entries found")

    _HEADER_RE = re.compile(r"^(\S.*adapter\s+(.+?)):\s*$")
    _FIELD_RE = re.compile(r"^\s+([A-Za-z0-9 ()-]+?)[ .]*:\s*(.*)$")

    def interface_command(self) -> list[str]:
        return ["ipconfig", "/all"]

    def probe_command(self, ip: str, timeout: int) -> list[str]:
        # -w takes milliseconds
        return ["ping", "-n", "1", "-w", str(timeout * 1000), ip]

    def resolve_command(self, ip: str) -> list[str]:
        return ["arp", "-a", ip]

    def _parse_interface_blocks(self, output: str) -> list[_InterfaceBlock]:
        # Wireless LAN adapter Wi-Fi:
        #
        #    Media State . . . . . . . . . . . : Media disconnected
        #    Description . . . . . . . . . . . : Intel(R) Wi-Fi 6 AX201 160MHz
        #    Physical Address. . . . . . . . . : A4-83-E7-11-22-33
        #    IPv4 Address. . . . . . . . . . . : 192.168.1.50(Preferred)
        blocks: list[_InterfaceBlock] = []
        current: _InterfaceBlock | None = None

        for line in output.splitlines():
            m = self._HEADER_RE.match(line)
            if m:
                current = _InterfaceBlock(name=m.group(2), active=True)
                blocks.append(current)
                continue
            if current is None:
                continue

            fm = self._FIELD_RE.match(line)
            if not fm:
                continue
            label = fm.group(1).strip().lower()
            value = fm.group(2).strip()

            if label == "media state":
                current.active = "disconnected" not in value.lower()
            elif label == "description":
                current.loopback = "loopback" in value.lower()
            elif label == "physical address":
                current.mac = value
            elif label in ("ipv4 address", "ip address") and not current.ip:
                candidate = value.split("(")[0].strip()
                if _validate_ip(candidate):
                    current.ip = candidate

        return blocks

    def _extract_mac(self, ip: str, output: str) -> str:
        #   Internet Address      Physical Address      Type
        #   10.0.0.1              00-11-22-33-44-55     dynamic
        for line in output.splitlines():
            tokens = line.split()
            if len(tokens) >= 2 and tokens[0] == ip:
                return tokens[1].replace("-", ":")
        raise ValueError(f"no row for {ip}")
