"""Shared fixtures for the arpsweep test suite."""

from __future__ import annotations

import threading

import pytest

from arpsweep.discovery.models import CommandResult, HostRecord

# ── canned tool output ────────────────────────────────────────────────

LINUX_IP_ADDR = """\
1: lo: <LOOPBACK,UP,LOWER_UP> mtu 65536 qdisc noqueue state UNKNOWN group default qlen 1000
    link/loopback 00:00:00:00:00:00 brd 00:00:00:00:00:00
    inet 127.0.0.1/8 scope host lo
       valid_lft forever preferred_lft forever
2: docker0: <NO-CARRIER,BROADCAST,MULTICAST,UP> mtu 1500 qdisc noqueue state DOWN group default
    link/ether 02:42:ac:11:00:01 brd ff:ff:ff:ff:ff:ff
    inet 172.17.0.1/16 brd 172.17.255.255 scope global docker0
       valid_lft forever preferred_lft forever
3: wlan0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc noqueue state UP group default qlen 1000
    link/ether B8:27:EB:12:34:56 brd ff:ff:ff:ff:ff:ff
    inet 192.168.1.23/24 brd 192.168.1.255 scope global dynamic noprefixroute wlan0
       valid_lft 85000sec preferred_lft 85000sec
    inet6 fe80::ba27:ebff:fe12:3456/64 scope link
       valid_lft forever preferred_lft forever
"""

LINUX_ARP_HEADER = "Address                  HWtype  HWaddress           Flags Mask            Iface\n"


def linux_arp_output(ip: str, mac: str) -> str:
    return LINUX_ARP_HEADER + f"{ip:<25}ether   {mac}   C                     wlan0\n"


def linux_arp_no_entry(ip: str) -> str:
    return f"{ip} ({ip}) -- no entry\n"


class FakeRunner:
    """Stand-in for ``_run_cmd`` answering ip/ping/arp like a Linux host.

    ``reachable`` lists the addresses that answer a ping, ``arp_table`` maps
    addresses to the MAC the ARP table reports for them.
    """

    def __init__(
        self,
        interfaces: str = LINUX_IP_ADDR,
        reachable: list[str] | None = None,
        arp_table: dict[str, str] | None = None,
        raise_for: set[str] | None = None,
    ):
        self.interfaces = interfaces
        self.reachable = set(reachable or [])
        self.arp_table = dict(arp_table or {})
        self.raise_for = raise_for or set()
        self.calls: list[list[str]] = []
        self._lock = threading.Lock()

    def commands(self, tool: str) -> list[list[str]]:
        return [c for c in self.calls if c[0] == tool]

    def targets(self, tool: str) -> list[str]:
        return [c[-1] for c in self.commands(tool)]

    def __call__(self, cmd: list[str], timeout: int) -> CommandResult:
        with self._lock:
            self.calls.append(list(cmd))

        target = cmd[-1]
        if target in self.raise_for:
            raise OSError(f"cannot run {cmd[0]}")

        if cmd[0] == "ip":
            return CommandResult(stdout=self.interfaces)
        if cmd[0] == "ping":
            if target in self.reachable:
                return CommandResult(stdout="1 packets transmitted, 1 received, 0% packet loss, time 0ms\n")
            return CommandResult(returncode=1, stdout="1 packets transmitted, 0 received, 100% packet loss\n")
        if cmd[0] == "arp":
            if target in self.arp_table:
                return CommandResult(stdout=linux_arp_output(target, self.arp_table[target]))
            return CommandResult(returncode=1, stdout=linux_arp_no_entry(target))
        return CommandResult(returncode=127, stderr=f"{cmd[0]}: not found")


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


VENDORS = {
    "b8:27:eb": "Raspberry Pi",
    "aa:bb:cc": "TestVendor",
    "00:11:22": "Cisco",
}


def fake_vendor_lookup(mac: str) -> str | None:
    return VENDORS.get(mac.lower()[:8])


# ── fixtures ──────────────────────────────────────────────────────────


@pytest.fixture()
def fake_runner():
    """Factory fixture returning a FakeRunner."""

    def _make(**kwargs):
        return FakeRunner(**kwargs)

    return _make


@pytest.fixture()
def linux_ip_addr():
    return LINUX_IP_ADDR


@pytest.fixture()
def fake_clock():
    return FakeClock()


@pytest.fixture()
def vendor_lookup():
    return fake_vendor_lookup


@pytest.fixture()
def sample_host():
    """Factory fixture returning a HostRecord with customizable fields."""

    def _make(**kwargs):
        defaults = {
            "ip": "192.168.1.100",
            "mac": "aa:bb:cc:dd:ee:ff",
            "vendor_type": None,
            "is_self": False,
        }
        defaults.update(kwargs)
        return HostRecord(**defaults)

    return _make


@pytest.fixture()
def make_engine(fake_clock):
    """Factory fixture building a Linux DiscoveryEngine on a FakeRunner."""
    from arpsweep.discovery.engine import DiscoveryEngine

    engines = []

    def _make(runner, **options):
        options.setdefault("timeout", 1)
        engine = DiscoveryEngine(
            platform="Linux",
            runner=runner,
            vendor_lookup=fake_vendor_lookup,
            clock=fake_clock,
            **options,
        )
        engines.append(engine)
        return engine

    yield _make

    for engine in engines:
        engine.close()
