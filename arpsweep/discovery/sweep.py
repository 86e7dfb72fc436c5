"""Concurrent ping and ARP phases of a subnet sweep."""

from __future__ import annotations

import concurrent.futures
from typing import Callable, Optional, TypeVar

from loguru import logger

from arpsweep.discovery.exceptions import ProbeFailure, ResolveFailure
from arpsweep.discovery.models import CommandResult, HostRecord, ProbeResult, ResolveResult, SelfInfo
from arpsweep.discovery.platforms import PlatformAdapter

CommandRunner = Callable[[list[str], int], CommandResult]
VendorLookup = Callable[[str], Optional[str]]

T = TypeVar("T")

# Grace period on top of the probe's own timeout before the subprocess is killed
_RUNNER_GRACE = 5


def _fan_out(
    fn: Callable[[str], T],
    addresses: list[str],
    phase: str,
) -> list[tuple[str, T | None, BaseException | None]]:
    """Run ``fn`` once per address concurrently and wait for all of them.

    Returns ``(address, result, error)`` triples in input order. Nothing is
    returned until every call has finished.
    """
    if not addresses:
        return []

    with concurrent.futures.ThreadPoolExecutor(
        max_workers=len(addresses), thread_name_prefix=f"arpsweep-{phase}"
    ) as pool:
        futures = [pool.submit(fn, ip) for ip in addresses]
        concurrent.futures.wait(futures)

    outcomes: list[tuple[str, T | None, BaseException | None]] = []
    for ip, future in zip(addresses, futures):
        error = future.exception()
        outcomes.append((ip, None if error else future.result(), error))
    return outcomes


class Prober:
    """Ping phase: one echo request per address, all in flight at once."""

    def __init__(self, adapter: PlatformAdapter, runner: CommandRunner, timeout: int):
        self.adapter = adapter
        self.runner = runner
        self.timeout = timeout

    def _probe_one(self, ip: str) -> bool:
        try:
            result = self.runner(self.adapter.probe_command(ip, self.timeout), self.timeout + _RUNNER_GRACE)
        except OSError as e:
            raise ProbeFailure(f"ping {ip} failed: {e}", ip=ip) from e
        return self.adapter.parse_probe_result(result)

    def run(self, addresses: list[str]) -> ProbeResult:
        logger.info(f"Pinging {len(addresses)} addresses (timeout {self.timeout}s)...")
        result = ProbeResult()

        for ip, reachable, error in _fan_out(self._probe_one, addresses, "ping"):
            if error is not None:
                logger.debug(f"Probe {ip} failed: {error}")
                result.unreachable.append(ip)
            elif reachable:
                result.reachable.append(ip)
            else:
                result.unreachable.append(ip)

        logger.info(f"{len(result.reachable)}/{len(addresses)} addresses answered")
        return result


class Resolver:
    """ARP phase: read each reachable address's hardware address from the ARP table."""

    def __init__(
        self,
        adapter: PlatformAdapter,
        runner: CommandRunner,
        vendor_lookup: VendorLookup,
        timeout: int = 10,
    ):
        self.adapter = adapter
        self.runner = runner
        self.vendor_lookup = vendor_lookup
        self.timeout = timeout

    def _resolve_one(self, ip: str) -> str | None:
        try:
            result = self.runner(self.adapter.resolve_command(ip), self.timeout)
        except OSError as e:
            raise ResolveFailure(f"arp {ip} failed: {e}", ip=ip) from e
        return self.adapter.parse_resolve_result(ip, result)

    def run(
        self,
        addresses: list[str],
        self_ip: str | None = None,
        self_info: SelfInfo | None = None,
    ) -> ResolveResult:
        """Resolve ``addresses``; the local host never has an ARP entry of its own,
        so its MAC is taken from ``self_info`` when that is known."""
        logger.info(f"Resolving hardware addresses for {len(addresses)} hosts...")
        result = ResolveResult()
        known_self = self_info if self_info is not None and self_info.ip == self_ip else None
        to_query = [ip for ip in addresses if known_self is None or ip != known_self.ip]

        resolved = {ip: (mac, error) for ip, mac, error in _fan_out(self._resolve_one, to_query, "arp")}
        if known_self is not None and known_self.ip in addresses:
            resolved[known_self.ip] = (known_self.mac, None)

        for ip in addresses:
            mac, error = resolved[ip]
            if error is not None:
                logger.debug(f"Resolve {ip} failed: {error}")
                result.unresolved.append(ip)
            elif mac is None:
                logger.debug(f"No ARP entry for {ip}")
                result.unresolved.append(ip)
            else:
                result.hosts.append(
                    HostRecord(
                        ip=ip,
                        mac=mac,
                        vendor_type=self.vendor_lookup(mac),
                        is_self=ip == self_ip,
                    )
                )

        logger.info(f"Resolved {len(result.hosts)} hosts, {len(result.unresolved)} without ARP entry")
        return result
