"""DiscoveryEngine: self detection, ping/ARP sweep, caching and host search."""

from __future__ import annotations

import concurrent.futures
import time
from types import TracebackType
from typing import Any, Callable, Self

from loguru import logger
from pydantic import ValidationError

from arpsweep.discovery._util import _run_cmd
from arpsweep.discovery.cache import DiscoveryCache
from arpsweep.discovery.exceptions import InvalidConfig, InvalidInput, NoActiveInterface
from arpsweep.discovery.models import EngineConfig, HostRecord, ProbeResult, ResolveResult, SearchResult, SelfInfo
from arpsweep.discovery.oui import OuiVendorLookup
from arpsweep.discovery.platforms import PlatformAdapter, get_platform
from arpsweep.discovery.ranges import build_range
from arpsweep.discovery.search import _as_query_list, filter_by_ip, filter_by_mac, filter_by_type
from arpsweep.discovery.sweep import CommandRunner, Prober, Resolver, VendorLookup

_INTERFACE_CMD_TIMEOUT = 30


class DiscoveryEngine:
    """Discover hosts on the local /24 subnet and search them.

    The engine remembers its own IP once detected and keeps the last host list
    for ``cache_ttl`` seconds. ``discover`` and the ``search_by_*`` methods
    return a :class:`concurrent.futures.Future`; failures, including invalid
    arguments, are delivered through it. Top-level calls run one at a time on
    the engine's own worker thread.

    Args:
        config: Engine settings. Keyword ``options`` (``timeout``,
            ``include_endpoints``, ``use_cache``, ``cache_ttl``) override it.
        platform: Adapter instance or ``platform.system()`` name; defaults to
            the running OS.
        runner: Executes a command with a timeout and returns a CommandResult.
        vendor_lookup: ``mac -> vendor label | None``; defaults to the IEEE
            OUI database.
        clock: Monotonic time source for cache expiry.

    Raises:
        InvalidConfig: If the settings are out of range.
        UnsupportedPlatform: If no adapter exists for the requested platform.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        *,
        platform: PlatformAdapter | str | None = None,
        runner: CommandRunner = _run_cmd,
        vendor_lookup: VendorLookup | None = None,
        clock: Callable[[], float] = time.monotonic,
        **options: Any,
    ):
        try:
            if config is None:
                config = EngineConfig(**options)
            elif options:
                config = EngineConfig(**{**config.model_dump(), **options})
        except ValidationError as e:
            raise InvalidConfig(f"Invalid engine configuration: {e}") from e

        self.config = config
        self.adapter = platform if isinstance(platform, PlatformAdapter) else get_platform(platform)
        self.runner = runner
        self.vendor_lookup: VendorLookup = vendor_lookup or OuiVendorLookup()

        self._self_ip: str | None = None
        self._self_info: SelfInfo | None = None
        self._cache = DiscoveryCache(ttl=config.cache_ttl, enabled=config.use_cache, clock=clock)
        self._prober = Prober(self.adapter, runner, config.timeout)
        self._resolver = Resolver(self.adapter, runner, self.vendor_lookup)
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="arpsweep-engine")

        logger.debug(f"DiscoveryEngine on {self.adapter.name}: {config}")

    @property
    def self_ip(self) -> str | None:
        return self._self_ip

    @property
    def self_info(self) -> SelfInfo | None:
        return self._self_info

    @property
    def cache(self) -> DiscoveryCache:
        return self._cache

    def clear_cache(self) -> None:
        self._cache.clear()

    # ── building blocks ───────────────────────────────────────────────

    def resolve_self(self) -> SelfInfo:
        """Detect this machine's active interface IP and MAC.

        Raises:
            ParseError: If the interface listing has an unexpected format.
            NoActiveInterface: If no active non-loopback interface exists.
        """
        result = self.runner(self.adapter.interface_command(), _INTERFACE_CMD_TIMEOUT)
        info = self.adapter.parse_interface_info(result.stdout)
        info.vendor_type = self.vendor_lookup(info.mac)

        self._self_ip = info.ip
        self._self_info = info
        logger.info(f"Local interface {info.interface}: {info.ip} ({info.mac})")
        return info

    def probe(self, addresses: list[str] | str | None = None) -> ProbeResult:
        """Ping every address concurrently and partition them by reachability.

        Without a usable address list the full range around the engine's own
        IP is probed, detecting that IP first if necessary.
        """
        if isinstance(addresses, str):
            addresses = [addresses]
        if not isinstance(addresses, (list, tuple)) or not addresses:
            if not self._self_ip:
                info = self.resolve_self()
                return self.probe(build_range(info.ip, self.config.include_endpoints))
            addresses = build_range(self._self_ip, self.config.include_endpoints)
        return self._prober.run(list(addresses))

    def resolve(self, addresses: list[str] | str) -> ResolveResult:
        """Look up hardware addresses for ``addresses`` concurrently.

        Raises:
            InvalidInput: If ``addresses`` is not a list of addresses.
        """
        if isinstance(addresses, str):
            addresses = [addresses]
        if not isinstance(addresses, (list, tuple)):
            raise InvalidInput(f"Addresses must be a list of IP address strings, got {type(addresses).__name__}")
        if not addresses:
            return ResolveResult()
        return self._resolver.run(list(addresses), self_ip=self._self_ip, self_info=self._self_info)

    def _discover(self, ref_ip: str | None = None, retry: bool = False) -> list[HostRecord]:
        if self._cache.is_valid():
            logger.debug(f"Serving {len(self._cache.snapshot())} cached hosts (age {self._cache.age():.1f}s)")
            return self._cache.snapshot()

        if not ref_ip and not self._self_ip:
            if retry:
                raise NoActiveInterface("Failed to find your IP address")
            info = self.resolve_self()
            # A replaced resolve_self may report an interface without an address
            return self._discover(info.ip or None, retry=True)

        sweep_range = build_range(ref_ip or self._self_ip, self.config.include_endpoints)  # type: ignore[arg-type]
        logger.info(f"Sweeping {sweep_range[0]} - {sweep_range[-1]}")

        probed = self.probe(sweep_range)
        if not probed.reachable:
            logger.warning("No host answered the ping sweep")
            return []

        hosts = self.resolve(probed.reachable).hosts
        self._cache.store(hosts)
        return hosts

    def _search_by_ip(self, ips: Any, ref_ip: str | None) -> SearchResult:
        queries = _as_query_list(ips, "ip address")
        return filter_by_ip(self._discover(ref_ip or queries[0]), queries)

    def _search_by_mac(self, macs: Any, ref_ip: str | None) -> SearchResult:
        queries = _as_query_list(macs, "mac address")
        return filter_by_mac(self._discover(ref_ip), queries)

    def _search_by_type(self, vendor_type: Any, ref_ip: str | None) -> list[HostRecord]:
        if not isinstance(vendor_type, str) or not vendor_type:
            raise InvalidInput(f"Invalid vendor type: {vendor_type!r}")
        return filter_by_type(self._discover(ref_ip), vendor_type)

    # ── public API ────────────────────────────────────────────────────

    def discover(self, ref_ip: str | None = None) -> concurrent.futures.Future[list[HostRecord]]:
        """Hosts on the subnet of ``ref_ip`` (default: this machine's subnet)."""
        return self._executor.submit(self._discover, ref_ip)

    def search_by_ip(
        self, ips: str | list[str], ref_ip: str | None = None
    ) -> concurrent.futures.Future[SearchResult]:
        """Discovered hosts with one of ``ips``; ``missing`` lists the IPs not found."""
        return self._executor.submit(self._search_by_ip, ips, ref_ip)

    def search_by_mac(
        self, macs: str | list[str], ref_ip: str | None = None
    ) -> concurrent.futures.Future[SearchResult]:
        """Hosts whose MAC contains any of the (partial) ``macs``, case-insensitively."""
        return self._executor.submit(self._search_by_mac, macs, ref_ip)

    def search_by_type(self, vendor_type: str, ref_ip: str | None = None) -> concurrent.futures.Future[list[HostRecord]]:
        """Hosts whose vendor label matches ``vendor_type``, case-insensitively."""
        return self._executor.submit(self._search_by_type, vendor_type, ref_ip)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.close()
