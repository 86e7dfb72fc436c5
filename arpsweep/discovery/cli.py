"""CLI entry point for host discovery, standalone-capable."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from loguru import logger
from tabulate import tabulate

from arpsweep.discovery.engine import DiscoveryEngine
from arpsweep.discovery.exceptions import ArpsweepError
from arpsweep.discovery.models import EngineConfig, HostRecord, SearchResult, SelfInfo
from arpsweep.discovery.platforms import list_platforms

_HOST_HEADERS = ["IP", "MAC", "Vendor", "Self", "Matched"]


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Build argparse parser for host discovery."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Per-host ping timeout in seconds, 1-60 (default: $ARPSWEEP_TIMEOUT or 5)",
    )
    common.add_argument(
        "--include-endpoints",
        action="store_true",
        default=None,
        help="Also probe .1 and .255 of the subnet",
    )
    common.add_argument(
        "--cache-ttl",
        type=int,
        default=None,
        help="Seconds a discovery result may be reused (default: $ARPSWEEP_CACHE_TTL or 300)",
    )
    common.add_argument(
        "--no-cache",
        action="store_true",
        help="Always run a fresh sweep",
    )
    common.add_argument(
        "--platform",
        choices=list_platforms(),
        help="Parse tool output for this platform (default: running OS)",
    )
    common.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    common.add_argument(
        "-o",
        "--output",
        help="Output file (default: stdout)",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose logging",
    )

    parser = argparse.ArgumentParser(
        description="Discover hosts on the local /24 subnet via ping and ARP",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_discover = sub.add_parser("discover", parents=[common], help="List all hosts on the subnet")
    p_discover.add_argument("--ref", help="Reference IP selecting the subnet (default: own IP)")

    sub.add_parser("self", parents=[common], help="Show this machine's interface IP and MAC")

    p_ip = sub.add_parser("ip", parents=[common], help="Search hosts by IP address")
    p_ip.add_argument("ips", nargs="+", help="IP address(es) to look for")
    p_ip.add_argument("--ref", help="Reference IP selecting the subnet (default: first searched IP)")

    p_mac = sub.add_parser("mac", parents=[common], help="Search hosts by full or partial MAC address")
    p_mac.add_argument("macs", nargs="+", help="MAC address fragment(s), e.g. aa:bb")
    p_mac.add_argument("--ref", help="Reference IP selecting the subnet (default: own IP)")

    p_type = sub.add_parser("type", parents=[common], help="Search hosts by vendor label")
    p_type.add_argument("vendor", help="Vendor label, e.g. 'Raspberry Pi'")
    p_type.add_argument("--ref", help="Reference IP selecting the subnet (default: own IP)")

    return parser.parse_args(args)


def _build_config(parsed: argparse.Namespace) -> EngineConfig:
    return EngineConfig.from_env(
        timeout=parsed.timeout,
        include_endpoints=parsed.include_endpoints,
        cache_ttl=parsed.cache_ttl,
        use_cache=False if parsed.no_cache else None,
    )


def _format_hosts(hosts: list[HostRecord], missing: list[str] | None, fmt: str) -> str:
    if fmt == "json":
        payload: dict[str, object] = {"hosts": [h.model_dump() for h in hosts]}
        if missing is not None:
            payload["missing"] = missing
        return json.dumps(payload, indent=2)

    rows = [[h.ip, h.mac, h.vendor_type or "", "*" if h.is_self else "", ", ".join(h.matched)] for h in hosts]
    output = tabulate(rows, headers=_HOST_HEADERS, tablefmt="simple")
    if missing:
        output += f"\n\nNot found: {', '.join(missing)}"
    return output


def _format_self(info: SelfInfo, fmt: str) -> str:
    if fmt == "json":
        return info.model_dump_json(indent=2)
    return tabulate(
        [["interface", info.interface], ["ip", info.ip], ["mac", info.mac], ["vendor", info.vendor_type or ""]],
        tablefmt="simple",
    )


def run(parsed: argparse.Namespace, engine: DiscoveryEngine) -> str:
    """Execute the parsed sub-command and return the rendered output."""
    if parsed.command == "self":
        return _format_self(engine.resolve_self(), parsed.format)

    if parsed.command == "discover":
        return _format_hosts(engine.discover(parsed.ref).result(), None, parsed.format)

    if parsed.command in ("ip", "mac"):
        search = engine.search_by_ip if parsed.command == "ip" else engine.search_by_mac
        queries = parsed.ips if parsed.command == "ip" else parsed.macs
        result: SearchResult = search(queries, parsed.ref).result()
        return _format_hosts(result.hosts, result.missing, parsed.format)

    return _format_hosts(engine.search_by_type(parsed.vendor, parsed.ref).result(), None, parsed.format)


def main(args: list[str] | None = None) -> None:
    """Main entry point for discovery CLI."""
    parsed = parse_args(args)

    if not parsed.verbose:
        logger.remove()
        logger.add(sys.stderr, level="INFO")

    try:
        config = _build_config(parsed)
        with DiscoveryEngine(config, platform=parsed.platform) as engine:
            output = run(parsed, engine)
    except ArpsweepError as e:
        logger.error(f"{type(e).__name__}: {e}")
        sys.exit(1)

    if parsed.output:
        Path(parsed.output).write_text(output + "\n")
        logger.info(f"Output written to {parsed.output}")
    else:
        print(output)
