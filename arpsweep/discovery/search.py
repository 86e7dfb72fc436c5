"""Query-layer filters over a discovered host list."""

from __future__ import annotations

from typing import Any

from arpsweep.discovery.exceptions import InvalidInput
from arpsweep.discovery.models import HostRecord, SearchResult


def _as_query_list(value: Any, what: str) -> list[str]:
    """Accept one string or a non-empty list of strings.

    Raises:
        InvalidInput: For any other shape.
    """
    if isinstance(value, str):
        if not value:
            raise InvalidInput(f"Empty {what} query")
        return [value]
    if isinstance(value, (list, tuple)) and value and all(isinstance(v, str) and v for v in value):
        return list(value)
    raise InvalidInput(
        f"Invalid {what} query: {value!r}. Search input should be one {what} string or a list of {what} strings."
    )


def filter_by_ip(hosts: list[HostRecord], ips: list[str]) -> SearchResult:
    """Exact-match partition of ``ips`` into discovered hosts and missing inputs."""
    wanted = set(ips)
    found_ips = {h.ip for h in hosts}
    return SearchResult(
        hosts=[h for h in hosts if h.ip in wanted],
        missing=[ip for ip in ips if ip not in found_ips],
    )


def filter_by_mac(hosts: list[HostRecord], fragments: list[str]) -> SearchResult:
    """Case-insensitive substring match of MAC fragments.

    Matching hosts are returned as copies with ``matched`` listing every
    fragment they contain; cached records are left untouched.
    """
    matches: list[HostRecord] = []
    hit: set[str] = set()

    for host in hosts:
        mac = host.mac.lower()
        matched = [f for f in fragments if f.lower() in mac]
        if matched:
            hit.update(matched)
            matches.append(host.model_copy(update={"matched": tuple(matched)}))

    return SearchResult(hosts=matches, missing=[f for f in fragments if f not in hit])


def filter_by_type(hosts: list[HostRecord], vendor_type: str) -> list[HostRecord]:
    """Hosts whose vendor label equals ``vendor_type`` ignoring case."""
    wanted = vendor_type.casefold()
    return [h for h in hosts if h.vendor_type is not None and h.vendor_type.casefold() == wanted]
