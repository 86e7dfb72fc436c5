"""Sweep range synthesis for a /24 subnet."""

from __future__ import annotations

from arpsweep.discovery.exceptions import InvalidAddress


def build_range(sample_ip: str, include_endpoints: bool = False) -> list[str]:
    """Return every address of the /24 subnet ``sample_ip`` belongs to.

    The prefix is everything before the last dot. Without endpoints the
    conventional gateway (``.1``) and broadcast (``.255``) addresses are left
    out, giving ``.2`` to ``.254``; with endpoints the range is ``.1`` to ``.255``.

    Raises:
        InvalidAddress: If ``sample_ip`` contains no dot.
    """
    if not isinstance(sample_ip, str) or "." not in sample_ip:
        raise InvalidAddress(f"Cannot derive a subnet from address: {sample_ip!r}")

    prefix = sample_ip[: sample_ip.rindex(".")]
    first, last = (1, 255) if include_endpoints else (2, 254)
    return [f"{prefix}.{i}" for i in range(first, last + 1)]
