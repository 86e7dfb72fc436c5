"""Local-network host discovery.

Sweeps the caller's /24 subnet with concurrent ping probes, resolves hardware
addresses of the reachable hosts from the ARP table, labels them with their
OUI vendor and serves cached search queries over the result.
"""

__version__ = "0.1.0"

import os
import sys
from typing import Any, Callable, Dict

from loguru import logger as glogger

glogger.disable(__name__)


def _loguru_skiplog_filter(record: dict) -> bool:  # type: ignore[type-arg]
    """Filter function to hide records with ``extra['skiplog']`` set."""
    return not record.get("extra", {}).get("skiplog", False)


def configure_logging(
    loguru_filter: Callable[[Dict[str, Any]], bool] = _loguru_skiplog_filter,
) -> None:
    """Configure a default ``loguru`` sink with a convenient format and filter."""
    os.environ["LOGURU_LEVEL"] = os.getenv("LOGURU_LEVEL", "DEBUG")
    glogger.remove()
    logger_fmt: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    glogger.add(sys.stderr, level=os.getenv("LOGURU_LEVEL"), format=logger_fmt, filter=loguru_filter)  # type: ignore[arg-type]
    glogger.configure(extra={"skiplog": False})
    glogger.enable(__name__)


from arpsweep.discovery.engine import DiscoveryEngine  # noqa: E402
from arpsweep.discovery.exceptions import (  # noqa: E402
    ArpsweepError,
    InvalidAddress,
    InvalidConfig,
    InvalidInput,
    NoActiveInterface,
    ParseError,
    ProbeFailure,
    ResolveFailure,
    UnsupportedPlatform,
)
from arpsweep.discovery.models import EngineConfig, HostRecord  # noqa: E402

__all__ = [
    "glogger",
    "configure_logging",
    "DiscoveryEngine",
    "EngineConfig",
    "HostRecord",
    "ArpsweepError",
    "InvalidAddress",
    "InvalidConfig",
    "InvalidInput",
    "NoActiveInterface",
    "ParseError",
    "ProbeFailure",
    "ResolveFailure",
    "UnsupportedPlatform",
]
