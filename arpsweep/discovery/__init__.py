"""Host discovery subpackage.

Sweeps a /24 subnet with concurrent ping probes, resolves hardware addresses
from the ARP table, labels hosts with their OUI vendor and searches the
cached result by IP, MAC fragment or vendor.
"""

from arpsweep.discovery.cache import DiscoveryCache
from arpsweep.discovery.engine import DiscoveryEngine
from arpsweep.discovery.models import (
    CommandResult,
    EngineConfig,
    HostRecord,
    ProbeResult,
    ResolveResult,
    SearchResult,
    SelfInfo,
)
from arpsweep.discovery.oui import OuiVendorLookup, load_oui_db, lookup_vendor
from arpsweep.discovery.platforms import (
    DarwinPlatform,
    LinuxPlatform,
    PlatformAdapter,
    WindowsPlatform,
    get_platform,
    list_platforms,
)
from arpsweep.discovery.ranges import build_range

__all__ = [
    "DiscoveryEngine",
    "DiscoveryCache",
    "build_range",
    "PlatformAdapter",
    "LinuxPlatform",
    "DarwinPlatform",
    "WindowsPlatform",
    "get_platform",
    "list_platforms",
    "OuiVendorLookup",
    "load_oui_db",
    "lookup_vendor",
    "CommandResult",
    "EngineConfig",
    "HostRecord",
    "ProbeResult",
    "ResolveResult",
    "SearchResult",
    "SelfInfo",
]
