"""Pydantic models for host discovery."""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from arpsweep.discovery.exceptions import InvalidConfig

_ENV_VARS: dict[str, str] = {
    "timeout": "ARPSWEEP_TIMEOUT",
    "include_endpoints": "ARPSWEEP_INCLUDE_ENDPOINTS",
    "use_cache": "ARPSWEEP_USE_CACHE",
    "cache_ttl": "ARPSWEEP_CACHE_TTL",
}


class EngineConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    timeout: int = Field(default=5, ge=1, le=60)
    include_endpoints: bool = False
    use_cache: bool = True
    cache_ttl: int = Field(default=300, ge=0)

    @classmethod
    def from_env(cls, **overrides: object) -> EngineConfig:
        """Build a config from ``ARPSWEEP_*`` environment variables.

        Explicit keyword overrides that are not None win over the environment.

        Raises:
            InvalidConfig: If a value is out of range or not a valid number or boolean.
        """
        values: dict[str, object] = {}
        for field_name, env_var in _ENV_VARS.items():
            raw = os.getenv(env_var)
            if raw is None:
                continue
            values[field_name] = raw.strip()
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls(**values)  # type: ignore[arg-type]
        except ValidationError as e:
            raise InvalidConfig(f"Invalid engine configuration: {e}") from e


class CommandResult(BaseModel):
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


class SelfInfo(BaseModel):
    ip: str
    mac: str
    interface: str = ""
    vendor_type: Optional[str] = None


class HostRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    ip: str
    mac: str
    vendor_type: Optional[str] = None
    is_self: bool = False
    matched: tuple[str, ...] = ()  # filled in by MAC search only


class ProbeResult(BaseModel):
    reachable: list[str] = Field(default_factory=list)
    unreachable: list[str] = Field(default_factory=list)


class ResolveResult(BaseModel):
    hosts: list[HostRecord] = Field(default_factory=list)
    unresolved: list[str] = Field(default_factory=list)


class SearchResult(BaseModel):
    hosts: list[HostRecord] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
