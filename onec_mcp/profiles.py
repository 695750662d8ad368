"""Selection of the business profile for the connected configuration."""

from __future__ import annotations

from onec_mcp.client import Client, OneCError
from onec_mcp.models import ConfigurationInfo

AUTO = "auto"
GENERIC = "generic"
BUH_3_0 = "buh_3_0"
UNKNOWN = "unknown"


class ProfileResolutionError(Exception):
    """Raised when the profile cannot be detected; ``fallback`` is the profile to use."""

    def __init__(self, message: str, fallback: str = GENERIC) -> None:
        super().__init__(message)
        self.fallback = fallback


def normalize(value: str) -> str:
    """Validate and normalise a profile name; raise ``ValueError`` if unsupported."""
    profile = value.strip().lower()
    if profile in ("", AUTO):
        return AUTO
    if profile in (GENERIC, BUH_3_0, UNKNOWN):
        return profile
    raise ValueError(
        f'unsupported profile "{value}" (allowed: auto|generic|buh_3_0|unknown)'
    )


def resolve(client: Client, profile_flag: str) -> str:
    """Return the effective profile, querying ``/configuration`` when set to auto."""
    normalized = normalize(profile_flag)
    if normalized != AUTO:
        return normalized
    try:
        info = ConfigurationInfo.from_dict(client.get("/configuration"))
    except (OneCError, TypeError) as exc:
        raise ProfileResolutionError(str(exc), fallback=GENERIC) from exc
    return detect(info.name, info.version)


def detect(config_name: str, config_version: str) -> str:
    """Identify the profile from configuration name and version."""
    name = config_name.strip().lower()
    version = config_version.strip()
    if "бухгалтерияпредприятия" in name and version.startswith("3.0"):
        return BUH_3_0
    return GENERIC