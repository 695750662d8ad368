"""Server configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields

DEFAULT_BASE_URL = "http://localhost:8080/hs/mcp-1c"
_ENV_PREFIX = "MCP_1C_"


@dataclass
class Config:
    """Connection settings for the 1C HTTP service."""

    base_url: str = DEFAULT_BASE_URL
    user: str = ""
    password: str = field(default_factory=str, repr=False)


def load() -> Config:
    """Build a :class:`Config`, letting non-empty environment variables override defaults.

    Each field is read from ``MCP_1C_<FIELD NAME IN UPPER CASE>``.
    """
    cfg = Config()
    for item in fields(Config):
        value = os.environ.get(f"{_ENV_PREFIX}{item.name.upper()}")
        if value:
            setattr(cfg, item.name, value)
    return cfg