"""Runtime configuration for hostlink.

Provides configurable timeouts and locations, read from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from hostlink.config.defaults import (
    KEYSCAN_ATTEMPT_TIMEOUT_SECONDS,
    KEYSCAN_BINARY,
    KEYSCAN_TOTAL_TIMEOUT_SECONDS,
    TRANSPORT_TIMEOUT_SECONDS,
)
from hostlink.config.paths import get_known_hosts_path, get_state_dir


@dataclass
class HostlinkConfig:
    """Configuration shared by the trust and session subsystems."""

    state_dir: Path = field(default_factory=get_state_dir)
    keyscan_binary: str = KEYSCAN_BINARY
    keyscan_timeout: int = KEYSCAN_ATTEMPT_TIMEOUT_SECONDS
    keyscan_total_timeout: float = KEYSCAN_TOTAL_TIMEOUT_SECONDS
    transport_timeout: float = TRANSPORT_TIMEOUT_SECONDS

    @property
    def known_hosts_path(self) -> Path:
        return get_known_hosts_path(self.state_dir)

    @classmethod
    def from_env(cls) -> "HostlinkConfig":
        """Create config from environment variables."""
        return cls(
            state_dir=get_state_dir(),
            keyscan_binary=os.environ.get("HOSTLINK_KEYSCAN_BIN", KEYSCAN_BINARY),
            keyscan_timeout=int(os.environ.get(
                "HOSTLINK_KEYSCAN_TIMEOUT", str(KEYSCAN_ATTEMPT_TIMEOUT_SECONDS))),
            keyscan_total_timeout=float(os.environ.get(
                "HOSTLINK_KEYSCAN_TOTAL_TIMEOUT", str(KEYSCAN_TOTAL_TIMEOUT_SECONDS))),
            transport_timeout=float(os.environ.get(
                "HOSTLINK_TRANSPORT_TIMEOUT", str(TRANSPORT_TIMEOUT_SECONDS))),
        )


__all__ = ["HostlinkConfig", "get_state_dir", "get_known_hosts_path"]
