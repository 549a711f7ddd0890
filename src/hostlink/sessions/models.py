"""
Shared dataclasses for the session subsystem.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

from hostlink.config.defaults import DEFAULT_FTP_PORT, DEFAULT_FTPS_IMPLICIT_PORT
from hostlink.errors import ConfigurationError

if TYPE_CHECKING:
    from .queue import OperationQueue
    from .transport import Transport


class SecurityMode(Enum):
    """Channel security for a file-transfer session."""
    PLAIN = "plain"
    IMPLICIT_TLS = "implicit-secure"


@dataclass(frozen=True)
class ConnectConfig:
    """Parameters of one connect() call. Immutable once a session exists."""
    host: str
    port: int
    username: str
    password: Optional[str] = field(default=None, repr=False)
    security_mode: SecurityMode = SecurityMode.PLAIN

    def __post_init__(self):
        if not isinstance(self.host, str) or not self.host.strip():
            raise ConfigurationError("host is required")
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ConfigurationError(f"invalid port: {self.port!r}")
        if not isinstance(self.security_mode, SecurityMode):
            raise ConfigurationError(f"invalid security mode: {self.security_mode!r}")

    @property
    def secure(self) -> bool:
        return self.security_mode is SecurityMode.IMPLICIT_TLS

    @classmethod
    def for_protocol(
        cls,
        protocol: str,
        host: str,
        username: str,
        password: Optional[str] = None,
        port: Optional[int] = None,
    ) -> "ConnectConfig":
        """Build a config from a protocol name ("ftp" or "ftps")."""
        protocol = (protocol or "").strip().lower()
        if protocol == "ftp":
            mode, default_port = SecurityMode.PLAIN, DEFAULT_FTP_PORT
        elif protocol == "ftps":
            mode, default_port = SecurityMode.IMPLICIT_TLS, DEFAULT_FTPS_IMPLICIT_PORT
        else:
            raise ConfigurationError(f"unsupported protocol: {protocol!r}")
        return cls(
            host=host,
            port=port or default_port,
            username=username,
            password=password,
            security_mode=mode,
        )


@dataclass
class Session:
    """Live state of one connection: transport plus its serialization queue."""
    connection_id: str
    transport: "Transport"
    config: ConnectConfig
    queue: "OperationQueue"
    connected_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class RemoteEntry:
    """One item of a remote directory listing."""
    name: str
    type: str  # "file", "directory", "symlink"
    size: int = 0
    modify_time: Optional[datetime] = None
    permissions: Optional[int] = None

    @property
    def is_dir(self) -> bool:
        return self.type == "directory"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "modifyTime": self.modify_time.isoformat() if self.modify_time else None,
            "permissions": self.permissions,
        }
