"""
Shared dataclasses for the trust subsystem.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from hostlink.config.defaults import DEFAULT_SSH_PORT


@dataclass(frozen=True)
class HostIdentity:
    """Normalized (host, port) pair naming one endpoint's key material."""
    host: str
    port: int = DEFAULT_SSH_PORT

    @classmethod
    def of(cls, host: str, port: int = DEFAULT_SSH_PORT) -> "HostIdentity":
        """
        Normalize ``host`` and ``port``.

        Raises:
            ValueError: If the host is empty or the port is not 1-65535.
        """
        if not isinstance(host, str) or not host.strip():
            raise ValueError(f"invalid host: {host!r}")
        try:
            number = int(port)
        except (TypeError, ValueError):
            raise ValueError(f"invalid port: {port!r}") from None
        if not 0 < number < 65536:
            raise ValueError(f"invalid port: {port!r}")
        return cls(host=host.strip().lower(), port=number)

    @property
    def key(self) -> str:
        """Store key: bare host on the default port, "[host]:port" otherwise."""
        if self.port == DEFAULT_SSH_PORT:
            return self.host
        return f"[{self.host}]:{self.port}"

    def __str__(self) -> str:
        return self.key


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class TrustRecord:
    """Last-trusted key for a single host identity."""
    host: str
    port: int
    key_type: str
    fingerprint: str
    full_key: str
    added_at: str = field(default_factory=_utc_now)

    @property
    def identity(self) -> HostIdentity:
        return HostIdentity.of(self.host, self.port)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "keyType": self.key_type,
            "fingerprint": self.fingerprint,
            "fullKey": self.full_key,
            "addedAt": self.added_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TrustRecord":
        return cls(
            host=str(data["host"]),
            port=int(data.get("port", DEFAULT_SSH_PORT)),
            key_type=str(data.get("keyType", "")),
            fingerprint=str(data["fingerprint"]),
            full_key=str(data.get("fullKey", "")),
            added_at=str(data.get("addedAt") or _utc_now()),
        )


@dataclass(frozen=True)
class HostKey:
    """One key line returned by a fetch: algorithm plus base64 payload."""
    key_type: str
    key_data: str

    @property
    def full_key(self) -> str:
        return f"{self.key_type} {self.key_data}"


class FingerprintStatus(Enum):
    """Outcome of comparing a live key against the trust store."""
    NEW = "new"
    MATCH = "match"
    CHANGED = "changed"
    ERROR = "error"


@dataclass
class FingerprintResult:
    status: FingerprintStatus
    key_type: Optional[str] = None
    fingerprint: Optional[str] = None
    full_key: Optional[str] = None
    previous_fingerprint: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def failed(cls, reason: str) -> "FingerprintResult":
        return cls(status=FingerprintStatus.ERROR, error=reason)

    @property
    def ok(self) -> bool:
        return self.status is not FingerprintStatus.ERROR

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"status": self.status.value}
        for name in ("key_type", "fingerprint", "full_key", "previous_fingerprint", "error"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data
