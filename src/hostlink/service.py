"""
HostlinkService - boundary facade returning plain results instead of raising.

Every public call returns an OperationResult: either success with data,
or failure with a descriptive error string.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional

from hostlink.config.defaults import DEFAULT_SSH_PORT
from hostlink.context import HostlinkContext
from hostlink.errors import HostlinkError
from hostlink.sessions import ConnectConfig, SecurityMode
from hostlink.trust import HostIdentity

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    """Outcome of one facade call.

    Fields:
        success: Whether the call succeeded
        data: Return value on success (may be None)
        error: Human-readable reason on failure
    """

    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "OperationResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error}


_EXPECTED_ERRORS = (HostlinkError, OSError, ValueError)


def _failure(action: str, error: Exception) -> OperationResult:
    if isinstance(error, HostlinkError):
        logger.info(f"{action} failed: {error}")
    else:
        logger.warning(f"{action} failed: {error}")
    return OperationResult.fail(str(error) or type(error).__name__)


async def _guard(action: str, awaitable: Awaitable[Any]) -> OperationResult:
    try:
        return OperationResult.ok(await awaitable)
    except _EXPECTED_ERRORS as e:
        return _failure(action, e)


def _guard_call(action: str, func: Callable[[], Any]) -> OperationResult:
    """Synchronous counterpart of _guard for trust store calls."""
    try:
        return OperationResult.ok(func())
    except _EXPECTED_ERRORS as e:
        return _failure(action, e)


class HostlinkService:
    """Thin wrapper over a HostlinkContext for UI / IPC callers."""

    def __init__(self, context: HostlinkContext):
        self.context = context

    # --- Sessions ---

    async def connect(
        self,
        connection_id: str,
        host: str,
        port: int,
        username: str,
        password: Optional[str] = None,
        secure: bool = False,
    ) -> OperationResult:
        async def _connect() -> None:
            config = ConnectConfig(
                host=host,
                port=port,
                username=username,
                password=password,
                security_mode=SecurityMode.IMPLICIT_TLS if secure else SecurityMode.PLAIN,
            )
            await self.context.registry.connect(connection_id, config)

        return await _guard("connect", _connect())

    async def disconnect(self, connection_id: str) -> OperationResult:
        return await _guard("disconnect", self.context.registry.disconnect(connection_id))

    def is_connected(self, connection_id: str) -> bool:
        return self.context.registry.is_connected(connection_id)

    async def list_files(self, connection_id: str, remote_path: str) -> OperationResult:
        async def _list() -> list:
            entries = await self.context.files.list_files(connection_id, remote_path)
            return [e.to_dict() for e in entries]

        return await _guard("list", _list())

    async def read_file(self, connection_id: str, remote_path: str) -> OperationResult:
        return await _guard("read", self.context.files.read_file(connection_id, remote_path))

    async def write_file(self, connection_id: str, remote_path: str, content: str) -> OperationResult:
        return await _guard(
            "write", self.context.files.write_file(connection_id, remote_path, content)
        )

    async def download_file(
        self, connection_id: str, remote_path: str, local_path: str
    ) -> OperationResult:
        return await _guard(
            "download",
            self.context.files.download_file(connection_id, remote_path, Path(local_path)),
        )

    async def upload_file(
        self, connection_id: str, local_path: str, remote_path: str
    ) -> OperationResult:
        return await _guard(
            "upload",
            self.context.files.upload_file(connection_id, Path(local_path), remote_path),
        )

    async def delete_file(self, connection_id: str, remote_path: str) -> OperationResult:
        return await _guard("delete", self.context.files.delete_file(connection_id, remote_path))

    async def delete_directory(self, connection_id: str, remote_path: str) -> OperationResult:
        return await _guard(
            "delete directory", self.context.files.delete_directory(connection_id, remote_path)
        )

    async def create_directory(self, connection_id: str, remote_path: str) -> OperationResult:
        return await _guard(
            "create directory", self.context.files.create_directory(connection_id, remote_path)
        )

    async def rename(self, connection_id: str, old_path: str, new_path: str) -> OperationResult:
        return await _guard(
            "rename", self.context.files.rename(connection_id, old_path, new_path)
        )

    # --- Host keys ---

    async def verify_host(self, host: str, port: int = DEFAULT_SSH_PORT) -> OperationResult:
        result = await self.context.verifier.verify(host, port)
        if not result.ok:
            return OperationResult.fail(result.error or "Host key verification failed")
        return OperationResult.ok(result.to_dict())

    def trust_host(
        self,
        host: str,
        port: int,
        key_type: str,
        fingerprint: str,
        full_key: str,
    ) -> OperationResult:
        return _guard_call(
            "trust host",
            lambda: self.context.verifier.commit(
                host, port, key_type, fingerprint, full_key
            ).to_dict(),
        )

    def forget_host(self, host: str, port: int = DEFAULT_SSH_PORT) -> OperationResult:
        return _guard_call("forget host", lambda: self.context.verifier.forget(host, port))

    def known_host(self, host: str, port: int = DEFAULT_SSH_PORT) -> OperationResult:
        def _lookup() -> Optional[Dict[str, Any]]:
            record = self.context.store.get(HostIdentity.of(host, port))
            return record.to_dict() if record else None

        return _guard_call("known host", _lookup)

    def known_hosts(self) -> OperationResult:
        return OperationResult.ok([r.to_dict() for r in self.context.store.get_all()])

    def clear_known_hosts(self) -> OperationResult:
        self.context.store.clear()
        return OperationResult.ok()
