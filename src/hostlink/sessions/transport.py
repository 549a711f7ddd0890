"""
Transport capability consumed by the session layer.

A transport is one stateful remote file-transfer session. It is not safe
for concurrent use; the registry routes every call through the owning
connection's OperationQueue.
"""

from __future__ import annotations

from typing import Callable, List, Protocol, runtime_checkable

from .models import ConnectConfig, RemoteEntry


@runtime_checkable
class Transport(Protocol):

    @property
    def is_open(self) -> bool:
        ...

    async def open(self) -> None:
        """Connect and authenticate. Raises on failure."""
        ...

    async def close(self) -> None:
        ...

    async def list(self, path: str) -> List[RemoteEntry]:
        ...

    async def read_bytes(self, path: str) -> bytes:
        ...

    async def write_bytes(self, path: str, data: bytes) -> None:
        ...

    async def remove(self, path: str) -> None:
        ...

    async def remove_dir(self, path: str) -> None:
        """Remove a directory and everything below it."""
        ...

    async def make_dir(self, path: str) -> None:
        """Create a directory and any missing parents."""
        ...

    async def rename(self, source: str, target: str) -> None:
        ...


TransportFactory = Callable[[ConnectConfig], Transport]


def default_transport_factory(config: ConnectConfig) -> Transport:
    """Build the FTP/FTPS transport for ``config``."""
    from .ftp import FTPTransport

    return FTPTransport(config)
