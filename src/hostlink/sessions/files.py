"""
RemoteFiles - file operations routed through each connection's queue.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Awaitable, Callable, List, TypeVar

import aiofiles

from hostlink.errors import HostlinkError, TransportError

from .models import RemoteEntry
from .registry import ConnectionRegistry
from .transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RemoteFiles:
    """
    File manager operations on registered connections.

    Every call is serialized per connection. Transport failures surface as
    TransportError to the caller of that call only.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    async def _run(
        self,
        connection_id: str,
        action: str,
        operation: Callable[[Transport], Awaitable[T]],
    ) -> T:
        async def call(transport: Transport) -> T:
            try:
                return await operation(transport)
            except HostlinkError:
                raise
            except Exception as e:
                raise TransportError(f"{action} failed: {e}") from e

        return await self.registry.enqueue(connection_id, call)

    async def list_files(self, connection_id: str, remote_path: str) -> List[RemoteEntry]:
        return await self._run(
            connection_id, f"list {remote_path}", lambda t: t.list(remote_path)
        )

    async def download_file(self, connection_id: str, remote_path: str, local_path: Path) -> int:
        """Copy a remote file to ``local_path``. Returns the byte count."""
        local_path = Path(local_path)

        async def download(transport: Transport) -> int:
            data = await transport.read_bytes(remote_path)
            local_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(local_path, "wb") as f:
                await f.write(data)
            return len(data)

        size = await self._run(connection_id, f"download {remote_path}", download)
        logger.info(f"Downloaded: {remote_path} -> {local_path} ({size} bytes)")
        return size

    async def upload_file(self, connection_id: str, local_path: Path, remote_path: str) -> int:
        """Copy ``local_path`` to the remote side. Returns the byte count."""
        local_path = Path(local_path)

        async def upload(transport: Transport) -> int:
            async with aiofiles.open(local_path, "rb") as f:
                data = await f.read()
            await transport.write_bytes(remote_path, data)
            return len(data)

        size = await self._run(connection_id, f"upload {remote_path}", upload)
        logger.info(f"Uploaded: {local_path} -> {remote_path} ({size} bytes)")
        return size

    async def delete_file(self, connection_id: str, remote_path: str) -> None:
        await self._run(connection_id, f"delete {remote_path}", lambda t: t.remove(remote_path))
        logger.info(f"Deleted file: {remote_path}")

    async def delete_directory(self, connection_id: str, remote_path: str) -> None:
        await self._run(
            connection_id, f"delete directory {remote_path}", lambda t: t.remove_dir(remote_path)
        )
        logger.info(f"Deleted directory: {remote_path}")

    async def create_directory(self, connection_id: str, remote_path: str) -> None:
        await self._run(
            connection_id, f"create directory {remote_path}", lambda t: t.make_dir(remote_path)
        )
        logger.info(f"Created directory: {remote_path}")

    async def rename(self, connection_id: str, old_path: str, new_path: str) -> None:
        await self._run(
            connection_id, f"rename {old_path}", lambda t: t.rename(old_path, new_path)
        )
        logger.info(f"Renamed: {old_path} -> {new_path}")

    async def read_file(self, connection_id: str, remote_path: str) -> str:
        data = await self._run(
            connection_id, f"read {remote_path}", lambda t: t.read_bytes(remote_path)
        )
        content = data.decode("utf-8", errors="replace")
        logger.debug(f"Read file: {remote_path} size: {len(content)}")
        return content

    async def write_file(self, connection_id: str, remote_path: str, content: str) -> None:
        data = content.encode("utf-8")
        await self._run(
            connection_id, f"write {remote_path}", lambda t: t.write_bytes(remote_path, data)
        )
        logger.debug(f"Wrote file: {remote_path} size: {len(data)}")
