"""
HostlinkContext - owns every process-wide registry.

One explicitly constructed object holds the trust store, the verifier and
the connection registry, instead of module-level singletons.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Optional

from hostlink.config import HostlinkConfig
from hostlink.sessions import ConnectionRegistry, RemoteFiles, TransportFactory
from hostlink.sessions.ftp import FTPTransport
from hostlink.trust import HostKeyVerifier, KeyFetcher, KeyscanFetcher, TrustStore

logger = logging.getLogger(__name__)


@dataclass
class HostlinkContext:
    config: HostlinkConfig
    store: TrustStore
    verifier: HostKeyVerifier
    registry: ConnectionRegistry
    files: RemoteFiles

    @classmethod
    def create(
        cls,
        config: Optional[HostlinkConfig] = None,
        fetcher: Optional[KeyFetcher] = None,
        transport_factory: Optional[TransportFactory] = None,
    ) -> "HostlinkContext":
        """Wire up all components; anything not supplied is built from ``config``."""
        config = config or HostlinkConfig.from_env()
        store = TrustStore(config.known_hosts_path)
        fetcher = fetcher or KeyscanFetcher(
            binary=config.keyscan_binary,
            attempt_timeout=config.keyscan_timeout,
            total_timeout=config.keyscan_total_timeout,
        )
        transport_factory = transport_factory or functools.partial(
            FTPTransport, timeout=config.transport_timeout
        )
        registry = ConnectionRegistry(transport_factory)
        logger.debug(f"Context created with state dir {config.state_dir}")
        return cls(
            config=config,
            store=store,
            verifier=HostKeyVerifier(store, fetcher),
            registry=registry,
            files=RemoteFiles(registry),
        )

    async def close(self) -> None:
        """Tear down all live sessions."""
        await self.registry.close_all()

    async def __aenter__(self) -> "HostlinkContext":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()
