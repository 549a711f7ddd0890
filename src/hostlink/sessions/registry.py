"""
ConnectionRegistry - owns live sessions and their connect/disconnect lifecycle.

Every operation against a connection goes through that connection's
OperationQueue, so one control channel never sees overlapping commands.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, List, Optional, TypeVar

from hostlink.errors import ConfigurationError, HostlinkError, NotConnectedError

from .models import ConnectConfig, Session
from .queue import OperationQueue
from .transport import Transport, TransportFactory, default_transport_factory

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_info(msg: str, **kwargs) -> None:
    """Log info message."""
    logger.info(f"{msg}: {kwargs}")


def _log_warning(msg: str, **kwargs) -> None:
    """Log warning message."""
    logger.warning(f"{msg}: {kwargs}")


class ConnectionRegistry:
    """
    Map of connection id to live Session.

    Invariant: at most one session per id. The map is only touched from
    the event loop, so no lock is held around it.
    """

    def __init__(self, transport_factory: Optional[TransportFactory] = None):
        self._transport_factory = transport_factory or default_transport_factory
        self._sessions: Dict[str, Session] = {}

    async def connect(self, connection_id: str, config: ConnectConfig) -> Session:
        """
        Open a new session for ``connection_id``, replacing any existing one.

        Raises:
            ConfigurationError: If the transport cannot be built or opened.
                The registry is left as it was before the call, minus the
                replaced session.
        """
        await self.disconnect(connection_id)

        try:
            transport = self._transport_factory(config)
        except HostlinkError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid connection settings: {e}") from e

        try:
            await transport.open()
        except Exception as e:
            _log_warning(
                "connect_failed",
                connection_id=connection_id,
                host=config.host,
                port=config.port,
                error=str(e),
            )
            await self._close_transport(connection_id, transport)
            if isinstance(e, ConfigurationError):
                raise
            raise ConfigurationError(
                f"Connection to {config.host}:{config.port} failed: {e}"
            ) from e

        # A concurrent connect() for the same id may have finished while we awaited
        stale = self._sessions.pop(connection_id, None)
        if stale is not None:
            await self._teardown(stale)

        session = Session(
            connection_id=connection_id,
            transport=transport,
            config=config,
            queue=OperationQueue(name=connection_id),
        )
        self._sessions[connection_id] = session
        _log_info(
            "connected",
            connection_id=connection_id,
            host=config.host,
            port=config.port,
            security=config.security_mode.value,
        )
        return session

    async def disconnect(self, connection_id: str) -> bool:
        """Close and forget the session. Returns False if there was none."""
        session = self._sessions.pop(connection_id, None)
        if session is None:
            return False
        await self._teardown(session)
        _log_info("disconnected", connection_id=connection_id)
        return True

    def get(self, connection_id: str) -> Session:
        """
        Raises:
            NotConnectedError: If no session exists for the id.
        """
        session = self._sessions.get(connection_id)
        if session is None:
            raise NotConnectedError(connection_id)
        return session

    def is_connected(self, connection_id: str) -> bool:
        session = self._sessions.get(connection_id)
        return session is not None and session.transport.is_open

    def active_count(self) -> int:
        return len(self._sessions)

    def connection_ids(self) -> List[str]:
        return list(self._sessions)

    async def enqueue(
        self,
        connection_id: str,
        operation: Callable[[Transport], Awaitable[T]],
    ) -> T:
        """
        Run ``operation(transport)`` on the connection's queue.

        Raises:
            NotConnectedError: If no session exists for the id.
        """
        session = self.get(connection_id)
        transport = session.transport
        return await session.queue.enqueue(lambda: operation(transport))

    async def close_all(self) -> None:
        """Tear down every session. One failure never stops the rest."""
        sessions = list(self._sessions.items())
        _log_info("closing_all", count=len(sessions))
        try:
            for _, session in sessions:
                await self._teardown(session)
        finally:
            self._sessions.clear()
        _log_info("all_closed")

    async def _teardown(self, session: Session) -> None:
        try:
            await session.queue.close()
        except Exception as e:
            _log_warning("queue_close_failed", connection_id=session.connection_id, error=str(e))
        await self._close_transport(session.connection_id, session.transport)

    async def _close_transport(self, connection_id: str, transport: Transport) -> None:
        try:
            await transport.close()
        except Exception as e:
            _log_warning("close_failed", connection_id=connection_id, error=str(e))

    def get_status(self) -> dict:
        """Get registry status for diagnostics."""
        return {
            "active": len(self._sessions),
            "sessions": [
                {
                    "connection_id": cid,
                    "host": s.config.host,
                    "port": s.config.port,
                    "open": s.transport.is_open,
                    "connected_at": s.connected_at.isoformat(),
                    "queue": s.queue.status(),
                }
                for cid, s in self._sessions.items()
            ],
        }
