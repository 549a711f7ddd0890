"""
hostlink session subsystem - serialized access to stateful file-transfer sessions.
"""

from __future__ import annotations

from .files import RemoteFiles
from .models import ConnectConfig, RemoteEntry, SecurityMode, Session
from .queue import OperationQueue
from .registry import ConnectionRegistry
from .transport import Transport, TransportFactory, default_transport_factory

__all__ = [
    "ConnectionRegistry",
    "OperationQueue",
    "RemoteFiles",
    "ConnectConfig",
    "RemoteEntry",
    "SecurityMode",
    "Session",
    "Transport",
    "TransportFactory",
    "default_transport_factory",
]
