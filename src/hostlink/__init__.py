"""
hostlink - serialized remote file-transfer sessions and TOFU host key checks.
"""

from __future__ import annotations

__version__ = "0.1.0"

from hostlink.context import HostlinkContext
from hostlink.service import HostlinkService, OperationResult

__all__ = ["HostlinkContext", "HostlinkService", "OperationResult", "__version__"]
