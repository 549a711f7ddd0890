"""Exception hierarchy for hostlink.

Errors raised to callers of the session layer derive from HostlinkError.
Host key scanning failures never escape ``HostKeyVerifier.verify``; they
are reported as an ERROR classification instead.
"""

from __future__ import annotations


class HostlinkError(Exception):
    """Base class for hostlink errors."""
    pass


class ConfigurationError(HostlinkError):
    """Bad connect parameters, or the transport refused to open."""
    pass


class NotConnectedError(HostlinkError):
    """Operation addressed to a connection id with no live session."""

    def __init__(self, connection_id: str):
        super().__init__(f"Not connected: {connection_id}")
        self.connection_id = connection_id


class TransportError(HostlinkError):
    """A queued operation failed against the remote session."""
    pass


class QueueClosedError(HostlinkError):
    """Operation enqueued after the session's queue was shut down."""
    pass


class ScanError(HostlinkError):
    """The out-of-band host key fetch failed or returned nothing usable."""
    pass


class PersistenceError(HostlinkError):
    """The trust store file could not be read or written."""
    pass
