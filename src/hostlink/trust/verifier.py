"""
HostKeyVerifier - trust-on-first-use classification of SSH host keys.

verify() only reads the trust store; commit() is the single path that
records trust.
"""

from __future__ import annotations

import logging
from typing import Optional

from hostlink.config.defaults import DEFAULT_SSH_PORT
from hostlink.errors import ScanError

from .fetcher import KeyFetcher, KeyscanFetcher
from .fingerprint import compute_fingerprint, parse_host_keys, select_host_key
from .models import (
    FingerprintResult,
    FingerprintStatus,
    HostIdentity,
    TrustRecord,
)
from .store import TrustStore

logger = logging.getLogger(__name__)


class HostKeyVerifier:
    """
    Compare a host's live key with the last trusted one.

    Failures never raise out of verify(); they come back as an ERROR result.
    """

    def __init__(self, store: TrustStore, fetcher: Optional[KeyFetcher] = None):
        self.store = store
        self.fetcher = fetcher or KeyscanFetcher()

    async def verify(self, host: str, port: int = DEFAULT_SSH_PORT) -> FingerprintResult:
        """
        Fetch, fingerprint and classify the host's current key.

        Args:
            host: Hostname or address.
            port: SSH port.

        Returns:
            FingerprintResult with status NEW, MATCH, CHANGED or ERROR.
        """
        try:
            identity = HostIdentity.of(host, port)
        except ValueError as e:
            return FingerprintResult.failed(str(e))

        try:
            output = await self.fetcher.fetch(identity.host, identity.port)
        except ScanError as e:
            logger.warning(f"Host key fetch failed for {identity}: {e}")
            return FingerprintResult.failed(str(e))
        except Exception as e:
            logger.warning(f"Host key fetch error for {identity}: {e}")
            return FingerprintResult.failed(f"Key fetch error: {e}")

        key = select_host_key(parse_host_keys(output))
        if key is None:
            return FingerprintResult.failed("Could not parse host key from key scan output")

        try:
            fingerprint = compute_fingerprint(key.key_data)
        except ScanError as e:
            return FingerprintResult.failed(str(e))

        existing = self.store.get(identity)
        if existing is None:
            status = FingerprintStatus.NEW
            previous = None
        elif existing.fingerprint == fingerprint:
            status = FingerprintStatus.MATCH
            previous = None
        else:
            status = FingerprintStatus.CHANGED
            previous = existing.fingerprint
            logger.warning(
                f"Host key for {identity} changed: {existing.fingerprint} -> {fingerprint}"
            )

        return FingerprintResult(
            status=status,
            key_type=key.key_type,
            fingerprint=fingerprint,
            full_key=key.full_key,
            previous_fingerprint=previous,
        )

    def commit(
        self,
        host: str,
        port: int,
        key_type: str,
        fingerprint: str,
        full_key: str,
    ) -> TrustRecord:
        """Record (or replace) the trusted key for host:port and persist the store."""
        identity = HostIdentity.of(host, port)
        record = TrustRecord(
            host=identity.host,
            port=identity.port,
            key_type=key_type,
            fingerprint=fingerprint,
            full_key=full_key,
        )
        self.store.add(record)
        return record

    def accept(
        self, result: FingerprintResult, host: str, port: int = DEFAULT_SSH_PORT
    ) -> TrustRecord:
        """
        Commit the key carried by a verify() result.

        Raises:
            ValueError: If the result carries no key (ERROR status).
        """
        if not result.ok or not result.fingerprint:
            raise ValueError(f"Cannot trust a failed verification: {result.error}")
        return self.commit(
            host,
            port,
            result.key_type or "",
            result.fingerprint,
            result.full_key or "",
        )

    def forget(self, host: str, port: int = DEFAULT_SSH_PORT) -> bool:
        """Drop the trusted key for host:port."""
        return self.store.remove(HostIdentity.of(host, port))
