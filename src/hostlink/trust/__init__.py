"""
hostlink trust subsystem - trust-on-first-use SSH host key verification.
"""

from __future__ import annotations

from .fetcher import KeyFetcher, KeyscanFetcher
from .fingerprint import compute_fingerprint, parse_host_keys, select_host_key
from .models import (
    FingerprintResult,
    FingerprintStatus,
    HostIdentity,
    HostKey,
    TrustRecord,
)
from .store import TrustStore
from .verifier import HostKeyVerifier

__all__ = [
    "HostKeyVerifier",
    "TrustStore",
    "KeyFetcher",
    "KeyscanFetcher",
    "FingerprintResult",
    "FingerprintStatus",
    "HostIdentity",
    "HostKey",
    "TrustRecord",
    "compute_fingerprint",
    "parse_host_keys",
    "select_host_key",
]
