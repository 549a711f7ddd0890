"""
Host key parsing and fingerprinting.

Parses ssh-keyscan style output and computes OpenSSH-compatible
SHA256 fingerprints.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from typing import List, Optional, Sequence

from hostlink.config.defaults import FINGERPRINT_DIGEST, KEY_TYPE_PREFERENCE
from hostlink.errors import ScanError

from .models import HostKey


def parse_host_keys(output: str) -> List[HostKey]:
    """
    Parse newline-delimited ``host keytype base64key`` records.

    Blank lines, ``#`` comments and lines with fewer than three fields
    are skipped. Order of appearance is preserved.
    """
    keys: List[HostKey] = []
    for raw in output.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) < 3:
            continue
        keys.append(HostKey(key_type=parts[1], key_data=parts[2]))
    return keys


def _preference_rank(key_type: str, preference: Sequence[str]) -> Optional[int]:
    for rank, pattern in enumerate(preference):
        if pattern.endswith("-"):
            if key_type.startswith(pattern):
                return rank
        elif key_type == pattern:
            return rank
    return None


def select_host_key(
    keys: Sequence[HostKey],
    preference: Sequence[str] = KEY_TYPE_PREFERENCE,
) -> Optional[HostKey]:
    """
    Pick one key: ed25519 > ecdsa-* > rsa, else the first one seen.

    Within one preference rank the first key seen wins.
    """
    if not keys:
        return None
    best: Optional[HostKey] = None
    best_rank: Optional[int] = None
    for key in keys:
        rank = _preference_rank(key.key_type, preference)
        if rank is None:
            continue
        if best_rank is None or rank < best_rank:
            best, best_rank = key, rank
    return best or keys[0]


def compute_fingerprint(key_data: str) -> str:
    """
    SHA256 fingerprint of a base64 key blob, as printed by ssh-keygen -l.

    Raises:
        ScanError: If the payload is not valid base64.
    """
    try:
        raw = base64.b64decode(key_data.encode("ascii"), validate=True)
    except (binascii.Error, ValueError, UnicodeEncodeError) as e:
        raise ScanError(f"Invalid key payload: {e}") from e
    if not raw:
        raise ScanError("Empty key payload")
    digest = hashlib.sha256(raw).digest()
    encoded = base64.b64encode(digest).decode("ascii").rstrip("=")
    return f"{FINGERPRINT_DIGEST}:{encoded}"
