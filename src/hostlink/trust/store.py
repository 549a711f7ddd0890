"""
TrustStore - JSON-file persistence for trusted host keys.

The whole file is loaded once at construction and rewritten atomically
on every mutation. A single owning process is assumed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from hostlink.config.paths import get_known_hosts_path
from hostlink.errors import PersistenceError
from hostlink.persistence import ensure_state_dir, read_json, write_json_atomic

from .models import HostIdentity, TrustRecord

logger = logging.getLogger(__name__)


class TrustStore:
    """
    Mapping from host identity to its last-trusted key.

    At most one record is kept per identity; add() replaces.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_known_hosts_path()
        ensure_state_dir(self.path.parent)
        self._records: Dict[str, TrustRecord] = {}
        self._load()

    def _load(self) -> None:
        """Load all records; an unreadable or corrupt file yields an empty store."""
        try:
            data = read_json(self.path)
            if data is None:
                return
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            # Keyed by the record's normalized identity, not the raw file key
            records: Dict[str, TrustRecord] = {}
            for value in data.values():
                record = TrustRecord.from_dict(value)
                records[record.identity.key] = record
        except (OSError, ValueError, KeyError, TypeError) as e:
            err = PersistenceError(f"Failed to load known hosts from {self.path}: {e}")
            logger.error(str(err))
            self._records = {}
            return
        self._records = records
        logger.debug(f"Loaded {len(records)} known hosts from {self.path}")

    def _save(self) -> None:
        """Rewrite the whole file. Failures are logged; memory keeps the change."""
        data = {key: record.to_dict() for key, record in self._records.items()}
        try:
            write_json_atomic(self.path, data)
        except OSError as e:
            err = PersistenceError(f"Failed to save known hosts to {self.path}: {e}")
            logger.error(str(err))

    def add(self, record: TrustRecord) -> None:
        """Insert or replace the record for the record's identity."""
        key = record.identity.key
        self._records[key] = record
        self._save()
        logger.info(f"Added known host: {key}")

    def remove(self, identity: HostIdentity) -> bool:
        """Remove a record. Returns True if one existed."""
        removed = self._records.pop(identity.key, None) is not None
        self._save()
        logger.info(f"Removed known host: {identity.key}")
        return removed

    def clear(self) -> None:
        """Remove every record."""
        self._records.clear()
        self._save()
        logger.info("Cleared all known hosts")

    def get(self, identity: HostIdentity) -> Optional[TrustRecord]:
        return self._records.get(identity.key)

    def get_all(self) -> List[TrustRecord]:
        return list(self._records.values())

    def has(self, identity: HostIdentity) -> bool:
        return identity.key in self._records

    def __len__(self) -> int:
        return len(self._records)
