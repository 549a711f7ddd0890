"""Default configuration values for hostlink.

This module centralizes the hard-coded numbers (ports, timeouts, file
names) used across the trust and session subsystems. Modules should
import these constants instead of hard-coding values.

Usage:
    from hostlink.config.defaults import (
        DEFAULT_SSH_PORT,
        KEYSCAN_TOTAL_TIMEOUT_SECONDS,
    )
"""

from __future__ import annotations

# =============================================================================
# Host Key Verification
# =============================================================================

# Hosts on this port are keyed by bare hostname in the trust store
DEFAULT_SSH_PORT = 22

KEYSCAN_BINARY = "ssh-keyscan"

# Passed to the fetch tool itself (-T)
KEYSCAN_ATTEMPT_TIMEOUT_SECONDS = 5

# Wall-clock limit; the fetch process is killed once it elapses
KEYSCAN_TOTAL_TIMEOUT_SECONDS = 10.0

# Earlier entries win; "ecdsa-" matches every ecdsa-sha2-* curve
KEY_TYPE_PREFERENCE = ("ssh-ed25519", "ecdsa-", "ssh-rsa")

FINGERPRINT_DIGEST = "SHA256"


# =============================================================================
# Trust Store
# =============================================================================

STATE_DIR_NAME = ".hostlink"
KNOWN_HOSTS_FILENAME = "known_hosts.json"


# =============================================================================
# Transport Defaults
# =============================================================================

TRANSPORT_TIMEOUT_SECONDS = 30.0

DEFAULT_FTP_PORT = 21
DEFAULT_FTPS_IMPLICIT_PORT = 990
