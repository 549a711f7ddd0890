"""Path resolution for hostlink – single source of truth for the state directory."""

from pathlib import Path
import os

from hostlink.config.defaults import KNOWN_HOSTS_FILENAME, STATE_DIR_NAME


def get_state_dir() -> Path:
    """Return the per-user directory holding hostlink state.

    Checks environment variable HOSTLINK_HOME first; otherwise uses
    ~/.hostlink.
    """
    env_path = os.environ.get("HOSTLINK_HOME")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / STATE_DIR_NAME


def get_known_hosts_path(state_dir: Path | None = None) -> Path:
    """Return the trust store file inside ``state_dir`` (or the default state dir)."""
    return (state_dir or get_state_dir()) / KNOWN_HOSTS_FILENAME
