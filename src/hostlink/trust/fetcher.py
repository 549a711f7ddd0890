"""
Out-of-band host key fetching.

KeyFetcher is the narrow capability the verifier depends on; the
default implementation shells out to ssh-keyscan.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, runtime_checkable

from hostlink.config.defaults import (
    KEYSCAN_ATTEMPT_TIMEOUT_SECONDS,
    KEYSCAN_BINARY,
    KEYSCAN_TOTAL_TIMEOUT_SECONDS,
)
from hostlink.errors import ScanError

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyFetcher(Protocol):
    """Fetch a host's public keys as ``host keytype base64key`` lines."""

    async def fetch(self, host: str, port: int) -> str:
        ...


class KeyscanFetcher:
    """
    Run ssh-keyscan with two timeouts.

    ``attempt_timeout`` is passed to the tool (-T); ``total_timeout`` is
    enforced here and kills the process if it is still running.
    """

    def __init__(
        self,
        binary: str = KEYSCAN_BINARY,
        attempt_timeout: int = KEYSCAN_ATTEMPT_TIMEOUT_SECONDS,
        total_timeout: float = KEYSCAN_TOTAL_TIMEOUT_SECONDS,
    ):
        self.binary = binary
        self.attempt_timeout = attempt_timeout
        self.total_timeout = total_timeout

    def build_args(self, host: str, port: int) -> list[str]:
        return [self.binary, "-p", str(port), "-T", str(self.attempt_timeout), host]

    async def fetch(self, host: str, port: int) -> str:
        """
        Return the tool's stdout.

        Raises:
            ScanError: On spawn failure, timeout, non-zero exit or empty output.
        """
        args = self.build_args(host, port)
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ScanError(f"{self.binary} error: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.total_timeout
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.warning(f"Key fetch for {host}:{port} killed after {self.total_timeout}s")
            raise ScanError("Timeout fetching host key")

        output = stdout.decode("utf-8", errors="replace") if stdout else ""
        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
            raise ScanError(
                f"{self.binary} exited with status {proc.returncode}"
                + (f": {detail[:200]}" if detail else "")
            )
        if not output.strip():
            raise ScanError(
                "Could not fetch host key. Host may be unreachable or SSH not running."
            )
        return output
