"""
FTP / implicit FTPS transport over ftplib.

ftplib is blocking; each call runs in a worker thread via asyncio.to_thread.
Calls are never concurrent because the owning OperationQueue serializes
them. close() only sends QUIT while no call is in flight; otherwise it drops
the socket so two threads never share the control channel.
"""

from __future__ import annotations

import asyncio
import ftplib
import io
import logging
import posixpath
import re
import ssl
from datetime import datetime, timezone
from typing import Callable, List, Optional, TypeVar

from hostlink.config.defaults import TRANSPORT_TIMEOUT_SECONDS

from .models import ConnectConfig, RemoteEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MLSD_FACTS = ["type", "size", "modify", "unix.mode", "perm"]

_LIST_LINE = re.compile(
    r"^(?P<perms>[\-ldbcps][rwxsStT\-]{9})\S*\s+\d+\s+\S+\s+\S+\s+(?P<size>\d+)\s+"
    r"(?P<month>[A-Za-z]{3})\s+(?P<day>\d{1,2})\s+(?P<timeyear>\d{1,2}:\d{2}|\d{4})\s+"
    r"(?P<name>.+)$"
)


class ImplicitFTPTLS(ftplib.FTP_TLS):
    """FTP_TLS variant that wraps the control socket as soon as it connects."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._sock = None

    @property
    def sock(self):
        return self._sock

    @sock.setter
    def sock(self, value):
        if value is not None and not isinstance(value, ssl.SSLSocket):
            value = self.context.wrap_socket(value, server_hostname=self.host)
        self._sock = value


def _insecure_tls_context() -> ssl.SSLContext:
    # Server certificates are not verified; self-signed servers are common
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


def parse_permissions(perms: str) -> int:
    """Convert an ``ls -l`` mode string (``rwxr-xr-x``) to an octal int."""
    if len(perms) == 10:
        perms = perms[1:]
    mode = 0
    for i, char in enumerate(perms[:9]):
        if char not in "-STl":
            mode |= 1 << (8 - i)
    return mode


def _parse_mlsd_time(value: str) -> Optional[datetime]:
    try:
        return datetime.strptime(value[:14], "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def entry_from_mlsd(name: str, facts: dict) -> Optional[RemoteEntry]:
    kind = facts.get("type", "").lower()
    if kind in ("cdir", "pdir") or name in (".", ".."):
        return None
    if kind == "dir":
        entry_type = "directory"
    elif "slink" in kind or "symlink" in kind:
        entry_type = "symlink"
    else:
        entry_type = "file"
    mode = facts.get("unix.mode")
    try:
        permissions = int(mode, 8) if mode else None
    except ValueError:
        permissions = None
    return RemoteEntry(
        name=name,
        type=entry_type,
        size=int(facts.get("size") or 0),
        modify_time=_parse_mlsd_time(facts["modify"]) if facts.get("modify") else None,
        permissions=permissions,
    )


def entry_from_list_line(line: str, now: Optional[datetime] = None) -> Optional[RemoteEntry]:
    """Parse one Unix-style LIST line; returns None for lines it cannot read."""
    match = _LIST_LINE.match(line.strip())
    if not match:
        return None
    perms = match.group("perms")
    name = match.group("name")
    entry_type = {"d": "directory", "l": "symlink"}.get(perms[0], "file")
    if entry_type == "symlink" and " -> " in name:
        name = name.split(" -> ", 1)[0]
    if name in (".", ".."):
        return None

    now = now or datetime.now(timezone.utc)
    timeyear = match.group("timeyear")
    stamp = f"{match.group('month')} {match.group('day')}"
    try:
        if ":" in timeyear:
            modified = datetime.strptime(f"{stamp} {now.year} {timeyear}", "%b %d %Y %H:%M")
            modified = modified.replace(tzinfo=timezone.utc)
            # LIST omits the year for the last six months only
            if modified > now:
                modified = modified.replace(year=now.year - 1)
        else:
            modified = datetime.strptime(f"{stamp} {timeyear}", "%b %d %Y").replace(
                tzinfo=timezone.utc
            )
    except ValueError:
        modified = None

    return RemoteEntry(
        name=name,
        type=entry_type,
        size=int(match.group("size")),
        modify_time=modified,
        permissions=parse_permissions(perms),
    )


class FTPTransport:
    """Transport backed by one ftplib control connection."""

    def __init__(self, config: ConnectConfig, timeout: float = TRANSPORT_TIMEOUT_SECONDS):
        self.config = config
        self.timeout = timeout
        self._ftp: Optional[ftplib.FTP] = None
        self._in_flight = 0

    @property
    def is_open(self) -> bool:
        return self._ftp is not None and self._ftp.sock is not None

    def _client(self) -> ftplib.FTP:
        if self._ftp is None:
            raise ConnectionError("FTP session is closed")
        return self._ftp

    def _open_sync(self) -> ftplib.FTP:
        cfg = self.config
        if cfg.secure:
            ftp: ftplib.FTP = ImplicitFTPTLS(context=_insecure_tls_context(), timeout=self.timeout)
        else:
            ftp = ftplib.FTP(timeout=self.timeout)
        try:
            ftp.connect(cfg.host, cfg.port, timeout=self.timeout)
            ftp.login(cfg.username, cfg.password or "")
            if cfg.secure:
                ftp.prot_p()
        except Exception:
            ftp.close()
            raise
        return ftp

    async def open(self) -> None:
        logger.info(
            f"Connecting to {self.config.host}:{self.config.port} "
            f"secure={self.config.secure}"
        )
        self._ftp = await asyncio.to_thread(self._open_sync)

    async def _call(self, func: Callable[..., T], *args) -> T:
        """Run one blocking ftplib call in a worker thread, tracking it as in flight."""
        self._in_flight += 1
        try:
            return await asyncio.to_thread(func, *args)
        finally:
            self._in_flight -= 1

    async def close(self) -> None:
        ftp, self._ftp = self._ftp, None
        if ftp is None:
            return

        if self._in_flight:
            # A worker thread still owns the control channel; QUIT would interleave with it
            logger.warning(
                f"Closing {self.config.host}:{self.config.port} without QUIT: "
                f"{self._in_flight} call(s) in flight"
            )
            ftp.close()
            return

        def _quit() -> None:
            try:
                ftp.quit()
            except ftplib.all_errors:
                ftp.close()

        await asyncio.to_thread(_quit)

    def _list_sync(self, path: str) -> List[RemoteEntry]:
        ftp = self._client()
        try:
            entries = [entry_from_mlsd(name, facts) for name, facts in ftp.mlsd(path, _MLSD_FACTS)]
        except ftplib.error_perm:
            lines: List[str] = []
            ftp.retrlines(f"LIST {path}", lines.append)
            entries = [entry_from_list_line(line) for line in lines]
        return [e for e in entries if e is not None]

    async def list(self, path: str) -> List[RemoteEntry]:
        return await self._call(self._list_sync, path)

    def _read_sync(self, path: str) -> bytes:
        buf = io.BytesIO()
        self._client().retrbinary(f"RETR {path}", buf.write)
        return buf.getvalue()

    async def read_bytes(self, path: str) -> bytes:
        return await self._call(self._read_sync, path)

    def _write_sync(self, path: str, data: bytes) -> None:
        self._client().storbinary(f"STOR {path}", io.BytesIO(data))

    async def write_bytes(self, path: str, data: bytes) -> None:
        await self._call(self._write_sync, path, data)

    async def remove(self, path: str) -> None:
        await self._call(self._client().delete, path)

    def _remove_dir_sync(self, path: str) -> None:
        ftp = self._client()
        for entry in self._list_sync(path):
            child = posixpath.join(path, entry.name)
            if entry.is_dir:
                self._remove_dir_sync(child)
            else:
                ftp.delete(child)
        ftp.rmd(path)

    async def remove_dir(self, path: str) -> None:
        await self._call(self._remove_dir_sync, path)

    def _make_dir_sync(self, path: str) -> None:
        ftp = self._client()
        current = "/" if path.startswith("/") else ""
        for part in [p for p in path.split("/") if p]:
            current = posixpath.join(current, part) if current else part
            try:
                ftp.mkd(current)
            except ftplib.error_perm as e:
                # 550 covers "exists" as well as "permission denied" and "no such path"
                if not str(e).startswith("550") or not self._is_dir_sync(current):
                    raise

    def _is_dir_sync(self, path: str) -> bool:
        ftp = self._client()
        saved = ftp.pwd()
        try:
            ftp.cwd(path)
        except ftplib.error_perm:
            return False
        ftp.cwd(saved)
        return True

    async def make_dir(self, path: str) -> None:
        await self._call(self._make_dir_sync, path)

    async def rename(self, source: str, target: str) -> None:
        await self._call(self._client().rename, source, target)
