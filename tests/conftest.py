"""Pytest configuration for hostlink tests."""
import sys
from pathlib import Path

import pytest

# Add src to path for the tests - conftest is in tests/, so parent.parent is project root
project_root = Path(__file__).resolve().parent.parent
src_path = project_root / "src"

sys.path.insert(0, str(src_path))

from hostlink.errors import ScanError  # noqa: E402
from hostlink.sessions import ConnectConfig, RemoteEntry  # noqa: E402


class FakeFetcher:
    """KeyFetcher returning canned output (or raising) without touching the network."""

    def __init__(self, output: str = "", error: Exception | None = None):
        self.output = output
        self.error = error
        self.calls = []

    async def fetch(self, host: str, port: int) -> str:
        self.calls.append((host, port))
        if self.error is not None:
            raise self.error
        if not self.output.strip():
            raise ScanError("Could not fetch host key. Host may be unreachable or SSH not running.")
        return self.output


class MemoryTransport:
    """In-memory Transport that records the order in which operations ran."""

    def __init__(self, config: ConnectConfig | None = None, fail_open: Exception | None = None,
                 fail_close: Exception | None = None):
        self.config = config
        self.files: dict[str, bytes] = {}
        self.dirs: set[str] = set()
        self.events: list[str] = []
        self.active = 0
        self.max_active = 0
        self.opened = False
        self.closed = False
        self.fail_open = fail_open
        self.fail_close = fail_close

    @property
    def is_open(self) -> bool:
        return self.opened and not self.closed

    async def open(self) -> None:
        if self.fail_open is not None:
            raise self.fail_open
        self.opened = True

    async def close(self) -> None:
        self.closed = True
        if self.fail_close is not None:
            raise self.fail_close

    async def _step(self, name: str) -> None:
        if self.closed:
            raise ConnectionError("transport closed")
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.events.append(name)
        self.active -= 1

    async def list(self, path: str) -> list[RemoteEntry]:
        await self._step(f"list {path}")
        prefix = path.rstrip("/") + "/"
        entries = [
            RemoteEntry(name=p[len(prefix):], type="file", size=len(data))
            for p, data in self.files.items()
            if p.startswith(prefix) and "/" not in p[len(prefix):]
        ]
        entries += [
            RemoteEntry(name=d[len(prefix):], type="directory")
            for d in self.dirs
            if d.startswith(prefix) and "/" not in d[len(prefix):]
        ]
        return sorted(entries, key=lambda e: e.name)

    async def read_bytes(self, path: str) -> bytes:
        await self._step(f"read {path}")
        if path not in self.files:
            raise FileNotFoundError(f"550 {path}: No such file")
        return self.files[path]

    async def write_bytes(self, path: str, data: bytes) -> None:
        await self._step(f"write {path}")
        self.files[path] = data

    async def remove(self, path: str) -> None:
        await self._step(f"remove {path}")
        if path not in self.files:
            raise FileNotFoundError(f"550 {path}: No such file")
        del self.files[path]

    async def remove_dir(self, path: str) -> None:
        await self._step(f"remove_dir {path}")
        prefix = path.rstrip("/") + "/"
        self.files = {p: d for p, d in self.files.items() if not p.startswith(prefix)}
        self.dirs = {d for d in self.dirs if d != path and not d.startswith(prefix)}

    async def make_dir(self, path: str) -> None:
        await self._step(f"make_dir {path}")
        self.dirs.add(path)

    async def rename(self, source: str, target: str) -> None:
        await self._step(f"rename {source} {target}")
        self.files[target] = self.files.pop(source)


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def transports():
    """Factory that builds MemoryTransports and remembers every one it built."""
    built: list[MemoryTransport] = []

    def factory(config: ConnectConfig) -> MemoryTransport:
        transport = MemoryTransport(config)
        built.append(transport)
        return transport

    factory.built = built
    return factory


@pytest.fixture
def ftp_config():
    return ConnectConfig(host="ftp.example.com", port=21, username="alice", password="secret")
