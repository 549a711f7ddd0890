"""Tests for RemoteFiles."""

import asyncio

import pytest

from hostlink.errors import NotConnectedError, TransportError
from hostlink.sessions import ConnectionRegistry, RemoteFiles


@pytest.fixture
def files(transports):
    return RemoteFiles(ConnectionRegistry(transports))


async def _connect(files, ftp_config, connection_id="c1"):
    session = await files.registry.connect(connection_id, ftp_config)
    return session.transport


@pytest.mark.asyncio
async def test_write_then_read(files, ftp_config):
    await _connect(files, ftp_config)

    await files.write_file("c1", "/notes.txt", "héllo")
    content = await files.read_file("c1", "/notes.txt")

    assert content == "héllo"


@pytest.mark.asyncio
async def test_list_files(files, ftp_config):
    transport = await _connect(files, ftp_config)
    transport.files = {"/srv/a.txt": b"abc", "/srv/sub/b.txt": b"b"}
    transport.dirs = {"/srv/sub"}

    entries = await files.list_files("c1", "/srv")

    assert [(e.name, e.type) for e in entries] == [("a.txt", "file"), ("sub", "directory")]
    assert entries[0].size == 3


@pytest.mark.asyncio
async def test_transport_failure_becomes_transport_error(files, ftp_config):
    await _connect(files, ftp_config)

    with pytest.raises(TransportError) as exc_info:
        await files.read_file("c1", "/missing.txt")

    assert "read /missing.txt failed" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, FileNotFoundError)


@pytest.mark.asyncio
async def test_failed_operation_does_not_poison_connection(files, ftp_config):
    await _connect(files, ftp_config)

    results = await asyncio.gather(
        files.delete_file("c1", "/missing.txt"),
        files.write_file("c1", "/ok.txt", "fine"),
        files.read_file("c1", "/ok.txt"),
        return_exceptions=True,
    )

    assert isinstance(results[0], TransportError)
    assert results[1] is None
    assert results[2] == "fine"


@pytest.mark.asyncio
async def test_upload_and_download(files, ftp_config, tmp_path):
    transport = await _connect(files, ftp_config)
    source = tmp_path / "upload.bin"
    source.write_bytes(b"\x00\x01payload")

    uploaded = await files.upload_file("c1", source, "/remote.bin")
    target = tmp_path / "nested" / "download.bin"
    downloaded = await files.download_file("c1", "/remote.bin", target)

    assert uploaded == downloaded == 9
    assert transport.files["/remote.bin"] == b"\x00\x01payload"
    assert target.read_bytes() == b"\x00\x01payload"


@pytest.mark.asyncio
async def test_directory_and_rename_operations(files, ftp_config):
    transport = await _connect(files, ftp_config)

    await files.create_directory("c1", "/data")
    await files.write_file("c1", "/data/a.txt", "a")
    await files.rename("c1", "/data/a.txt", "/data/b.txt")
    assert set(transport.files) == {"/data/b.txt"}

    await files.delete_directory("c1", "/data")

    assert transport.files == {}
    assert transport.dirs == set()
    assert transport.events == [
        "make_dir /data",
        "write /data/a.txt",
        "rename /data/a.txt /data/b.txt",
        "remove_dir /data",
    ]


@pytest.mark.asyncio
async def test_not_connected(files):
    with pytest.raises(NotConnectedError):
        await files.list_files("nope", "/")


@pytest.mark.asyncio
async def test_operations_follow_reconnect(files, transports, ftp_config):
    """After a reconnect, new operations run on the new transport."""
    await _connect(files, ftp_config)
    await files.write_file("c1", "/a.txt", "old")
    await _connect(files, ftp_config)

    await files.write_file("c1", "/a.txt", "new")

    assert transports.built[0].files == {"/a.txt": b"old"}
    assert transports.built[1].files == {"/a.txt": b"new"}
