"""Tests for HostKeyVerifier."""

from unittest.mock import patch

import pytest

from conftest import FakeFetcher
from hostlink.errors import ScanError
from hostlink.trust import (
    FingerprintStatus,
    HostIdentity,
    HostKeyVerifier,
    TrustStore,
    compute_fingerprint,
)

ED25519 = "AAAAC3NzaC1lZDI1NTE5AAAAIOMqqnkVzrm0SdG6UOoqKLsabgH5C9okWi0dh2l9GKJl"
RSA = "AAAAB3NzaC1yc2EAAAADAQABAAABAQC7"
SCAN_OUTPUT = (
    "# example.com:22 SSH-2.0-OpenSSH_9.6\n"
    f"example.com ssh-rsa {RSA}\n"
    f"example.com ssh-ed25519 {ED25519}\n"
)


@pytest.fixture
def store(tmp_path):
    return TrustStore(tmp_path / "known_hosts.json")


@pytest.fixture
def fetcher():
    return FakeFetcher(SCAN_OUTPUT)


@pytest.fixture
def verifier(store, fetcher):
    return HostKeyVerifier(store, fetcher)


@pytest.mark.asyncio
async def test_unknown_host_is_new(verifier, fetcher):
    result = await verifier.verify("Example.com", 22)

    assert result.status is FingerprintStatus.NEW
    assert result.key_type == "ssh-ed25519"
    assert result.fingerprint == compute_fingerprint(ED25519)
    assert result.full_key == f"ssh-ed25519 {ED25519}"
    assert result.previous_fingerprint is None
    assert fetcher.calls == [("example.com", 22)]


@pytest.mark.asyncio
async def test_verify_does_not_mutate_store(verifier, store, tmp_path):
    await verifier.verify("example.com")

    assert len(store) == 0
    assert not (tmp_path / "known_hosts.json").exists()


@pytest.mark.asyncio
async def test_commit_then_match_is_stable(verifier):
    first = await verifier.verify("example.com")
    verifier.accept(first, "example.com")

    second = await verifier.verify("example.com")
    third = await verifier.verify("example.com")

    assert second.status is FingerprintStatus.MATCH
    assert third.status is FingerprintStatus.MATCH
    assert second.fingerprint == first.fingerprint


@pytest.mark.asyncio
async def test_changed_key_reports_previous(verifier, store):
    verifier.commit("example.com", 22, "ssh-ed25519", "SHA256:AAA", "ssh-ed25519 old")

    with patch("hostlink.trust.verifier.compute_fingerprint", return_value="SHA256:BBB"):
        result = await verifier.verify("example.com", 22)

    assert result.status is FingerprintStatus.CHANGED
    assert result.fingerprint == "SHA256:BBB"
    assert result.previous_fingerprint == "SHA256:AAA"
    # verify never overwrites the trusted key
    assert store.get(HostIdentity.of("example.com")).fingerprint == "SHA256:AAA"


@pytest.mark.asyncio
async def test_accepting_changed_key_replaces_record(verifier, store):
    verifier.commit("example.com", 22, "ssh-ed25519", "SHA256:AAA", "ssh-ed25519 old")
    result = await verifier.verify("example.com")

    verifier.accept(result, "example.com")

    assert len(store) == 1
    assert store.get(HostIdentity.of("example.com")).fingerprint == compute_fingerprint(ED25519)
    assert (await verifier.verify("example.com")).status is FingerprintStatus.MATCH


@pytest.mark.asyncio
async def test_ports_are_classified_independently(verifier):
    verifier.accept(await verifier.verify("example.com", 22), "example.com", 22)

    on_22 = await verifier.verify("example.com", 22)
    on_2222 = await verifier.verify("example.com", 2222)

    assert on_22.status is FingerprintStatus.MATCH
    assert on_2222.status is FingerprintStatus.NEW


@pytest.mark.asyncio
async def test_empty_output_is_error_and_store_untouched(store, tmp_path):
    verifier = HostKeyVerifier(store, FakeFetcher(""))
    verifier.commit("example.com", 22, "ssh-ed25519", "SHA256:AAA", "ssh-ed25519 old")
    before = (tmp_path / "known_hosts.json").read_bytes()

    result = await verifier.verify("example.com")

    assert result.status is FingerprintStatus.ERROR
    assert "Could not fetch host key" in result.error
    assert result.fingerprint is None
    assert (tmp_path / "known_hosts.json").read_bytes() == before


@pytest.mark.asyncio
async def test_unparsable_output_is_error(store):
    verifier = HostKeyVerifier(store, FakeFetcher("# only comments\nnot-a-key-line\n"))

    result = await verifier.verify("example.com")

    assert result.status is FingerprintStatus.ERROR
    assert result.error == "Could not parse host key from key scan output"


@pytest.mark.asyncio
async def test_invalid_key_payload_is_error(store):
    verifier = HostKeyVerifier(store, FakeFetcher("example.com ssh-ed25519 @@@not-base64@@@\n"))

    result = await verifier.verify("example.com")

    assert result.status is FingerprintStatus.ERROR
    assert "Invalid key payload" in result.error


@pytest.mark.asyncio
async def test_fetch_timeout_is_error(store):
    verifier = HostKeyVerifier(store, FakeFetcher(error=ScanError("Timeout fetching host key")))

    result = await verifier.verify("example.com")

    assert result.status is FingerprintStatus.ERROR
    assert result.error == "Timeout fetching host key"


@pytest.mark.asyncio
async def test_unexpected_fetch_failure_is_error(store):
    verifier = HostKeyVerifier(store, FakeFetcher(error=RuntimeError("kaboom")))

    result = await verifier.verify("example.com")

    assert result.status is FingerprintStatus.ERROR
    assert "kaboom" in result.error


@pytest.mark.asyncio
async def test_accept_rejects_error_result(verifier):
    failed = await HostKeyVerifier(verifier.store, FakeFetcher("")).verify("example.com")

    with pytest.raises(ValueError):
        verifier.accept(failed, "example.com")
    assert len(verifier.store) == 0


def test_commit_normalizes_host(verifier, store):
    record = verifier.commit(" Example.COM ", 2222, "ssh-rsa", "SHA256:x", "ssh-rsa AAAA")

    assert record.host == "example.com"
    assert store.has(HostIdentity.of("example.com", 2222))


def test_forget(verifier, store):
    verifier.commit("example.com", 22, "ssh-rsa", "SHA256:x", "ssh-rsa AAAA")

    assert verifier.forget("example.com") is True
    assert verifier.forget("example.com") is False
    assert len(store) == 0


@pytest.mark.asyncio
async def test_invalid_port_is_error(verifier, fetcher):
    result = await verifier.verify("example.com", "22x")

    assert result.status is FingerprintStatus.ERROR
    assert "invalid port" in result.error
    assert fetcher.calls == []
