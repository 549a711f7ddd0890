"""Tests for host key parsing and fingerprinting."""

import base64
import hashlib

import pytest

from hostlink.errors import ScanError
from hostlink.trust.fingerprint import compute_fingerprint, parse_host_keys, select_host_key
from hostlink.trust.models import HostKey

ED25519 = "AAAAC3NzaC1lZDI1NTE5AAAAIOMqqnkVzrm0SdG6UOoqKLsabgH5C9okWi0dh2l9GKJl"


def _expected(key_data):
    digest = hashlib.sha256(base64.b64decode(key_data)).digest()
    return "SHA256:" + base64.b64encode(digest).decode().rstrip("=")


def test_parse_skips_comments_and_short_lines():
    output = "\n".join([
        "# example.com:22 SSH-2.0-OpenSSH_9.6",
        "",
        "example.com ssh-rsa AAAAB3NzaC1yc2E",
        "garbage",
        "example.com ssh-ed25519 " + ED25519,
    ])

    keys = parse_host_keys(output)

    assert keys == [
        HostKey("ssh-rsa", "AAAAB3NzaC1yc2E"),
        HostKey("ssh-ed25519", ED25519),
    ]


def test_parse_empty_output():
    assert parse_host_keys("") == []
    assert parse_host_keys("# only a comment\n") == []


@pytest.mark.parametrize(
    "types, expected",
    [
        (["ssh-rsa", "ecdsa-sha2-nistp256", "ssh-ed25519"], "ssh-ed25519"),
        (["ssh-rsa", "ecdsa-sha2-nistp384"], "ecdsa-sha2-nistp384"),
        (["ssh-dss", "ssh-rsa"], "ssh-rsa"),
        (["ssh-dss", "x-unknown"], "ssh-dss"),
    ],
)
def test_select_prefers_strongest_type(types, expected):
    keys = [HostKey(t, f"data{i}") for i, t in enumerate(types)]

    assert select_host_key(keys).key_type == expected


def test_select_first_of_same_rank_wins():
    keys = [HostKey("ecdsa-sha2-nistp521", "first"), HostKey("ecdsa-sha2-nistp256", "second")]

    assert select_host_key(keys).key_data == "first"


def test_select_no_keys():
    assert select_host_key([]) is None


def test_fingerprint_matches_openssh_format():
    fingerprint = compute_fingerprint(ED25519)

    assert fingerprint == _expected(ED25519)
    assert fingerprint.startswith("SHA256:")
    assert not fingerprint.endswith("=")
    assert len(fingerprint) == len("SHA256:") + 43


def test_fingerprint_is_deterministic():
    assert compute_fingerprint(ED25519) == compute_fingerprint(ED25519)


@pytest.mark.parametrize("bad", ["not base64!!", "", "é"])
def test_fingerprint_rejects_invalid_payload(bad):
    with pytest.raises(ScanError):
        compute_fingerprint(bad)
