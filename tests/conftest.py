"""Root test configuration for the keys server.

Shared fixtures build small in-memory registries so that route, router and
app tests never touch the filesystem. Tests that exercise the loaders write
their own files under ``tmp_path``.
"""

from __future__ import annotations

import pytest

from keyserver.models import KnownHost, KnownHostKey, PGPKey, PublicSSHKey
from keyserver.registry import KeyRegistry
from keyserver.router import ServerContext

TEST_VERSION = "1.2.3-test"

ARMORED_KEY = (
    "-----BEGIN PGP PUBLIC KEY BLOCK-----\n"
    "\n"
    "mDMEZfakeBYJKwYBBAHaRw8BAQdAfakefakefakefakefakefakefakefakefake\n"
    "=ab12\n"
    "-----END PGP PUBLIC KEY BLOCK-----\n"
)


@pytest.fixture
def ssh_keys() -> tuple[PublicSSHKey, ...]:
    return (
        PublicSSHKey(name="key-1", user="user", tags=("private",), key="ssh-rsa fake1"),
        PublicSSHKey(name="key-2", user="user", tags=("public",), key="ssh-rsa fake2"),
        PublicSSHKey(name="laptop", user="alice", tags=("private", "work"), key="ssh-ed25519 fake3"),
    )


@pytest.fixture
def pgp_keys() -> tuple[PGPKey, ...]:
    return (
        PGPKey(name="key1", key=ARMORED_KEY),
        PGPKey(name="key2", key=ARMORED_KEY.replace("fake", "other")),
    )


@pytest.fixture
def known_hosts() -> tuple[KnownHost, ...]:
    return (
        KnownHost(
            name="git",
            hosts=("git.example.com", "10.0.0.2"),
            keys=(
                KnownHostKey(type="ssh-ed25519", key="AAAAhost1", comment="primary"),
                KnownHostKey(type="ssh-rsa", key="AAAAhost2", revoked=True),
            ),
        ),
        KnownHost(
            hosts=("*.example.com",),
            keys=(KnownHostKey(type="ssh-ed25519", key="AAAAca", cert_authority=True),),
        ),
    )


@pytest.fixture
def registry(ssh_keys, pgp_keys, known_hosts) -> KeyRegistry:
    return KeyRegistry(ssh_keys=ssh_keys, pgp_keys=pgp_keys, known_hosts=known_hosts)


@pytest.fixture
def context(registry: KeyRegistry) -> ServerContext:
    return ServerContext(version=TEST_VERSION, instance_name="Test", registry=registry)
