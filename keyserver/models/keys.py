"""Key record models for the keys server.

These pydantic models double as the schema of the YAML key config file: the
loader validates the parsed document with ``KeysConfig.model_validate()`` and
every record is frozen afterwards. Field names match the YAML spelling through
aliases (``ssh-keys``, ``cert-authority``) so the same models serialise back to
the JSON representation served to clients.

Records are loaded once at startup and never mutated.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool

# ─── Shared model config ──────────────────────────────────────────────────────

_RECORD_CONFIG = ConfigDict(frozen=True, populate_by_name=True)


# ─── SSH keys ─────────────────────────────────────────────────────────────────


class PublicSSHKey(BaseModel):
    """A single SSH public key line served from /keys.

    ``key`` is the opaque key material (``"ssh-ed25519 AAAA..."``). ``tags``
    keep their configured order for display; filtering treats them as a set.
    """

    model_config = _RECORD_CONFIG

    name: str
    key: str
    user: str
    tags: tuple[str, ...] = ()


# ─── PGP keys ─────────────────────────────────────────────────────────────────


class PGPKey(BaseModel):
    """An ASCII-armored PGP public key, addressable as /pgp/<name>."""

    model_config = _RECORD_CONFIG

    name: str
    key: str


# ─── Known hosts ──────────────────────────────────────────────────────────────


class KnownHostKey(BaseModel):
    """One host key of a known-hosts group.

    ``revoked`` and ``cert_authority`` may both be set in the data; plain-text
    rendering emits only one marker and ``@cert-authority`` wins.
    """

    model_config = _RECORD_CONFIG

    type: str
    key: str
    comment: Optional[str] = None
    revoked: StrictBool = False
    cert_authority: StrictBool = Field(default=False, alias="cert-authority")


class KnownHost(BaseModel):
    """A group of hostnames sharing the same set of host keys."""

    model_config = _RECORD_CONFIG

    name: Optional[str] = None
    hosts: tuple[str, ...]
    keys: tuple[KnownHostKey, ...]


# ─── Config document ──────────────────────────────────────────────────────────


class KeysConfig(BaseModel):
    """Root of the YAML key config file.

    ``ssh-keys`` is required (may be an empty list); ``pgp-keys`` and
    ``known-hosts`` default to empty. Unknown top-level keys are ignored.
    """

    model_config = _RECORD_CONFIG

    ssh_keys: tuple[PublicSSHKey, ...] = Field(alias="ssh-keys")
    pgp_keys: tuple[PGPKey, ...] = Field(default=(), alias="pgp-keys")
    known_hosts: tuple[KnownHost, ...] = Field(default=(), alias="known-hosts")
