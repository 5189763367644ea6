"""HTTP client for a running keys server.

Every request asks for ``application/json`` and the body is validated with the
same pydantic models the server serialises from, so the CLI and server cannot
drift apart silently.

Tests pass an ``httpx.MockTransport`` through ``transport``.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from keyserver.constants import CLIENT_TIMEOUT_S
from keyserver.models import KnownHost, PGPKey, PublicSSHKey
from keyserver.routes.filter import Filter, build_query


class KeysClientError(Exception):
    """A request to the keys server failed or returned an unusable response."""


ResponseT = TypeVar("ResponseT", bound=BaseModel)


# ─── Response models ──────────────────────────────────────────────────────────


class SSHKeysResponse(BaseModel):
    version: str
    keys: tuple[PublicSSHKey, ...]


class PGPKeysResponse(BaseModel):
    version: str
    keys: tuple[PGPKey, ...]


class KnownHostsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: str
    known_hosts: tuple[KnownHost, ...] = Field(alias="knownHosts")


# ─── Client ───────────────────────────────────────────────────────────────────


class KeysClient:
    """Thin synchronous client for the JSON representations of the server."""

    def __init__(self, server_url: str, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.server_url = server_url.rstrip("/")
        self._transport = transport

    def fetch_ssh_keys(self, filter: Optional[Filter] = None) -> SSHKeysResponse:
        query = build_query(filter) if filter is not None else ""
        path = f"/keys?{query}" if query else "/keys"
        return _parse(SSHKeysResponse, self._get_json(path, "keys server"))

    def fetch_pgp_keys(self) -> PGPKeysResponse:
        return _parse(PGPKeysResponse, self._get_json("/pgp", "PGP keys server"))

    def fetch_known_hosts(self) -> KnownHostsResponse:
        return _parse(KnownHostsResponse, self._get_json("/known_hosts", "known hosts server"))

    def _get_json(self, path: str, description: str) -> Any:
        url = f"{self.server_url}{path}"
        try:
            with httpx.Client(transport=self._transport, timeout=CLIENT_TIMEOUT_S) as client:
                response = client.get(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as exc:
            raise KeysClientError(f"Failed to send request to {description}: {exc}") from exc

        if not response.is_success:
            raise KeysClientError(
                f"Server returned error code: {response.status_code} - "
                f"{response.reason_phrase or 'Unknown'}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise KeysClientError("Failed to parse JSON response") from exc


def _parse(model: type[ResponseT], payload: Any) -> ResponseT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise KeysClientError(f"Unexpected response from server: {exc}") from exc
