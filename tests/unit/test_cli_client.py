"""Unit tests for the CLI HTTP client (keyserver/cli/client.py).

The server is replaced with ``httpx.MockTransport``.
"""

from __future__ import annotations

import httpx
import pytest

from keyserver.cli.client import KeysClient, KeysClientError
from keyserver.routes.filter import Filter


def _client(handler) -> KeysClient:
    return KeysClient("http://keys.test/", transport=httpx.MockTransport(handler))


class TestFetch:
    def test_ssh_keys(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "version": "1.0",
                    "keys": [{"key": "ssh-rsa A", "user": "u", "name": "n", "tags": ["t"]}],
                },
            )

        response = _client(handler).fetch_ssh_keys()

        assert response.version == "1.0"
        assert response.keys[0].tags == ("t",)
        assert str(seen[0].url) == "http://keys.test/keys"
        assert seen[0].headers["accept"] == "application/json"

    def test_ssh_keys_filter_in_query(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"version": "1", "keys": []})

        _client(handler).fetch_ssh_keys(Filter(user="alice", none_of=frozenset({"b", "a"})))

        assert seen[0].url.path == "/keys"
        assert seen[0].url.params.get("user") == "alice"
        assert seen[0].url.params.get_list("noneOf") == ["a", "b"]

    def test_pgp_keys(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/pgp"
            return httpx.Response(200, json={"version": "1", "keys": [{"name": "a", "key": "K"}]})

        assert _client(handler).fetch_pgp_keys().keys[0].name == "a"

    def test_known_hosts(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/known_hosts"
            return httpx.Response(
                200,
                json={
                    "version": "1",
                    "knownHosts": [
                        {
                            "hosts": ["h1"],
                            "keys": [{"type": "ssh-ed25519", "key": "K", "cert-authority": True}],
                        }
                    ],
                },
            )

        response = _client(handler).fetch_known_hosts()
        assert response.known_hosts[0].keys[0].cert_authority is True
        assert response.known_hosts[0].name is None


class TestErrors:
    def test_error_status(self) -> None:
        client = _client(lambda request: httpx.Response(404))
        with pytest.raises(KeysClientError, match="Server returned error code: 404 - Not Found"):
            client.fetch_pgp_keys()

    def test_406(self) -> None:
        client = _client(lambda request: httpx.Response(406))
        with pytest.raises(KeysClientError, match="406"):
            client.fetch_ssh_keys()

    def test_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(KeysClientError, match="Failed to send request to keys server"):
            _client(handler).fetch_ssh_keys()

    def test_invalid_json(self) -> None:
        client = _client(lambda request: httpx.Response(200, text="not json"))
        with pytest.raises(KeysClientError, match="Failed to parse JSON response"):
            client.fetch_known_hosts()

    def test_unexpected_shape(self) -> None:
        client = _client(lambda request: httpx.Response(200, json={"keys": "nope"}))
        with pytest.raises(KeysClientError, match="Unexpected response"):
            client.fetch_ssh_keys()
