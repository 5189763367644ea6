"""Unit tests for the request dispatcher (keyserver/router.py).

Covers:
  - routing table precedence and trailing-slash aliases
  - 404 for unknown paths, bad PGP extensions and non-GET methods
  - exceptions from any stage become an empty 500
  - renderers receive the negotiated content type
"""

from __future__ import annotations

import dataclasses

import pytest
from starlette.datastructures import URL
from starlette.responses import Response

from keyserver.negotiation import ContentType
from keyserver.router import DEFAULT_RENDERERS, ServerContext, handle_request

TEST_VERSION = "1.2.3-test"
JSON = {"accept": "application/json"}
TEXT = {"accept": "text/plain"}


def _get(path: str, context: ServerContext, headers=None, renderers=DEFAULT_RENDERERS) -> Response:
    return handle_request("GET", URL(f"http://test{path}"), headers or TEXT, context, renderers)


def _recording_renderers(calls: list):
    """Renderers that record which route was chosen instead of rendering."""

    def recorder(name):
        def render(*args):
            calls.append((name, args[-1]))
            return Response(name, status_code=200)

        return render

    return dataclasses.replace(
        DEFAULT_RENDERERS,
        home=recorder("home"),
        keys=recorder("keys"),
        pgp_key_list=recorder("pgp_key_list"),
        pgp_key=recorder("pgp_key"),
        known_hosts=recorder("known_hosts"),
    )


# ─── Routing ──────────────────────────────────────────────────────────────────


class TestRouting:
    @pytest.mark.parametrize(
        "path, route",
        [
            ("/", "home"),
            ("/keys", "keys"),
            ("/keys/", "keys"),
            ("/authorized_keys", "keys"),
            ("/authorized_keys/", "keys"),
            ("/pgp", "pgp_key_list"),
            ("/pgp/", "pgp_key_list"),
            ("/pgp/key1", "pgp_key"),
            ("/pgp/key1.asc", "pgp_key"),
            ("/known_hosts", "known_hosts"),
            ("/known_hosts/", "known_hosts"),
        ],
    )
    def test_route_table(self, context, path: str, route: str) -> None:
        calls: list = []
        response = _get(path, context, renderers=_recording_renderers(calls))
        assert response.status_code == 200
        assert calls == [(route, ContentType.TEXT_PLAIN)]

    @pytest.mark.parametrize("path", ["/not_found", "/keys/extra", "/pgp/key1.txt", "/pgp/a/b", "/KEYS"])
    def test_unmatched_is_404(self, context, path: str) -> None:
        calls: list = []
        response = _get(path, context, renderers=_recording_renderers(calls))
        assert response.status_code == 404
        assert response.body == b""
        assert calls == []

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "HEAD"])
    def test_non_get_is_404(self, context, method: str) -> None:
        response = handle_request(method, URL("http://test/keys"), TEXT, context)
        assert response.status_code == 404

    def test_negotiated_type_passed_to_renderer(self, context) -> None:
        calls: list = []
        _get("/keys", context, headers=JSON, renderers=_recording_renderers(calls))
        assert calls == [("keys", ContentType.APPLICATION_JSON)]

    def test_real_renderers(self, context) -> None:
        response = _get("/pgp", context)
        assert response.status_code == 200
        assert response.body == b"key1\nkey2"


# ─── Error containment ────────────────────────────────────────────────────────


class TestErrorContainment:
    def test_renderer_exception_is_500(self, context) -> None:
        def explode(*args):
            raise RuntimeError("boom")

        renderers = dataclasses.replace(DEFAULT_RENDERERS, keys=explode)
        response = _get("/keys", context, renderers=renderers)
        assert response.status_code == 500
        assert response.body == b""

    def test_negotiation_exception_is_500(self, context) -> None:
        def explode(headers):
            raise ValueError("bad accept")

        renderers = dataclasses.replace(DEFAULT_RENDERERS, get_content_type=explode)
        assert _get("/", context, renderers=renderers).status_code == 500

    def test_target_parser_exception_is_500(self, context) -> None:
        def explode(path):
            raise KeyError(path)

        renderers = dataclasses.replace(DEFAULT_RENDERERS, get_pgp_target=explode)
        assert _get("/pgp/key1", context, renderers=renderers).status_code == 500

    def test_500_has_no_version_header(self, context) -> None:
        def explode(*args):
            raise RuntimeError("boom")

        renderers = dataclasses.replace(DEFAULT_RENDERERS, home=explode)
        response = _get("/", context, renderers=renderers)
        assert "x-keys-version" not in response.headers

    def test_version_header_on_success(self, context) -> None:
        assert _get("/", context).headers["x-keys-version"] == TEST_VERSION
