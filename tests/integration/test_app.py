"""Integration tests: the full FastAPI application over HTTP, in-process.

Requests go through ``httpx.AsyncClient(transport=ASGITransport(app=...))``
with a prepared ServerContext, so the middleware, catch-all route, router,
negotiation and renderers are all exercised together. Lifespan tests use
``TestClient`` and real files under ``tmp_path``.
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.testclient import TestClient

from keyserver.config import Settings
from keyserver.main import build_context, create_app
from keyserver.models import PublicSSHKey
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

# ─── Helpers ──────────────────────────────────────────────────────────────────


async def _get(application: FastAPI, path: str, accept: str = "text/plain"):
    transport = ASGITransport(app=application)  # type: ignore[arg-type]
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(path, headers={"Accept": accept})


@pytest.fixture
def application(context: ServerContext) -> FastAPI:
    return create_app(context=context)


# ─── Resources ────────────────────────────────────────────────────────────────


class TestResources:
    @pytest.mark.asyncio
    async def test_filtered_keys(self) -> None:
        context = ServerContext(
            version=TEST_VERSION,
            instance_name="Test",
            registry=KeyRegistry(
                ssh_keys=(
                    PublicSSHKey(name="key-1", user="user", tags=("private",), key="ssh-rsa fake1"),
                    PublicSSHKey(name="key-2", user="user", tags=("public",), key="ssh-rsa fake2"),
                )
            ),
        )
        response = await _get(
            create_app(context=context), "/keys?oneOf=private&noneOf=public&noneOf=github"
        )
        assert response.status_code == 200
        assert response.text == "ssh-rsa fake1 user@key-1"
        assert response.headers["x-keys-version"] == TEST_VERSION

    @pytest.mark.asyncio
    async def test_authorized_keys_alias(self, application: FastAPI) -> None:
        response = await _get(application, "/authorized_keys?user=alice")
        assert response.text == "ssh-ed25519 fake3 alice@laptop"

    @pytest.mark.asyncio
    async def test_keys_json(self, application: FastAPI) -> None:
        response = await _get(application, "/keys/", accept="application/json")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        payload = response.json()
        assert payload["version"] == TEST_VERSION
        assert len(payload["keys"]) == 3

    @pytest.mark.asyncio
    async def test_pgp_list(self, application: FastAPI) -> None:
        response = await _get(application, "/pgp")
        assert response.status_code == 200
        assert response.text == "key1\nkey2"

    @pytest.mark.asyncio
    async def test_pgp_key_download(self, application: FastAPI) -> None:
        response = await _get(application, "/pgp/key1.asc", accept="application/json")
        assert response.status_code == 200
        assert response.text == ARMORED_KEY
        assert response.headers["content-disposition"] == 'attachment; filename="key1.asc"'

    @pytest.mark.asyncio
    async def test_known_hosts(self, application: FastAPI) -> None:
        response = await _get(application, "/known_hosts")
        assert response.status_code == 200
        assert response.text.splitlines()[2] == "@cert-authority *.example.com ssh-ed25519 AAAAca"

    @pytest.mark.asyncio
    async def test_home(self, application: FastAPI) -> None:
        response = await _get(application, "/", accept="*/*")
        assert response.status_code == 200
        assert response.text.startswith('Welcome to the "Test" keys instance.')


# ─── Error statuses ───────────────────────────────────────────────────────────


class TestErrorStatuses:
    @pytest.mark.asyncio
    async def test_unknown_pgp_key_is_404(self, application: FastAPI) -> None:
        response = await _get(application, "/pgp/unknown")
        assert response.status_code == 404
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_unknown_path_is_404(self, application: FastAPI) -> None:
        assert (await _get(application, "/not_found")).status_code == 404

    @pytest.mark.asyncio
    async def test_bad_pgp_extension_is_404(self, application: FastAPI) -> None:
        assert (await _get(application, "/pgp/key1.txt")).status_code == 404

    @pytest.mark.asyncio
    async def test_html_is_406(self, application: FastAPI) -> None:
        response = await _get(application, "/", accept="text/html")
        assert response.status_code == 406
        assert response.content == b""
        assert response.headers["x-keys-version"] == TEST_VERSION

    @pytest.mark.asyncio
    async def test_post_is_404(self, application: FastAPI) -> None:
        transport = ASGITransport(app=application)  # type: ignore[arg-type]
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/keys", content=b"x")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_503_before_startup(self) -> None:
        # ASGITransport does not run the lifespan; no context has been loaded.
        response = await _get(create_app(), "/keys")
        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_503_when_not_ready(self, application: FastAPI) -> None:
        application.state.ready = False
        assert (await _get(application, "/")).status_code == 503


# ─── Lifespan ─────────────────────────────────────────────────────────────────


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        textwrap.dedent(
            """
            ssh-keys:
              - name: laptop
                user: alice
                key: ssh-ed25519 AAAA
            pgp-keys:
              - name: alice
                key: from-config
            """
        )
    )
    return path


class TestLifespan:
    def test_create_app_without_context_is_not_ready(self) -> None:
        assert create_app().state.ready is False

    def test_startup_loads_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        pgp_dir = tmp_path / "pgp"
        pgp_dir.mkdir()
        (pgp_dir / "bob.asc").write_text(ARMORED_KEY)

        monkeypatch.setenv("KEYS_VERSION", "9.9.9")
        monkeypatch.setenv("CONFIG_PATH", str(_write_config(tmp_path)))
        monkeypatch.setenv("PGP_KEYS_PATH", str(pgp_dir))
        monkeypatch.setenv("INSTANCE_NAME", "Lifespan")
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        application = create_app()
        with TestClient(application) as client:
            assert application.state.ready is True
            home = client.get("/")
            pgp = client.get("/pgp")

        assert application.state.ready is False
        assert home.status_code == 200
        assert 'Welcome to the "Lifespan" keys instance.' in home.text
        assert home.headers["x-keys-version"] == "9.9.9"
        assert pgp.text == "alice\nbob"

    def test_injected_context_is_kept(self, context: ServerContext) -> None:
        application = create_app(context=context)
        with TestClient(application) as client:
            response = client.get("/pgp")
        assert application.state.context is context
        assert response.text == "key1\nkey2"

    def test_build_context_fails_on_bad_config(
        self, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        bad = tmp_path / "config.yaml"
        bad.write_text("pgp-keys: []\n")
        with pytest.raises(SystemExit) as exc_info:
            build_context(Settings(version="1", config_path=str(bad)))
        assert exc_info.value.code == 1
        assert "CONFIG ERROR" in capsys.readouterr().err

    def test_build_context_without_pgp_directory(self, tmp_path: Path) -> None:
        context = build_context(
            Settings(version="1", instance_name="x", config_path=str(_write_config(tmp_path)))
        )
        assert context.version == "1"
        assert [k.name for k in context.registry.pgp_keys] == ["alice"]
        assert len(context.registry.ssh_keys) == 1
