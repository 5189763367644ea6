"""Request dispatcher for the keys server.

``handle_request()`` maps one incoming request to exactly one renderer:

    ROUTE_MATCH → CONTENT_NEGOTIATE → RENDER → RESPOND

Routing table, first match wins:

  1. /pgp, /pgp/                                → PGP key list
  2. /pgp/<name>[.asc|.pub|.pgp]                → single PGP key
  3. /keys, /keys/, /authorized_keys[/]          → SSH keys (filterable)
  4. /                                           → home
  5. /known_hosts, /known_hosts/                 → known hosts
  6. anything else, or any method but GET       → 404

/pgp/<name>.<other> does not match rule 2 and ends in a 404.

Renderers decide for themselves whether the negotiated type is servable
(406), because the PGP key renderer overrides negotiation for downloads.

This module is the single recovery boundary for request handling: any
exception raised while routing, negotiating or rendering is logged here and
becomes an empty HTTP 500. Renderers never catch their own failures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from starlette.datastructures import URL
from starlette.responses import Response

from keyserver.constants import HOME_PATH, KNOWN_HOSTS_PATHS, PGP_LIST_PATHS, SSH_KEYS_PATHS
from keyserver.negotiation import ContentType, get_content_type
from keyserver.registry import KeyRegistry
from keyserver.routes import (
    get_pgp_target,
    serve_home,
    serve_keys,
    serve_known_hosts,
    serve_pgp_key,
    serve_pgp_key_list,
)
from keyserver.routes.responses import internal_error, not_found
from keyserver.utils.logger import get_logger

logger = get_logger(__name__)


# ─── Dependencies ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Renderers:
    """The set of renderers the dispatcher delegates to.

    Defaults to the real implementations; tests replace individual entries
    with ``dataclasses.replace(DEFAULT_RENDERERS, keys=...)``.
    """

    home: Callable[..., Response] = serve_home
    keys: Callable[..., Response] = serve_keys
    pgp_key_list: Callable[..., Response] = serve_pgp_key_list
    pgp_key: Callable[..., Response] = serve_pgp_key
    known_hosts: Callable[..., Response] = serve_known_hosts
    get_pgp_target: Callable[[str], object] = get_pgp_target
    get_content_type: Callable[[Mapping[str, str]], ContentType] = get_content_type


DEFAULT_RENDERERS = Renderers()


@dataclass(frozen=True)
class ServerContext:
    """Everything a request needs, fixed at startup."""

    version: str
    instance_name: str
    registry: KeyRegistry = field(default_factory=KeyRegistry)


# ─── Dispatch ─────────────────────────────────────────────────────────────────


def handle_request(
    method: str,
    url: URL,
    headers: Mapping[str, str],
    context: ServerContext,
    renderers: Renderers = DEFAULT_RENDERERS,
) -> Response:
    """Route, negotiate and render a single request. Never raises."""
    try:
        return _dispatch(method, url, headers, context, renderers)
    except Exception:
        logger.exception(
            "Unhandled error while serving request",
            method=method,
            path=url.path,
        )
        return internal_error()


def _dispatch(
    method: str,
    url: URL,
    headers: Mapping[str, str],
    context: ServerContext,
    renderers: Renderers,
) -> Response:
    if method.upper() != "GET":
        return not_found()

    render = _match_route(url, context, renderers)
    if render is None:
        return not_found()

    content_type = renderers.get_content_type(headers)
    return render(content_type)


def _match_route(
    url: URL,
    context: ServerContext,
    renderers: Renderers,
) -> Optional[Callable[[ContentType], Response]]:
    """Return a callable rendering the matched route, or None for no match."""
    path = url.path
    version = context.version
    registry = context.registry

    if path in PGP_LIST_PATHS:
        return lambda content_type: renderers.pgp_key_list(
            version, registry.pgp_keys, content_type
        )

    target = renderers.get_pgp_target(path)
    if target is not None:
        return lambda content_type: renderers.pgp_key(
            target, version, registry, content_type
        )

    if path in SSH_KEYS_PATHS:
        return lambda content_type: renderers.keys(url, version, registry.ssh_keys, content_type)

    if path == HOME_PATH:
        return lambda content_type: renderers.home(
            version, context.instance_name, registry, content_type
        )

    if path in KNOWN_HOSTS_PATHS:
        return lambda content_type: renderers.known_hosts(
            version, registry.known_hosts, content_type
        )

    return None
