"""Resource renderers.

Each renderer is a pure function of already-loaded records, the deployment
version and the negotiated content type, returning a Starlette Response.

Public API:
    serve_home:          / summary
    serve_keys:          /keys, /authorized_keys
    serve_pgp_key_list:  /pgp
    serve_pgp_key:       /pgp/<name>[.<ext>]
    get_pgp_target:      parses /pgp/<name>[.<ext>]
    serve_known_hosts:   /known_hosts
"""
from keyserver.routes.home import serve_home
from keyserver.routes.keys import serve_keys
from keyserver.routes.known_hosts import serve_known_hosts
from keyserver.routes.pgp import PGPKeyTarget, get_pgp_target, serve_pgp_key, serve_pgp_key_list

__all__ = [
    "PGPKeyTarget",
    "get_pgp_target",
    "serve_home",
    "serve_keys",
    "serve_known_hosts",
    "serve_pgp_key",
    "serve_pgp_key_list",
]
