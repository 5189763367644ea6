"""Home page renderer (/).

A short human-readable summary of what this instance serves.
"""

from __future__ import annotations

from starlette.responses import Response

from keyserver.negotiation import ContentType
from keyserver.registry import KeyRegistry
from keyserver.routes.responses import not_acceptable, text_response

HOME_TEMPLATE = (
    'Welcome to the "{instance_name}" keys instance.\n'
    "There are {ssh_count} SSH keys available at /keys.\n"
    "There are {pgp_count} PGP keys available at /pgp.\n"
    "There are {known_hosts_count} known hosts available at /known_hosts.\n"
    "This server is running version {version}."
)


def serve_home(
    version: str,
    instance_name: str,
    registry: KeyRegistry,
    content_type: ContentType,
) -> Response:
    if content_type != ContentType.TEXT_PLAIN:
        return not_acceptable(version)

    body = HOME_TEMPLATE.format(
        instance_name=instance_name,
        ssh_count=len(registry.ssh_keys),
        pgp_count=len(registry.pgp_keys),
        known_hosts_count=len(registry.known_hosts),
        version=version,
    )
    return text_response(body, version)
