"""SSH known-hosts renderer (/known_hosts).

Plain text is emitted in OpenSSH ``known_hosts`` format, one line per host
key::

    [@cert-authority |@revoked ]<host>[,<host>...] <type> <key>[ <comment>]

Only one marker is written per line. A key flagged both cert-authority and
revoked is written as ``@cert-authority``.
"""

from __future__ import annotations

from typing import Sequence

from starlette.responses import Response

from keyserver.models import KnownHost, KnownHostKey
from keyserver.negotiation import ContentType
from keyserver.routes.responses import json_response, not_acceptable, text_response


def get_marker(key: KnownHostKey) -> str:
    if key.cert_authority:
        return "@cert-authority "
    if key.revoked:
        return "@revoked "
    return ""


def format_known_host_line(known_host: KnownHost, key: KnownHostKey) -> str:
    """Format a single known_hosts line for ``key`` in ``known_host``."""
    comment = f" {key.comment}" if key.comment else ""
    return f"{get_marker(key)}{','.join(known_host.hosts)} {key.type} {key.key}{comment}"


def serve_known_hosts(
    version: str,
    known_hosts: Sequence[KnownHost],
    content_type: ContentType,
) -> Response:
    if content_type == ContentType.TEXT_PLAIN:
        lines = [
            format_known_host_line(known_host, key)
            for known_host in known_hosts
            for key in known_host.keys
        ]
        return text_response("\n".join(lines), version)

    if content_type == ContentType.APPLICATION_JSON:
        return json_response(
            {
                "version": version,
                "knownHosts": [
                    known_host.model_dump(mode="json", by_alias=True, exclude_none=True)
                    for known_host in known_hosts
                ],
            },
            version,
        )

    return not_acceptable(version)
