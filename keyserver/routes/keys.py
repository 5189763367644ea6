"""SSH public key renderer (/keys, /authorized_keys)."""

from __future__ import annotations

from typing import Sequence, Union

from starlette.datastructures import URL
from starlette.responses import Response

from keyserver.models import PublicSSHKey
from keyserver.negotiation import ContentType
from keyserver.routes.filter import filter_includes_key, parse_parameters
from keyserver.routes.responses import json_response, not_acceptable, text_response


def format_authorized_key(key: PublicSSHKey) -> str:
    """Format one key as an authorized_keys line: ``<key> <user>@<name>``."""
    return f"{key.key} {key.user}@{key.name}"


def serve_keys(
    url: Union[URL, str],
    version: str,
    ssh_keys: Sequence[PublicSSHKey],
    content_type: ContentType,
) -> Response:
    """Serve the SSH keys matching the filter in ``url``'s query string.

    text/plain is directly usable as an authorized_keys file; no matches
    yields an empty body rather than an error.
    """
    filter = parse_parameters(url)
    matching = [key for key in ssh_keys if filter_includes_key(filter, key)]

    if content_type == ContentType.TEXT_PLAIN:
        return text_response("\n".join(format_authorized_key(key) for key in matching), version)

    if content_type == ContentType.APPLICATION_JSON:
        return json_response(
            {
                "version": version,
                "keys": [
                    {"key": key.key, "user": key.user, "name": key.name, "tags": list(key.tags)}
                    for key in matching
                ],
            },
            version,
        )

    return not_acceptable(version)
