"""PGP key renderers (/pgp, /pgp/<name>[.<ext>]).

Requesting a key with a file extension (``/pgp/alice.asc``) signals download
intent: the armored key is always returned as plain text with a
``Content-Disposition: attachment`` header, whatever the Accept header asked
for. Without an extension the negotiated content type applies.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence

from starlette.responses import Response

from keyserver.constants import CONTENT_DISPOSITION_HEADER, PGP_KEY_PATTERN, VALID_PGP_EXTENSIONS
from keyserver.models import PGPKey
from keyserver.negotiation import ContentType
from keyserver.registry.pgp import describe_extensions
from keyserver.registry.store import KeyRegistry
from keyserver.routes.responses import json_response, not_acceptable, not_found, text_response
from keyserver.utils.logger import get_logger

logger = get_logger(__name__)

_PGP_KEY_RE = re.compile(PGP_KEY_PATTERN)


@dataclass(frozen=True)
class PGPKeyTarget:
    """The key named in a /pgp/<name>[.<ext>] path."""

    name: str
    extension: Optional[str] = None


def get_pgp_target(path: str) -> Optional[PGPKeyTarget]:
    """Parse a /pgp/<name>[.<ext>] path.

    Returns None when the path does not have that shape, or when it carries an
    extension other than asc, pub or pgp.
    """
    match = _PGP_KEY_RE.match(path)
    if match is None:
        return None

    name, extension = match.group(1), match.group(2)
    if extension is not None and extension not in VALID_PGP_EXTENSIONS:
        logger.warning(
            f"Ignoring PGP path, only {describe_extensions()} files are considered",
            path=path,
        )
        return None
    return PGPKeyTarget(name=name, extension=extension)


def serve_pgp_key_list(
    version: str,
    pgp_keys: Sequence[PGPKey],
    content_type: ContentType,
) -> Response:
    """Serve the names (text) or names and keys (JSON) of every PGP key."""
    if content_type == ContentType.TEXT_PLAIN:
        return text_response("\n".join(key.name for key in pgp_keys), version)

    if content_type == ContentType.APPLICATION_JSON:
        return json_response(
            {
                "version": version,
                "keys": [{"name": key.name, "key": key.key} for key in pgp_keys],
            },
            version,
        )

    return not_acceptable(version)


def serve_pgp_key(
    target: PGPKeyTarget,
    version: str,
    registry: KeyRegistry,
    content_type: ContentType,
) -> Response:
    """Serve a single PGP key; the first key with a matching name wins."""
    key = registry.find_pgp_key(target.name)
    if key is None:
        logger.info("PGP key not found", name=target.name)
        return not_found()

    if target.extension is not None:
        return text_response(
            key.key,
            version,
            headers={
                CONTENT_DISPOSITION_HEADER: (
                    f'attachment; filename="{key.name}.{target.extension}"'
                ),
            },
        )

    if content_type == ContentType.TEXT_PLAIN:
        return text_response(key.key, version)

    if content_type == ContentType.APPLICATION_JSON:
        return json_response(
            {"version": version, "key": {"name": key.name, "key": key.key}},
            version,
        )

    return not_acceptable(version)
