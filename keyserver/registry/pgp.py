"""PGP key directory loader.

Optionally loads armored public keys from a directory (``PGP_KEYS_PATH``), in
addition to the ``pgp-keys`` listed in the YAML config. Each file becomes one
PGPKey named after the file without its extension::

    /pgp/alice.asc  →  PGPKey(name="alice", key=<file contents>)

Never raises. Anything that cannot be served is skipped with a WARNING:
sub-directories, unsupported extensions, unreadable files and files that do
not contain an armored public key block. A missing directory yields no keys.
"""

from __future__ import annotations

import os

from keyserver.constants import PGP_ARMOR_HEADER, VALID_PGP_EXTENSIONS
from keyserver.models import PGPKey
from keyserver.utils.logger import get_logger

logger = get_logger(__name__)


def describe_extensions() -> str:
    """Return the valid extensions as prose, e.g. ``"asc, pub and pgp"``."""
    return f"{', '.join(VALID_PGP_EXTENSIONS[:-1])} and {VALID_PGP_EXTENSIONS[-1]}"


def load_pgp_directory(directory: str) -> list[PGPKey]:
    """Load every valid PGP public key file in ``directory``.

    Files are visited in name order so the resulting list (and therefore the
    /pgp listing) is stable across restarts.
    """
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError as exc:
        logger.warning(
            "PGP key directory could not be listed; no keys loaded from it",
            path=directory,
            error=str(exc),
        )
        return []

    results: list[PGPKey] = []
    for entry in entries:
        if not entry.is_file():
            logger.warning(
                "Ignoring directory in PGP key directory, only files are considered",
                path=entry.path,
            )
            continue

        name, _, extension = entry.name.rpartition(".")
        if not name or extension not in VALID_PGP_EXTENSIONS:
            logger.warning(
                f"Ignoring file in PGP key directory, only {describe_extensions()} "
                "files are considered",
                path=entry.path,
            )
            continue

        try:
            with open(entry.path) as fh:
                contents = fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read PGP key file, skipping", path=entry.path, error=str(exc))
            continue

        if PGP_ARMOR_HEADER not in contents:
            logger.warning(
                "File does not contain an armored PGP public key block, skipping",
                path=entry.path,
            )
            continue

        results.append(PGPKey(name=name, key=contents))

    logger.info("PGP keys loaded from directory", path=directory, count=len(results))
    return results
