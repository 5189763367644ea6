"""YAML key config loader.

Reads the file named by ``CONFIG_PATH`` (``/config.yaml`` by default) and
validates it against ``KeysConfig``. A server that cannot load its keys has
nothing to serve, so every failure here is fatal: a human-readable
``CONFIG ERROR`` goes to stderr and ``SystemExit(1)`` is raised before the
application reports ready.

Expected layout::

    ssh-keys:
      - name: laptop
        user: alice
        key: ssh-ed25519 AAAA...
        tags: [private, work]
    pgp-keys:
      - name: alice
        key: |
          -----BEGIN PGP PUBLIC KEY BLOCK-----
          ...
    known-hosts:
      - name: git
        hosts: [git.example.com, 10.0.0.2]
        keys:
          - type: ssh-ed25519
            key: AAAA...
            cert-authority: false
"""

from __future__ import annotations

import sys
from typing import NoReturn

import yaml
from pydantic import ValidationError

from keyserver.models import KeysConfig
from keyserver.utils.logger import get_logger

logger = get_logger(__name__)


def load_keys_config(path: str) -> KeysConfig:
    """Load and validate the YAML key config at ``path``.

    Returns:
        Validated, frozen KeysConfig.

    Raises:
        SystemExit(1): File missing or unreadable, YAML syntax error, document
                       is not a mapping, or schema validation failed.
    """
    logger.info("Loading key config", path=path)

    try:
        with open(path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(f"Failed to parse {path}: {exc}\nCheck the YAML syntax and try again.")
    except OSError as exc:
        _fail(f"Could not read key config {path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(f"{path} is empty. Add at least an 'ssh-keys:' list.")
        _fail(
            f"{path} is not a valid YAML mapping.\n"
            "The key config must be a YAML dictionary at the top level."
        )

    try:
        config = KeysConfig.model_validate(raw)
    except ValidationError as exc:
        _fail(f"{path} does not match the key config schema:\n{_format_errors(exc)}")

    logger.info(
        "Key config loaded",
        path=path,
        ssh_keys=len(config.ssh_keys),
        pgp_keys=len(config.pgp_keys),
        known_hosts=len(config.known_hosts),
    )
    return config


def _format_errors(exc: ValidationError) -> str:
    """Render pydantic errors as ``  - ssh-keys.0.key: Field required`` lines."""
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        lines.append(f"  - {location}: {error['msg']}")
    return "\n".join(lines)


def _fail(message: str) -> NoReturn:
    print(f"CONFIG ERROR: {message}", file=sys.stderr)
    raise SystemExit(1)
