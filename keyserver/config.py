"""Environment settings for the keys server.

All process-level settings come from environment variables; the keys
themselves live in the YAML file named by ``CONFIG_PATH`` (see
``keyserver.registry.loader``).

Variables:
  KEYS_VERSION:   required. Release identifier echoed in ``X-Keys-Version``.
  PORT:           listen port (default 8000).
  HOST:           bind address (default 0.0.0.0).
  CONFIG_PATH:    YAML key config (default /config.yaml).
  PGP_KEYS_PATH:  optional directory of armored PGP public keys.
  INSTANCE_NAME:  shown on the home page (default "Unnamed").
  LOG_LEVEL:      structlog level (default INFO, or DEBUG when DEBUG=true).
  JSON_LOGS:      "true" for JSON log lines (default), "false" for console.
  DEBUG:          "true" enables the OpenAPI docs and uvicorn reload.

Invalid values write a ``CONFIG ERROR`` to stderr and raise SystemExit(1);
the server refuses to start rather than guess.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Mapping, NoReturn, Optional

from keyserver.constants import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_HOST,
    DEFAULT_INSTANCE_NAME,
    DEFAULT_PORT,
)
from keyserver.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Settings:
    """Process settings parsed from the environment."""

    version: str
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    config_path: str = DEFAULT_CONFIG_PATH
    pgp_keys_path: Optional[str] = None
    instance_name: str = DEFAULT_INSTANCE_NAME
    log_level: str = "INFO"
    json_logs: bool = True
    debug: bool = False


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Parse and validate settings from ``environ`` (defaults to ``os.environ``).

    Raises:
        SystemExit(1): KEYS_VERSION missing or blank, PORT not an integer in
                       1-65535, or LOG_LEVEL not a known level.
    """
    env = os.environ if environ is None else environ

    version = env.get("KEYS_VERSION", "").strip()
    if not version:
        _fail(
            "KEYS_VERSION environment variable is required.\n"
            "Set it to the release identifier of this deployment (e.g. KEYS_VERSION=1.4.2)."
        )

    port = _parse_port(env.get("PORT"))

    debug = env.get("DEBUG", "false").lower() == "true"
    log_level = env.get("LOG_LEVEL", "DEBUG" if debug else "INFO").upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        _fail(f"LOG_LEVEL environment variable is not a valid level: '{log_level}'")

    settings = Settings(
        version=version,
        port=port,
        host=env.get("HOST", DEFAULT_HOST),
        config_path=env.get("CONFIG_PATH", DEFAULT_CONFIG_PATH),
        pgp_keys_path=env.get("PGP_KEYS_PATH") or None,
        instance_name=env.get("INSTANCE_NAME", DEFAULT_INSTANCE_NAME),
        log_level=log_level,
        json_logs=env.get("JSON_LOGS", "true").lower() == "true",
        debug=debug,
    )

    logger.debug(
        "Settings loaded",
        version=settings.version,
        port=settings.port,
        config_path=settings.config_path,
        pgp_keys_path=settings.pgp_keys_path,
        instance_name=settings.instance_name,
    )
    return settings


def _parse_port(raw: Optional[str]) -> int:
    if raw is None:
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        _fail(f"PORT environment variable is not a valid integer: '{raw}'")
    if not 1 <= port <= 65535:
        _fail(f"PORT environment variable is out of range (1-65535): {port}")
    return port


def _fail(message: str) -> NoReturn:
    print(f"CONFIG ERROR: {message}", file=sys.stderr)
    raise SystemExit(1)
