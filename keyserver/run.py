"""Programmatic uvicorn entry point for the keys server.

Reads host and port from the environment (0.0.0.0:8000 by default) and starts
uvicorn with the module-level application.

Usage:
    python -m keyserver.run
    keys-server                # via pyproject.toml [project.scripts]
"""

from __future__ import annotations

import uvicorn

from keyserver.config import load_settings

# Kept low: every request is served from memory, so a keys server never needs
# long-lived idle connections.
UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def main() -> None:
    """Start the keys server.

    Settings are validated here first so that a bad environment fails fast,
    before uvicorn starts; the lifespan validates them again on startup.

    Raises:
        SystemExit: Propagated from load_settings() on invalid environment.
    """
    settings = load_settings()

    uvicorn.run(
        "keyserver.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
