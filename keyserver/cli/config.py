"""Client configuration for the ``keys`` CLI.

A single TOML file, by default in the platform's user config directory
(``~/.config/keys/config.toml`` on Linux)::

    # Keys CLI Configuration
    server_url = "https://keys.example.com"

Search order:
  1. ``--config PATH`` (a missing explicit file warns and falls back to defaults)
  2. the default path above
  3. built-in defaults (server_url = http://localhost:8000)
"""

from __future__ import annotations

import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import platformdirs

from keyserver.constants import CLIENT_APP_NAME, CLIENT_CONFIG_FILENAME, DEFAULT_SERVER_URL


class ClientConfigError(Exception):
    """The client config file exists but cannot be read or parsed."""


@dataclass(frozen=True)
class ClientConfig:
    server_url: str = DEFAULT_SERVER_URL


def get_default_config_path() -> Path:
    return Path(platformdirs.user_config_dir(CLIENT_APP_NAME)) / CLIENT_CONFIG_FILENAME


def load_client_config(config_path: Optional[str] = None) -> ClientConfig:
    """Load the client config following the search order above.

    Raises:
        ClientConfigError: The selected file is unreadable or not valid TOML,
                           or ``server_url`` is not a string.
    """
    if config_path is not None:
        path = Path(config_path).expanduser()
        if not path.is_file():
            print(f"Warning: Specified config file not found at {config_path}", file=sys.stderr)
            return ClientConfig()
        return _load_from_path(path)

    default_path = get_default_config_path()
    if default_path.is_file():
        return _load_from_path(default_path)
    return ClientConfig()


def _load_from_path(path: Path) -> ClientConfig:
    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except OSError as exc:
        raise ClientConfigError(f"Failed to read config file: {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ClientConfigError(f"Failed to parse TOML config from: {path}: {exc}") from exc

    server_url = raw.get("server_url", DEFAULT_SERVER_URL)
    if not isinstance(server_url, str):
        raise ClientConfigError(f"server_url must be a string in {path}")
    return ClientConfig(server_url=server_url)


def ensure_default_config_exists(path: Optional[Path] = None) -> Path:
    """Write the default client config at ``path`` unless a file is already there."""
    path = path or get_default_config_path()
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            "# Keys CLI Configuration\n\n"
            f"# Server URL (default: {DEFAULT_SERVER_URL})\n"
            f'server_url = "{DEFAULT_SERVER_URL}"\n'
        )
        print(f"Created default config file at: {path}")
    else:
        print(f"Config file already exists at: {path}")
    return path
