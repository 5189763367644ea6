"""Shared constants for the keys server.

Header names, route paths, file extensions and defaults used across modules
are defined here. No magic strings in other modules; import from here.
"""

# ─── Response headers ────────────────────────────────────────────────────────

# Echoed on every successful and every 406 response from a renderer.
VERSION_HEADER: str = "X-Keys-Version"

CONTENT_DISPOSITION_HEADER: str = "Content-Disposition"

# ─── Routes ──────────────────────────────────────────────────────────────────

HOME_PATH: str = "/"
PGP_LIST_PATHS: frozenset[str] = frozenset({"/pgp", "/pgp/"})
SSH_KEYS_PATHS: frozenset[str] = frozenset({
    "/keys",
    "/keys/",
    "/authorized_keys",
    "/authorized_keys/",
})
KNOWN_HOSTS_PATHS: frozenset[str] = frozenset({"/known_hosts", "/known_hosts/"})

# /pgp/<name> or /pgp/<name>.<ext>; the extension is validated separately.
PGP_KEY_PATTERN: str = r"^/pgp/([^/.]+)(?:\.([^/]+))?$"

# ─── PGP files ───────────────────────────────────────────────────────────────

# Ordered for human-readable messages ("asc, pub and pgp").
VALID_PGP_EXTENSIONS: tuple[str, ...] = ("asc", "pub", "pgp")

# Marker every armored public key must contain to be loaded from disk.
PGP_ARMOR_HEADER: str = "-----BEGIN PGP PUBLIC KEY BLOCK-----"

# ─── Filter query parameters ─────────────────────────────────────────────────

PARAM_USER: str = "user"
PARAM_ALL_OF: str = "allOf"
PARAM_ONE_OF: str = "oneOf"
PARAM_NONE_OF: str = "noneOf"

# ─── Settings defaults ───────────────────────────────────────────────────────

DEFAULT_PORT: int = 8000
DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_CONFIG_PATH: str = "/config.yaml"
DEFAULT_INSTANCE_NAME: str = "Unnamed"

# ─── CLI client ──────────────────────────────────────────────────────────────

DEFAULT_SERVER_URL: str = "http://localhost:8000"
CLIENT_APP_NAME: str = "keys"
CLIENT_CONFIG_FILENAME: str = "config.toml"
CLIENT_TIMEOUT_S: float = 10.0
