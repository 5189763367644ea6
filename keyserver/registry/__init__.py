"""Key registry: loading and holding the records served by this process.

Public API:
    KeyRegistry:         frozen in-memory record set
    load_keys_config:    YAML key config loader (fatal on error)
    load_pgp_directory:  optional PGP key directory loader (never fails)
"""
from keyserver.registry.loader import load_keys_config
from keyserver.registry.pgp import load_pgp_directory
from keyserver.registry.store import KeyRegistry

__all__ = ["KeyRegistry", "load_keys_config", "load_pgp_directory"]
