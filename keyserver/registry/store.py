"""In-memory key registry.

The registry is built once during application startup and passed by reference
into the router. It is a frozen dataclass of tuples, so request handlers can
read it concurrently without locking.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from keyserver.models import KeysConfig, KnownHost, PGPKey, PublicSSHKey
from keyserver.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class KeyRegistry:
    """All key records served by this process, in load order."""

    ssh_keys: tuple[PublicSSHKey, ...] = ()
    pgp_keys: tuple[PGPKey, ...] = ()
    known_hosts: tuple[KnownHost, ...] = ()

    @classmethod
    def from_config(
        cls,
        config: KeysConfig,
        extra_pgp_keys: Iterable[PGPKey] = (),
    ) -> "KeyRegistry":
        """Build a registry from the validated key config.

        PGP keys loaded from a directory are appended after the config's own
        ``pgp-keys``. Duplicate PGP names are logged but kept; lookups serve
        the first one.
        """
        pgp_keys = tuple(config.pgp_keys) + tuple(extra_pgp_keys)

        duplicates = sorted(
            name for name, count in Counter(key.name for key in pgp_keys).items() if count > 1
        )
        if duplicates:
            logger.warning(
                "Duplicate PGP key names; only the first of each will be served",
                names=duplicates,
            )

        return cls(
            ssh_keys=tuple(config.ssh_keys),
            pgp_keys=pgp_keys,
            known_hosts=tuple(config.known_hosts),
        )

    def find_pgp_key(self, name: str) -> Optional[PGPKey]:
        """Return the first PGP key called ``name``, or None."""
        return next((key for key in self.pgp_keys if key.name == name), None)
