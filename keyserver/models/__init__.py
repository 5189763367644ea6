"""Key record models.

Public API:
    PublicSSHKey:  SSH public key served from /keys
    PGPKey:        armored PGP public key served from /pgp
    KnownHost:     group of hosts sharing host keys
    KnownHostKey:  single host key with revoked / cert-authority flags
    KeysConfig:    validated root of the YAML key config file
"""
from keyserver.models.keys import KeysConfig, KnownHost, KnownHostKey, PGPKey, PublicSSHKey

__all__ = ["KeysConfig", "KnownHost", "KnownHostKey", "PGPKey", "PublicSSHKey"]
