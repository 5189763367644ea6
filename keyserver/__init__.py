"""Keys server: SSH keys, PGP keys and known hosts over HTTP."""

__version__ = "1.0.0"
