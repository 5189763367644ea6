"""``keys`` command-line client for a running keys server."""
