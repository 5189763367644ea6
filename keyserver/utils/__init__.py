"""Shared utilities: structured logging and request identifiers."""
