"""ULID generation for request correlation.

Each served request is tagged with a 26-character ULID that is bound into the
structlog context as ``request_id``. ULIDs sort by creation time, which keeps
request logs greppable in arrival order.

Uses the ``python-ulid`` library; do not hand-roll ULID generation.
"""

from __future__ import annotations

from ulid import ULID


def generate_request_id() -> str:
    """Return a new ULID as a 26-character uppercase Crockford Base32 string.

    Example::

        request_id = generate_request_id()
        # "01KJ0JRVHYA7KX32VPN5ZSCTMV"
    """
    return str(ULID())
