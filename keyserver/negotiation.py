"""Accept header content negotiation.

Resolves a request's ``Accept`` header to one of the three representations
the server knows about. The algorithm follows the usual HTTP rules:

  - Each media range carries a quality ``q`` (default 1, clamped to 0..1).
  - A candidate type takes the q of its most specific matching range:
    ``text/plain`` beats ``text/*`` beats ``*/*``.
  - ``q=0`` rules a candidate out.
  - Candidates are ordered by q, then specificity, then the position of the
    matching range in the header, then our own candidate order.

Media-range parameters other than ``q`` (``charset``, ``level``) are ignored,
so ``application/json; charset=utf-8`` selects JSON. Stricter negotiators treat
a parameterised range as not matching a bare type and would fall back to plain
text here.

``text/plain`` comes first in the candidate order, so a bare ``*/*`` (what
curl sends) resolves to plain text. Missing, empty or unmatched headers also
fall back to ``text/plain``. Malformed ranges are skipped; negotiation never
raises.

``text/html`` is a candidate so that browsers are recognised, but no renderer
produces HTML; they answer 406 instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from keyserver.utils.logger import get_logger

logger = get_logger(__name__)


class ContentType(str, Enum):
    """Representations that negotiation can resolve to."""

    TEXT_PLAIN = "text/plain"
    APPLICATION_JSON = "application/json"
    TEXT_HTML = "text/html"


# Order matters: earlier candidates win ties.
CANDIDATES: tuple[ContentType, ...] = (
    ContentType.TEXT_PLAIN,
    ContentType.APPLICATION_JSON,
    ContentType.TEXT_HTML,
)

DEFAULT_CONTENT_TYPE = ContentType.TEXT_PLAIN


@dataclass(frozen=True)
class MediaRange:
    """One parsed entry of an Accept header."""

    type: str
    subtype: str
    q: float
    index: int

    def specificity(self, candidate: str) -> int:
        """Return 2/1/0 for exact/``type/*``/``*/*`` matches, -1 for no match."""
        ctype, _, csubtype = candidate.partition("/")
        if self.type == "*" and self.subtype == "*":
            return 0
        if self.type != ctype:
            return -1
        if self.subtype == "*":
            return 1
        return 2 if self.subtype == csubtype else -1


def parse_accept(header: str) -> list[MediaRange]:
    """Parse an Accept header into media ranges, dropping malformed entries."""
    ranges: list[MediaRange] = []
    for index, part in enumerate(header.split(",")):
        media, *params = (token.strip() for token in part.split(";"))
        mtype, slash, msubtype = media.lower().partition("/")
        if not slash or not mtype or not msubtype:
            continue
        if mtype == "*" and msubtype != "*":
            continue

        q: Optional[float] = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    q = min(max(float(value.strip()), 0.0), 1.0)
                except ValueError:
                    q = None
        if q is None:
            continue

        ranges.append(MediaRange(type=mtype, subtype=msubtype, q=q, index=index))
    return ranges


def preferred_types(header: Optional[str]) -> list[ContentType]:
    """Return acceptable candidates, most preferred first.

    A missing header accepts everything, in candidate order.
    """
    if header is None:
        return list(CANDIDATES)

    ranked = []
    ranges = parse_accept(header)
    for order, candidate in enumerate(CANDIDATES):
        best: Optional[tuple[int, MediaRange]] = None
        for media_range in ranges:
            specificity = media_range.specificity(candidate.value)
            if specificity < 0:
                continue
            if best is None or specificity > best[0]:
                best = (specificity, media_range)
        if best is None:
            continue
        specificity, media_range = best
        if media_range.q <= 0:
            continue
        ranked.append(((-media_range.q, -specificity, media_range.index, order), candidate))

    ranked.sort(key=lambda item: item[0])
    return [candidate for _, candidate in ranked]


def get_content_type(headers: Mapping[str, str]) -> ContentType:
    """Resolve the request's Accept header to a single ContentType.

    ``headers`` is any case-insensitive mapping (Starlette ``Headers``) or a
    plain dict with a lower-case ``accept`` key.
    """
    header = headers.get("accept")
    if header is not None and not header.strip():
        header = None

    preferred = preferred_types(header)
    if not preferred:
        logger.debug("No acceptable content type, defaulting", accept=header)
        return DEFAULT_CONTENT_TYPE
    return preferred[0]
