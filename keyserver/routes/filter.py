"""Tag and user filtering for SSH keys.

A Filter is built from the query string of a /keys request::

    /keys?user=alice&allOf=work&oneOf=laptop&oneOf=desktop&noneOf=retired

Each parameter is a separate predicate; a key must satisfy all of the ones
that are present:

  user:    key.user equals the value exactly (case sensitive).
  allOf:   key carries every listed tag.
  oneOf:   key carries at least one listed tag.
  noneOf:  key carries none of the listed tags.

A parameter that is absent places no constraint. A parameter that is present
always constrains, even with an empty value list: ``all_of=frozenset()`` passes
every key, ``one_of=frozenset()`` passes none.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import urlencode

from starlette.datastructures import URL, QueryParams

from keyserver.constants import PARAM_ALL_OF, PARAM_NONE_OF, PARAM_ONE_OF, PARAM_USER
from keyserver.models import PublicSSHKey


@dataclass(frozen=True)
class Filter:
    """Request-scoped SSH key filter. ``None`` means "parameter absent"."""

    user: Optional[str] = None
    all_of: Optional[frozenset[str]] = None
    one_of: Optional[frozenset[str]] = None
    none_of: Optional[frozenset[str]] = None


def filter_includes_key(filter: Filter, key: PublicSSHKey) -> bool:
    """Return True if ``key`` satisfies every predicate set on ``filter``.

    Predicates are checked in a fixed order (user, allOf, oneOf, noneOf) and
    evaluation stops at the first failure.
    """
    if filter.user is not None and key.user != filter.user:
        return False

    tags = frozenset(key.tags)

    if filter.all_of is not None and not filter.all_of <= tags:
        return False

    if filter.one_of is not None and filter.one_of.isdisjoint(tags):
        return False

    if filter.none_of is not None and not filter.none_of.isdisjoint(tags):
        return False

    return True


def parse_parameters(url: Union[URL, str]) -> Filter:
    """Build a Filter from the query string of ``url``.

    Blank values are kept, so ``?allOf`` yields ``all_of={""}``. When ``user``
    is repeated, the last value wins.
    """
    params = QueryParams(URL(str(url)).query)

    def _tags(name: str) -> Optional[frozenset[str]]:
        if name not in params:
            return None
        return frozenset(params.getlist(name))

    return Filter(
        user=params.get(PARAM_USER),
        all_of=_tags(PARAM_ALL_OF),
        one_of=_tags(PARAM_ONE_OF),
        none_of=_tags(PARAM_NONE_OF),
    )


def build_query(filter: Filter) -> str:
    """Encode ``filter`` as a query string that ``parse_parameters`` reads back.

    Tag values are sorted so equal filters always produce the same string.
    Empty tag sets cannot be expressed in a query string and are dropped.
    """
    items: list[tuple[str, str]] = []
    if filter.user is not None:
        items.append((PARAM_USER, filter.user))
    for name, tags in (
        (PARAM_ALL_OF, filter.all_of),
        (PARAM_ONE_OF, filter.one_of),
        (PARAM_NONE_OF, filter.none_of),
    ):
        if tags:
            items.extend((name, tag) for tag in sorted(tags))
    return urlencode(items)
