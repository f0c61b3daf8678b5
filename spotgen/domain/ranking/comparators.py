"""Comparators for ranking search candidates and ordering playlists.

A comparator takes two items and returns a negative number, zero or a
positive number, like the ``cmp`` functions accepted by
``functools.cmp_to_key``. Comparators are composed with ``combine`` and
applied with ``stable_sort``, which never reorders items that compare equal.
"""

from collections.abc import Callable, Iterable
from functools import cmp_to_key, reduce
from typing import Any, TypeVar

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process
from toolz import identity

T = TypeVar("T")

Comparator = Callable[[Any, Any], int]

ALBUM_TYPE_RANKINGS = {
    "album": 4,
    "single": 3,
    "appears_on": 2,
    "compilation": 1,
}


# =============================================================================
# CORE BUILDERS
# =============================================================================


def _natural_order(x: Any, y: Any) -> int:
    return -1 if x < y else 1 if x > y else 0


def stable_sort(items: Iterable[T], cmp: Comparator | None = None) -> list[T]:
    """Sort items by a comparator, keeping equal items in their input order.

    Each item is paired with its original position and the position is
    used as the last tie-break.
    """
    cmp = cmp or ascending()
    pairs = list(enumerate(items))

    def compare_pairs(a: tuple[int, T], b: tuple[int, T]) -> int:
        result = cmp(a[1], b[1])
        if result:
            return result
        return _natural_order(a[0], b[0])

    return [item for _, item in sorted(pairs, key=cmp_to_key(compare_pairs))]


def comparator(cmp: Comparator, fn: Callable[[Any], Any] | None = None) -> Comparator:
    """Apply ``cmp`` to the scores computed by ``fn`` (identity by default)."""
    fn = fn or identity
    return lambda a, b: cmp(fn(a), fn(b))


def ascending(fn: Callable[[Any], Any] | None = None) -> Comparator:
    """Lower scores first."""
    return comparator(_natural_order, fn)


def descending(fn: Callable[[Any], Any] | None = None) -> Comparator:
    """Higher scores first."""
    return comparator(lambda x, y: _natural_order(y, x), fn)


def combine(*cmps: Comparator) -> Comparator:
    """Chain comparators, falling through to the next one on ties."""

    def chain(first: Comparator, second: Comparator) -> Comparator:
        return lambda a, b: first(a, b) or second(a, b)

    return reduce(chain, cmps)


def similarity(fn: Callable[[Any], str], reference: str) -> Comparator:
    """Most similar to ``reference`` first, by normalized string similarity."""
    return descending(
        lambda x: fuzz.ratio(fn(x), reference, processor=default_process) / 100.0
    )


# =============================================================================
# SCORING HELPERS
# =============================================================================


def _score(value: Any) -> Any:
    return -1 if value is None else value


def _main_artist(item: Any) -> str:
    artists = getattr(item, "artists", None) or []
    if not artists:
        return ""
    first = artists[0]
    return getattr(first, "name", first) or ""


def _artist_and_name(item: Any) -> str:
    return f"{_main_artist(item)} - {getattr(item, 'name', '') or ''}"


# =============================================================================
# DERIVED COMPARATORS
# =============================================================================

popularity = descending(lambda x: _score(getattr(x, "popularity", None)))

engagement = combine(
    descending(lambda x: _score(getattr(x, "personal_playcount", None))),
    descending(lambda x: _score(getattr(x, "global_playcount", None))),
    popularity,
)

album_type = descending(
    lambda album: ALBUM_TYPE_RANKINGS.get(getattr(album, "album_type", None), 0)
)

album = combine(album_type, popularity)

# Explicit versions ahead of censored ones
censorship = descending(lambda x: 1 if getattr(x, "explicit", False) else 0)


def similar_album(query: str) -> Comparator:
    return similarity(_artist_and_name, query)


def similar_artist(query: str) -> Comparator:
    return similarity(lambda x: getattr(x, "name", "") or "", query)


def similar_track(query: str) -> Comparator:
    return similarity(_artist_and_name, query)


def best_track_match(query: str) -> Comparator:
    """Rank track candidates for a free-text query."""
    return combine(similar_track(query), popularity, censorship)


def by_property(getter: Callable[[Any], Any]) -> Comparator:
    """Playlist ordering by an arbitrary property.

    Strings sort alphabetically while numbers sort from high to low, so
    ``order by popularity`` puts the most popular tracks first. Items
    without a value go last.
    """

    def compare(a: Any, b: Any) -> int:
        x, y = getter(a), getter(b)
        if x is None or y is None:
            return (x is None) - (y is None)
        if isinstance(x, str) or isinstance(y, str):
            return _natural_order(str(x), str(y))
        return _natural_order(y, x)

    return compare
