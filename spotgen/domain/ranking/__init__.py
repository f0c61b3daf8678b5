"""Stable sorting and the comparator library used for ranking."""

from .comparators import (
    ALBUM_TYPE_RANKINGS,
    Comparator,
    album,
    album_type,
    ascending,
    best_track_match,
    by_property,
    censorship,
    combine,
    comparator,
    descending,
    engagement,
    popularity,
    similar_album,
    similar_artist,
    similar_track,
    similarity,
    stable_sort,
)

__all__ = [
    "ALBUM_TYPE_RANKINGS",
    "Comparator",
    "album",
    "album_type",
    "ascending",
    "best_track_match",
    "by_property",
    "censorship",
    "combine",
    "comparator",
    "descending",
    "engagement",
    "popularity",
    "similar_album",
    "similar_artist",
    "similar_track",
    "similarity",
    "stable_sort",
]
