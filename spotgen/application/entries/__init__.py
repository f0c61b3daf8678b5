"""Resolvable entries.

Every entry exposes ``async dispatch()``. A Track resolves to itself; the
other entries resolve to a ``Queue`` of tracks.
"""

from .album import Album
from .artist import Artist
from .base import Entry
from .playlist import Playlist
from .similar import SimilarArtists
from .top import TopTracks
from .track import Track

__all__ = [
    "Album",
    "Artist",
    "Entry",
    "Playlist",
    "SimilarArtists",
    "TopTracks",
    "Track",
]
