"""Domain entities: catalog records and the ordered queue."""

from .queue import Queue
from .records import (
    ArtistRef,
    CatalogAlbum,
    CatalogArtist,
    CatalogPlaylist,
    CatalogTrack,
    EngagementStats,
)

__all__ = [
    "ArtistRef",
    "CatalogAlbum",
    "CatalogArtist",
    "CatalogPlaylist",
    "CatalogTrack",
    "EngagementStats",
    "Queue",
]
