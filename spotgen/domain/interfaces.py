"""Protocols for the external services used during resolution.

Misses are reported as ``None`` or an empty list. Transport failures that
survive the connector's retry policy surface as ``CatalogError``.
"""

from typing import Literal, Protocol

from spotgen.domain.entities.records import (
    CatalogAlbum,
    CatalogArtist,
    CatalogPlaylist,
    CatalogTrack,
    EngagementStats,
)

SearchKind = Literal["track", "album", "artist", "playlist"]

CatalogRecord = CatalogTrack | CatalogAlbum | CatalogArtist | CatalogPlaylist


class CatalogClient(Protocol):
    """Music catalog lookups (Spotify Web API)."""

    async def search(self, query: str, kind: SearchKind) -> list[CatalogRecord]:
        """Search the catalog, best match first."""
        ...

    async def get_track(self, track_id: str) -> CatalogTrack | None:
        """Fetch a single track."""
        ...

    async def get_album(self, album_id: str) -> CatalogAlbum | None:
        """Fetch an album including its full track listing."""
        ...

    async def get_artist(self, artist_id: str) -> CatalogArtist | None:
        """Fetch a single artist."""
        ...

    async def get_artist_albums(self, artist_id: str) -> list[CatalogAlbum]:
        """Fetch every album of an artist, across all album groups."""
        ...

    async def get_artist_top_tracks(
        self, artist_id: str, market: str | None = None
    ) -> list[CatalogTrack]:
        """Fetch an artist's top tracks, by default for the configured market."""
        ...

    async def get_related_artists(self, artist_id: str) -> list[CatalogArtist]:
        """Fetch artists related to the given artist."""
        ...

    async def get_playlist_tracks(
        self, owner_id: str | None, playlist_id: str
    ) -> list[CatalogTrack]:
        """Fetch the full track listing of a playlist."""
        ...

    async def get_audio_features(self, track_id: str) -> dict[str, float] | None:
        """Fetch the audio-feature vector of a track."""
        ...


class EngagementService(Protocol):
    """Listening statistics (Last.fm)."""

    async def get_track_engagement(
        self, artist: str, title: str, username: str | None = None
    ) -> EngagementStats | None:
        """Fetch global and per-user play counts for a track."""
        ...
