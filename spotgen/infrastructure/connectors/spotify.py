"""Spotify catalog connector with record conversion.

This module provides a connector for the Spotify Web API using the spotipy
library (https://spotipy.readthedocs.io/). It uses the client-credentials
flow, which is enough for every read-only catalog lookup the generator needs.

Key components:
- SpotifyConnector: catalog client implementing the CatalogClient protocol
- Conversion utilities: transform Spotify API responses into catalog records

Error policy:
- HTTP 401: the access token is refreshed and the call retried once
- HTTP 400/404: the identifier was rejected or not found, the result is None
- Rate limiting, server errors and network failures are retried with a fixed
  interval, then reported as CatalogError
"""

import asyncio
from collections.abc import Callable
from typing import Any

from attrs import define, field
import backoff
import requests
import spotipy
from spotipy.oauth2 import SpotifyClientCredentials

from spotgen.config import get_logger, resilient_operation, settings
from spotgen.domain.entities.records import (
    ArtistRef,
    CatalogAlbum,
    CatalogArtist,
    CatalogPlaylist,
    CatalogTrack,
)
from spotgen.domain.errors import CatalogError
from spotgen.domain.interfaces import CatalogRecord, SearchKind

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="spotify")

ALBUM_GROUPS = "album,single,appears_on,compilation"

AUDIO_FEATURE_KEYS = (
    "danceability",
    "energy",
    "key",
    "loudness",
    "mode",
    "speechiness",
    "acousticness",
    "instrumentalness",
    "liveness",
    "valence",
    "tempo",
    "time_signature",
)

# Statuses meaning "no such item" rather than a failure
MISSING_STATUSES = frozenset({400, 404})
RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


def _is_permanent(error: Exception) -> bool:
    """Whether retrying the call cannot help."""
    return (
        isinstance(error, spotipy.SpotifyException)
        and error.http_status not in RETRYABLE_STATUSES
    )


@define(slots=True)
class SpotifyConnector:
    """Thin wrapper around spotipy returning catalog records.

    All spotipy calls run in a worker thread so the event loop keeps
    serving other entries while a request is in flight.
    """

    client_id: str | None = field(default=None)
    client_secret: str | None = field(default=None)
    market: str = field(factory=lambda: settings.api.spotify_market)
    client: spotipy.Spotify | None = field(default=None, repr=False)

    def __attrs_post_init__(self) -> None:
        """Initialize the Spotify client with client-credentials auth."""
        if self.client is not None:
            return
        logger.debug("Initializing Spotify connector")
        credentials = settings.credentials
        self.client = spotipy.Spotify(
            auth_manager=SpotifyClientCredentials(
                client_id=self.client_id or credentials.spotify_client_id or None,
                client_secret=(
                    self.client_secret or credentials.spotify_client_secret or None
                ),
            ),
            retries=0,
        )

    # -------------------------------------------------------------------------
    # Request plumbing
    # -------------------------------------------------------------------------

    @backoff.on_exception(
        backoff.constant,
        (spotipy.SpotifyException, requests.exceptions.RequestException),
        max_tries=lambda: settings.api.spotify_retry_count,
        interval=lambda: settings.api.spotify_retry_interval,
        jitter=None,
        giveup=_is_permanent,
    )
    async def _request(self, method: Callable[..., Any], *args, **kwargs) -> Any:
        return await asyncio.to_thread(method, *args, **kwargs)

    async def _call(self, method: Callable[..., Any], *args, **kwargs) -> Any | None:
        """Call the API; None when the item does not exist."""
        try:
            try:
                return await self._request(method, *args, **kwargs)
            except spotipy.SpotifyException as e:
                if e.http_status != 401:
                    raise
                logger.debug("Access token rejected, refreshing")
                await self._refresh_token()
                return await self._request(method, *args, **kwargs)
        except spotipy.SpotifyException as e:
            if e.http_status in MISSING_STATUSES or e.http_status == 401:
                logger.debug(f"Spotify returned {e.http_status}: {e.msg}")
                return None
            raise CatalogError(f"Spotify request failed: {e}") from e
        except requests.exceptions.RequestException as e:
            raise CatalogError(f"Spotify request failed: {e}") from e

    async def _refresh_token(self) -> None:
        auth_manager = self.client.auth_manager
        await asyncio.to_thread(
            auth_manager.get_access_token, as_dict=False, check_cache=False
        )

    async def _all_items(self, page: dict[str, Any] | None) -> list[dict[str, Any]]:
        """Follow ``next`` links and collect the items of every page."""
        items: list[dict[str, Any]] = []
        while page:
            items.extend(item for item in page.get("items") or [] if item)
            if not page.get("next"):
                break
            page = await self._call(self.client.next, page)
        return items

    # -------------------------------------------------------------------------
    # CatalogClient
    # -------------------------------------------------------------------------

    @resilient_operation("spotify_search")
    async def search(self, query: str, kind: SearchKind) -> list[CatalogRecord]:
        """Search the catalog; results keep Spotify's ranking."""
        logger.debug(f"Searching Spotify {kind}s: {query}")
        response = await self._call(
            self.client.search,
            q=query,
            type=kind,
            limit=settings.api.spotify_search_limit,
            market=self.market,
        )
        if not response:
            return []
        items = (response.get(f"{kind}s") or {}).get("items") or []
        convert = SEARCH_CONVERTERS[kind]
        return [convert(item) for item in items if item and item.get("id")]

    @resilient_operation("spotify_get_track")
    async def get_track(self, track_id: str) -> CatalogTrack | None:
        response = await self._call(self.client.track, track_id)
        return convert_spotify_track(response) if response else None

    @resilient_operation("spotify_get_album")
    async def get_album(self, album_id: str) -> CatalogAlbum | None:
        """Fetch an album together with every page of its track listing."""
        response = await self._call(self.client.album, album_id, market=self.market)
        if not response:
            return None
        items = await self._all_items(response.get("tracks"))
        tracks = [
            convert_spotify_track(item, album_name=response.get("name"))
            for item in items
            if item.get("id")
        ]
        return convert_spotify_album(response, tracks=tracks)

    @resilient_operation("spotify_get_artist")
    async def get_artist(self, artist_id: str) -> CatalogArtist | None:
        response = await self._call(self.client.artist, artist_id)
        return convert_spotify_artist(response) if response else None

    @resilient_operation("spotify_get_artist_albums")
    async def get_artist_albums(self, artist_id: str) -> list[CatalogAlbum]:
        response = await self._call(
            self.client.artist_albums,
            artist_id,
            include_groups=ALBUM_GROUPS,
            limit=settings.api.spotify_page_limit,
        )
        items = await self._all_items(response)
        logger.debug(f"Retrieved {len(items)} albums for artist {artist_id}")
        return [convert_spotify_album(item) for item in items if item.get("id")]

    @resilient_operation("spotify_get_artist_top_tracks")
    async def get_artist_top_tracks(
        self, artist_id: str, market: str | None = None
    ) -> list[CatalogTrack]:
        response = await self._call(
            self.client.artist_top_tracks, artist_id, country=market or self.market
        )
        tracks = (response or {}).get("tracks") or []
        return [convert_spotify_track(item) for item in tracks if item]

    @resilient_operation("spotify_get_related_artists")
    async def get_related_artists(self, artist_id: str) -> list[CatalogArtist]:
        response = await self._call(self.client.artist_related_artists, artist_id)
        artists = (response or {}).get("artists") or []
        return [convert_spotify_artist(item) for item in artists if item]

    @resilient_operation("spotify_get_playlist_tracks")
    async def get_playlist_tracks(
        self, owner_id: str | None, playlist_id: str
    ) -> list[CatalogTrack]:
        """Fetch every track of a playlist; local files and episodes are skipped."""
        response = await self._call(
            self.client.playlist_items,
            playlist_id,
            additional_types=("track",),
            market=self.market,
        )
        items = await self._all_items(response)
        tracks = [
            convert_spotify_track(item["track"])
            for item in items
            if (item.get("track") or {}).get("id")
            and item["track"].get("type", "track") == "track"
        ]
        logger.debug(
            f"Retrieved {len(tracks)} tracks from playlist {owner_id}:{playlist_id}"
        )
        return tracks

    @resilient_operation("spotify_get_audio_features")
    async def get_audio_features(self, track_id: str) -> dict[str, float] | None:
        response = await self._call(self.client.audio_features, [track_id])
        features = response[0] if response else None
        if not features:
            return None
        return {
            key: features[key]
            for key in AUDIO_FEATURE_KEYS
            if features.get(key) is not None
        }


# =============================================================================
# CONVERSION
# =============================================================================


def _artist_refs(data: dict[str, Any]) -> list[ArtistRef]:
    return [
        ArtistRef(name=artist.get("name", ""), id=artist.get("id"))
        for artist in data.get("artists") or []
    ]


def convert_spotify_track(
    data: dict[str, Any], album_name: str | None = None
) -> CatalogTrack:
    """Convert a Spotify track object to a CatalogTrack record."""
    album = data.get("album") or {}
    return CatalogTrack(
        id=data["id"],
        uri=data.get("uri") or "",
        name=data.get("name", ""),
        artists=_artist_refs(data),
        album=album.get("name") or album_name,
        duration_ms=data.get("duration_ms"),
        popularity=data.get("popularity"),
        explicit=data.get("explicit"),
        disc_number=data.get("disc_number"),
        track_number=data.get("track_number"),
    )


def convert_spotify_album(
    data: dict[str, Any], tracks: list[CatalogTrack] | None = None
) -> CatalogAlbum:
    """Convert a Spotify album object to a CatalogAlbum record.

    Albums an artist only guests on are listed under the ``appears_on``
    album group, which takes precedence over the album type.
    """
    album_type = data.get("album_type")
    if data.get("album_group") == "appears_on":
        album_type = "appears_on"
    return CatalogAlbum(
        id=data["id"],
        uri=data.get("uri") or "",
        name=data.get("name", ""),
        artists=_artist_refs(data),
        album_type=album_type,
        popularity=data.get("popularity"),
        tracks=tracks,
    )


def convert_spotify_artist(data: dict[str, Any]) -> CatalogArtist:
    """Convert a Spotify artist object to a CatalogArtist record."""
    return CatalogArtist(
        id=data["id"],
        uri=data.get("uri") or "",
        name=data.get("name", ""),
        popularity=data.get("popularity"),
    )


def convert_spotify_playlist(data: dict[str, Any]) -> CatalogPlaylist:
    """Convert a Spotify playlist object to a CatalogPlaylist record."""
    return CatalogPlaylist(
        id=data["id"],
        name=data.get("name", ""),
        owner_id=(data.get("owner") or {}).get("id"),
    )


SEARCH_CONVERTERS: dict[str, Callable[[dict[str, Any]], CatalogRecord]] = {
    "track": convert_spotify_track,
    "album": convert_spotify_album,
    "artist": convert_spotify_artist,
    "playlist": convert_spotify_playlist,
}
