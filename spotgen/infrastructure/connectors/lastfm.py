"""Last.fm engagement connector.

This module provides play counts from the Last.fm API through the pylast
library (https://github.com/pylast/pylast). It is used to order playlists by
how often tracks are played, globally and by a given user.
"""

import asyncio
from typing import Any, ClassVar

from attrs import define, field
import backoff
import pylast

from spotgen.config import get_logger, resilient_operation, settings
from spotgen.domain.entities.records import EngagementStats
from spotgen.domain.errors import CatalogError

# Get contextual logger with service binding
logger = get_logger(__name__).bind(service="lastfm")


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@define(slots=True)
class LastFMConnector:
    """Last.fm API connector implementing the EngagementService protocol."""

    api_key: str | None = field(default=None)
    api_secret: str | None = field(default=None)
    lastfm_username: str | None = field(default=None)
    client: pylast.LastFMNetwork | None = field(default=None, repr=False)

    USER_AGENT: ClassVar[str] = "spotgen/0.3.0 (Playlist Generator)"

    def __attrs_post_init__(self) -> None:
        """Initialize a read-only Last.fm client when credentials are available."""
        credentials = settings.credentials
        self.api_key = self.api_key or credentials.lastfm_key or None
        self.api_secret = self.api_secret or credentials.lastfm_secret or None
        self.lastfm_username = (
            self.lastfm_username or credentials.lastfm_username or None
        )

        if self.client is not None or not self.api_key:
            return

        self.client = pylast.LastFMNetwork(
            api_key=str(self.api_key),
            api_secret=str(self.api_secret or ""),
        )
        pylast.HEADERS["User-Agent"] = self.USER_AGENT

    @resilient_operation("get_lastfm_track_engagement")
    async def get_track_engagement(
        self, artist: str, title: str, username: str | None = None
    ) -> EngagementStats | None:
        """Get global and personal play counts for a track.

        Returns:
            The play counts, or None when Last.fm does not know the track

        Raises:
            CatalogError: when Last.fm keeps failing after the retry policy
        """
        if not self.client:
            return None
        user = username or self.lastfm_username
        try:
            return await self._fetch_engagement(artist, title, user)
        except pylast.PyLastError as e:
            raise CatalogError(f"Last.fm request failed: {e}") from e

    @backoff.on_exception(
        backoff.constant,
        (pylast.NetworkError, pylast.MalformedResponseError, pylast.WSError),
        max_tries=lambda: settings.api.lastfm_retry_count,
        interval=lambda: settings.api.lastfm_retry_interval,
        jitter=None,
        giveup=lambda e: "not found" in str(e).lower(),
    )
    async def _fetch_engagement(
        self, artist: str, title: str, user: str | None
    ) -> EngagementStats | None:
        logger.debug(f"Fetching Last.fm play counts for {artist} - {title}")
        track = await asyncio.to_thread(self.client.get_track, artist, title)

        # Set username for user-specific data
        track.username = user

        try:
            playcount = await asyncio.to_thread(track.get_playcount)
            userplaycount = (
                await asyncio.to_thread(track.get_userplaycount) if user else None
            )
        except pylast.WSError as e:
            if "not found" in str(e).lower():
                logger.debug(f"Track not found on Last.fm: {artist} - {title}")
                return None
            raise

        return EngagementStats(
            global_playcount=_to_int(playcount),
            personal_playcount=_to_int(userplaycount),
        )
