"""Playlist entries."""

from typing import ClassVar

from attrs import define

from spotgen.application.entries.base import Attempt, Entry, query_attempts
from spotgen.application.entries.track import Track
from spotgen.config import get_logger
from spotgen.domain.entities.queue import Queue
from spotgen.domain.entities.records import CatalogPlaylist, CatalogTrack

logger = get_logger(__name__).bind(service="resolver")


def playlist_uri(owner: str | None, playlist_id: str) -> str:
    if owner:
        return f"spotify:user:{owner}:playlist:{playlist_id}"
    return f"spotify:playlist:{playlist_id}"


@define(eq=False)
class Playlist(Entry):
    """A playlist, identified by owner and ID or found by name."""

    kind: ClassVar[str] = "playlist"

    owner: str | None = None
    name: str = ""
    uri: str = ""
    tracks: list[CatalogTrack] | None = None

    def __attrs_post_init__(self) -> None:
        if self.id and not self.uri:
            self.uri = playlist_uri(self.owner, self.id)

    def apply_record(self, record: CatalogPlaylist) -> "Playlist":
        """Copy catalog metadata onto this entry."""
        self.id = record.id
        self.name = record.name
        self.owner = record.owner_id or self.owner
        self.uri = playlist_uri(self.owner, self.id)
        return self

    async def dispatch(self) -> Queue:
        await self.search_playlists()
        await self.get_playlist()
        return self.create_queue()

    async def search_playlists(self) -> "Playlist":
        if not self.id:
            await self.first_match(query_attempts(self.entry, self._search))
        return self

    def _search(self, query: str) -> Attempt:
        async def attempt() -> bool:
            logger.debug(f"Searching playlists: {query}")
            results = [
                record
                for record in await self.context.catalog.search(query, "playlist")
                if isinstance(record, CatalogPlaylist)
            ]
            if not results:
                return False
            self.apply_record(results[0])
            return True

        return attempt

    async def get_playlist(self) -> "Playlist":
        """Fetch the full track listing once."""
        if self.tracks is None:
            self.tracks = await self.context.catalog.get_playlist_tracks(
                self.owner, self.id
            )
        return self

    def create_queue(self) -> Queue:
        queue = Queue(
            Track(self.context, entry=self.entry).apply_record(record)
            for record in self.tracks or []
        )
        if self.limit:
            queue = queue.slice(0, self.limit)
        return queue

    def __str__(self) -> str:
        return self.name or self.entry or self.uri
