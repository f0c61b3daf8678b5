"""Top tracks of an artist."""

from typing import ClassVar

from attrs import define

from spotgen.application.entries.artist import Artist
from spotgen.application.entries.base import Entry
from spotgen.application.entries.track import Track
from spotgen.domain import ranking
from spotgen.domain.entities.queue import Queue
from spotgen.domain.entities.records import CatalogTrack


@define(eq=False)
class TopTracks(Entry):
    """The most popular tracks of an artist."""

    kind: ClassVar[str] = "top"

    tracks: list[CatalogTrack] | None = None

    async def dispatch(self) -> Queue:
        await self.search_artists()
        await self.get_artist_top_tracks()
        return self.create_queue()

    async def search_artists(self) -> "TopTracks":
        if not self.id:
            artist = await Artist(self.context, entry=self.entry).search_artists()
            self.id = artist.id
        return self

    async def get_artist_top_tracks(self) -> "TopTracks":
        if self.tracks is None:
            records = await self.context.catalog.get_artist_top_tracks(
                self.id, self.context.market
            )
            self.tracks = ranking.stable_sort(records, ranking.popularity)
        return self

    def create_queue(self) -> Queue:
        queue = Queue(
            Track(self.context, entry=self.entry).apply_record(record)
            for record in self.tracks or []
        )
        if self.limit:
            queue = queue.slice(0, self.limit)
        return queue
