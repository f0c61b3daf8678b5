"""Top tracks of the artists related to a seed artist."""

from typing import ClassVar

from attrs import define

from spotgen.application.entries.artist import Artist
from spotgen.application.entries.base import Entry
from spotgen.application.entries.top import TopTracks
from spotgen.config import get_logger
from spotgen.domain.entities.queue import Queue
from spotgen.domain.entities.records import CatalogArtist

logger = get_logger(__name__).bind(service="resolver")


@define(eq=False)
class SimilarArtists(Entry):
    """Interleaved top tracks of artists similar to the seed artist.

    ``artist_limit`` bounds the number of related artists and
    ``track_limit`` the tracks taken from each of them; both fall back to
    the context defaults.
    """

    kind: ClassVar[str] = "similar"

    artist_limit: int | None = None
    track_limit: int | None = None
    artists: list[CatalogArtist] | None = None

    async def dispatch(self) -> Queue:
        await self.search_artists()
        await self.get_related_artists()
        return await self.create_queue()

    async def search_artists(self) -> "SimilarArtists":
        if not self.id:
            artist = await Artist(self.context, entry=self.entry).search_artists()
            self.id = artist.id
        return self

    async def get_related_artists(self) -> "SimilarArtists":
        if self.artists is None:
            self.artists = await self.context.catalog.get_related_artists(self.id)
            logger.debug(f"Found {len(self.artists)} artists related to {self.entry}")
        return self

    async def create_queue(self) -> Queue:
        artist_limit = self.artist_limit or self.context.similar_artist_limit
        track_limit = self.track_limit or self.context.similar_track_limit
        queue = Queue(
            TopTracks(self.context, entry=self.entry, id=artist.id, limit=track_limit)
            for artist in (self.artists or [])[:artist_limit]
        )
        result = await queue.dispatch(self.context.concurrency)
        return result.interleave()
