"""Artist entries: every album of an artist, best albums first."""

from typing import ClassVar

from attrs import define

from spotgen.application.entries.album import Album
from spotgen.application.entries.base import Attempt, Entry, query_attempts
from spotgen.config import get_logger
from spotgen.domain import ranking
from spotgen.domain.entities.queue import RECOVERABLE_ERRORS, Queue
from spotgen.domain.entities.records import CatalogAlbum, CatalogArtist
from spotgen.domain.text import is_catalog_id

logger = get_logger(__name__).bind(service="resolver")


@define(eq=False)
class Artist(Entry):
    """An artist, expanded into the tracks of their albums on dispatch.

    Tracks where the artist only appears as a guest are filtered out.
    """

    kind: ClassVar[str] = "artist"

    name: str = ""
    uri: str = ""
    popularity: int | None = None
    albums: list[CatalogAlbum] | None = None

    def apply_record(self, record: CatalogArtist) -> "Artist":
        """Copy catalog metadata onto this entry."""
        self.id = record.id
        self.uri = record.uri
        self.name = record.name
        if record.popularity is not None:
            self.popularity = record.popularity
        return self

    async def dispatch(self) -> Queue:
        await self.search_artists()
        if not self.name:
            # the name is needed to drop guest appearances
            record = await self.context.catalog.get_artist(self.id)
            if record is None:
                raise self.not_found()
            self.apply_record(record)
        await self.get_artist_albums()
        return await self.create_queue()

    async def search_artists(self) -> "Artist":
        """Identify the artist by name."""
        if self.id:
            return self
        query = self.name or self.entry
        await self.first_match(
            [*query_attempts(query, self._search), self._identifier(query)]
        )
        return self

    def _search(self, query: str) -> Attempt:
        async def attempt() -> bool:
            logger.debug(f"Searching artists: {query}")
            results = [
                record
                for record in await self.context.catalog.search(query, "artist")
                if isinstance(record, CatalogArtist)
            ]
            if not results:
                return False
            results = ranking.stable_sort(results, ranking.similar_artist(query))
            self.apply_record(results[0])
            return True

        return attempt

    def _identifier(self, query: str) -> Attempt:
        async def attempt() -> bool:
            if not is_catalog_id(query):
                return False
            record = await self.context.catalog.get_artist(query.strip())
            if record is None:
                return False
            self.apply_record(record)
            return True

        return attempt

    async def get_artist_albums(self) -> "Artist":
        """Fetch every album of the artist, ranked by type and popularity."""
        if self.albums is None:
            records = await self.context.catalog.get_artist_albums(self.id)
            self.albums = ranking.stable_sort(records, ranking.album)
        return self

    async def create_queue(self) -> Queue:
        albums = Queue(
            Album(self.context, entry=self.entry).apply_record(record)
            for record in self.albums or []
        )
        if self.limit:
            albums = albums.slice(0, self.limit)

        async def fetch_popularity(album: Album) -> None:
            try:
                await album.get_popularity()
            except RECOVERABLE_ERRORS as e:
                logger.debug(f"No popularity for album {album}: {e}")

        await albums.for_each_async(fetch_popularity)
        albums = albums.sort(ranking.album)

        tracks = (await albums.dispatch(self.context.concurrency)).flatten()
        if self.name:
            tracks = tracks.filter(lambda track: track.has_artist(self.name))
        return tracks

    def __str__(self) -> str:
        return self.name or self.entry or self.id or ""
