"""Album entries: resolve an album and expand it into its tracks."""

from typing import ClassVar

from attrs import define

from spotgen.application.entries.base import Attempt, Entry, query_attempts
from spotgen.application.entries.track import Track
from spotgen.config import get_logger
from spotgen.domain import ranking
from spotgen.domain.entities.queue import Queue
from spotgen.domain.entities.records import CatalogAlbum, CatalogTrack
from spotgen.domain.text import is_catalog_id, structured_query

logger = get_logger(__name__).bind(service="resolver")


@define(eq=False)
class Album(Entry):
    """An album, expanded into a queue of its tracks on dispatch."""

    kind: ClassVar[str] = "album"

    artist: str = ""
    name: str = ""
    uri: str = ""
    album_type: str | None = None
    popularity: int | None = None
    tracks: list[CatalogTrack] | None = None

    def __attrs_post_init__(self) -> None:
        if self.id and not self.uri:
            self.uri = f"spotify:album:{self.id}"

    def apply_record(self, record: CatalogAlbum) -> "Album":
        """Copy catalog metadata onto this entry."""
        self.id = record.id
        self.uri = record.uri
        self.name = record.name
        if record.artists:
            self.artist = ", ".join(artist.name for artist in record.artists)
        if record.album_type:
            self.album_type = record.album_type
        if record.popularity is not None:
            self.popularity = record.popularity
        if record.tracks is not None:
            self.tracks = list(record.tracks)
        return self

    @property
    def artists(self) -> list[str]:
        return [name.strip() for name in self.artist.split(",") if name.strip()]

    async def dispatch(self) -> Queue:
        await self.get_tracks()
        return self.create_queue()

    def create_queue(self) -> Queue:
        """Wrap the album tracks as track entries tagged with the album name."""
        queue = Queue()
        for record in self.tracks or []:
            track = Track(self.context, entry=self.entry).apply_record(record)
            track.album = self.name
            queue.add(track)
        if self.limit:
            queue = queue.slice(0, self.limit)
        return queue

    async def get_album(self, album_id: str | None = None) -> "Album":
        """Fetch the full album, including the track listing, once."""
        if self.popularity is not None and self.tracks is not None:
            return self
        album_id = album_id or self.id
        record = await self.context.catalog.get_album(album_id) if album_id else None
        if record is None:
            raise self.not_found()
        return self.apply_record(record)

    async def get_popularity(self) -> int | None:
        if self.popularity is None:
            await self.get_album()
        return self.popularity

    async def get_tracks(self) -> "Album":
        if self.tracks is not None:
            return self
        if not self.id:
            await self.search_albums()
        return await self.get_album()

    async def search_albums(self) -> "Album":
        """Identify the album by searching the catalog."""
        if self.id:
            return self
        await self.first_match(self._search_attempts())
        return self

    def _search_attempts(self) -> list[Attempt]:
        if not self.artist:
            query = self.name or self.entry
            return [*query_attempts(query, self._search), self._identifier(query)]

        album, artist = self.name or self.entry, self.artist
        query = f"{artist} - {album}"
        return [
            self._search(_album_query(album, artist), rank=False),
            self._search(_album_query(artist, album), rank=False),
            *query_attempts(query, self._search),
            self._identifier(query),
        ]

    def _search(self, query: str, rank: bool = True) -> Attempt:
        async def attempt() -> bool:
            logger.debug(f"Searching albums: {query}")
            results = [
                record
                for record in await self.context.catalog.search(query, "album")
                if isinstance(record, CatalogAlbum)
            ]
            if not results:
                return False
            if rank:
                results = ranking.stable_sort(results, ranking.similar_album(query))
            self.apply_record(results[0])
            return True

        return attempt

    def _identifier(self, query: str) -> Attempt:
        async def attempt() -> bool:
            if not is_catalog_id(query):
                return False
            record = await self.context.catalog.get_album(query.strip())
            if record is None:
                return False
            self.apply_record(record)
            return True

        return attempt

    def __str__(self) -> str:
        if self.artist and self.name:
            return f"{self.artist} - {self.name}"
        return self.name or self.entry or self.id or ""


def _album_query(album: str, artist: str) -> str:
    return structured_query(("album", album), ("artist", artist))
