"""Track entries: catalog search with fallbacks and lazily fetched properties."""

from typing import Any, ClassVar

from attrs import define, field

from spotgen.application.entries.base import Attempt, Entry, query_attempts
from spotgen.config import get_logger
from spotgen.domain import ranking
from spotgen.domain.entities.records import CatalogTrack
from spotgen.domain.text import comparable_title, is_catalog_id, structured_query

logger = get_logger(__name__).bind(service="resolver")

AUDIO_FEATURES = (
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

# Features with a derived "un<feature>" complement
COMPLEMENTED_FEATURES = (
    "acousticness",
    "danceability",
    "energy",
    "instrumentalness",
    "liveness",
    "loudness",
    "speechiness",
    "valence",
)

AUDIO_PROPERTIES = frozenset(
    AUDIO_FEATURES + tuple(f"un{name}" for name in COMPLEMENTED_FEATURES)
)
ENGAGEMENT_PROPERTIES = frozenset({"lastfm", "global_playcount", "personal_playcount"})
METADATA_PROPERTIES = frozenset({"artist", "name", "album"})


def _write_once(instance: "Track", attribute: Any, value: str) -> str:
    current = getattr(instance, attribute.name)
    if current and value and value != current:
        raise AttributeError(
            f"{attribute.name} of {instance.entry!r} is already {current!r}"
        )
    return value or current


def _track_query(track: str, artist: str, album: str | None = None) -> str:
    return structured_query(("track", track), ("artist", artist), ("album", album))


def _non_negative(value: Any) -> Any:
    return value if isinstance(value, int) and value >= 0 else ""


@define(eq=False)
class Track(Entry):
    """A single track, searched for by text or fetched by identifier."""

    kind: ClassVar[str] = "track"

    artist: str = ""
    name: str = ""
    album: str = ""
    uri: str = field(default="", on_setattr=_write_once)
    artists: list[str] = field(factory=list)
    main_artist: str = ""
    title: str = ""
    duration_ms: int | None = None
    disc_number: int | None = None
    track_number: int | None = None
    popularity: int | None = None
    explicit: bool | None = None
    global_playcount: int | None = None
    personal_playcount: int | None = None
    audio_features: dict[str, float] | None = None

    @property
    def lastfm(self) -> int | None:
        """Personal play count when known, otherwise the global one."""
        if self.personal_playcount is not None:
            return self.personal_playcount
        return self.global_playcount

    def apply_record(self, record: CatalogTrack) -> "Track":
        """Copy catalog metadata onto this entry."""
        self.id = record.id
        self.uri = record.uri
        self.name = record.name
        if record.artists:
            self.artists = record.artist_names
            self.artist = ", ".join(self.artists)
            self.main_artist = self.artists[0]
        if record.album:
            self.album = record.album
        self.duration_ms = record.duration_ms
        self.disc_number = record.disc_number
        self.track_number = record.track_number
        if record.popularity is not None:
            self.popularity = record.popularity
        if record.explicit is not None:
            self.explicit = record.explicit
        if self.main_artist and self.name:
            self.title = f"{self.main_artist} - {self.name}"
        else:
            self.title = self.name
        return self

    async def dispatch(self) -> "Track":
        """Resolve the track URI, fetching metadata for bare identifiers."""
        if self.id and not self.name:
            await self.fetch_track()
        await self.get_property("uri")
        return self

    # -------------------------------------------------------------------------
    # Catalog lookups
    # -------------------------------------------------------------------------

    async def fetch_track(self, track_id: str | None = None) -> "Track":
        """Fetch full metadata by identifier; cached once popularity is known."""
        if track_id is None and self.popularity is not None:
            return self
        track_id = track_id or self.id
        record = await self.context.catalog.get_track(track_id) if track_id else None
        if record is None:
            raise self.not_found()
        return self.apply_record(record)

    async def search_tracks(self) -> "Track":
        """Identify the track by searching the catalog."""
        if self.id:
            return self
        await self.first_match(self._search_attempts())
        return self

    def _search_attempts(self) -> list[Attempt]:
        if not self.artist:
            query = self.name or self.entry
            return [*query_attempts(query, self._search), self._identifier(query)]

        track, artist, album = self.name or self.entry, self.artist, self.album
        attempts = [
            self._search(_track_query(track, artist, album), rank=False),
            # artist and title swapped
            self._search(_track_query(artist, track, album), rank=False),
        ]
        if album:
            attempts += [
                self._search(_track_query(track, artist), rank=False),
                self._search(_track_query(artist, track), rank=False),
            ]
        query = " - ".join(part for part in (artist, track, album) if part)
        return [
            *attempts,
            *query_attempts(query, self._search),
            self._identifier(query),
        ]

    def _search(self, query: str, rank: bool = True) -> Attempt:
        async def attempt() -> bool:
            logger.debug(f"Searching tracks: {query}")
            results = [
                record
                for record in await self.context.catalog.search(query, "track")
                if isinstance(record, CatalogTrack)
            ]
            if not results:
                return False
            if rank:
                # The first hit is sometimes a random track from a
                # same-named album
                results = ranking.stable_sort(results, ranking.best_track_match(query))
            self.apply_record(results[0])
            return True

        return attempt

    def _identifier(self, query: str) -> Attempt:
        async def attempt() -> bool:
            if not is_catalog_id(query):
                return False
            record = await self.context.catalog.get_track(query.strip())
            if record is None:
                return False
            self.apply_record(record)
            return True

        return attempt

    async def get_audio_features(self) -> "Track":
        """Fetch the audio-feature vector and derive the complements."""
        if self.audio_features is not None:
            return self
        features = dict(await self.context.catalog.get_audio_features(self.id) or {})
        if features:
            for name in COMPLEMENTED_FEATURES:
                features[f"un{name}"] = 1.0 - (features.get(name) or 0.0)
        self.audio_features = features
        return self

    async def get_engagement(self, username: str | None = None) -> "Track":
        """Fetch play counts from the engagement service, when one is configured."""
        engagement = self.context.engagement
        if engagement is None:
            logger.debug("No engagement service configured, skipping play counts")
            return self
        await self.get_property("artist")
        await self.get_property("name")
        stats = await engagement.get_track_engagement(
            self.main_artist or self.artist,
            self.name,
            username or self.context.lastfm_user,
        )
        if stats is not None:
            self.global_playcount = stats.global_playcount
            self.personal_playcount = stats.personal_playcount
        return self

    async def get_popularity(self) -> int | None:
        return await self.get_property("popularity")

    async def get_property(self, name: str) -> Any:
        """Get a property, fetching it from the catalog when it is missing."""
        value = self.value_of(name)
        if value is not None and value != "":
            return value

        if name in ENGAGEMENT_PROPERTIES:
            await self.get_engagement()
        elif name in AUDIO_PROPERTIES:
            await self.get_property("id")
            await self.get_audio_features()
        elif name == "popularity":
            await self.get_property("id")
            await self.fetch_track()
        elif name in METADATA_PROPERTIES:
            if self.id:
                await self.fetch_track()
            else:
                await self.search_tracks()
        elif name == "uri":
            if self.id:
                self.uri = f"spotify:track:{self.id}"
            else:
                await self.search_tracks()
        elif name == "id":
            await self.search_tracks()

        return self.value_of(name)

    def value_of(self, name: str) -> Any:
        """Current value of a property, without fetching anything."""
        if name in AUDIO_PROPERTIES:
            return (self.audio_features or {}).get(name)
        if name == "context":
            return None
        return getattr(self, name, None)

    # -------------------------------------------------------------------------
    # Comparison and rendering
    # -------------------------------------------------------------------------

    def equals(self, other: "Track") -> bool:
        return bool(self.uri and other.uri and self.uri == other.uri)

    def similar_to(self, other: "Track") -> bool:
        """Whether both entries stand for the same track.

        URIs decide when both are known, normalized titles otherwise.
        """
        if self.uri and other.uri:
            return self.uri == other.uri
        title = comparable_title(self.title)
        return bool(title) and title == comparable_title(other.title)

    def has_artist(self, artist: str) -> bool:
        """Whether any of the track artists contains ``artist``, ignoring case."""
        artist = artist.strip().lower()
        return any(artist in name.strip().lower() for name in self.artists)

    def csv_row(self) -> list[Any]:
        """URI, name, artist, album, disc, track number, duration, popularity, lastfm."""
        return [
            self.uri,
            self.name,
            self.artist,
            self.album,
            _non_negative(self.disc_number),
            _non_negative(self.track_number),
            _non_negative(self.duration_ms),
            _non_negative(self.popularity),
            _non_negative(self.lastfm),
        ]

    def __str__(self) -> str:
        return self.title or self.name or self.entry or self.id or ""
