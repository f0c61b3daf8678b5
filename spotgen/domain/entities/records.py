"""Immutable records returned by the catalog and engagement services.

Connectors convert raw API payloads into these records; entries copy the
fields they need explicitly, one record type at a time.
"""

from attrs import define, field


@define(frozen=True, slots=True)
class ArtistRef:
    """Artist as referenced from a track or album."""

    name: str
    id: str | None = None


@define(frozen=True, slots=True)
class CatalogTrack:
    """Track metadata from the catalog."""

    id: str
    name: str
    uri: str = ""
    artists: list[ArtistRef] = field(factory=list)
    album: str | None = None
    duration_ms: int | None = None
    popularity: int | None = None
    explicit: bool | None = None
    disc_number: int | None = None
    track_number: int | None = None

    def __attrs_post_init__(self):
        if not self.uri:
            object.__setattr__(self, "uri", f"spotify:track:{self.id}")

    @property
    def artist_names(self) -> list[str]:
        return [artist.name.strip() for artist in self.artists]


@define(frozen=True, slots=True)
class CatalogAlbum:
    """Album metadata, with its full track listing once fetched."""

    id: str
    name: str
    uri: str = ""
    artists: list[ArtistRef] = field(factory=list)
    album_type: str | None = None
    popularity: int | None = None
    tracks: list[CatalogTrack] | None = None

    def __attrs_post_init__(self):
        if not self.uri:
            object.__setattr__(self, "uri", f"spotify:album:{self.id}")


@define(frozen=True, slots=True)
class CatalogArtist:
    """Artist metadata."""

    id: str
    name: str
    uri: str = ""
    popularity: int | None = None

    def __attrs_post_init__(self):
        if not self.uri:
            object.__setattr__(self, "uri", f"spotify:artist:{self.id}")


@define(frozen=True, slots=True)
class CatalogPlaylist:
    """Playlist reference found by search."""

    id: str
    name: str
    owner_id: str | None = None
    uri: str = ""

    def __attrs_post_init__(self):
        if not self.uri:
            object.__setattr__(self, "uri", f"spotify:playlist:{self.id}")


@define(frozen=True, slots=True)
class EngagementStats:
    """Play counts from the engagement service."""

    global_playcount: int | None = None
    personal_playcount: int | None = None
