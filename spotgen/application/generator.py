"""Generator strings: parse playlist descriptions into a collection.

A generator string is line based. Lines starting with ``#`` are commands
(``#order by popularity``, ``#artist Bowery Electric``, ...), catalog URIs
and links are taken as they are, CSV rows and extended M3U playlists are
read back, and every other line is searched for as a track.
"""

import csv
import re
from typing import Any

from spotgen.application.collection import FORMATS, Collection
from spotgen.application.context import ResolutionContext
from spotgen.application.entries import (
    Album,
    Artist,
    Playlist,
    SimilarArtists,
    TopTracks,
    Track,
)
from spotgen.config import get_logger, settings

logger = get_logger(__name__).bind(service="generator")

_COMMAND = re.compile(r"^#(\w+)\s*(.*)$")
_BY_PROPERTY = re.compile(r"^by\s+(.+)$", re.IGNORECASE)

_URI = re.compile(r"^spotify:(track|album|artist|playlist):([0-9A-Za-z]+)$")
_USER_PLAYLIST_URI = re.compile(r"^spotify:user:([^:\s]+):playlist:([0-9A-Za-z]+)$")
_LINK = re.compile(
    r"^https?://open\.spotify\.com/(?:intl-[\w-]+/)?"
    r"(track|album|artist|playlist)/([0-9A-Za-z]+)/?(?:\?.*)?$"
)
_USER_PLAYLIST_LINK = re.compile(
    r"^https?://open\.spotify\.com/user/([^/\s]+)/playlist/([0-9A-Za-z]+)/?(?:\?.*)?$"
)
_CSV_ROW = re.compile(r"^spotify:track:[0-9A-Za-z]+\s*,")
_OWNER_AND_ID = re.compile(r"^([^:\s]+):([0-9A-Za-z]{22})$")
_EXTINF = re.compile(r"^#EXTINF:\s*-?\d*\s*,\s*(.*)$", re.IGNORECASE)

ENTRY_COMMANDS = {
    "track": Track,
    "album": Album,
    "artist": Artist,
    "top": TopTracks,
    "similar": SimilarArtists,
}


class Generator:
    """Parse a generator string into ``self.collection``."""

    def __init__(self, text: str, context: ResolutionContext | None = None):
        if context is None:
            from spotgen.infrastructure.connectors import create_context

            context = create_context()
        self.context = context
        self.collection = Collection(
            context,
            format=settings.generator.default_format,
            unique=settings.generator.unique,
        )
        self._expect_m3u_path = False
        self.parse(text)

    async def generate(self, format: str | None = None) -> Any:
        """Resolve the collection and render it."""
        return await self.collection.execute(format)

    def parse(self, text: str) -> Collection:
        for raw in text.splitlines():
            line = raw.strip()
            if line:
                self.parse_line(line)
        logger.debug(f"Parsed {len(self.collection.entries)} entries")
        return self.collection

    def parse_line(self, line: str) -> None:
        if self._expect_m3u_path and not line.startswith("#"):
            # file path following an #EXTINF line
            self._expect_m3u_path = False
            return

        if line.lower() == "sep=,":
            return
        if line.upper() == "#EXTM3U":
            return
        if match := _EXTINF.match(line):
            self._add_m3u_entry(match.group(1))
            return
        if line.startswith("#"):
            self._parse_command(line)
            return
        if _CSV_ROW.match(line):
            self._add_csv_entry(line)
            return
        if entry := self._catalog_entry(line):
            self.collection.add(entry)
            return
        self.collection.add(Track(self.context, entry=line))

    def _parse_command(self, line: str) -> None:
        match = _COMMAND.match(line)
        if not match:
            return
        command, argument = match.group(1).lower(), match.group(2).strip()
        collection = self.collection

        if command in ("order", "group", "alternate"):
            by = _BY_PROPERTY.match(argument)
            if not by:
                logger.warning(f"Ignoring command without property: {line}")
                return
            prop = by.group(1).strip().lower()
            if command == "order":
                collection.ordering = prop
            elif command == "group":
                collection.grouping = prop
            else:
                collection.alternating = prop
        elif command == "reverse":
            collection.reverse = True
        elif command == "shuffle":
            collection.shuffle = True
        elif command == "unique":
            collection.unique = True
        elif command == "duplicates":
            collection.unique = False
        elif command == "lastfm":
            collection.lastfm_user = argument or None
        elif command in FORMATS and not argument:
            collection.format = command
        elif command in ENTRY_COMMANDS and argument:
            collection.add(ENTRY_COMMANDS[command](self.context, entry=argument))
        elif command == "playlist" and argument:
            if owner_and_id := _OWNER_AND_ID.match(argument):
                owner, playlist_id = owner_and_id.groups()
                collection.add(
                    Playlist(self.context, entry=argument, id=playlist_id, owner=owner)
                )
            else:
                collection.add(
                    self._catalog_entry(argument)
                    or Playlist(self.context, entry=argument)
                )
        # anything else is a comment

    def _catalog_entry(self, line: str) -> Any:
        """Build an entry from a catalog URI or link, if the line is one."""
        if match := _USER_PLAYLIST_URI.match(line) or _USER_PLAYLIST_LINK.match(line):
            owner, playlist_id = match.groups()
            return Playlist(self.context, entry=line, id=playlist_id, owner=owner)

        match = _URI.match(line) or _LINK.match(line)
        if not match:
            return None
        kind, item_id = match.groups()
        if kind == "track":
            return Track(
                self.context, entry=line, id=item_id, uri=f"spotify:track:{item_id}"
            )
        if kind == "album":
            return Album(self.context, entry=line, id=item_id)
        if kind == "artist":
            return Artist(self.context, entry=line, id=item_id)
        return Playlist(self.context, entry=line, id=item_id)

    def _add_csv_entry(self, line: str) -> None:
        row = next(csv.reader([line]))
        uri, name, artist, album = (row + ["", "", "", ""])[:4]
        uri = uri.strip()
        self.collection.add(
            Track(
                self.context,
                entry=f"{artist} - {name}" if artist and name else name or uri,
                id=uri.rsplit(":", 1)[-1],
                uri=uri,
                name=name,
                artist=artist,
                album=album,
            )
        )

    def _add_m3u_entry(self, description: str) -> None:
        self._expect_m3u_path = True
        title, _, artist = description.rpartition(" - ")
        if not title:
            self.collection.add(Track(self.context, entry=description))
            return
        self.collection.add(
            Track(
                self.context,
                entry=f"{artist} - {title}",
                artist=artist.strip(),
                name=title.strip(),
            )
        )
