"""Playlist collection: resolve entries, then dedup, order and render.

Pipeline stages run in a fixed order and each one is a pass-through when
its option is unset::

    dispatch -> dedup -> order -> group -> alternate -> reverse | shuffle
"""

from collections.abc import Awaitable, Callable
import csv
import io
import random
from typing import Any

from attrs import define, field

from spotgen.application.context import ResolutionContext
from spotgen.application.entries import Track
from spotgen.config import get_logger
from spotgen.domain import ranking
from spotgen.domain.entities.queue import RECOVERABLE_ERRORS, Queue

logger = get_logger(__name__).bind(service="collection")

FORMATS = ("uri", "list", "csv", "log", "array", "queue")


@define(eq=False)
class Collection:
    """Entries of a generated playlist and the options that shape it."""

    context: ResolutionContext
    entries: Queue = field(factory=Queue)
    format: str = "uri"
    ordering: str | None = None
    grouping: str | None = None
    alternating: str | None = None
    reverse: bool = False
    shuffle: bool = False
    unique: bool = True
    lastfm_user: str | None = None
    rng: random.Random | None = None

    def add(self, entry: Any) -> None:
        """Add an entry to the end of the collection."""
        self.entries.add(entry)

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    async def dispatch(self) -> Queue:
        """Resolve every entry and apply the configured stages."""
        await self.get_tracks()
        await self.dedup()
        await self.order()
        await self.group()
        await self.alternate()
        self.reorder()
        logger.info(f"Collection ready with {len(self.entries)} tracks")
        return self.entries

    async def execute(self, format: str | None = None) -> Any:
        """Dispatch the entries and render the result."""
        self.format = format or self.format
        await self.dispatch()
        return self.output()

    async def get_tracks(self) -> Queue:
        logger.info(f"Resolving {len(self.entries)} entries")
        resolved = await self.entries.dispatch(self.context.concurrency)
        self.entries = resolved.flatten()
        return self.entries

    async def dedup(self) -> Queue:
        if self.unique:
            self.entries = await self.entries.dedup()
        return self.entries

    async def order(self) -> Queue:
        if self.ordering == "lastfm":
            await self._for_each_track(
                lambda track: track.get_engagement(self.lastfm_user)
            )
            self.entries = self.entries.sort(ranking.engagement)
        elif self.ordering:
            prop = self.ordering
            await self.get_property(prop)
            self.entries = self.entries.sort(
                ranking.by_property(lambda entry: _value_of(entry, prop))
            )
        return self.entries

    async def group(self) -> Queue:
        if self.grouping:
            prop = self.grouping
            await self.get_property(prop)
            self.entries = self.entries.group(lambda entry: _key_of(entry, prop))
        return self.entries

    async def alternate(self) -> Queue:
        if self.alternating:
            prop = self.alternating
            await self.get_property(prop)
            self.entries = self.entries.alternate(lambda entry: _key_of(entry, prop))
        return self.entries

    def reorder(self) -> Queue:
        if self.reverse:
            self.entries = self.entries.reverse()
        elif self.shuffle:
            self.entries = self.entries.shuffle(self.rng)
        return self.entries

    async def get_property(self, prop: str) -> Queue:
        """Resolve a property on every track, one track at a time."""
        return await self._for_each_track(lambda track: track.get_property(prop))

    async def _for_each_track(self, fn: Callable[[Track], Awaitable[Any]]) -> Queue:
        async def resolve(entry: Any) -> None:
            if not isinstance(entry, Track):
                return
            try:
                await fn(entry)
            except RECOVERABLE_ERRORS as e:
                logger.warning(f"Could not fetch metadata for {entry}: {e}")

        return await self.entries.for_each_async(resolve)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def tracks(self) -> list[Track]:
        """Resolved tracks, the only entries that are rendered."""
        return [
            entry for entry in self.entries if isinstance(entry, Track) and entry.uri
        ]

    def output(self, format: str | None = None) -> Any:
        """Render the collection in the given format (``uri`` by default)."""
        format = format or self.format
        log = self.to_log()
        if log:
            logger.info(f"\n{log}")

        match format:
            case "array":
                return self.to_array()
            case "csv":
                return self.to_csv()
            case "list":
                return self.to_list()
            case "log":
                return log
            case "queue":
                return self.entries
            case _:
                return self.to_uris()

    def to_array(self) -> list[str]:
        return [track.uri for track in self.tracks()]

    def to_uris(self) -> str:
        return "\n".join(self.to_array())

    def to_list(self) -> str:
        return "\n".join(track.title for track in self.tracks())

    def to_csv(self) -> str:
        buffer = io.StringIO()
        buffer.write("sep=,\n")
        writer = csv.writer(buffer, lineterminator="\n")
        for track in self.tracks():
            writer.writerow(track.csv_row())
        return buffer.getvalue().strip()

    def to_log(self) -> str:
        prop = self.ordering or "popularity"
        lines = []
        for track in self.tracks():
            line = track.title or track.uri
            value = track.value_of(prop)
            if value is not None:
                line += f" ({prop}: {value})"
            lines.append(line)
        return "\n".join(lines)


def _value_of(entry: Any, prop: str) -> Any:
    if isinstance(entry, Track):
        return entry.value_of(prop)
    return getattr(entry, prop, None)


def _key_of(entry: Any, prop: str) -> str:
    return f"{_value_of(entry, prop)}".lower()
