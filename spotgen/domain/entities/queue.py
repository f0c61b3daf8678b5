"""Ordered queue of entries, tracks and nested queues.

Every transformation returns a new ``Queue`` and leaves the receiver
untouched. Resolution happens through ``dispatch``, which runs entries
concurrently but reassembles the results in entry order.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Iterator
import random
from typing import Any

from attrs import define, field
from toolz import concat, groupby, interleave

from spotgen.config import get_logger
from spotgen.domain.errors import CatalogError, EntryNotFoundError
from spotgen.domain.ranking import Comparator, ascending, stable_sort

logger = get_logger(__name__).bind(service="queue")

# Failures that drop a single entry without aborting the batch
RECOVERABLE_ERRORS = (EntryNotFoundError, CatalogError)


def _is_track(entry: Any) -> bool:
    return getattr(entry, "kind", None) == "track"


@define(slots=True)
class Queue:
    """Ordered sequence of entries."""

    items: list[Any] = field(factory=list, converter=list)

    # -------------------------------------------------------------------------
    # Container helpers
    # -------------------------------------------------------------------------

    def add(self, entry: Any) -> "Queue":
        """Append an entry in place."""
        self.items.append(entry)
        return self

    def get(self, index: int) -> Any:
        return self.items[index]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __contains__(self, entry: Any) -> bool:
        return entry in self.items

    def concat(self, other: "Queue | Iterable[Any]") -> "Queue":
        return Queue([*self.items, *other])

    def filter(self, predicate: Callable[[Any], bool]) -> "Queue":
        return Queue(item for item in self.items if predicate(item))

    def slice(self, start: int | None = None, end: int | None = None) -> "Queue":
        return Queue(self.items[start:end])

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def sort(self, cmp: Comparator | None = None) -> "Queue":
        """Stable sort; without a comparator entries sort by their text."""
        return Queue(stable_sort(self.items, cmp or ascending(str)))

    def reverse(self) -> "Queue":
        return Queue(reversed(self.items))

    def shuffle(self, rng: random.Random | None = None) -> "Queue":
        items = list(self.items)
        (rng or random.Random()).shuffle(items)
        return Queue(items)

    def group(self, key_fn: Callable[[Any], Any]) -> "Queue":
        """Gather entries sharing a key, groups in order of first appearance."""
        return Queue(concat(groupby(key_fn, self.items).values()))

    def alternate(self, key_fn: Callable[[Any], Any]) -> "Queue":
        """Take one entry per key in turn, round-robin across keys."""
        return Queue(interleave(groupby(key_fn, self.items).values()))

    def interleave(self) -> "Queue":
        """Merge sub-queues round-robin into a single queue."""
        sequences = [
            list(item) if isinstance(item, Queue) else [item] for item in self.items
        ]
        return Queue(interleave(sequences))

    def flatten(self) -> "Queue":
        """Recursively splice nested queues into one level."""
        result = Queue()
        for item in self.items:
            if isinstance(item, Queue):
                result.items.extend(item.flatten().items)
            else:
                result.add(item)
        return result

    # -------------------------------------------------------------------------
    # Async operations
    # -------------------------------------------------------------------------

    async def dedup(self) -> "Queue":
        """Drop tracks that duplicate an earlier track; other entries are kept."""
        result = Queue()
        for entry in self.items:
            if not _is_track(entry):
                result.add(entry)
                continue

            if not (entry.uri or entry.title):
                try:
                    await entry.get_property("uri")
                except RECOVERABLE_ERRORS as e:
                    logger.debug(f"Keeping unresolved entry {entry.entry!r}: {e}")
                    result.add(entry)
                    continue

            if not any(
                _is_track(kept) and kept.similar_to(entry) for kept in result.items
            ):
                result.add(entry)

        if len(result) < len(self):
            logger.debug(f"Removed {len(self) - len(result)} duplicate tracks")
        return result

    async def for_each_async(self, fn: Callable[[Any], Awaitable[Any]]) -> "Queue":
        """Await ``fn`` for each entry in order, one at a time."""
        for entry in self.items:
            await fn(entry)
        return self

    async def dispatch(self, concurrency: int = 5) -> "Queue":
        """Resolve every entry, at most ``concurrency`` at a time.

        Results keep the entry order regardless of completion order. Entries
        that cannot be found, or whose catalog calls keep failing, are
        logged and left out; any other error propagates.
        """
        if not self.items:
            return Queue()

        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def dispatch_entry(entry: Any) -> Any:
            async with semaphore:
                return await entry.dispatch()

        results = await asyncio.gather(
            *(dispatch_entry(entry) for entry in self.items),
            return_exceptions=True,
        )

        resolved = Queue()
        for entry, result in zip(self.items, results, strict=True):
            if isinstance(result, EntryNotFoundError):
                logger.debug(f"Skipping {entry}: {result}")
            elif isinstance(result, CatalogError):
                logger.warning(f"Skipping {entry} after catalog failure: {result}")
            elif isinstance(result, BaseException):
                raise result
            elif result is not None:
                resolved.add(result)

        logger.debug(f"Dispatched {len(self)} entries, {len(resolved)} resolved")
        return resolved
