"""Common behaviour of resolvable entries and the fallback-chain runner."""

from collections.abc import Awaitable, Callable, Iterable
from typing import Any, ClassVar

from attrs import define, field

from spotgen.application.context import ResolutionContext
from spotgen.config import get_logger
from spotgen.domain.errors import CatalogError, EntryNotFoundError
from spotgen.domain.text import simplify_query

logger = get_logger(__name__).bind(service="resolver")

# A single resolution attempt; returns True when it identified the entry
Attempt = Callable[[], Awaitable[bool]]


def _strip(value: str | None) -> str:
    return (value or "").strip()


@define(eq=False)
class Entry:
    """An entry awaiting resolution against the catalog.

    The raw ``entry`` text is kept for diagnostics after resolution.
    """

    kind: ClassVar[str] = "entry"

    context: ResolutionContext
    entry: str = field(default="", converter=_strip)
    id: str | None = None
    limit: int | None = None

    async def dispatch(self) -> Any:
        raise NotImplementedError

    def not_found(self) -> EntryNotFoundError:
        """Log the miss and build the error to raise."""
        logger.warning(f"COULD NOT FIND: {self.entry or self.id}")
        return EntryNotFoundError(self.entry or self.id or "")

    async def first_match(self, attempts: Iterable[Attempt]) -> None:
        """Run attempts in order until one identifies the entry.

        A catalog failure inside an attempt counts as a miss.

        Raises:
            EntryNotFoundError: when every attempt missed
        """
        for attempt in attempts:
            try:
                if await attempt():
                    return
            except CatalogError as e:
                logger.warning(f"Catalog failure while resolving {self.entry!r}: {e}")
        raise self.not_found()

    def __str__(self) -> str:
        return self.entry or self.id or ""


def query_attempts(query: str, search: Callable[[str], Attempt]) -> list[Attempt]:
    """The plain query, then its simplified form when that differs."""
    attempts = [search(query)]
    simplified = simplify_query(query)
    if simplified and simplified != query:
        attempts.append(search(simplified))
    return attempts
