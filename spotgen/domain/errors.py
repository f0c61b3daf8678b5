"""Error taxonomy for entry resolution."""


class EntryNotFoundError(LookupError):
    """Raised when every resolution attempt for an entry has missed."""

    def __init__(self, entry: str, message: str | None = None):
        self.entry = entry
        super().__init__(message or f"COULD NOT FIND: {entry}")


class CatalogError(RuntimeError):
    """Raised when a catalog call keeps failing after the retry policy."""
