"""Application layer: resolvable entries, the collection pipeline and the parser."""
