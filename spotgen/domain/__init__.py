"""Pure domain layer: text helpers, records, ranking and the queue."""
