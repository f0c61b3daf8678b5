"""Infrastructure layer: external service connectors and the CLI."""
