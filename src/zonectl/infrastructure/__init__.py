"""Infrastructure layer — registry backends, builders, catalog, and context."""
