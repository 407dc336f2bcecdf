"""SQLite persistence for the ``sqlite`` registry backend."""
