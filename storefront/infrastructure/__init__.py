"""Infrastructure layer - configuration, database, object store, logging."""
