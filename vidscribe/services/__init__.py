"""Service layer: ingestion pipeline and its collaborators."""
