"""Drop feed ingestion service."""
