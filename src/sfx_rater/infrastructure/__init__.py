"""Infrastructure adapters for object storage, ledgers and event publishing."""
