"""Storage layers for external services."""
