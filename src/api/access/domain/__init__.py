"""Domain layer for the access bounded context."""
