"""FastAPI dependency providers for the access bounded context."""
