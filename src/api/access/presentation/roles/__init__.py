"""Role routes and models."""

from access.presentation.roles.routes import router

__all__ = ["router"]
