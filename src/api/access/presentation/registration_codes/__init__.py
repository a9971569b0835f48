"""Registration code routes and models."""

from access.presentation.registration_codes.routes import router

__all__ = ["router"]
