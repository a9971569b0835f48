"""Onboarding routes and models."""

from access.presentation.onboarding.routes import router

__all__ = ["router"]
