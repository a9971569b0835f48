"""Tenant routes and models."""

from access.presentation.tenants.routes import router

__all__ = ["router"]
