"""Audit log routes and models."""

from access.presentation.audit_logs.routes import router

__all__ = ["router"]
