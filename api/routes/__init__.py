"""API route handlers."""

from api.routes import health, trees

__all__ = ["health", "trees"]
