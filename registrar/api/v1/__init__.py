"""
API v1 package.

Contains versioned API routes for the invite registrar.
"""

from registrar.api.v1.routes import router

__all__ = ["router"]
