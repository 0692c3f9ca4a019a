# src/parley_stage/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import posts_router, verify_router, votes_router

__all__ = [
    "posts_router",
    "verify_router",
    "votes_router",
]
