# src/parley_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .posts import router as posts_router
from .verify import router as verify_router
from .votes import router as votes_router

__all__ = [
    "posts_router",
    "verify_router",
    "votes_router",
]
