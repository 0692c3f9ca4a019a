# src/parley_stage/models/__init__.py
"""SQLAlchemy models for the Parley application."""

from .identity import NO_TICKET, Identity
from .post import Post

__all__ = [
    "Identity", "NO_TICKET",
    "Post",
]
