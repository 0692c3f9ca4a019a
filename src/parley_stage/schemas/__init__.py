# src/parley_stage/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .post import PostCreate, PostResponse
from .verify import VerifyResponse
from .vote import VoteCreate, VoteTally

__all__ = [
    "PostCreate", "PostResponse",
    "VerifyResponse",
    "VoteCreate", "VoteTally",
]
