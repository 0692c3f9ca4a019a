# src/parley_stage/schemas/vote.py
"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class VoteCreate(BaseModel):
    """Schema for casting a like or dislike."""

    post_id: int = Field(..., alias="postId")
    vote_action: StrictBool = Field(..., alias="voteAction", description="true to like, false to dislike")

    model_config = ConfigDict(populate_by_name=True)


class VoteTally(BaseModel):
    """Current like/dislike counts of one post in the voted thread."""

    id: int
    likes: int
    dislikes: int
