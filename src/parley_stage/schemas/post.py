# src/parley_stage/schemas/post.py
"""Post-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PostCreate(BaseModel):
    """Schema for creating a new thread or a reply."""

    post_content: str = Field(..., alias="postContent", min_length=1)
    reply_id: int | None = Field(
        None,
        alias="replyId",
        description="Post to reply to; omitted, null or 0 starts a new thread",
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("reply_id")
    @classmethod
    def _zero_means_new_thread(cls, value: int | None) -> int | None:
        if value == 0:
            return None
        return value


class PostResponse(BaseModel):
    """One post of the thread shown to the client, in display order."""

    post_content: str = Field(..., alias="postContent")
    path: str
    id: int

    model_config = ConfigDict(populate_by_name=True)
