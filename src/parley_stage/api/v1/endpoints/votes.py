# src/parley_stage/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Parley API."""

import logging

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from parley_stage.core.errors import BoardError
from parley_stage.schemas.vote import VoteCreate, VoteTally

from ..dependencies import (
    CurrentIdentityDep,
    SessionDep,
    VoteLedgerDep,
    http_error,
    storage_error,
)

router = APIRouter(prefix="/votes", tags=["votes"])
logger = logging.getLogger(__name__)


@router.post("", response_model=list[VoteTally])
async def cast_vote(
    vote_data: VoteCreate,
    identity: CurrentIdentityDep,
    db: SessionDep,
    votes: VoteLedgerDep,
) -> list[VoteTally]:
    """Like or dislike a post in the thread the caller was last shown."""
    try:
        thread = votes.cast_vote(db, identity, vote_data.post_id, vote_data.vote_action)
        tallies = [
            VoteTally(id=post.id, likes=post.likes, dislikes=post.dislikes)
            for post in thread
        ]
        db.commit()
    except BoardError as exc:
        raise http_error(exc) from exc
    except SQLAlchemyError as exc:
        logger.error("Unable to record vote from %s: %s", identity, exc)
        raise storage_error(exc, "Unable to perform vote operation") from exc

    return tallies
