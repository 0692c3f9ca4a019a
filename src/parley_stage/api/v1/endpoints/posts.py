# src/parley_stage/api/v1/endpoints/posts.py
"""Post-related endpoints for the Parley API."""

import logging
import time
from typing import Annotated

from fastapi import APIRouter, Header
from sqlalchemy.exc import SQLAlchemyError

from parley_stage.core.errors import BoardError
from parley_stage.db.time import epoch_seconds
from parley_stage.schemas.post import PostCreate, PostResponse
from parley_stage.services.post_service import create_post as submit_post
from parley_stage.services.post_service import to_post_response

from ..dependencies import (
    ContentFilterDep,
    CurrentIdentityDep,
    IdentityLedgerDep,
    ReputationGateDep,
    SessionDep,
    ThreadTreeDep,
    TicketProtocolDep,
    http_error,
    storage_error,
)

router = APIRouter(prefix="/posts", tags=["posts"])
logger = logging.getLogger(__name__)


@router.post("", response_model=list[PostResponse])
async def create_post(
    post_data: PostCreate,
    identity: CurrentIdentityDep,
    db: SessionDep,
    gate: ReputationGateDep,
    content_filter: ContentFilterDep,
    ledger: IdentityLedgerDep,
    tree: ThreadTreeDep,
    tickets: TicketProtocolDep,
    captcha_token: Annotated[str | None, Header()] = None,
) -> list[PostResponse]:
    """Publish a thread or reply and receive the next thread to read.

    Args:
        post_data: Content and optional reply target
        identity: Caller identity
        db: Database session
        gate: Reputation gate for the CAPTCHA check
        content_filter: Blacklist and anonymous-marker filter
        ledger: Identity ledger
        tree: Thread tree
        tickets: Ticket protocol
        captcha_token: CAPTCHA token, required only when the ledger asks for one

    Returns:
        The thread shown to the caller, ordered by path. Its root is the only
        thread the caller may now vote on.

    Raises:
        HTTPException: 400 for rejected content, 403 for trust-state denials,
            404 for unknown identity or reply target, 500/503 on failures.
    """
    started = time.perf_counter()
    try:
        thread = await submit_post(
            db=db,
            address=identity,
            post_data=post_data,
            captcha_token=captcha_token,
            now=epoch_seconds(),
            gate=gate,
            content_filter=content_filter,
            ledger=ledger,
            tree=tree,
            tickets=tickets,
        )
        response = [to_post_response(post) for post in thread]
        db.commit()
    except BoardError as exc:
        raise http_error(exc) from exc
    except SQLAlchemyError as exc:
        logger.error("Unable to write post for %s: %s", identity, exc)
        raise storage_error(exc, "Unable to write new post") from exc

    logger.info(
        "Post request from %s took %d ms",
        identity,
        (time.perf_counter() - started) * 1000,
    )
    return response
