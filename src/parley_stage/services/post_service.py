"""Service-level helpers for submitting posts."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from parley_stage.core.errors import NotFoundError
from parley_stage.models import NO_TICKET, Post
from parley_stage.schemas.post import PostCreate, PostResponse
from parley_stage.services.content_filter import ContentFilter
from parley_stage.services.ledger import IdentityLedger
from parley_stage.services.reputation import ReputationGate
from parley_stage.services.threads import ThreadTree
from parley_stage.services.tickets import TicketProtocol

logger = logging.getLogger(__name__)


async def create_post(
    *,
    db: Session,
    address: str,
    post_data: PostCreate,
    captcha_token: str | None,
    now: int,
    gate: ReputationGate,
    content_filter: ContentFilter,
    ledger: IdentityLedger,
    tree: ThreadTree,
    tickets: TicketProtocol,
) -> list[Post]:
    """Store a post and return the thread the caller is shown next.

    Args:
        db: Session holding the request transaction; the caller commits.
        address: Caller identity. The trust state machine always runs against
            it, even when the post itself is stored anonymously.
        post_data: Validated request body.
        captcha_token: Token from the client, consulted only if required.
        now: Request time in epoch seconds.
        gate: Reputation gate used for the CAPTCHA check.
        content_filter: Blacklist and anonymous-marker filter.
        ledger: Identity ledger.
        tree: Thread tree.
        tickets: Ticket protocol.

    Returns:
        The posts of a randomly chosen thread not authored by the caller, in
        display order. Empty if the board has nothing to show yet.

    Raises:
        BadRequestError: If the content is rejected by the filter.
        ForbiddenError: If the trust state forbids posting.
        NotFoundError: If the caller is unknown or the reply target is missing.
    """
    # Content is checked before any ledger state is read.
    prepared = content_filter.prepare(post_data.post_content, address)

    await ledger.consume_for_post(db, address, now, captcha_token=captcha_token, gate=gate)

    # Select before inserting so the new post can never be the one shown.
    try:
        thread = tree.select_thread(db, address)
    except NotFoundError:
        logger.info("No thread available to show %s", address)
        thread = []

    shown_root = thread[0].root_id if thread else None
    tickets.issue(db, address, shown_root or NO_TICKET)

    post = tree.append_post(
        db,
        content=prepared.content,
        author_address=prepared.author_address,
        timestamp=now,
        reply_to_id=post_data.reply_id,
    )
    logger.info(
        "Accepted post %s from %s%s",
        post.id,
        address,
        " (anonymous)" if prepared.anonymous else "",
    )
    return thread


def to_post_response(post: Post) -> PostResponse:
    """Convert a Post ORM instance to an API schema."""
    return PostResponse(post_content=post.content, path=post.path or "", id=post.id)
