"""Single-use viewing tickets binding one thread view to at most one vote."""

from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from parley_stage.core.errors import ForbiddenError, NotFoundError
from parley_stage.models import NO_TICKET, Identity, Post

logger = logging.getLogger(__name__)


class TicketProtocol:
    """Issues and redeems the ``view_ticket`` stored on each identity."""

    @staticmethod
    def issue(db: Session, address: str, root_id: int) -> None:
        """Overwrite the identity's ticket with ``root_id``.

        Any previous ticket is invalidated. ``NO_TICKET`` clears it.
        """
        db.execute(
            update(Identity)
            .where(Identity.address == address)
            .values(view_ticket=root_id)
        )

    @staticmethod
    def redeem(db: Session, identity: Identity, post_id: int) -> Post:
        """Consume the identity's ticket for a vote on ``post_id``.

        The ticket is cleared with a compare-and-set on the stored value, so of
        two concurrent redemptions at most one succeeds.

        Returns:
            The post being voted on.

        Raises:
            NotFoundError: If the post does not exist.
            ForbiddenError: If the post is not in the thread the ticket names.
        """
        post = db.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")

        root_id = post.root_id
        if root_id is None or identity.view_ticket == NO_TICKET or root_id != identity.view_ticket:
            raise ForbiddenError("User cannot vote on this post")

        result = db.execute(
            update(Identity)
            .where(Identity.address == identity.address, Identity.view_ticket == root_id)
            .values(view_ticket=NO_TICKET)
        )
        if result.rowcount != 1:
            raise ForbiddenError("User cannot vote on this post")

        logger.debug("Redeemed ticket %s for %s", root_id, identity.address)
        return post
