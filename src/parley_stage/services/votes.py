"""Vote ledger: applies a like or dislike against a redeemed ticket."""

from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from parley_stage.models import Identity, Post
from parley_stage.services.ledger import IdentityLedger
from parley_stage.services.threads import ThreadTree
from parley_stage.services.tickets import TicketProtocol

logger = logging.getLogger(__name__)

# (voter column, author column, post column) per vote kind.
_LIKE_COLUMNS = ("likes_sent", "likes_received", "likes")
_DISLIKE_COLUMNS = ("dislikes_sent", "dislikes_received", "dislikes")


class VoteLedger:
    """Records votes on the voter, the post's author and the post itself."""

    def __init__(
        self,
        ledger: IdentityLedger | None = None,
        tickets: TicketProtocol | None = None,
        tree: ThreadTree | None = None,
    ) -> None:
        self.ledger = ledger or IdentityLedger()
        self.tickets = tickets or TicketProtocol()
        self.tree = tree or ThreadTree()

    def cast_vote(self, db: Session, address: str, post_id: int, is_like: bool) -> list[Post]:
        """Redeem the voter's ticket and count one vote.

        Voter, author and post counters move in the caller's transaction, so
        a failure leaves none of them changed. A post whose author has no
        ledger record still counts on the voter and the post.

        Returns:
            Every post of the voted thread, in display order, with fresh tallies.
        """
        voter = self.ledger.require(db, address)
        post = self.tickets.redeem(db, voter, post_id)
        sent, received, tally = _LIKE_COLUMNS if is_like else _DISLIKE_COLUMNS

        db.execute(
            update(Identity)
            .where(Identity.address == voter.address)
            .values({sent: getattr(Identity, sent) + 1})
        )
        author_result = db.execute(
            update(Identity)
            .where(Identity.address == post.author_address)
            .values({received: getattr(Identity, received) + 1})
        )
        if author_result.rowcount == 0:
            logger.info("Author of post %s has no ledger record; skipped payout", post.id)
        db.execute(
            update(Post)
            .where(Post.id == post.id)
            .values({tally: getattr(Post, tally) + 1})
        )

        logger.info("Recorded %s from %s on post %s", tally, voter.address, post.id)
        return self.tree.load_thread(db, post.root_id)  # type: ignore[arg-type]
