# src/parley_stage/models/identity.py
"""SQLAlchemy model for network-address identities and their trust state."""

from sqlalchemy import BigInteger, Boolean, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from parley_stage.db.session import Base

# view_ticket value meaning "no live ticket".
NO_TICKET = 0


class Identity(Base):
    """Per-address trust record.

    The combination of ``restricted``, ``verified`` and ``captcha_required`` is
    the identity's trust state. ``view_ticket`` holds the root id of the thread
    the identity was last shown and may vote on once, or ``NO_TICKET``.
    Records are never deleted; moderation only sets ``restricted``.
    """

    __tablename__ = "identity"

    address: Mapped[str] = mapped_column(Text, primary_key=True)

    restricted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    restricted_message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    captcha_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Seconds since the epoch; 0 means the identity has never posted.
    last_posted_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    view_ticket: Mapped[int] = mapped_column(BigInteger, nullable=False, default=NO_TICKET)

    likes_sent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    likes_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes_sent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views_sent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views_received: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def has_ticket(self) -> bool:
        """Return True if the identity currently holds a live viewing ticket."""
        return self.view_ticket != NO_TICKET
