# src/parley_stage/models/post.py
"""SQLAlchemy model for posts and their place in a thread."""

from sqlalchemy import BigInteger, Boolean, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from parley_stage.db.session import Base


class Post(Base):
    """A thread root or a reply inside a thread.

    ``root_id`` names the thread (equal to ``id`` for roots) and ``path`` is the
    materialized ancestry, e.g. ``/4/9/17``. Both are filled in right after the
    row is inserted, once ``id`` is known, inside the same transaction.
    """

    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_root_id", "root_id"),
        Index("ix_post_author_address", "author_address"),
    )

    # SQLite only autoincrements INTEGER primary keys.
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_address: Mapped[str] = mapped_column(Text, nullable=False)

    root_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    path: Mapped[str | None] = mapped_column(Text, nullable=True, unique=True)

    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def is_root(self) -> bool:
        """Return True if this post starts its own thread."""
        return self.root_id == self.id
