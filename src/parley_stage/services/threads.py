"""Thread tree: materialized-path replies and random thread selection."""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from parley_stage.core.errors import NotFoundError
from parley_stage.models import Identity, Post

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def root_path(post_id: int) -> str:
    """Return the path of a thread root."""
    return f"{PATH_SEPARATOR}{post_id}"


def child_path(parent_path: str, post_id: int) -> str:
    """Return the path of ``post_id`` replying to the post at ``parent_path``."""
    return f"{parent_path}{PATH_SEPARATOR}{post_id}"


def path_key(path: str) -> tuple[int, ...]:
    """Return a sort key comparing path segments as integers.

    ``/2`` sorts before ``/10``, and a parent sorts immediately before its
    subtree, so sorting by this key yields a pre-order traversal.
    """
    return tuple(int(segment) for segment in path.split(PATH_SEPARATOR) if segment)


class ThreadTree:
    """Builds threads and picks which one a caller is shown next."""

    @staticmethod
    def load_thread(db: Session, root_id: int) -> list[Post]:
        """Return every post of thread ``root_id`` in display order."""
        posts = db.scalars(
            select(Post).where(Post.root_id == root_id, Post.path.is_not(None))
        ).all()
        return sorted(posts, key=lambda post: path_key(post.path or ""))

    def select_thread(self, db: Session, viewer: str) -> list[Post]:
        """Pick a random thread for ``viewer`` and record the view.

        Every visible post not authored by ``viewer`` is equally likely to be
        drawn; the thread it belongs to is returned. View counters on the
        posts, their authors and the viewer move in the same transaction as the
        selection.

        Raises:
            NotFoundError: If no eligible post exists.
        """
        root_id = db.scalars(
            select(Post.root_id)
            .where(
                Post.author_address != viewer,
                Post.hidden.is_(False),
                Post.root_id.is_not(None),
            )
            .order_by(func.random())
            .limit(1)
        ).first()
        if root_id is None:
            raise NotFoundError("No threads found.")

        self._record_views(db, root_id, viewer)
        return self.load_thread(db, root_id)

    @staticmethod
    def _record_views(db: Session, root_id: int, viewer: str) -> None:
        authors = db.scalars(
            select(Post.author_address).where(Post.root_id == root_id).distinct()
        ).all()

        db.execute(
            update(Post)
            .where(Post.root_id == root_id)
            .values(views=Post.views + 1)
        )
        db.execute(
            update(Identity)
            .where(Identity.address.in_(authors))
            .values(views_received=Identity.views_received + 1)
        )
        db.execute(
            update(Identity)
            .where(Identity.address == viewer)
            .values(views_sent=Identity.views_sent + 1)
        )

    @staticmethod
    def append_post(
        db: Session,
        *,
        content: str,
        author_address: str,
        timestamp: int,
        reply_to_id: int | None = None,
    ) -> Post:
        """Insert a root post or a reply and assign its thread and path.

        The row is flushed first to obtain its id, then its ``root_id`` and
        ``path`` are filled in within the same transaction.

        Raises:
            NotFoundError: If ``reply_to_id`` does not name a threaded post.
        """
        parent: Post | None = None
        if reply_to_id is not None:
            parent = db.get(Post, reply_to_id)
            if parent is None or parent.root_id is None or parent.path is None:
                raise NotFoundError("Reply target not found")

        post = Post(
            timestamp=timestamp,
            content=content,
            author_address=author_address,
            root_id=parent.root_id if parent else None,
            hidden=False,
            views=0,
            likes=0,
            dislikes=0,
        )
        db.add(post)
        db.flush()

        if parent is None:
            post.root_id = post.id
            post.path = root_path(post.id)
        else:
            post.path = child_path(parent.path, post.id)
        db.flush()

        logger.debug("Appended post %s at %s", post.id, post.path)
        return post
