"""Pre-ledger content checks: the word blacklist and the anonymous marker."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from parley_stage.core.errors import BadRequestError
from parley_stage.core.settings import settings


@dataclass(frozen=True)
class PreparedPost:
    """Content and authorship after the filter has run."""

    content: str
    author_address: str
    anonymous: bool


class ContentFilter:
    """Rejects blacklisted content and applies the anonymous-posting marker.

    The word list and marker are fixed at construction; a new list takes effect
    only when a new filter is built (in practice, on restart).
    """

    def __init__(
        self,
        blacklist: Iterable[str],
        *,
        anonymous_marker: str,
        anonymous_identity: str,
    ) -> None:
        self._blacklist = tuple(word.lower() for word in blacklist if word)
        self._marker = anonymous_marker
        self._anonymous_identity = anonymous_identity

    def check(self, content: str) -> None:
        """Raise ``BadRequestError`` if ``content`` is empty or blacklisted."""
        if not content:
            raise BadRequestError("Empty post")
        lowered = content.lower()
        if any(word in lowered for word in self._blacklist):
            raise BadRequestError("Post rejected")

    def prepare(self, content: str, author_address: str) -> PreparedPost:
        """Validate ``content`` and resolve who the post is stored under.

        Content starting with the marker is attributed to the placeholder
        identity. The marker is stripped unless it is the whole post.
        """
        self.check(content)
        if not self._marker or not content.startswith(self._marker):
            return PreparedPost(content=content, author_address=author_address, anonymous=False)

        if content != self._marker:
            content = content[len(self._marker):]
        return PreparedPost(content=content, author_address=self._anonymous_identity, anonymous=True)


def get_content_filter() -> ContentFilter:
    """Build a content filter from the process settings."""
    return ContentFilter(
        settings.blacklist,
        anonymous_marker=settings.anonymous_marker,
        anonymous_identity=settings.anonymous_identity,
    )
