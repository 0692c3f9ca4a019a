"""Domain errors raised by the board services.

Every error carries the HTTP status the API layer answers with. Raising any of
them aborts the enclosing request transaction.
"""

from __future__ import annotations

from typing import ClassVar


class BoardError(RuntimeError):
    """Base exception for policy denials and failures on the board."""

    status_code: ClassVar[int] = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class BadRequestError(BoardError):
    """Malformed or missing input, or content rejected by the filter."""

    status_code = 400


class ForbiddenError(BoardError):
    """Trust-state violation: restricted, cooldown, unverified, CAPTCHA or ticket."""

    status_code = 403


class NotFoundError(BoardError):
    """Unknown identity, post or thread."""

    status_code = 404


class InternalError(BoardError):
    """Storage or remote-service failure."""

    status_code = 500


class UpstreamTimeoutError(InternalError):
    """A remote verifier or the database did not answer within its timeout."""

    status_code = 503
