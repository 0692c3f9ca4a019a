"""Identity ledger: per-address trust state and its transitions.

States, as stored on ``Identity``::

    unknown --verify--> verified (CAPTCHA required)
    verified --post--> unverified --verify--> verified (CAPTCHA with p=0.10)
    any --moderation--> restricted (absorbing)

A successful post consumes the verification, so every post is preceded by a
fresh ``verify`` call and possibly a fresh CAPTCHA.
"""

from __future__ import annotations

import logging
import random

from sqlalchemy import update
from sqlalchemy.orm import Session

from parley_stage.core.errors import ForbiddenError, NotFoundError
from parley_stage.core.settings import settings
from parley_stage.models import NO_TICKET, Identity
from parley_stage.services.reputation import ReputationGate

logger = logging.getLogger(__name__)


class IdentityLedger:
    """Owns reads and transitions of ``Identity`` rows.

    Methods flush but never commit; the caller's request transaction decides.
    """

    def __init__(
        self,
        *,
        cooldown_seconds: int | None = None,
        captcha_probability: float | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.cooldown_seconds = (
            settings.post_cooldown_seconds if cooldown_seconds is None else cooldown_seconds
        )
        self.captcha_probability = (
            settings.captcha_reroll_probability
            if captcha_probability is None
            else captcha_probability
        )
        self._rng = rng or random.Random()

    @staticmethod
    def get(db: Session, address: str) -> Identity | None:
        """Return the identity for ``address`` if it has been seen before."""
        return db.get(Identity, address)

    def require(self, db: Session, address: str) -> Identity:
        """Return the identity for ``address`` or raise ``NotFoundError``."""
        identity = self.get(db, address)
        if identity is None:
            raise NotFoundError("User not found")
        return identity

    async def verify(self, db: Session, address: str, gate: ReputationGate) -> bool:
        """Mark ``address`` verified and return whether its next post needs a CAPTCHA.

        Args:
            db: Database session
            address: Caller identity
            gate: Reputation gate consulted on first contact only

        Returns:
            The ``captcha_required`` flag the client must honour on its next post.

        Raises:
            ForbiddenError: If the identity is restricted or fails the
                first-contact reputation check.
        """
        identity = self.get(db, address)
        if identity is None:
            verdict = await gate.check_reputation(address)
            if not verdict.allow:
                logger.warning("Denied first contact from %s (score %s)", address, verdict.score)
                raise ForbiddenError(verdict.reason)
            identity = Identity(
                address=address,
                restricted=False,
                restricted_message="",
                verified=True,
                captcha_required=True,
                last_posted_at=0,
                view_ticket=NO_TICKET,
            )
            db.add(identity)
            db.flush()
            logger.info("Registered new identity %s", address)
            return True

        if identity.restricted:
            raise ForbiddenError(identity.restricted_message)

        # Repeated verify calls must not re-roll the CAPTCHA requirement.
        if identity.verified:
            return identity.captcha_required

        identity.captcha_required = self._rng.random() < self.captcha_probability
        identity.verified = True
        db.flush()
        logger.info("Verified %s (captcha_required=%s)", address, identity.captcha_required)
        return identity.captcha_required

    async def consume_for_post(
        self,
        db: Session,
        address: str,
        now: int,
        *,
        captcha_token: str | None,
        gate: ReputationGate,
    ) -> Identity:
        """Spend the identity's verification on a post made at ``now``.

        The CAPTCHA, when required, is checked before anything is written.
        ``verified`` is cleared and ``last_posted_at`` set with a conditional
        update, so two concurrent posts cannot both spend one verification.

        Raises:
            NotFoundError: If ``address`` has never been verified.
            ForbiddenError: If restricted, cooling down, unverified, or the
                CAPTCHA is missing or rejected.
        """
        identity = self.require(db, address)
        if identity.restricted:
            raise ForbiddenError(identity.restricted_message)
        if now < identity.last_posted_at + self.cooldown_seconds:
            raise ForbiddenError(
                f"Please wait {self.cooldown_seconds} seconds before posting again."
            )
        if not identity.verified:
            raise ForbiddenError("Verification required before posting")

        if identity.captcha_required:
            if not captcha_token:
                raise ForbiddenError("Captcha token required")
            if not await gate.check_captcha(captcha_token):
                raise ForbiddenError("Invalid captcha.")

        result = db.execute(
            update(Identity)
            .where(
                Identity.address == address,
                Identity.verified.is_(True),
                Identity.last_posted_at <= now - self.cooldown_seconds,
            )
            .values(verified=False, last_posted_at=now)
        )
        if result.rowcount != 1:
            raise ForbiddenError("Verification already used")
        return identity

    def restrict(self, db: Session, address: str, message: str) -> Identity:
        """Put ``address`` into the restricted state, creating it if unseen."""
        identity = self.get(db, address)
        if identity is None:
            identity = Identity(
                address=address,
                verified=False,
                captcha_required=True,
                last_posted_at=0,
                view_ticket=NO_TICKET,
            )
            db.add(identity)
        identity.restricted = True
        identity.restricted_message = message
        db.flush()
        return identity

    def lift_restriction(self, db: Session, address: str) -> Identity:
        """Clear the restricted flag on an existing identity."""
        identity = self.require(db, address)
        identity.restricted = False
        identity.restricted_message = ""
        db.flush()
        return identity
