# src/parley_stage/api/v1/endpoints/verify.py
"""Verification endpoint for the Parley API."""

import logging

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from parley_stage.core.errors import BoardError
from parley_stage.schemas.verify import VerifyResponse

from ..dependencies import (
    CurrentIdentityDep,
    IdentityLedgerDep,
    ReputationGateDep,
    SessionDep,
    http_error,
    storage_error,
)

router = APIRouter(prefix="/verify", tags=["verify"])
logger = logging.getLogger(__name__)


@router.get("", response_model=VerifyResponse)
async def verify(
    identity: CurrentIdentityDep,
    db: SessionDep,
    ledger: IdentityLedgerDep,
    gate: ReputationGateDep,
) -> VerifyResponse:
    """Verify the caller ahead of its next post.

    Returns:
        Whether the next post must carry a CAPTCHA token.

    Raises:
        HTTPException: 403 if restricted or denied on first contact, 500/503 on
            storage or verifier failure.
    """
    try:
        captcha_required = await ledger.verify(db, identity, gate)
        db.commit()
    except BoardError as exc:
        raise http_error(exc) from exc
    except SQLAlchemyError as exc:
        logger.error("Unable to update profile for %s: %s", identity, exc)
        raise storage_error(exc, "Unable to update user profile") from exc

    return VerifyResponse(captcha_required=captcha_required)
