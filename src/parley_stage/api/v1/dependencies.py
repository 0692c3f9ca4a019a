"""Shared API dependencies for identity resolution and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from parley_stage.core.errors import BoardError, UpstreamTimeoutError
from parley_stage.db.session import get_db, is_storage_timeout
from parley_stage.services.content_filter import ContentFilter, get_content_filter
from parley_stage.services.identity import IdentityResolver, get_identity_resolver
from parley_stage.services.ledger import IdentityLedger
from parley_stage.services.reputation import ReputationGate, get_reputation_gate
from parley_stage.services.threads import ThreadTree
from parley_stage.services.tickets import TicketProtocol
from parley_stage.services.votes import VoteLedger

_ledger = IdentityLedger()
_tree = ThreadTree()
_tickets = TicketProtocol()
_votes = VoteLedger(_ledger, _tickets, _tree)
_content_filter = get_content_filter()


def get_reputation_gate_dep() -> ReputationGate:
    """Return the shared reputation gate."""
    return get_reputation_gate()


def get_identity_resolver_dep() -> IdentityResolver:
    """Return the configured identity resolution strategy."""
    return get_identity_resolver()


def get_content_filter_dep() -> ContentFilter:
    """Return the content filter built from startup configuration."""
    return _content_filter


def get_identity_ledger() -> IdentityLedger:
    """Return the shared identity ledger."""
    return _ledger


def get_thread_tree() -> ThreadTree:
    """Return the shared thread tree."""
    return _tree


def get_ticket_protocol() -> TicketProtocol:
    """Return the shared ticket protocol."""
    return _tickets


def get_vote_ledger() -> VoteLedger:
    """Return the shared vote ledger."""
    return _votes


def get_current_identity(
    request: Request,
    resolver: Annotated[IdentityResolver, Depends(get_identity_resolver_dep)],
) -> str:
    """Resolve the caller's identity key.

    Raises:
        HTTPException: If the request carries no usable identity.
    """
    identity = resolver.resolve(request)
    if not identity:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Ip address not received",
        )
    return identity


def http_error(exc: BoardError) -> HTTPException:
    """Translate a domain error into the HTTP error the client sees."""
    return HTTPException(status_code=exc.status_code, detail=exc.detail)


def storage_error(exc: SQLAlchemyError, detail: str) -> HTTPException:
    """Translate a storage failure, reporting timeouts as transient (503)."""
    if is_storage_timeout(exc):
        return http_error(UpstreamTimeoutError("Storage timed out, please retry"))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


# Type aliases for dependencies
SessionDep = Annotated[Session, Depends(get_db)]
CurrentIdentityDep = Annotated[str, Depends(get_current_identity)]
ReputationGateDep = Annotated[ReputationGate, Depends(get_reputation_gate_dep)]
ContentFilterDep = Annotated[ContentFilter, Depends(get_content_filter_dep)]
IdentityLedgerDep = Annotated[IdentityLedger, Depends(get_identity_ledger)]
ThreadTreeDep = Annotated[ThreadTree, Depends(get_thread_tree)]
TicketProtocolDep = Annotated[TicketProtocol, Depends(get_ticket_protocol)]
VoteLedgerDep = Annotated[VoteLedger, Depends(get_vote_ledger)]
