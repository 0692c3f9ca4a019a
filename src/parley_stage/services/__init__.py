# src/parley_stage/services/__init__.py
"""Business logic services for the Parley application."""

from .content_filter import ContentFilter
from .ledger import IdentityLedger
from .reputation import ReputationGate
from .threads import ThreadTree
from .tickets import TicketProtocol
from .votes import VoteLedger

__all__ = [
    "ContentFilter",
    "IdentityLedger",
    "ReputationGate",
    "ThreadTree",
    "TicketProtocol",
    "VoteLedger",
]
