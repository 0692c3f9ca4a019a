# src/parley_stage/scripts/restrict.py
"""
Restrict or un-restrict an identity.

This is the only moderation path into the restricted state: a restricted
identity is refused by verify and post with the stored message.

Usage:
    python -m parley_stage.scripts.restrict 203.0.113.7 --message "Spamming"
    python -m parley_stage.scripts.restrict 203.0.113.7 --lift
"""

from __future__ import annotations

import argparse
import sys

from sqlalchemy.orm import Session

from parley_stage.core.errors import NotFoundError
from parley_stage.db.session import SessionLocal
from parley_stage.services.ledger import IdentityLedger

DEFAULT_MESSAGE = "You have been restricted from posting."


def apply_restriction(db: Session, address: str, *, message: str, lift: bool) -> str:
    """Restrict ``address`` (or lift its restriction) and commit.

    Returns:
        A one-line summary of what changed.
    """
    ledger = IdentityLedger()
    if lift:
        ledger.lift_restriction(db, address)
        db.commit()
        return f"Lifted restriction on {address}"

    ledger.restrict(db, address, message)
    db.commit()
    return f"Restricted {address}: {message}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("address", help="Network address identifying the user")
    parser.add_argument("--message", default=DEFAULT_MESSAGE, help="Message shown to the user")
    parser.add_argument("--lift", action="store_true", help="Remove an existing restriction")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    with SessionLocal() as db:
        try:
            print(apply_restriction(db, args.address, message=args.message, lift=args.lift))
        except NotFoundError as exc:
            print(f"{args.address}: {exc.detail}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
