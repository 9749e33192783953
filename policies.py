"""
Ownership rules applied after authentication and before any store access.

Emails are compared as exact strings: "A@x.com" and "a@x.com" are different
owners.
"""

import logging
from typing import Optional

from fastapi import HTTPException, status

from models import Listing
from schemas import SessionIdentity

logger = logging.getLogger(__name__)


def ensure_self(identity: SessionIdentity, email: Optional[str]) -> None:
    """Self-scoped reads: the claimed email must be the caller's own."""
    if email != identity.email:
        logger.warning("Forbidden: %s asked for data of %s", identity.email, email)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def ensure_requester(identity: SessionIdentity, email: Optional[str]) -> None:
    """Self-scoped creates: nobody may file a request on someone else's behalf."""
    if email != identity.email:
        logger.warning("Unauthorized: %s tried to request as %s", identity.email, email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )


def resolve_donor(identity: SessionIdentity, donor_email: Optional[str]) -> str:
    """Listings are always created with the caller as donor."""
    if donor_email is None:
        return identity.email
    ensure_self(identity, donor_email)
    return donor_email


def owner_filter(listing_id: str, identity: SessionIdentity) -> tuple:
    """
    Where-clauses matching a listing only if the caller owns it.

    A wrong id and a wrong owner look the same: the write matches nothing.
    """
    return (Listing.id == listing_id, Listing.donor_email == identity.email)
