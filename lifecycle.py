"""
Listing lifecycle: creation, claiming, owner edits and deletes.

A claim always records a request and leaves the listing Requested, whether it
was Available or already claimed. Claims and owner writes go through single SQL
statements guarded by their filters, so the decision and the write cannot be
separated by another request.
"""

import logging
from datetime import datetime, timezone
from typing import List

from fastapi import HTTPException, status
from sqlalchemy import delete, update
from sqlmodel import Session

from models import FoodRequest, Listing, ListingStatus
from policies import ensure_requester, owner_filter, resolve_donor
from queries import owned_listing_query, requests_by_user_query
from schemas import (
    DeleteResult,
    FoodRequestCreate,
    ListingCreate,
    ListingUpdate,
    SessionIdentity,
    UpdateResult,
)

logger = logging.getLogger(__name__)

REQUEST_EVENT = "request"

_TRANSITIONS = {
    (ListingStatus.AVAILABLE.value, REQUEST_EVENT): ListingStatus.REQUESTED.value,
    (ListingStatus.REQUESTED.value, REQUEST_EVENT): ListingStatus.REQUESTED.value,
}

# Version-guarded claim attempts before giving up with a 409.
CLAIM_ATTEMPTS = 3

EDITABLE_FIELDS = (
    "food_name",
    "food_image",
    "food_quantity",
    "pickup_location",
    "expire_date",
    "additional_notes",
)


class InvalidTransition(Exception):
    def __init__(self, current: str, event: str) -> None:
        super().__init__(f"No transition from {current!r} on {event!r}")
        self.current = current
        self.event = event


def next_status(current: str, event: str) -> str:
    try:
        return _TRANSITIONS[(current, event)]
    except KeyError:
        raise InvalidTransition(current, event) from None


def create_listing(
    session: Session, payload: ListingCreate, identity: SessionIdentity
) -> Listing:
    donor_email = resolve_donor(identity, payload.donor_email)

    # The donor's form decides the initial status; Available when omitted.
    listing = Listing(
        **payload.model_dump(exclude={"status", "donor_email"}),
        donor_email=donor_email,
        status=payload.status or ListingStatus.AVAILABLE.value,
    )
    session.add(listing)
    session.commit()
    session.refresh(listing)
    logger.info("Listing %s created by %s", listing.id, donor_email)
    return listing


def get_listing(session: Session, listing_id: str) -> Listing:
    listing = session.get(Listing, listing_id)
    if listing is None:
        raise HTTPException(status_code=404, detail="Food not found")
    return listing


def claim_listing(
    session: Session, payload: FoodRequestCreate, identity: SessionIdentity
) -> FoodRequest:
    """
    Record a request for a listing and mark the listing Requested.

    Both writes share one transaction. The listing update only applies if the
    version read here is still current; on a mismatch nothing is written, the
    listing is read again and the claim retried. A listing that keeps changing
    underneath gives a 409.
    """
    ensure_requester(identity, payload.user_email)

    for attempt in range(1, CLAIM_ATTEMPTS + 1):
        listing = get_listing(session, payload.food_id)
        try:
            target = next_status(listing.status, REQUEST_EVENT)
        except InvalidTransition:
            logger.warning(
                "Claim on %s by %s rejected: status is %s",
                listing.id,
                identity.email,
                listing.status,
            )
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Food is not available",
            )

        if payload.status is not None and payload.status != target:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status {payload.status!r}, expected {target!r}",
            )

        result = session.connection().execute(
            update(Listing)
            .where(Listing.id == listing.id, Listing.version == listing.version)
            .values(status=target, version=Listing.version + 1)
        )
        if result.rowcount:
            break

        session.rollback()
        logger.info(
            "Claim on %s by %s saw a stale version (attempt %d)",
            payload.food_id,
            identity.email,
            attempt,
        )
    else:
        logger.warning(
            "Claim on %s by %s gave up after %d attempts",
            payload.food_id,
            identity.email,
            CLAIM_ATTEMPTS,
        )
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Food was modified concurrently",
        )

    food_request = FoodRequest(
        food_id=listing.id,
        user_email=identity.email,
        food_name=listing.food_name,
        donor_email=listing.donor_email,
        pickup_location=listing.pickup_location,
        expire_date=listing.expire_date,
        request_date=payload.request_date or datetime.now(timezone.utc),
        additional_notes=payload.additional_notes,
        status=target,
    )
    session.add(food_request)
    session.commit()
    session.refresh(food_request)
    logger.info("Listing %s claimed by %s", listing.id, identity.email)
    return food_request


def edit_listing(
    session: Session,
    listing_id: str,
    fields: ListingUpdate,
    identity: SessionIdentity,
) -> UpdateResult:
    changes = fields.model_dump(include=set(EDITABLE_FIELDS), exclude_unset=True)
    result = session.connection().execute(
        update(Listing)
        .where(*owner_filter(listing_id, identity))
        .values(**changes, version=Listing.version + 1)
    )
    session.commit()
    logger.info(
        "Edit of %s by %s matched %d", listing_id, identity.email, result.rowcount
    )
    return UpdateResult(matched_count=result.rowcount)


def delete_listing(
    session: Session, listing_id: str, identity: SessionIdentity
) -> DeleteResult:
    result = session.connection().execute(
        delete(Listing).where(*owner_filter(listing_id, identity))
    )
    session.commit()
    logger.info(
        "Delete of %s by %s removed %d", listing_id, identity.email, result.rowcount
    )
    return DeleteResult(deleted_count=result.rowcount)


def list_owned(session: Session, email: str) -> List[Listing]:
    return list(session.exec(owned_listing_query(email)).all())


def list_requests(session: Session, email: str) -> List[FoodRequest]:
    return list(session.exec(requests_by_user_query(email)).all())
