from typing import List, Optional

from fastapi import APIRouter

import lifecycle
from db import SessionDep, store_errors
from policies import ensure_self
from schemas import FoodRequestCreate, FoodRequestRead
from .auth import CurrentIdentityDep

router = APIRouter(tags=["requests"])


@router.get("/request-foods", response_model=List[FoodRequestRead])
def list_my_requests(
    session: SessionDep,
    current: CurrentIdentityDep,
    email: Optional[str] = None,
):
    ensure_self(current, email)
    with store_errors(session, "Error fetching requested foods"):
        return lifecycle.list_requests(session, email)


@router.post("/request-foods", response_model=FoodRequestRead)
def request_food(
    request_in: FoodRequestCreate,
    session: SessionDep,
    current: CurrentIdentityDep,
):
    """
    Claim a listing for the caller. The listing becomes Requested in the same
    transaction. Listings that were already claimed take more requests.
    """
    with store_errors(session, "Error requesting food"):
        return lifecycle.claim_listing(session, request_in, current)
