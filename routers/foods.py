from typing import List, Optional

from fastapi import APIRouter

import lifecycle
from db import SessionDep, store_errors
from policies import ensure_self
from queries import build_listing_query, featured_listing_query
from schemas import (
    DeleteResult,
    InsertResult,
    ListingCreate,
    ListingRead,
    ListingUpdate,
    UpdateResult,
)
from .auth import CurrentIdentityDep

router = APIRouter(tags=["foods"])


@router.get("/all-foods", response_model=List[ListingRead])
def list_foods(
    session: SessionDep,
    available: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
):
    """
    Browse listings, optionally only available ones, matching a name search,
    ordered by expiry ("asc" / "dsc").
    """
    with store_errors(session, "Error fetching foods"):
        return session.exec(build_listing_query(available, search, sort)).all()


@router.get("/foods", response_model=List[ListingRead])
def list_all_foods(session: SessionDep):
    with store_errors(session, "Error fetching foods"):
        return session.exec(build_listing_query()).all()


@router.get("/featured-foods", response_model=List[ListingRead])
def list_featured_foods(session: SessionDep):
    """
    The six available listings with the largest quantity.
    """
    with store_errors(session, "Error fetching featured foods"):
        return session.exec(featured_listing_query()).all()


@router.get("/all-foods/{food_id}", response_model=ListingRead)
def get_food(food_id: str, session: SessionDep, current: CurrentIdentityDep):
    with store_errors(session, "Error fetching food"):
        return lifecycle.get_listing(session, food_id)


@router.get("/manage-my-foods", response_model=List[ListingRead])
def manage_my_foods(
    session: SessionDep,
    current: CurrentIdentityDep,
    email: Optional[str] = None,
):
    """
    Listings donated by the caller, newest first.
    """
    ensure_self(current, email)
    with store_errors(session, "Error fetching user foods"):
        return lifecycle.list_owned(session, email)


@router.post("/all-foods", response_model=InsertResult)
def create_food(
    food_in: ListingCreate, session: SessionDep, current: CurrentIdentityDep
):
    with store_errors(session, "Error adding food"):
        listing = lifecycle.create_listing(session, food_in, current)
    return InsertResult(inserted_id=listing.id)


@router.patch("/all-foods/{food_id}", response_model=UpdateResult)
def update_food(
    food_id: str,
    fields: ListingUpdate,
    session: SessionDep,
    current: CurrentIdentityDep,
):
    """
    Edit a listing the caller donated. Someone else's listing, or an unknown
    id, is left alone and reported with matched_count 0.
    """
    with store_errors(session, "Error updating food"):
        return lifecycle.edit_listing(session, food_id, fields, current)


@router.delete("/all-foods/{food_id}", response_model=DeleteResult)
def delete_food(food_id: str, session: SessionDep, current: CurrentIdentityDep):
    with store_errors(session, "Error deleting food"):
        return lifecycle.delete_listing(session, food_id, current)
