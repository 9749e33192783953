"""
Translate listing filters into store queries.

Every builder returns an unexecuted ``select`` so callers decide how to run it.
"""

from typing import Optional

from sqlmodel import col, select

from models import FoodRequest, Listing, ListingStatus

FEATURED_LIMIT = 6

_FALSE_FLAGS = {"", "false", "0", "no", "off"}


def is_truthy(flag: Optional[str]) -> bool:
    if flag is None:
        return False
    return flag.strip().lower() not in _FALSE_FLAGS


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_listing_query(
    available: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
):
    """
    available: any truthy flag keeps only Available listings.
    search: case-insensitive substring of the food name.
    sort: "asc" / "dsc" on expiry; anything else leaves the store's order.
    """
    query = select(Listing)

    if is_truthy(available):
        query = query.where(Listing.status == ListingStatus.AVAILABLE.value)

    if search:
        pattern = f"%{_escape_like(search)}%"
        query = query.where(col(Listing.food_name).ilike(pattern, escape="\\"))

    if sort == "asc":
        query = query.order_by(col(Listing.expire_date).asc())
    elif sort == "dsc":
        query = query.order_by(col(Listing.expire_date).desc())

    return query


def featured_listing_query(limit: int = FEATURED_LIMIT):
    return (
        select(Listing)
        .where(Listing.status == ListingStatus.AVAILABLE.value)
        .order_by(col(Listing.food_quantity).desc())
        .limit(limit)
    )


def owned_listing_query(email: str):
    return (
        select(Listing)
        .where(Listing.donor_email == email)
        .order_by(col(Listing.created_at).desc())
    )


def requests_by_user_query(email: str):
    return (
        select(FoodRequest)
        .where(FoodRequest.user_email == email)
        .order_by(col(FoodRequest.request_date).desc())
    )
