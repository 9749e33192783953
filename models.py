from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlmodel import Field, SQLModel


def _new_id() -> str:
    return uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ListingStatus(str, Enum):
    AVAILABLE = "Available"
    REQUESTED = "Requested"


class Listing(SQLModel, table=True):
    __tablename__ = "food"

    id: str = Field(default_factory=_new_id, primary_key=True)

    food_name: str = Field(index=True)
    food_image: Optional[str] = None
    food_quantity: int = 0
    pickup_location: Optional[str] = None
    expire_date: Optional[datetime] = Field(default=None, index=True)
    additional_notes: Optional[str] = None
    status: str = Field(default=ListingStatus.AVAILABLE.value, index=True)

    # Donor identity, fixed at creation.
    donor_email: str = Field(index=True)
    donor_name: Optional[str] = None
    donor_image: Optional[str] = None

    created_at: datetime = Field(default_factory=_now)
    version: int = 0


class FoodRequest(SQLModel, table=True):
    __tablename__ = "food_request"

    id: str = Field(default_factory=_new_id, primary_key=True)
    # Plain reference: requests outlive deleted listings.
    food_id: str = Field(index=True)
    user_email: str = Field(index=True)

    # Snapshot of the listing at claim time.
    food_name: str
    donor_email: str
    pickup_location: Optional[str] = None
    expire_date: Optional[datetime] = None

    request_date: datetime = Field(default_factory=_now)
    additional_notes: Optional[str] = None
    status: str = ListingStatus.REQUESTED.value
