from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Dates without an offset are taken to be UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionClaims(BaseModel):
    """Identity claims submitted to /jwt. Unknown keys are kept in the token."""

    email: str = Field(pattern=EMAIL_PATTERN)

    model_config = ConfigDict(extra="allow")


class SessionIdentity(BaseModel):
    email: str

    model_config = ConfigDict(extra="allow")


class ListingCreate(BaseModel):
    food_name: str = Field(min_length=1)
    food_image: Optional[str] = None
    food_quantity: int = Field(default=0, ge=0)
    pickup_location: Optional[str] = None
    expire_date: Optional[datetime] = None
    additional_notes: Optional[str] = None
    status: Optional[str] = None

    donor_email: Optional[str] = None
    donor_name: Optional[str] = None
    donor_image: Optional[str] = None

    expire_utc = field_validator("expire_date")(_as_utc)


class ListingUpdate(BaseModel):
    """Fields a donor may change on their own listing."""

    food_name: Optional[str] = Field(default=None, min_length=1)
    food_image: Optional[str] = None
    food_quantity: Optional[int] = Field(default=None, ge=0)
    pickup_location: Optional[str] = None
    expire_date: Optional[datetime] = None
    additional_notes: Optional[str] = None

    expire_utc = field_validator("expire_date")(_as_utc)

    @field_validator("food_name", "food_quantity")
    @classmethod
    def not_null(cls, value):
        # Leave the field out to keep it; null would clear a required column.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ListingRead(BaseModel):
    id: str
    food_name: str
    food_image: Optional[str]
    food_quantity: int
    pickup_location: Optional[str]
    expire_date: Optional[datetime]
    additional_notes: Optional[str]
    status: str
    donor_email: str
    donor_name: Optional[str]
    donor_image: Optional[str]
    created_at: datetime
    version: int

    model_config = ConfigDict(from_attributes=True)


class FoodRequestCreate(BaseModel):
    food_id: str
    user_email: str
    request_date: Optional[datetime] = None
    additional_notes: Optional[str] = None
    status: Optional[str] = None

    request_utc = field_validator("request_date")(_as_utc)


class FoodRequestRead(BaseModel):
    id: str
    food_id: str
    food_name: str
    donor_email: str
    pickup_location: Optional[str]
    expire_date: Optional[datetime]
    user_email: str
    request_date: datetime
    additional_notes: Optional[str]
    status: str

    model_config = ConfigDict(from_attributes=True)


class InsertResult(BaseModel):
    inserted_id: str


class UpdateResult(BaseModel):
    matched_count: int


class DeleteResult(BaseModel):
    deleted_count: int


class SuccessResponse(BaseModel):
    success: bool = True
