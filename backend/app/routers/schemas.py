from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"
# A midnight close may be written as "24:00".
CLOSING_PATTERN = r"^(([01]\d|2[0-3]):[0-5]\d|24:00)$"
PHONE_PATTERN = r"^\d{10,}$"


class RestaurantIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    opening_time: str = Field(pattern=HHMM_PATTERN, examples=["10:00"])
    closing_time: str = Field(pattern=CLOSING_PATTERN, examples=["22:00"])


class RestaurantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    opening_time: str
    closing_time: str
    created_at: datetime


class TableIn(BaseModel):
    # The URL's restaurant_id wins over this one when both are given.
    restaurant_id: int | None = Field(default=None, gt=0, strict=True)
    table_number: int = Field(gt=0, strict=True)
    capacity: int = Field(gt=0, strict=True)


class TableOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_id: int
    table_number: int
    capacity: int


class RestaurantDetailOut(RestaurantOut):
    tables: list[TableOut]


class ReservationIn(BaseModel):
    restaurant_id: int = Field(gt=0, strict=True)
    table_id: int = Field(gt=0, strict=True)
    customer_name: str = Field(min_length=1, max_length=200)
    phone: str = Field(pattern=PHONE_PATTERN, max_length=32)
    party_size: int = Field(gt=0, strict=True)
    # ISO 8601 with a UTC designator or offset, e.g. "2026-01-10T19:00:00Z"
    start_time: datetime
    duration_minutes: int = Field(ge=15, strict=True)

    @field_validator("start_time")
    @classmethod
    def _require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
            raise ValueError("start_time must include timezone information (e.g., 2026-01-10T19:00:00Z)")
        return value


class ReservationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_id: int
    table_id: int
    customer_name: str
    phone: str
    party_size: int
    start_time: datetime
    duration_minutes: int
    status: str
    created_at: datetime


class ReservationWithTableOut(ReservationOut):
    table_number: int
    capacity: int


class CancelOut(BaseModel):
    message: str
    id: int


class AvailabilitySlot(BaseModel):
    time: datetime
    table_id: int
    table_number: int


class AvailabilityOut(BaseModel):
    available_slots: list[AvailabilitySlot]
