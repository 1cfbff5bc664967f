"""
Pydantic models for bakery reservations.

A reservation is stored as one ``reservations`` row plus one
``reservation_infos`` row per reserved bread.  Queries join the two
tables and return one ``ReservationRow`` per bread line; the service
layer folds those rows into ``ReservationRead`` objects with a nested
``breads`` list before they are returned to clients.
"""

from datetime import date, datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, Field, field_validator


class ReservationStatus(str, Enum):
    """Lifecycle status of a reservation.

    ``PENDING`` reservations wait for pickup.  ``COMPLETE`` and
    ``CANCELLED`` are terminal.
    """

    PENDING = "PENDING"
    COMPLETE = "COMPLETE"
    CANCELLED = "CANCELLED"

    def next_status(self) -> "ReservationStatus":
        """Return the status that follows this one.

        Terminal statuses map to themselves.
        """
        return _STATUS_PROGRESSION[self]

    @property
    def is_terminal(self) -> bool:
        return self is not ReservationStatus.PENDING


_STATUS_PROGRESSION = {
    ReservationStatus.PENDING: ReservationStatus.COMPLETE,
    ReservationStatus.COMPLETE: ReservationStatus.COMPLETE,
    ReservationStatus.CANCELLED: ReservationStatus.CANCELLED,
}


MAX_BREAD_COUNT = 1000


def _to_naive_local(value: datetime) -> datetime:
    # Stored timestamps are naive local time; aware inputs are converted.
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class BreadSelection(BaseModel):
    """One requested bread and how many pieces of it."""

    name: str = Field(..., min_length=1, examples=["Baguette"])
    count: int = Field(..., ge=1, le=MAX_BREAD_COUNT, examples=[2])


class ReservationCreate(BaseModel):
    """Schema for creating (or replacing) a reservation."""

    bring_time: datetime = Field(..., description="Requested pickup time")
    breads: List[BreadSelection] = Field(..., min_length=1)

    @field_validator("bring_time")
    @classmethod
    def _normalize_bring_time(cls, value: datetime) -> datetime:
        return _to_naive_local(value)

    @field_validator("breads")
    @classmethod
    def _unique_bread_names(cls, value: List[BreadSelection]) -> List[BreadSelection]:
        names = [selection.name for selection in value]
        if len(set(names)) != len(names):
            raise ValueError("each bread may only be selected once")
        return value

    @property
    def bread_names(self) -> List[str]:
        return [selection.name for selection in self.breads]

    @property
    def bread_counts(self) -> List[int]:
        return [selection.count for selection in self.breads]


class Reservation(BaseModel):
    """A stored reservation without its line items."""

    id: int
    member_id: int
    bring_time: datetime
    price: int
    status: ReservationStatus
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class ReservationRow(BaseModel):
    """One joined reservation/bread row as returned by storage queries."""

    reservation_id: int
    member_email: str
    member_name: str | None = None
    bring_time: datetime
    price: int
    status: ReservationStatus
    created_at: datetime
    bread_name: str
    bread_price: int
    bread_count: int


class ReservationBread(BaseModel):
    """A bread line item inside a grouped reservation."""

    name: str
    price: int
    count: int

    @classmethod
    def from_row(cls, row: ReservationRow) -> "ReservationBread":
        return cls(name=row.bread_name, price=row.bread_price, count=row.bread_count)


class ReservationRead(BaseModel):
    """A reservation with its bread line items nested."""

    reservation_id: int
    member_email: str
    member_name: str | None = None
    bring_time: datetime
    price: int
    status: ReservationStatus
    created_at: datetime
    breads: List[ReservationBread]

    @classmethod
    def from_row(cls, row: ReservationRow, breads: List[ReservationBread]) -> "ReservationRead":
        return cls(
            reservation_id=row.reservation_id,
            member_email=row.member_email,
            member_name=row.member_name,
            bring_time=row.bring_time,
            price=row.price,
            status=row.status,
            created_at=row.created_at,
            breads=list(breads),
        )


class ReservationStatusRead(BaseModel):
    reservation_id: int
    status: ReservationStatus


class ReservationSale(BaseModel):
    """Count and revenue of reservations for one day."""

    sale_date: date
    reservation_count: int
    total_price: int
