"""
Pydantic models for stored reservation sales.
"""

from datetime import date, datetime

from pydantic import BaseModel


class ReservationSaleRead(BaseModel):
    """A persisted daily reservation sales record."""

    id: int
    sale_date: date
    reservation_count: int
    total_price: int
    created_at: datetime | None = None

    model_config = {
        "from_attributes": True,
    }
