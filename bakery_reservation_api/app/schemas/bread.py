"""
Pydantic models for the bread catalog.
"""

from pydantic import BaseModel, Field


# Largest value a SQLite INTEGER column holds.
MAX_PRICE = 2**63 - 1


class BreadCreate(BaseModel):
    name: str = Field(..., min_length=1, examples=["Baguette"])
    price: int = Field(..., ge=0, le=MAX_PRICE, examples=[5])
    description: str | None = None


class BreadRead(BaseModel):
    id: int
    name: str
    price: int
    description: str | None = None

    model_config = {
        "from_attributes": True,
    }
