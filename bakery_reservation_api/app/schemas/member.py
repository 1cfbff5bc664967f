"""
Pydantic model for bakery members.

Members are created by the external sign-in service; this API only
reads them to attach reservations to their owner.
"""

from pydantic import BaseModel


class MemberRead(BaseModel):
    id: int
    email: str
    name: str | None = None
    role: str

    model_config = {
        "from_attributes": True,
    }
