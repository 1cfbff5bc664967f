"""
Read access to bakery members.
"""

from bakery_reservation_api.app.core.db import get_connection
from bakery_reservation_api.app.core.exceptions import NotFoundError
from bakery_reservation_api.app.schemas.member import MemberRead


class MemberService:
    """Looks up members owning reservations."""

    @classmethod
    async def find_by_email(cls, email: str) -> MemberRead:
        """Return the member registered under ``email``.

        Raises ``NotFoundError`` when no such member exists.
        """
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT id, email, name, role FROM members WHERE email = ?",
                (email,),
            ).fetchone()
        finally:
            conn.close()
        if not row:
            raise NotFoundError(f"Member {email} does not exist")
        return MemberRead(**dict(row))
