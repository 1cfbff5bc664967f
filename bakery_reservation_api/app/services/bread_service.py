"""
Bread catalog and pricing.

The reservation service resolves requested bread names through
``find_many_by_names`` and asks ``compute_final_price`` for the total of
a selection.  Pricing is the sum of unit price times count; discounts
are not modelled.
"""

import logging
import sqlite3
from typing import List

from bakery_reservation_api.app.core.db import get_connection, get_cursor
from bakery_reservation_api.app.core.exceptions import NotFoundError, ValidationFailedError
from bakery_reservation_api.app.schemas.bread import MAX_PRICE, BreadCreate, BreadRead
from bakery_reservation_api.app.schemas.reservation import BreadSelection


logger = logging.getLogger(__name__)


class BreadService:
    """Service for the bread catalog."""

    @classmethod
    async def list_breads(cls) -> List[BreadRead]:
        conn = get_connection()
        try:
            rows = conn.execute(
                "SELECT id, name, price, description FROM breads ORDER BY name ASC"
            ).fetchall()
        finally:
            conn.close()
        return [BreadRead(**dict(row)) for row in rows]

    @classmethod
    async def create_bread(cls, data: BreadCreate) -> BreadRead:
        """Add a bread to the catalog.

        Bread names are unique; a duplicate raises ``ValidationFailedError``.
        """
        try:
            with get_cursor() as cursor:
                cursor.execute(
                    "INSERT INTO breads (name, price, description) VALUES (?, ?, ?)",
                    (data.name, data.price, data.description),
                )
                bread_id = cursor.lastrowid
        except sqlite3.IntegrityError as e:
            raise ValidationFailedError(f"Bread {data.name} already exists") from e
        logger.info("Bread %s added with price %s", data.name, data.price)
        return BreadRead(id=bread_id, name=data.name, price=data.price, description=data.description)

    @classmethod
    async def find_many_by_names(cls, names: List[str]) -> List[BreadRead]:
        """Return the breads called ``names``, in the order of ``names``.

        Raises ``NotFoundError`` naming every bread that is not in the
        catalog.
        """
        if not names:
            return []
        placeholders = ", ".join("?" for _ in names)
        conn = get_connection()
        try:
            rows = conn.execute(
                f"SELECT id, name, price, description FROM breads WHERE name IN ({placeholders})",
                tuple(names),
            ).fetchall()
        finally:
            conn.close()
        by_name = {row["name"]: BreadRead(**dict(row)) for row in rows}
        missing = [name for name in names if name not in by_name]
        if missing:
            raise NotFoundError(f"Bread not found: {', '.join(missing)}")
        return [by_name[name] for name in names]

    @classmethod
    async def compute_final_price(cls, selections: List[BreadSelection]) -> int:
        """Total price of ``selections``: unit price times count, summed.

        A total too large to store raises ``ValidationFailedError``.
        """
        breads = await cls.find_many_by_names([selection.name for selection in selections])
        total = sum(bread.price * selection.count for bread, selection in zip(breads, selections))
        if total > MAX_PRICE:
            raise ValidationFailedError(f"Reservation price {total} is too large")
        return total
