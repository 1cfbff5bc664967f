"""
Storage of daily reservation sales.

The sales rollup hands one ``ReservationSale`` per business day to
``save_reservation_sale``.  Running the rollup again for the same day
replaces that day's record instead of adding a second one.
"""

import logging
from datetime import date
from typing import List, Optional

from bakery_reservation_api.app.core.db import get_connection, get_cursor
from bakery_reservation_api.app.schemas.reservation import ReservationSale
from bakery_reservation_api.app.schemas.sales import ReservationSaleRead


class SalesService:
    """Service persisting and listing reservation sales."""

    @classmethod
    async def save_reservation_sale(cls, sale: ReservationSale) -> ReservationSaleRead:
        logger = logging.getLogger(__name__)
        with get_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO reservation_sales (sale_date, reservation_count, total_price)
                VALUES (?, ?, ?)
                ON CONFLICT(sale_date) DO UPDATE SET
                    reservation_count = excluded.reservation_count,
                    total_price = excluded.total_price
                """,
                (sale.sale_date.isoformat(), sale.reservation_count, sale.total_price),
            )
            row = cursor.execute(
                "SELECT id, sale_date, reservation_count, total_price, created_at "
                "FROM reservation_sales WHERE sale_date = ?",
                (sale.sale_date.isoformat(),),
            ).fetchone()
        logger.info(
            "Saved reservation sales for %s: %s reservations, total %s",
            sale.sale_date,
            sale.reservation_count,
            sale.total_price,
        )
        return ReservationSaleRead(**dict(row))

    @classmethod
    async def list_reservation_sales(
        cls,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[ReservationSaleRead]:
        """List stored sales, newest day first, optionally within a date range."""
        query = "SELECT id, sale_date, reservation_count, total_price, created_at FROM reservation_sales"
        conditions: list[str] = []
        params: list = []
        if start_date is not None:
            conditions.append("sale_date >= ?")
            params.append(start_date.isoformat())
        if end_date is not None:
            conditions.append("sale_date <= ?")
            params.append(end_date.isoformat())
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY sale_date DESC"
        conn = get_connection()
        try:
            rows = conn.execute(query, tuple(params)).fetchall()
        finally:
            conn.close()
        return [ReservationSaleRead(**dict(row)) for row in rows]
