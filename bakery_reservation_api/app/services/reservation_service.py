"""
Business logic for bakery reservations.

The ``ReservationService`` creates, replaces, deletes and cancels
reservations, advances their status and answers the member and admin
queries.  A reservation and its bread line items are always written in
one transaction (see ``core.db.get_cursor``), so a reservation without
its breads is never visible.  Replacing a reservation deletes the old
row and inserts the new one inside that same transaction; if the insert
fails, the old reservation is kept.

Query methods read joined rows (one per reserved bread) and fold them
into nested reservations with ``group_reservation_rows``.  Every query
orders by reservation id inside its other sort keys, which keeps the
rows of one reservation together as the grouping requires.
"""

import logging
import sqlite3
from datetime import date, datetime, time
from typing import List, Optional, Tuple

from bakery_reservation_api.app.core.db import get_connection, get_cursor
from bakery_reservation_api.app.core.exceptions import NotFoundError, ValidationFailedError
from bakery_reservation_api.app.schemas.bread import BreadRead
from bakery_reservation_api.app.schemas.reservation import (
    Reservation,
    ReservationCreate,
    ReservationRead,
    ReservationRow,
    ReservationSale,
    ReservationStatus,
)
from bakery_reservation_api.app.services.bread_service import BreadService
from bakery_reservation_api.app.services.member_service import MemberService
from bakery_reservation_api.app.services.pickup_window import validate_bring_time
from bakery_reservation_api.app.services.reservation_grouping import group_reservation_rows


logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59)

_ROW_QUERY = """
    SELECT r.id AS reservation_id,
           m.email AS member_email,
           m.name AS member_name,
           r.bring_time,
           r.price,
           r.status,
           r.created_at,
           b.name AS bread_name,
           b.price AS bread_price,
           ri.bread_count
    FROM reservations r
    JOIN members m ON m.id = r.member_id
    JOIN reservation_infos ri ON ri.reservation_id = r.id
    JOIN breads b ON b.id = ri.bread_id
"""


def day_bounds(start_day: date, end_day: Optional[date] = None) -> Tuple[datetime, datetime]:
    """Return the first and last second of the given calendar days.

    The end bound is 23:59:59 of ``end_day`` (``start_day`` when
    omitted) and is inclusive.
    """
    return datetime.combine(start_day, time.min), datetime.combine(end_day or start_day, END_OF_DAY)


def _format_timestamp(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


class ReservationService:
    """Service for the reservation lifecycle and reservation queries."""

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @classmethod
    async def find_by_id(cls, reservation_id: int) -> Reservation:
        """Return the stored reservation or raise ``NotFoundError``."""
        conn = get_connection()
        try:
            row = conn.execute(
                "SELECT id, member_id, bring_time, price, status, created_at FROM reservations WHERE id = ?",
                (reservation_id,),
            ).fetchone()
        finally:
            conn.close()
        if not row:
            raise NotFoundError(f"Reservation {reservation_id} does not exist")
        return Reservation(**dict(row))

    @classmethod
    async def create_reservation(
        cls,
        member_email: str,
        request: ReservationCreate,
        now: Optional[datetime] = None,
    ) -> int:
        """Create a reservation for ``member_email`` and return its id.

        The pickup time is validated before anything is looked up.  The
        breads are resolved in the order of ``request.breads`` and the
        i-th selection's count is stored with the i-th resolved bread.
        Raises ``ValidationFailedError`` for a pickup time outside the
        window and ``NotFoundError`` for an unknown member or bread.
        """
        validate_bring_time(request.bring_time, now)
        member = await MemberService.find_by_email(member_email)
        breads, price = await cls._price_selection(request)
        with get_cursor() as cursor:
            reservation_id = cls._insert_reservation(cursor, member.id, request, breads, price)
        logger.info(
            "Reservation %s created for %s: %s breads, price %s, pickup %s",
            reservation_id,
            member_email,
            len(breads),
            price,
            request.bring_time,
        )
        return reservation_id

    @classmethod
    async def update_reservation(
        cls,
        reservation_id: int,
        request: ReservationCreate,
        now: Optional[datetime] = None,
    ) -> int:
        """Replace a reservation with a new one built from ``request``.

        The new reservation keeps the owner of the old one and gets a new
        id, which is returned.  Deleting the old reservation and inserting
        the new one happen in one transaction.  Only pending reservations
        can be replaced; completed or cancelled ones raise
        ``ValidationFailedError``.
        """
        validate_bring_time(request.bring_time, now)
        existing = await cls.find_by_id(reservation_id)
        if existing.status.is_terminal:
            raise ValidationFailedError(
                f"Reservation {reservation_id} is {existing.status.value.lower()} and cannot be changed"
            )
        breads, price = await cls._price_selection(request)
        with get_cursor() as cursor:
            cls._delete_reservation(cursor, reservation_id)
            new_id = cls._insert_reservation(cursor, existing.member_id, request, breads, price)
        logger.info("Reservation %s replaced by %s", reservation_id, new_id)
        return new_id

    @classmethod
    async def delete_reservation(cls, reservation_id: int) -> None:
        """Delete a reservation and, by cascade, its line items.

        Deleting an unknown id raises ``NotFoundError``.
        """
        with get_cursor() as cursor:
            cls._delete_reservation(cursor, reservation_id)
        logger.info("Reservation %s deleted", reservation_id)

    @classmethod
    async def update_reservation_status(cls, reservation_id: int) -> ReservationStatus:
        """Advance the reservation to its next status and return it."""
        reservation = await cls.find_by_id(reservation_id)
        if reservation.status.is_terminal:
            logger.info("Reservation %s already %s", reservation_id, reservation.status.value)
            return reservation.status
        new_status = reservation.status.next_status()
        cls._set_status(reservation_id, new_status)
        logger.info(
            "Reservation %s status %s -> %s", reservation_id, reservation.status.value, new_status.value
        )
        return new_status

    @classmethod
    async def cancel_reservation(cls, reservation_id: int) -> ReservationStatus:
        """Cancel a pending reservation.

        Cancelling an already cancelled reservation changes nothing; a
        completed reservation cannot be cancelled.
        """
        reservation = await cls.find_by_id(reservation_id)
        if reservation.status is ReservationStatus.COMPLETE:
            logger.warning("Refused to cancel completed reservation %s", reservation_id)
            raise ValidationFailedError(f"Reservation {reservation_id} is already complete")
        if reservation.status is ReservationStatus.PENDING:
            cls._set_status(reservation_id, ReservationStatus.CANCELLED)
            logger.info("Reservation %s cancelled", reservation_id)
        return ReservationStatus.CANCELLED

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @classmethod
    async def get_reservation(cls, reservation_id: int) -> ReservationRead:
        """Return one reservation with its breads."""
        rows = cls._fetch_rows("WHERE r.id = ? ORDER BY ri.id", (reservation_id,))
        if not rows:
            raise NotFoundError(f"Reservation {reservation_id} does not exist")
        return group_reservation_rows(rows)[0]

    @classmethod
    async def get_reservations(cls, member_email: str, status: ReservationStatus) -> List[ReservationRead]:
        """All reservations of a member with the given status, latest pickup first."""
        rows = cls._fetch_rows(
            "WHERE m.email = ? AND r.status = ? ORDER BY r.bring_time DESC, r.id, ri.id",
            (member_email, status.value),
        )
        return group_reservation_rows(rows) if rows else []

    @classmethod
    async def get_recent_reservation(cls, member_email: str) -> ReservationRead:
        """The member's most recently created reservation, whatever its status."""
        rows = cls._fetch_rows(
            """
            WHERE r.id = (
                SELECT r2.id FROM reservations r2
                JOIN members m2 ON m2.id = r2.member_id
                WHERE m2.email = ?
                ORDER BY r2.created_at DESC, r2.id DESC
                LIMIT 1
            )
            ORDER BY ri.id
            """,
            (member_email,),
        )
        if not rows:
            raise NotFoundError(f"Member {member_email} has no reservations")
        return group_reservation_rows(rows)[0]

    @classmethod
    async def get_reservations_by_date(
        cls, select_date: date, status: ReservationStatus
    ) -> List[ReservationRead]:
        """Reservations with the given status picked up on ``select_date``."""
        return await cls.get_reservations_by_date_range(select_date, select_date, status)

    @classmethod
    async def get_reservations_by_date_range(
        cls, start_date: date, end_date: date, status: ReservationStatus
    ) -> List[ReservationRead]:
        """Reservations with the given status picked up between two days, both inclusive."""
        if end_date < start_date:
            raise ValidationFailedError(f"End date {end_date} is before start date {start_date}")
        start, end = day_bounds(start_date, end_date)
        rows = cls._fetch_rows(
            "WHERE r.status = ? AND r.bring_time BETWEEN ? AND ? ORDER BY r.bring_time, r.id, ri.id",
            (status.value, _format_timestamp(start), _format_timestamp(end)),
        )
        return group_reservation_rows(rows) if rows else []

    @classmethod
    async def get_reservation_sale(
        cls,
        start: datetime,
        end: datetime,
        status: ReservationStatus = ReservationStatus.COMPLETE,
    ) -> Optional[ReservationSale]:
        """Count and revenue of reservations with ``status`` picked up in ``[start, end]``.

        Returns ``None`` when no reservation matches.
        """
        conn = get_connection()
        try:
            row = conn.execute(
                """
                SELECT COUNT(*) AS reservation_count, COALESCE(SUM(price), 0) AS total_price
                FROM reservations
                WHERE status = ? AND bring_time BETWEEN ? AND ?
                """,
                (status.value, _format_timestamp(start), _format_timestamp(end)),
            ).fetchone()
        finally:
            conn.close()
        if not row or row["reservation_count"] == 0:
            return None
        return ReservationSale(
            sale_date=start.date(),
            reservation_count=row["reservation_count"],
            total_price=row["total_price"],
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @classmethod
    async def _price_selection(cls, request: ReservationCreate) -> Tuple[List[BreadRead], int]:
        breads = await BreadService.find_many_by_names(request.bread_names)
        price = await BreadService.compute_final_price(request.breads)
        return breads, price

    @staticmethod
    def _insert_reservation(
        cursor: sqlite3.Cursor,
        member_id: int,
        request: ReservationCreate,
        breads: List[BreadRead],
        price: int,
    ) -> int:
        cursor.execute(
            """
            INSERT INTO reservations (member_id, bring_time, price, status, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                member_id,
                _format_timestamp(request.bring_time),
                price,
                ReservationStatus.PENDING.value,
                _format_timestamp(datetime.now()),
            ),
        )
        reservation_id = cursor.lastrowid
        cursor.executemany(
            "INSERT INTO reservation_infos (reservation_id, bread_id, bread_count) VALUES (?, ?, ?)",
            [
                (reservation_id, bread.id, count)
                for bread, count in zip(breads, request.bread_counts)
            ],
        )
        return reservation_id

    @staticmethod
    def _delete_reservation(cursor: sqlite3.Cursor, reservation_id: int) -> None:
        cursor.execute("DELETE FROM reservations WHERE id = ?", (reservation_id,))
        if cursor.rowcount == 0:
            raise NotFoundError(f"Reservation {reservation_id} does not exist")

    @staticmethod
    def _set_status(reservation_id: int, new_status: ReservationStatus) -> None:
        with get_cursor() as cursor:
            cursor.execute(
                "UPDATE reservations SET status = ? WHERE id = ?",
                (new_status.value, reservation_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Reservation {reservation_id} does not exist")

    @staticmethod
    def _fetch_rows(clause: str, params: tuple) -> List[ReservationRow]:
        conn = get_connection()
        try:
            rows = conn.execute(f"{_ROW_QUERY} {clause}", params).fetchall()
        finally:
            conn.close()
        return [ReservationRow(**dict(row)) for row in rows]
