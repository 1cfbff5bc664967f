"""
Tests for folding joined reservation rows into nested reservations.
"""

from datetime import datetime

import pytest

from bakery_reservation_api.app.schemas.reservation import ReservationRow, ReservationStatus
from bakery_reservation_api.app.services.reservation_grouping import group_reservation_rows


def _row(reservation_id: int, bread: str, count: int = 1, price: int = 10) -> ReservationRow:
    return ReservationRow(
        reservation_id=reservation_id,
        member_email="client@bakery.com",
        member_name="Client",
        bring_time=datetime(2026, 10, 20, 10, 0),
        price=price,
        status=ReservationStatus.PENDING,
        created_at=datetime(2026, 10, 19, 9, 0),
        bread_name=bread,
        bread_price=5,
        bread_count=count,
    )


class TestGroupReservationRows:

    def test_groups_contiguous_rows(self):
        rows = [_row(1, "A"), _row(1, "B"), _row(2, "C")]

        grouped = group_reservation_rows(rows)

        assert [group.reservation_id for group in grouped] == [1, 2]
        assert [bread.name for bread in grouped[0].breads] == ["A", "B"]
        assert [bread.name for bread in grouped[1].breads] == ["C"]

    def test_single_row(self):
        grouped = group_reservation_rows([_row(7, "Baguette", count=2)])

        assert len(grouped) == 1
        assert grouped[0].reservation_id == 7
        assert len(grouped[0].breads) == 1
        assert grouped[0].breads[0].count == 2

    def test_empty_input_is_rejected(self):
        with pytest.raises(ValueError, match="no reservation rows"):
            group_reservation_rows([])

    def test_one_group_per_distinct_id_in_row_order(self):
        rows = [
            _row(5, "A"), _row(5, "B"), _row(5, "C"),
            _row(3, "D"),
            _row(9, "E"), _row(9, "F"),
        ]

        grouped = group_reservation_rows(rows)

        assert [group.reservation_id for group in grouped] == [5, 3, 9]
        assert [[b.name for b in group.breads] for group in grouped] == [["A", "B", "C"], ["D"], ["E", "F"]]

    def test_last_group_is_flushed(self):
        rows = [_row(1, "A"), _row(2, "B"), _row(2, "C")]

        grouped = group_reservation_rows(rows)

        assert [b.name for b in grouped[-1].breads] == ["B", "C"]

    def test_reservation_fields_come_from_group_rows(self):
        rows = [_row(1, "A", price=10), _row(1, "B", price=10), _row(2, "C", price=30)]

        grouped = group_reservation_rows(rows)

        assert [group.price for group in grouped] == [10, 30]
        assert grouped[0].member_email == "client@bakery.com"

    def test_accepts_any_iterable(self):
        grouped = group_reservation_rows(iter([_row(1, "A"), _row(1, "B")]))

        assert len(grouped) == 1

    def test_non_contiguous_rows_split_a_reservation(self):
        # Rows are not re-sorted; callers must keep a reservation's rows together.
        grouped = group_reservation_rows([_row(1, "A"), _row(2, "B"), _row(1, "C")])

        assert [group.reservation_id for group in grouped] == [1, 2, 1]
