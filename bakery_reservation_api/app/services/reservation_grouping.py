"""
Folding joined reservation rows into nested reservations.

Storage queries join ``reservations`` with ``reservation_infos`` and
``breads`` and therefore return one row per reserved bread.  Clients
expect one object per reservation with its breads nested, which is
what ``group_reservation_rows`` builds.

The input must keep the rows of one reservation next to each other.
The rows are not re-sorted: if the rows of a reservation are split by
another reservation's rows, that reservation shows up as two separate
groups.  Every query in ``ReservationService`` orders by reservation id
within its sort keys so that this holds.
"""

from typing import Iterable, List

from bakery_reservation_api.app.schemas.reservation import (
    ReservationBread,
    ReservationRead,
    ReservationRow,
)


def group_reservation_rows(rows: Iterable[ReservationRow]) -> List[ReservationRead]:
    """Group contiguous rows by reservation id in a single pass.

    Each group is built from the last row seen for that reservation and
    keeps its breads in row order.

    Raises
    ------
    ValueError
        If ``rows`` is empty.  Callers check for an empty query result
        before grouping.
    """
    grouped: List[ReservationRead] = []
    breads: List[ReservationBread] = []
    current_id = None
    last_row = None

    for row in rows:
        if last_row is not None and row.reservation_id != current_id:
            grouped.append(ReservationRead.from_row(last_row, breads))
            breads = []
        current_id = row.reservation_id
        breads.append(ReservationBread.from_row(row))
        last_row = row

    if last_row is None:
        raise ValueError("no reservation rows")
    grouped.append(ReservationRead.from_row(last_row, breads))
    return grouped
