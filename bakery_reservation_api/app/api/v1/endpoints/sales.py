"""
Reservation sales endpoints for API v1.

Administrators can list stored daily sales and trigger the rollup for a
given day by hand, e.g. to re-run a day the scheduler missed.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from bakery_reservation_api.app.api.v1.endpoints.reservations import http_error
from bakery_reservation_api.app.core.exceptions import ReservationError
from bakery_reservation_api.app.core.security import ADMIN_ROLE, require_roles
from bakery_reservation_api.app.schemas.reservation import ReservationSale
from bakery_reservation_api.app.schemas.sales import ReservationSaleRead
from bakery_reservation_api.app.services.sales_rollup import DailySalesRollup
from bakery_reservation_api.app.services.sales_service import SalesService


router = APIRouter()


@router.get("/reservations", response_model=List[ReservationSaleRead])
async def list_reservation_sales(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: dict = Depends(require_roles(ADMIN_ROLE)),
) -> List[ReservationSaleRead]:
    return await SalesService.list_reservation_sales(start_date, end_date)


@router.post("/reservations/rollup", response_model=ReservationSale)
async def rollup_reservation_sales(
    sale_date: Optional[date] = Query(None, description="Day to roll up, defaults to today"),
    current_user: dict = Depends(require_roles(ADMIN_ROLE)),
) -> ReservationSale:
    """Aggregate completed reservations of one day and store the result.

    Answers 409 when the day has no completed reservations.
    """
    try:
        return await DailySalesRollup.run(sale_date, skip_empty=False)
    except ReservationError as e:
        raise http_error(e) from e
