"""
Reservation endpoints for API v1.

Members create and manage their own reservations; administrators may
act on any reservation and use the date queries and status updates.
Service errors are translated into HTTP errors here: unknown
reservations, members or breads give 404 and rule violations such as a
pickup time outside opening hours give 400.
"""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from bakery_reservation_api.app.core.exceptions import (
    EmptyAggregateError,
    NotFoundError,
    ReservationError,
)
from bakery_reservation_api.app.core.security import (
    ADMIN_ROLE,
    get_current_user,
    is_admin,
    require_roles,
)
from bakery_reservation_api.app.schemas.reservation import (
    ReservationCreate,
    ReservationRead,
    ReservationStatus,
    ReservationStatusRead,
)
from bakery_reservation_api.app.services.reservation_service import ReservationService


router = APIRouter()


def http_error(e: ReservationError) -> HTTPException:
    """Map a domain error to the matching HTTP error."""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, EmptyAggregateError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


async def _ensure_can_access(reservation_id: int, current_user: dict) -> None:
    """Allow administrators and the member owning the reservation."""
    try:
        reservation = await ReservationService.find_by_id(reservation_id)
    except ReservationError as e:
        raise http_error(e) from e
    if not is_admin(current_user) and reservation.member_id != current_user.get("member_id"):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your reservation")


@router.post("/", response_model=ReservationRead, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation: ReservationCreate,
    current_user: dict = Depends(get_current_user),
) -> ReservationRead:
    """Reserve breads for pickup.

    The pickup time must be in the future and its hour between 9 and 19.
    """
    try:
        reservation_id = await ReservationService.create_reservation(current_user.get("sub"), reservation)
        return await ReservationService.get_reservation(reservation_id)
    except ReservationError as e:
        raise http_error(e) from e


@router.get("/", response_model=List[ReservationRead])
async def list_my_reservations(
    reservation_status: ReservationStatus = Query(ReservationStatus.PENDING, alias="status"),
    current_user: dict = Depends(get_current_user),
) -> List[ReservationRead]:
    """List the current member's reservations with the given status."""
    return await ReservationService.get_reservations(current_user.get("sub"), reservation_status)


@router.get("/recent", response_model=ReservationRead)
async def get_recent_reservation(current_user: dict = Depends(get_current_user)) -> ReservationRead:
    """Return the current member's latest reservation regardless of status."""
    try:
        return await ReservationService.get_recent_reservation(current_user.get("sub"))
    except ReservationError as e:
        raise http_error(e) from e


@router.get("/date", response_model=List[ReservationRead])
async def list_reservations_by_date(
    select_date: date = Query(..., description="Pickup day"),
    reservation_status: ReservationStatus = Query(ReservationStatus.PENDING, alias="status"),
    current_user: dict = Depends(require_roles(ADMIN_ROLE)),
) -> List[ReservationRead]:
    """List reservations picked up on one day.  Administrators only."""
    return await ReservationService.get_reservations_by_date(select_date, reservation_status)


@router.get("/date-range", response_model=List[ReservationRead])
async def list_reservations_by_date_range(
    start_date: date = Query(...),
    end_date: date = Query(...),
    reservation_status: ReservationStatus = Query(ReservationStatus.PENDING, alias="status"),
    current_user: dict = Depends(require_roles(ADMIN_ROLE)),
) -> List[ReservationRead]:
    """List reservations picked up between two days, both inclusive.  Administrators only."""
    try:
        return await ReservationService.get_reservations_by_date_range(start_date, end_date, reservation_status)
    except ReservationError as e:
        raise http_error(e) from e


@router.get("/{reservation_id}", response_model=ReservationRead)
async def get_reservation(
    reservation_id: int = Path(..., description="ID of the reservation"),
    current_user: dict = Depends(get_current_user),
) -> ReservationRead:
    await _ensure_can_access(reservation_id, current_user)
    try:
        return await ReservationService.get_reservation(reservation_id)
    except ReservationError as e:
        raise http_error(e) from e


@router.put("/{reservation_id}", response_model=ReservationRead)
async def update_reservation(
    reservation: ReservationCreate,
    reservation_id: int = Path(..., description="ID of the reservation to replace"),
    current_user: dict = Depends(get_current_user),
) -> ReservationRead:
    """Replace a reservation.

    The replacement is stored under a new ID, which the response carries.
    """
    await _ensure_can_access(reservation_id, current_user)
    try:
        new_id = await ReservationService.update_reservation(reservation_id, reservation)
        return await ReservationService.get_reservation(new_id)
    except ReservationError as e:
        raise http_error(e) from e


@router.delete("/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reservation(
    reservation_id: int = Path(..., description="ID of the reservation"),
    current_user: dict = Depends(get_current_user),
) -> None:
    await _ensure_can_access(reservation_id, current_user)
    try:
        await ReservationService.delete_reservation(reservation_id)
    except ReservationError as e:
        raise http_error(e) from e


@router.patch("/{reservation_id}/status", response_model=ReservationStatusRead)
async def advance_reservation_status(
    reservation_id: int = Path(..., description="ID of the reservation"),
    current_user: dict = Depends(require_roles(ADMIN_ROLE)),
) -> ReservationStatusRead:
    """Move a reservation to its next status (``PENDING`` to ``COMPLETE``).  Administrators only."""
    try:
        new_status = await ReservationService.update_reservation_status(reservation_id)
    except ReservationError as e:
        raise http_error(e) from e
    return ReservationStatusRead(reservation_id=reservation_id, status=new_status)


@router.post("/{reservation_id}/cancel", response_model=ReservationStatusRead)
async def cancel_reservation(
    reservation_id: int = Path(..., description="ID of the reservation"),
    current_user: dict = Depends(get_current_user),
) -> ReservationStatusRead:
    await _ensure_can_access(reservation_id, current_user)
    try:
        new_status = await ReservationService.cancel_reservation(reservation_id)
    except ReservationError as e:
        raise http_error(e) from e
    return ReservationStatusRead(reservation_id=reservation_id, status=new_status)
