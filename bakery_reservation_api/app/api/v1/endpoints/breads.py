"""
Bread catalog endpoints for API v1.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from bakery_reservation_api.app.core.exceptions import ReservationError
from bakery_reservation_api.app.core.security import ADMIN_ROLE, get_current_user, require_roles
from bakery_reservation_api.app.schemas.bread import BreadCreate, BreadRead
from bakery_reservation_api.app.services.bread_service import BreadService


router = APIRouter()


@router.get("/", response_model=List[BreadRead])
async def list_breads(current_user: dict = Depends(get_current_user)) -> List[BreadRead]:
    return await BreadService.list_breads()


@router.post("/", response_model=BreadRead, status_code=status.HTTP_201_CREATED)
async def create_bread(
    bread: BreadCreate,
    current_user: dict = Depends(require_roles(ADMIN_ROLE)),
) -> BreadRead:
    """Add a bread to the catalog.  Administrators only."""
    try:
        return await BreadService.create_bread(bread)
    except ReservationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
