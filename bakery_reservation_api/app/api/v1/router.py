"""
Top-level router for version 1 of the API.

This router aggregates the domain routers (reservations, breads and
sales) under a unified prefix.  When new domains are introduced,
include their routers here.
"""

from fastapi import APIRouter

from .endpoints import breads, reservations, sales

router = APIRouter()

router.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
router.include_router(breads.router, prefix="/breads", tags=["breads"])
router.include_router(sales.router, prefix="/sales", tags=["sales"])
