"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import admin, assignments, payments, reports, rooms

api_router = APIRouter()

# Rooms
api_router.include_router(rooms.router, prefix="/rooms", tags=["Rooms"])

# Assignments
api_router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])

# Payments
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])

# Admin
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])

# Reports
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
