"""Database models."""

from app.models.assignment import Assignment
from app.models.audit import AuditLog
from app.models.payment import Payment
from app.models.room import Room

__all__ = [
    "Room",
    "Assignment",
    "Payment",
    "AuditLog",
]
