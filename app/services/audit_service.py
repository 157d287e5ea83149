"""Audit trail service."""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import Principal
from app.models.audit import AuditLog

logger = logging.getLogger(__name__)


class AuditService:
    """Service for audit logging of state changes.

    Entries are added to the caller's session, so they commit or roll back
    together with the change they describe.
    """

    async def log_action(
        self,
        db: AsyncSession,
        actor: Principal | None,
        action: str,
        resource_type: str,
        resource_id: UUID,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Log an action.

        Args:
            db: Database session
            actor: Principal performing the action (None for system actions)
            action: Action name (e.g., "assignment_approve")
            resource_type: Resource type (e.g., "assignment", "payment")
            resource_id: Resource ID
            old_values: Previous state
            new_values: New state

        Returns:
            Created audit log entry
        """
        audit = AuditLog(
            actor_id=actor.id if actor else None,
            actor_role=actor.role.value if actor else None,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values=old_values,
            new_values=new_values,
        )
        db.add(audit)
        return audit

    async def log_status_change(
        self,
        db: AsyncSession,
        actor: Principal | None,
        action: str,
        resource_type: str,
        resource_id: UUID,
        old_status: str | None,
        new_status: str,
        **extra: Any,
    ) -> AuditLog:
        """Log a status transition."""
        new_values: dict[str, Any] = {"status": new_status}
        new_values.update({k: v for k, v in extra.items() if v is not None})
        return await self.log_action(
            db=db,
            actor=actor,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            old_values={"status": old_status} if old_status else None,
            new_values=new_values,
        )

    async def list_logs(
        self,
        db: AsyncSession,
        resource_type: str | None = None,
        resource_id: UUID | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[AuditLog], int]:
        query = select(AuditLog)
        if resource_type:
            query = query.where(AuditLog.resource_type == resource_type)
        if resource_id:
            query = query.where(AuditLog.resource_id == resource_id)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        offset = (page - 1) * page_size
        result = await db.execute(
            query.order_by(AuditLog.created_at.desc()).offset(offset).limit(page_size)
        )
        return list(result.scalars().all()), total


audit_service = AuditService()
