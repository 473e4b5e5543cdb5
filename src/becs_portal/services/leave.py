"""Leave application workflow."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import InvalidStateTransitionError, NotFoundError, PermissionDeniedError
from ..models import LeaveApplication, LeaveStatus, User, inclusive_days, utcnow
from ..repositories import LeaveApplicationRepository
from ..schemas import LeaveApplicationCreate, LeaveDecision

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = LeaveApplicationRepository(session)

    async def _get_or_404(self, application_id: int) -> LeaveApplication:
        application = await self._repository.get(application_id)
        if application is None:
            raise NotFoundError(f"Leave application {application_id} does not exist.")
        return application

    @staticmethod
    def _require_pending(application: LeaveApplication, target: LeaveStatus) -> None:
        if application.status is not LeaveStatus.PENDING:
            raise InvalidStateTransitionError(
                application.status.value,
                target.value,
                message="Only pending leave applications can change.",
            )

    async def apply(self, actor: User, payload: LeaveApplicationCreate) -> LeaveApplication:
        application = LeaveApplication(
            **payload.model_dump(),
            user_id=actor.id,
            total_days=inclusive_days(payload.start_date, payload.end_date),
            status=LeaveStatus.PENDING,
        )
        await self._repository.add(application)
        await self._session.commit()
        await self._repository.refresh(application)
        logger.info(
            "Leave applied",
            extra={
                "application_id": application.id,
                "user_id": actor.id,
                "leave_type": application.leave_type.value,
                "total_days": application.total_days,
            },
        )
        return application

    async def get_application(self, actor: User, application_id: int) -> LeaveApplication:
        application = await self._get_or_404(application_id)
        if not actor.is_privileged and application.user_id != actor.id:
            raise PermissionDeniedError("You may only view your own leave applications.")
        return application

    async def list_applications(
        self,
        actor: User,
        *,
        user_id: int | None = None,
        status: LeaveStatus | None = None,
    ) -> list[LeaveApplication]:
        if not actor.is_privileged:
            if user_id is not None and user_id != actor.id:
                raise PermissionDeniedError("You may only view your own leave applications.")
            user_id = actor.id
        return await self._repository.list_filtered(user_id=user_id, status=status)

    async def decide(self, actor: User, application_id: int, decision: LeaveDecision) -> LeaveApplication:
        if not actor.is_privileged:
            raise PermissionDeniedError("Only admins and directors may decide leave applications.")
        application = await self._get_or_404(application_id)
        target = LeaveStatus(decision.status)
        self._require_pending(application, target)
        application.status = target
        application.reviewer_id = actor.id
        application.reviewed_at = utcnow()
        application.review_comments = decision.comments.strip() if decision.comments else None
        await self._session.commit()
        await self._repository.refresh(application)
        logger.info(
            "Leave decided",
            extra={"application_id": application.id, "status": target.value, "actor_id": actor.id},
        )
        return application

    async def cancel(self, actor: User, application_id: int) -> LeaveApplication:
        application = await self._get_or_404(application_id)
        if application.user_id != actor.id:
            raise PermissionDeniedError("Only the applicant may cancel a leave application.")
        self._require_pending(application, LeaveStatus.CANCELLED)
        application.status = LeaveStatus.CANCELLED
        await self._session.commit()
        await self._repository.refresh(application)
        logger.info("Leave cancelled", extra={"application_id": application.id, "user_id": actor.id})
        return application


__all__ = ["LeaveService"]
