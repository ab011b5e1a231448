"""Host application service: intake and admin review of venue listing requests."""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zalna.errors import ConflictError, NotFoundError
from zalna.models.enums import HallStatus, HostApplicationStatus
from zalna.models.host_application import HostApplication
from zalna.schemas.host_application import HostApplicationCreate
from zalna.services.email_service import EmailDeliveryError, EmailService, email_service
from zalna.services.hall_service import HallService, hall_service, resolve_paging

logger = logging.getLogger(__name__)

_FINAL_STATUSES = {HostApplicationStatus.APPROVED.value, HostApplicationStatus.REJECTED.value}
_NOTIFY_STATUSES = {HostApplicationStatus.UNDER_REVIEW.value, HostApplicationStatus.APPROVED.value}


class HostApplicationService:
    """Runs the NEW -> UNDER_REVIEW -> APPROVED/REJECTED workflow.

    Transitions are not checked for legality. Approving an application that
    is not already APPROVED creates a DRAFT hall owned by the applicant, so
    re-approving after a rejection creates another hall.
    """

    def __init__(self, halls: HallService, emails: EmailService):
        self.halls = halls
        self.emails = emails

    async def create(
        self, db: AsyncSession, payload: HostApplicationCreate, applicant_user_id: uuid.UUID | None
    ) -> HostApplication:
        fields = payload.model_dump()
        fields["hall_name"] = fields["hall_name"].strip()
        fields["contact_name"] = fields["contact_name"].strip()
        fields["contact_email"] = str(fields["contact_email"]).strip().lower()

        application = HostApplication(
            applicant_user_id=applicant_user_id,
            status=HostApplicationStatus.NEW.value,
            **fields,
        )
        db.add(application)
        await db.commit()
        await db.refresh(application)
        logger.info(f"Host application {application.id} received for '{application.hall_name}'")
        return application

    async def list_applications(
        self,
        db: AsyncSession,
        status: str | None = None,
        city: str | None = None,
        search: str | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> dict:
        page, limit = resolve_paging(page, limit)

        query = select(HostApplication)
        if status:
            query = query.where(HostApplication.status == status)
        if city:
            query = query.where(func.lower(HostApplication.city) == city.strip().lower())
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            query = query.where(or_(
                func.lower(HostApplication.hall_name).like(pattern),
                func.lower(HostApplication.contact_name).like(pattern),
                func.lower(HostApplication.contact_email).like(pattern),
            ))

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        result = await db.execute(
            query.order_by(HostApplication.created_at.desc()).offset((page - 1) * limit).limit(limit)
        )
        return {"data": list(result.scalars().all()), "page": page, "limit": limit, "total": total}

    async def get_application(self, db: AsyncSession, application_id: uuid.UUID) -> HostApplication:
        application = await db.get(HostApplication, application_id)
        if not application:
            raise NotFoundError("Host application not found")
        return application

    async def update_status(
        self,
        db: AsyncSession,
        application_id: uuid.UUID,
        status: str,
        admin_notes: str | None = None,
        reviewed_by_user_id: uuid.UUID | None = None,
    ) -> HostApplication:
        """Apply a review decision; the application change and any new hall commit together."""
        application = await self.get_application(db, application_id)
        previous_status = application.status

        application.status = status
        if admin_notes is not None:
            application.admin_notes = admin_notes
        if reviewed_by_user_id is not None:
            application.reviewed_by_user_id = reviewed_by_user_id
        if status in _FINAL_STATUSES and application.reviewed_at is None:
            application.reviewed_at = datetime.now(timezone.utc)

        just_approved = (
            status == HostApplicationStatus.APPROVED.value
            and previous_status != HostApplicationStatus.APPROVED.value
        )
        if just_approved and application.applicant_user_id:
            hall = await self.halls.add_hall(
                db,
                name=application.hall_name,
                address=application.address,
                city=application.city,
                capacity=application.capacity,
                description=application.description,
                is_premium=False,
                status=HallStatus.DRAFT.value,
                gerant_id=application.applicant_user_id,
            )
            logger.info(f"Application {application.id} approved; draft hall {hall.slug} created")
        elif just_approved:
            logger.warning(f"Application {application.id} approved without an applicant; no hall created")

        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Review of application {application_id} rejected by constraint: {e.orig}")
            raise ConflictError("Application could not be updated; the hall it creates conflicts with an existing one")
        await db.refresh(application)

        if status != previous_status and status in _NOTIFY_STATUSES:
            await self._notify(application)
        return application

    async def _notify(self, application: HostApplication) -> None:
        try:
            await self.emails.send_host_application_status_email(
                application.contact_email,
                application.contact_name,
                application.hall_name,
                application.status,
            )
        except EmailDeliveryError as e:
            logger.warning(f"Status email for application {application.id} not delivered: {e}")


host_application_service = HostApplicationService(hall_service, email_service)
