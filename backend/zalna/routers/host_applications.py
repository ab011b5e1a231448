import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from zalna.database import get_db
from zalna.dependencies import get_current_user, require_admin
from zalna.models.enums import HostApplicationStatus
from zalna.models.user import User
from zalna.schemas.common import Page
from zalna.schemas.host_application import (
    HostApplicationCreate,
    HostApplicationResponse,
    HostApplicationStatusUpdate,
)
from zalna.services.host_application_service import host_application_service

admin_router = APIRouter()
public_router = APIRouter()


@public_router.post("", status_code=201, response_model=HostApplicationResponse)
async def submit_application(
    req: HostApplicationCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Apply to list a hall. The caller becomes the applicant and future owner."""
    application = await host_application_service.create(db, req, applicant_user_id=user.id)
    return HostApplicationResponse.model_validate(application)


@admin_router.get("", response_model=Page[HostApplicationResponse])
async def list_applications(
    status: HostApplicationStatus | None = Query(None),
    city: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1),
    limit: int = Query(20),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    result = await host_application_service.list_applications(
        db,
        status=status.value if status else None,
        city=city,
        search=search,
        page=page,
        limit=limit,
    )
    return Page[HostApplicationResponse].model_validate(result, from_attributes=True)


@admin_router.get("/{application_id}", response_model=HostApplicationResponse)
async def get_application(
    application_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    application = await host_application_service.get_application(db, application_id)
    return HostApplicationResponse.model_validate(application)


@admin_router.patch("/{application_id}/status", response_model=HostApplicationResponse)
async def update_application_status(
    application_id: uuid.UUID,
    req: HostApplicationStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    application = await host_application_service.update_status(
        db,
        application_id,
        status=req.status,
        admin_notes=req.admin_notes,
        reviewed_by_user_id=admin.id,
    )
    return HostApplicationResponse.model_validate(application)
