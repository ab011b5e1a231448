"""Hall routers: admin management, host self-service and public discovery."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from zalna.config import settings
from zalna.database import get_db
from zalna.dependencies import get_current_user, require_admin
from zalna.models.enums import HallStatus
from zalna.models.user import User
from zalna.schemas.common import Page
from zalna.schemas.hall import (
    HallCreate,
    HallFilters,
    HallResponse,
    HallSearchFilters,
    HallSortBy,
    HallUpdate,
    HostHallUpdate,
    PublicHallCard,
    PublicHallDetail,
)
from zalna.services.hall_query_service import hall_query_service
from zalna.services.hall_service import hall_service

admin_router = APIRouter()
host_router = APIRouter()
public_router = APIRouter()


# ─── Admin ───


@admin_router.post("", status_code=201, response_model=HallResponse)
async def create_hall(
    req: HallCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    hall = await hall_service.create_hall(db, req)
    return HallResponse.model_validate(hall)


@admin_router.get("", response_model=Page[HallResponse])
async def list_halls(
    status: HallStatus | None = Query(None),
    city: str | None = Query(None),
    is_premium: bool | None = Query(None),
    page: int = Query(1),
    limit: int = Query(20),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    result = await hall_service.list_halls(db, HallFilters(
        status=status, city=city, is_premium=is_premium, page=page, limit=limit,
    ))
    return Page[HallResponse].model_validate(result, from_attributes=True)


@admin_router.get("/{hall_id}", response_model=HallResponse)
async def get_hall(
    hall_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return HallResponse.model_validate(await hall_service.get_hall_by_id(db, hall_id))


@admin_router.patch("/{hall_id}", response_model=HallResponse)
async def update_hall(
    hall_id: uuid.UUID,
    req: HallUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    hall = await hall_service.update_hall(db, hall_id, req)
    return HallResponse.model_validate(hall)


# ─── Host (own halls only) ───


async def _get_owned_hall(db: AsyncSession, hall_id: uuid.UUID, user: User):
    hall = await hall_service.get_hall_by_id(db, hall_id)
    if hall.gerant_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not have access to this hall")
    return hall


@host_router.get("", response_model=Page[HallResponse])
async def list_my_halls(
    status: HallStatus | None = Query(None),
    city: str | None = Query(None),
    is_premium: bool | None = Query(None),
    page: int = Query(1),
    limit: int = Query(20),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await hall_service.list_halls(db, HallFilters(
        status=status, city=city, is_premium=is_premium, gerant_id=user.id, page=page, limit=limit,
    ))
    return Page[HallResponse].model_validate(result, from_attributes=True)


@host_router.get("/{hall_id}", response_model=HallResponse)
async def get_my_hall(
    hall_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return HallResponse.model_validate(await _get_owned_hall(db, hall_id, user))


@host_router.patch("/{hall_id}", response_model=HallResponse)
async def update_my_hall(
    hall_id: uuid.UUID,
    req: HostHallUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await _get_owned_hall(db, hall_id, user)
    hall = await hall_service.update_hall(db, hall_id, req)
    return HallResponse.model_validate(hall)


# ─── Public ───


@public_router.get("", response_model=Page[PublicHallCard])
async def search_halls(
    q: str | None = Query(None),
    city: str | None = Query(None),
    event_type: str | None = Query(None),
    date: date | None = Query(None, description="Only halls not blocked on this day"),
    capacity_min: int | None = Query(None),
    capacity_max: int | None = Query(None),
    price_min: float | None = Query(None),
    price_max: float | None = Query(None),
    is_premium: bool | None = Query(None),
    sort_by: str | None = Query(None),
    page: int = Query(1),
    limit: int = Query(20),
    db: AsyncSession = Depends(get_db),
):
    allowed_sorts = {s.value for s in HallSortBy}
    filters = HallSearchFilters(
        q=q.strip() if q and q.strip() else None,
        city=city.strip() if city and city.strip() else None,
        event_type=event_type.strip() if event_type and event_type.strip() else None,
        available_on=date,
        capacity_min=capacity_min,
        capacity_max=capacity_max,
        price_min=price_min,
        price_max=price_max,
        is_premium=is_premium,
        sort_by=sort_by if sort_by in allowed_sorts else HallSortBy.FEATURED,
        page=max(page, 1),
        limit=min(max(limit, 1), settings.public_list_max_limit),
    )
    result = await hall_query_service.get_public_hall_list(db, filters)
    return Page[PublicHallCard](**result)


@public_router.get("/{slug}", response_model=PublicHallDetail)
async def get_public_hall(slug: str, db: AsyncSession = Depends(get_db)):
    return await hall_query_service.get_public_hall_detail(db, slug)
