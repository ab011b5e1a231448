"""Admin pricing router: products, rates, addons and blocked dates nested under a hall."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from zalna.database import get_db
from zalna.dependencies import require_admin
from zalna.errors import ValidationError
from zalna.models.user import User
from zalna.schemas.pricing import (
    AddonCreate,
    AddonResponse,
    AddonUpdate,
    BlockedDateCreate,
    BlockedDateResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    RateCreate,
    RateResponse,
    RateUpdate,
)
from zalna.services.hall_service import hall_service
from zalna.services.pricing_service import pricing_service

router = APIRouter()


async def _product_of_hall(db: AsyncSession, hall_id: uuid.UUID, product_id: uuid.UUID):
    product = await pricing_service.get_product(db, product_id)
    if product.hall_id != hall_id:
        raise ValidationError("Product does not belong to this hall")
    return product


async def _rate_of_hall(db: AsyncSession, hall_id: uuid.UUID, product_id: uuid.UUID, rate_id: uuid.UUID):
    await _product_of_hall(db, hall_id, product_id)
    rate = await pricing_service.get_rate(db, rate_id)
    if rate.hall_product_id != product_id:
        raise ValidationError("Rate does not belong to this product")
    return rate


async def _addon_of_hall(db: AsyncSession, hall_id: uuid.UUID, addon_id: uuid.UUID):
    addon = await pricing_service.get_addon(db, addon_id)
    if addon.hall_id != hall_id:
        raise ValidationError("Addon does not belong to this hall")
    return addon


# ─── Products ───


@router.post("/products", status_code=201, response_model=ProductResponse)
async def create_product(
    hall_id: uuid.UUID,
    req: ProductCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await hall_service.get_hall_by_id(db, hall_id)
    product = await pricing_service.create_product(db, hall_id, req)
    return ProductResponse.model_validate(product)


@router.get("/products", response_model=list[ProductResponse])
async def list_products(
    hall_id: uuid.UUID,
    is_active: bool | None = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    products = await pricing_service.list_products(db, hall_id, is_active=is_active)
    return [ProductResponse.model_validate(p) for p in products]


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    hall_id: uuid.UUID,
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return ProductResponse.model_validate(await _product_of_hall(db, hall_id, product_id))


@router.patch("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    hall_id: uuid.UUID,
    product_id: uuid.UUID,
    req: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await _product_of_hall(db, hall_id, product_id)
    product = await pricing_service.update_product(db, product_id, req)
    return ProductResponse.model_validate(product)


# ─── Rates ───


@router.post("/products/{product_id}/rates", status_code=201, response_model=RateResponse)
async def create_rate(
    hall_id: uuid.UUID,
    product_id: uuid.UUID,
    req: RateCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await _product_of_hall(db, hall_id, product_id)
    rate = await pricing_service.create_rate(db, product_id, req)
    return RateResponse.model_validate(rate)


@router.get("/products/{product_id}/rates", response_model=list[RateResponse])
async def list_rates(
    hall_id: uuid.UUID,
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await _product_of_hall(db, hall_id, product_id)
    rates = await pricing_service.list_rates(db, product_id)
    return [RateResponse.model_validate(r) for r in rates]


@router.get("/products/{product_id}/rates/{rate_id}", response_model=RateResponse)
async def get_rate(
    hall_id: uuid.UUID,
    product_id: uuid.UUID,
    rate_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return RateResponse.model_validate(await _rate_of_hall(db, hall_id, product_id, rate_id))


@router.patch("/products/{product_id}/rates/{rate_id}", response_model=RateResponse)
async def update_rate(
    hall_id: uuid.UUID,
    product_id: uuid.UUID,
    rate_id: uuid.UUID,
    req: RateUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await _rate_of_hall(db, hall_id, product_id, rate_id)
    rate = await pricing_service.update_rate(db, rate_id, req)
    return RateResponse.model_validate(rate)


# ─── Addons ───


@router.post("/addons", status_code=201, response_model=AddonResponse)
async def create_addon(
    hall_id: uuid.UUID,
    req: AddonCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await hall_service.get_hall_by_id(db, hall_id)
    addon = await pricing_service.create_addon(db, hall_id, req)
    return AddonResponse.model_validate(addon)


@router.get("/addons", response_model=list[AddonResponse])
async def list_addons(
    hall_id: uuid.UUID,
    is_active: bool | None = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    addons = await pricing_service.list_addons(db, hall_id, is_active=is_active)
    return [AddonResponse.model_validate(a) for a in addons]


@router.get("/addons/{addon_id}", response_model=AddonResponse)
async def get_addon(
    hall_id: uuid.UUID,
    addon_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return AddonResponse.model_validate(await _addon_of_hall(db, hall_id, addon_id))


@router.patch("/addons/{addon_id}", response_model=AddonResponse)
async def update_addon(
    hall_id: uuid.UUID,
    addon_id: uuid.UUID,
    req: AddonUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    await _addon_of_hall(db, hall_id, addon_id)
    addon = await pricing_service.update_addon(db, addon_id, req)
    return AddonResponse.model_validate(addon)


# ─── Blocked dates ───


@router.post("/blocked-dates", status_code=201, response_model=BlockedDateResponse)
async def create_blocked_date(
    hall_id: uuid.UUID,
    req: BlockedDateCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    if req.end_date and req.end_date < req.start_date:
        raise ValidationError("end_date must not be before start_date")
    await hall_service.get_hall_by_id(db, hall_id)
    blocked = await pricing_service.create_blocked_date(db, hall_id, req, created_by_user_id=admin.id)
    return BlockedDateResponse.model_validate(blocked)


@router.get("/blocked-dates", response_model=list[BlockedDateResponse])
async def list_blocked_dates(
    hall_id: uuid.UUID,
    from_date: date | None = Query(None),
    to_date: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    blocked = await pricing_service.list_blocked_dates(db, hall_id, from_date=from_date, to_date=to_date)
    return [BlockedDateResponse.model_validate(b) for b in blocked]


@router.delete("/blocked-dates/{blocked_date_id}", status_code=204)
async def delete_blocked_date(
    hall_id: uuid.UUID,
    blocked_date_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    blocked = await pricing_service.get_blocked_date(db, blocked_date_id)
    if blocked.hall_id != hall_id:
        raise ValidationError("Blocked date does not belong to this hall")
    await pricing_service.delete_blocked_date(db, blocked_date_id)
    return Response(status_code=204)
