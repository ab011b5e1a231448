"""Pricing service: products, rates, addons and blocked dates of a hall.

Ownership of a child entity by a given hall is checked by the caller; this
service only resolves entities by id and persists them. Money arrives as
floats from the API layer and is stored as exact decimals.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from zalna.errors import NotFoundError
from zalna.models.pricing import HallAddon, HallBlockedDate, HallProduct, HallProductRate
from zalna.schemas.pricing import (
    AddonCreate,
    AddonUpdate,
    BlockedDateCreate,
    ProductCreate,
    ProductUpdate,
    RateCreate,
    RateUpdate,
)

logger = logging.getLogger(__name__)

_RATE_MONEY = {"price", "extra_unit_price"}
_ADDON_MONEY = {"unit_price", "redevance_amount"}

_PRODUCT_REQUIRED = {"name", "is_primary", "is_active"}
_RATE_REQUIRED = {"label", "currency", "price", "billing_unit", "is_default"}
_ADDON_REQUIRED = {"name", "pricing_model", "currency", "unit_price", "is_active"}


def to_money(value: float | Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value))


def _apply_changes(obj, changes: dict, required: set[str], money: set[str] = frozenset()) -> None:
    for field, value in changes.items():
        if value is None and field in required:
            continue
        setattr(obj, field, to_money(value) if field in money else value)


class PricingService:

    # ─── Products ───

    async def create_product(self, db: AsyncSession, hall_id: uuid.UUID, payload: ProductCreate) -> HallProduct:
        product = HallProduct(hall_id=hall_id, **payload.model_dump())
        db.add(product)
        await db.commit()
        await db.refresh(product)
        logger.info(f"Product '{product.name}' created for hall {hall_id}")
        return product

    async def update_product(self, db: AsyncSession, product_id: uuid.UUID, payload: ProductUpdate) -> HallProduct:
        product = await self.get_product(db, product_id)
        _apply_changes(product, payload.model_dump(exclude_unset=True), _PRODUCT_REQUIRED)
        await db.commit()
        await db.refresh(product)
        return product

    async def get_product(self, db: AsyncSession, product_id: uuid.UUID) -> HallProduct:
        product = await db.get(HallProduct, product_id)
        if not product:
            raise NotFoundError("Hall product not found")
        return product

    async def list_products(
        self, db: AsyncSession, hall_id: uuid.UUID, is_active: bool | None = None
    ) -> list[HallProduct]:
        query = select(HallProduct).where(HallProduct.hall_id == hall_id)
        if is_active is not None:
            query = query.where(HallProduct.is_active == is_active)
        result = await db.execute(
            query.order_by(HallProduct.is_primary.desc(), HallProduct.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_active_products_for_hall(self, db: AsyncSession, hall_id: uuid.UUID) -> list[HallProduct]:
        """Active products with their rates eagerly loaded, primary product first."""
        result = await db.execute(
            select(HallProduct)
            .where(HallProduct.hall_id == hall_id, HallProduct.is_active.is_(True))
            .options(selectinload(HallProduct.rates))
            .order_by(HallProduct.is_primary.desc(), HallProduct.created_at.asc())
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    # ─── Rates ───

    async def create_rate(self, db: AsyncSession, product_id: uuid.UUID, payload: RateCreate) -> HallProductRate:
        fields = payload.model_dump()
        for key in _RATE_MONEY:
            fields[key] = to_money(fields[key])
        rate = HallProductRate(hall_product_id=product_id, **fields)
        db.add(rate)
        await db.commit()
        await db.refresh(rate)
        return rate

    async def update_rate(self, db: AsyncSession, rate_id: uuid.UUID, payload: RateUpdate) -> HallProductRate:
        rate = await self.get_rate(db, rate_id)
        _apply_changes(rate, payload.model_dump(exclude_unset=True), _RATE_REQUIRED, _RATE_MONEY)
        await db.commit()
        await db.refresh(rate)
        return rate

    async def get_rate(self, db: AsyncSession, rate_id: uuid.UUID) -> HallProductRate:
        rate = await db.get(HallProductRate, rate_id)
        if not rate:
            raise NotFoundError("Hall product rate not found")
        return rate

    async def list_rates(self, db: AsyncSession, product_id: uuid.UUID) -> list[HallProductRate]:
        result = await db.execute(
            select(HallProductRate)
            .where(HallProductRate.hall_product_id == product_id)
            .order_by(HallProductRate.created_at.asc())
        )
        return list(result.scalars().all())

    # ─── Addons ───

    async def create_addon(self, db: AsyncSession, hall_id: uuid.UUID, payload: AddonCreate) -> HallAddon:
        fields = payload.model_dump()
        for key in _ADDON_MONEY:
            fields[key] = to_money(fields[key])
        addon = HallAddon(hall_id=hall_id, **fields)
        db.add(addon)
        await db.commit()
        await db.refresh(addon)
        return addon

    async def update_addon(self, db: AsyncSession, addon_id: uuid.UUID, payload: AddonUpdate) -> HallAddon:
        addon = await self.get_addon(db, addon_id)
        _apply_changes(addon, payload.model_dump(exclude_unset=True), _ADDON_REQUIRED, _ADDON_MONEY)
        await db.commit()
        await db.refresh(addon)
        return addon

    async def get_addon(self, db: AsyncSession, addon_id: uuid.UUID) -> HallAddon:
        addon = await db.get(HallAddon, addon_id)
        if not addon:
            raise NotFoundError("Hall addon not found")
        return addon

    async def list_addons(
        self, db: AsyncSession, hall_id: uuid.UUID, is_active: bool | None = None
    ) -> list[HallAddon]:
        query = select(HallAddon).where(HallAddon.hall_id == hall_id)
        if is_active is not None:
            query = query.where(HallAddon.is_active == is_active)
        result = await db.execute(query.order_by(HallAddon.created_at.asc()))
        return list(result.scalars().all())

    # ─── Blocked dates ───

    async def create_blocked_date(
        self,
        db: AsyncSession,
        hall_id: uuid.UUID,
        payload: BlockedDateCreate,
        created_by_user_id: uuid.UUID | None = None,
    ) -> HallBlockedDate:
        blocked = HallBlockedDate(
            hall_id=hall_id,
            created_by_user_id=created_by_user_id,
            **payload.model_dump(),
        )
        db.add(blocked)
        await db.commit()
        await db.refresh(blocked)
        logger.info(f"Hall {hall_id} blocked from {blocked.start_date} to {blocked.end_date or 'open end'}")
        return blocked

    async def get_blocked_date(self, db: AsyncSession, blocked_date_id: uuid.UUID) -> HallBlockedDate:
        blocked = await db.get(HallBlockedDate, blocked_date_id)
        if not blocked:
            raise NotFoundError("Blocked date not found")
        return blocked

    async def list_blocked_dates(
        self,
        db: AsyncSession,
        hall_id: uuid.UUID,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[HallBlockedDate]:
        query = select(HallBlockedDate).where(HallBlockedDate.hall_id == hall_id)
        if from_date:
            query = query.where(HallBlockedDate.start_date >= from_date)
        if to_date:
            query = query.where(HallBlockedDate.start_date <= to_date)
        result = await db.execute(query.order_by(HallBlockedDate.start_date.asc()))
        return list(result.scalars().all())

    async def delete_blocked_date(self, db: AsyncSession, blocked_date_id: uuid.UUID) -> None:
        blocked = await self.get_blocked_date(db, blocked_date_id)
        await db.delete(blocked)
        await db.commit()


pricing_service = PricingService()
