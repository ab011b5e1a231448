"""Hall query service: public read model composed from halls, pricing and media.

The listing is one aggregate query: ACTIVE halls left-joined to their active
products and those products' rates, grouped per hall, exposing the minimum
rate price as the "starting from" price. Price bounds filter on that
aggregate (HAVING), so halls without any priced rate drop out as soon as a
price bound is given.
"""

import logging
from decimal import Decimal

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from zalna.errors import NotFoundError
from zalna.models.enums import HallStatus, MediaType
from zalna.models.hall import Hall
from zalna.models.pricing import HallBlockedDate, HallProduct, HallProductRate
from zalna.schemas.hall import (
    HallSearchFilters,
    HallSortBy,
    PublicHallAddon,
    PublicHallCard,
    PublicHallDetail,
    PublicHallProduct,
    PublicHallRate,
)
from zalna.schemas.media import MediaResponse
from zalna.services.hall_service import HallService, hall_service
from zalna.services.media_service import HERO_TAG, MediaService, media_service
from zalna.services.pricing_service import PricingService, pricing_service

logger = logging.getLogger(__name__)


class HallQueryService:
    def __init__(self, halls: HallService, pricing: PricingService, media: MediaService):
        self.halls = halls
        self.pricing = pricing
        self.media = media

    async def get_public_hall_list(self, db: AsyncSession, filters: HallSearchFilters) -> dict:
        page, limit = filters.page, filters.limit

        min_price = func.min(HallProductRate.price)
        # Lexical minimum; not guaranteed to be the currency of the cheapest rate.
        min_currency = func.min(HallProductRate.currency)

        query = (
            select(Hall, min_price.label("min_price"), min_currency.label("min_currency"))
            .outerjoin(
                HallProduct,
                and_(HallProduct.hall_id == Hall.id, HallProduct.is_active.is_(True)),
            )
            .outerjoin(HallProductRate, HallProductRate.hall_product_id == HallProduct.id)
            .where(Hall.status == HallStatus.ACTIVE.value)
        )

        if filters.city:
            query = query.where(Hall.city == filters.city)
        if filters.is_premium is not None:
            query = query.where(Hall.is_premium == filters.is_premium)
        if filters.capacity_min is not None:
            query = query.where(Hall.capacity >= filters.capacity_min)
        if filters.capacity_max is not None:
            query = query.where(Hall.capacity <= filters.capacity_max)
        if filters.q:
            pattern = f"%{filters.q}%"
            query = query.where(or_(
                Hall.name.ilike(pattern),
                Hall.city.ilike(pattern),
                Hall.description.ilike(pattern),
                HallProduct.name.ilike(pattern),
            ))
        if filters.event_type:
            query = query.where(HallProduct.category == filters.event_type)
        if filters.available_on:
            blocked = (
                select(HallBlockedDate.id)
                .where(
                    HallBlockedDate.hall_id == Hall.id,
                    HallBlockedDate.start_date <= filters.available_on,
                    or_(
                        HallBlockedDate.end_date.is_(None),
                        HallBlockedDate.end_date >= filters.available_on,
                    ),
                )
                .exists()
            )
            query = query.where(~blocked)

        if filters.price_min is not None:
            query = query.having(min_price >= Decimal(str(filters.price_min)))
        if filters.price_max is not None:
            query = query.having(min_price <= Decimal(str(filters.price_max)))

        query = query.group_by(Hall.id)

        count_result = await db.execute(
            select(func.count()).select_from(query.subquery())
        )
        total = count_result.scalar() or 0

        query = query.order_by(*self._ordering(filters.sort_by, min_price))
        result = await db.execute(query.offset((page - 1) * limit).limit(limit))

        cards = []
        for hall, price, currency in result.all():
            hero = await self.media.get_primary_media_for_hall(db, hall.id, HERO_TAG)
            starting_from = float(price) if price is not None else None
            cards.append(PublicHallCard(
                id=hall.id,
                name=hall.name,
                slug=hall.slug,
                city=hall.city,
                capacity=hall.capacity,
                is_premium=hall.is_premium,
                hero_image_url=hero.file_url if hero else None,
                starting_from_price=starting_from,
                starting_from_currency=currency if starting_from is not None else None,
            ))

        return {"data": cards, "page": page, "limit": limit, "total": total}

    def _ordering(self, sort_by: str, min_price) -> list:
        if sort_by == HallSortBy.PRICE_ASC.value:
            return [min_price.asc().nulls_last()]
        if sort_by == HallSortBy.PRICE_DESC.value:
            return [min_price.desc().nulls_last()]
        if sort_by == HallSortBy.CAPACITY_DESC.value:
            return [Hall.capacity.desc().nulls_last()]
        if sort_by == HallSortBy.RELEVANCE.value:
            return [Hall.is_premium.desc(), min_price.asc().nulls_last(), Hall.created_at.desc()]
        return [Hall.is_premium.desc(), Hall.created_at.desc()]

    async def get_public_hall_detail(self, db: AsyncSession, slug: str) -> PublicHallDetail:
        hall = await self.halls.get_hall_by_slug(db, slug)
        # Non-public halls are reported as missing, not forbidden.
        if hall.status != HallStatus.ACTIVE.value:
            raise NotFoundError("Hall not found")

        hero = await self.media.get_primary_media_for_hall(db, hall.id, HERO_TAG)
        gallery = await self.media.list_media_for_hall(db, hall.id, media_type=MediaType.IMAGE.value)
        products = await self.pricing.get_active_products_for_hall(db, hall.id)
        addons = await self.pricing.list_addons(db, hall.id, is_active=True)

        return PublicHallDetail(
            id=hall.id,
            name=hall.name,
            slug=hall.slug,
            address=hall.address,
            city=hall.city,
            capacity=hall.capacity,
            description=hall.description,
            cancellation_policy=hall.cancellation_policy,
            is_premium=hall.is_premium,
            hero_image_url=hero.file_url if hero else None,
            gallery=[MediaResponse.model_validate(m) for m in gallery],
            products=[
                PublicHallProduct(
                    id=p.id,
                    name=p.name,
                    category=p.category,
                    description=p.description,
                    is_primary=p.is_primary,
                    rates=[PublicHallRate.model_validate(r) for r in p.rates],
                )
                for p in products
            ],
            addons=[PublicHallAddon.model_validate(a) for a in addons],
        )


hall_query_service = HallQueryService(hall_service, pricing_service, media_service)
