"""Hall service: hall CRUD, slug generation and owner-role synchronization."""

import logging
import re
import time
import unicodedata
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zalna.config import settings
from zalna.errors import ConflictError, NotFoundError, ValidationError
from zalna.models.enums import HallStatus, HallUserRoleType
from zalna.models.hall import Hall, HallUserRole
from zalna.schemas.hall import HallCreate, HallFilters, HostHallUpdate

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

# Columns that cannot be cleared through a partial update.
_NON_NULLABLE = {"name", "is_premium", "status"}


def slugify(value: str) -> str:
    """Lowercase, strip diacritics, collapse everything else to single hyphens."""
    decomposed = unicodedata.normalize("NFD", value.lower())
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("-", ascii_only).strip("-")


def _to_base36(number: int) -> str:
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def fallback_slug() -> str:
    return f"hall-{_to_base36(int(time.time() * 1000))}"


def resolve_paging(page: int | None, limit: int | None, max_limit: int | None = None) -> tuple[int, int]:
    """Page below 1 becomes 1; a limit outside [1, max_limit] falls back to the default."""
    max_limit = max_limit or settings.admin_list_max_limit
    page = page if page and page >= 1 else 1
    limit = limit if limit and 1 <= limit <= max_limit else settings.default_page_limit
    return page, limit


class HallService:
    """Owns the Hall aggregate: unique slugs and the single OWNER role row per hall."""

    async def generate_unique_slug(
        self, db: AsyncSession, base: str, exclude_id: uuid.UUID | None = None
    ) -> str:
        candidate = base
        suffix = 2
        while await self._slug_taken(db, candidate, exclude_id):
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    async def _slug_taken(self, db: AsyncSession, slug: str, exclude_id: uuid.UUID | None) -> bool:
        query = select(Hall.id).where(Hall.slug == slug)
        if exclude_id is not None:
            query = query.where(Hall.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def add_hall(
        self,
        db: AsyncSession,
        *,
        name: str,
        slug: str | None = None,
        address: str | None = None,
        city: str | None = None,
        capacity: int | None = None,
        description: str | None = None,
        cancellation_policy: str | None = None,
        is_premium: bool = False,
        status: str = HallStatus.DRAFT.value,
        gerant_id: uuid.UUID | None = None,
    ) -> Hall:
        """Stage a new hall (and its OWNER row) in the session without committing.

        Callers that need the hall to land together with other writes commit
        once themselves; `create_hall` is the standalone variant.
        """
        name = name.strip()
        if not name:
            raise ValidationError("name must not be blank")
        source = slug if slug and slug.strip() else " ".join(p for p in (name, city) if p)
        base = slugify(source) or fallback_slug()
        unique_slug = await self.generate_unique_slug(db, base)

        hall = Hall(
            id=uuid.uuid4(),
            name=name,
            slug=unique_slug,
            address=address,
            city=city,
            capacity=capacity,
            description=description,
            cancellation_policy=cancellation_policy,
            is_premium=is_premium,
            status=status,
            gerant_id=gerant_id,
        )
        db.add(hall)

        if gerant_id is not None:
            db.add(HallUserRole(hall=hall, user_id=gerant_id, role=HallUserRoleType.OWNER.value))
        return hall

    async def create_hall(self, db: AsyncSession, payload: HallCreate) -> Hall:
        hall = await self.add_hall(db, **payload.model_dump())
        await self._commit(db)
        await db.refresh(hall)
        logger.info(f"Hall created: {hall.slug} ({hall.id})")
        return hall

    async def update_hall(self, db: AsyncSession, hall_id: uuid.UUID, payload: HostHallUpdate) -> Hall:
        """Partial update. Slug and owner changes are applied in the same commit."""
        hall = await self.get_hall_by_id(db, hall_id)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("name") is not None:
            changes["name"] = changes["name"].strip()
            if not changes["name"]:
                raise ValidationError("name must not be blank")

        if "slug" in changes:
            requested = changes.pop("slug")
            if requested and requested.strip().lower() != hall.slug:
                base = slugify(requested) or fallback_slug()
                hall.slug = await self.generate_unique_slug(db, base, exclude_id=hall.id)

        if "gerant_id" in changes:
            new_owner = changes.pop("gerant_id")
            if new_owner != hall.gerant_id:
                await self._replace_owner(db, hall, new_owner)

        for field, value in changes.items():
            if value is None and field in _NON_NULLABLE:
                continue
            setattr(hall, field, value)

        await self._commit(db)
        await db.refresh(hall)
        return hall

    async def _replace_owner(self, db: AsyncSession, hall: Hall, new_owner: uuid.UUID | None) -> None:
        await db.execute(
            delete(HallUserRole).where(
                HallUserRole.hall_id == hall.id,
                HallUserRole.role == HallUserRoleType.OWNER.value,
            )
        )
        if new_owner is not None:
            db.add(HallUserRole(hall_id=hall.id, user_id=new_owner, role=HallUserRoleType.OWNER.value))
        logger.info(f"Hall {hall.id} owner: {hall.gerant_id} -> {new_owner}")
        hall.gerant_id = new_owner

    async def _commit(self, db: AsyncSession) -> None:
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Hall write rejected by constraint: {e.orig}")
            raise ConflictError("Hall conflicts with an existing record (slug or owner)")

    async def get_hall_by_id(self, db: AsyncSession, hall_id: uuid.UUID) -> Hall:
        hall = await db.get(Hall, hall_id)
        if not hall:
            raise NotFoundError("Hall not found")
        return hall

    async def get_hall_by_slug(self, db: AsyncSession, slug: str) -> Hall:
        result = await db.execute(select(Hall).where(Hall.slug == slugify(slug)))
        hall = result.scalar_one_or_none()
        if not hall:
            raise NotFoundError("Hall not found")
        return hall

    async def list_halls(self, db: AsyncSession, filters: HallFilters) -> dict:
        page, limit = resolve_paging(filters.page, filters.limit)

        query = select(Hall)
        if filters.status:
            query = query.where(Hall.status == filters.status)
        if filters.city:
            query = query.where(func.lower(Hall.city) == filters.city.strip().lower())
        if filters.is_premium is not None:
            query = query.where(Hall.is_premium == filters.is_premium)
        if filters.gerant_id:
            query = query.where(Hall.gerant_id == filters.gerant_id)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        result = await db.execute(
            query.order_by(Hall.created_at.desc()).offset((page - 1) * limit).limit(limit)
        )
        return {"data": list(result.scalars().all()), "page": page, "limit": limit, "total": total}

    async def list_owner_roles(self, db: AsyncSession, hall_id: uuid.UUID) -> list[HallUserRole]:
        result = await db.execute(
            select(HallUserRole).where(
                HallUserRole.hall_id == hall_id,
                HallUserRole.role == HallUserRoleType.OWNER.value,
            )
        )
        return list(result.scalars().all())


hall_service = HallService()
