import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from zalna.models.enums import BillingUnit, HallStatus, UserRole
from zalna.models.user import User
from zalna.schemas.hall import HallCreate
from zalna.schemas.pricing import ProductCreate, RateCreate
from zalna.services.hall_service import hall_service
from zalna.services.pricing_service import pricing_service


async def make_user(db: AsyncSession, role: str = UserRole.CLIENT.value, email: str | None = None) -> User:
    user_id = uuid.uuid4()
    user = User(
        id=user_id,
        email=email or f"{user_id.hex[:8]}@example.com",
        first_name="Test",
        role=role,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_hall(db: AsyncSession, **fields):
    fields.setdefault("name", "Salle Test")
    fields.setdefault("city", "Kinshasa")
    return await hall_service.create_hall(db, HallCreate(**fields))


async def make_active_hall(db: AsyncSession, **fields):
    fields.setdefault("status", HallStatus.ACTIVE)
    return await make_hall(db, **fields)


async def add_priced_product(
    db: AsyncSession,
    hall_id,
    price: float,
    currency: str = "USD",
    name: str = "Wedding",
    category: str | None = "WEDDING",
    is_active: bool = True,
):
    product = await pricing_service.create_product(
        db, hall_id, ProductCreate(name=name, category=category, is_active=is_active)
    )
    rate = await pricing_service.create_rate(
        db, product.id, RateCreate(label="Standard", currency=currency, price=price, billing_unit=BillingUnit.EVENT)
    )
    return product, rate
