import uuid
from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from zalna.models.enums import HallStatus
from zalna.schemas.media import MediaResponse


class HallCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str | None = None  # generated from name + city when omitted
    address: str | None = None
    city: str | None = None
    capacity: int | None = Field(None, ge=0)
    description: str | None = None
    cancellation_policy: str | None = None
    is_premium: bool = False
    status: HallStatus = HallStatus.DRAFT
    gerant_id: uuid.UUID | None = None

    model_config = {"use_enum_values": True, "validate_default": True}


class HostHallUpdate(BaseModel):
    """Fields a host may change on their own hall. Ownership is not editable here."""

    name: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = None
    address: str | None = None
    city: str | None = None
    capacity: int | None = Field(None, ge=0)
    description: str | None = None
    cancellation_policy: str | None = None
    is_premium: bool | None = None
    status: HallStatus | None = None

    model_config = {"use_enum_values": True}


class HallUpdate(HostHallUpdate):
    gerant_id: uuid.UUID | None = None


class HallResponse(BaseModel):
    id: uuid.UUID
    gerant_id: uuid.UUID | None = None
    name: str
    slug: str
    address: str | None = None
    city: str | None = None
    capacity: int | None = None
    description: str | None = None
    cancellation_policy: str | None = None
    is_premium: bool
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class HallFilters(BaseModel):
    status: HallStatus | None = None
    city: str | None = None
    is_premium: bool | None = None
    gerant_id: uuid.UUID | None = None
    page: int = 1
    limit: int = 20

    model_config = {"use_enum_values": True}


# ─── Public read model ───


class HallSortBy(str, Enum):
    RELEVANCE = "relevance"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    CAPACITY_DESC = "capacity_desc"
    FEATURED = "featured"


class HallSearchFilters(BaseModel):
    q: str | None = None
    city: str | None = None
    event_type: str | None = None  # matched against product category
    available_on: date | None = None  # excludes halls blocked on this day
    capacity_min: int | None = None
    capacity_max: int | None = None
    price_min: float | None = None
    price_max: float | None = None
    is_premium: bool | None = None
    sort_by: HallSortBy = HallSortBy.FEATURED
    page: int = 1
    limit: int = 20

    model_config = {"use_enum_values": True, "validate_default": True}


class PublicHallCard(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    city: str | None = None
    capacity: int | None = None
    is_premium: bool
    hero_image_url: str | None = None
    starting_from_price: float | None = None
    starting_from_currency: str | None = None


class PublicHallRate(BaseModel):
    id: uuid.UUID
    label: str
    currency: str
    price: float
    billing_unit: str
    min_hours: int | None = None
    max_hours: int | None = None
    extra_unit_price: float | None = None
    day_of_week_mask: str | None = None
    season_start: date | None = None
    season_end: date | None = None
    is_default: bool

    model_config = {"from_attributes": True}


class PublicHallProduct(BaseModel):
    id: uuid.UUID
    name: str
    category: str | None = None
    description: str | None = None
    is_primary: bool
    rates: list[PublicHallRate] = []


class PublicHallAddon(BaseModel):
    """Addon as shown to guests; the platform redevance stays internal."""

    id: uuid.UUID
    name: str
    description: str | None = None
    pricing_model: str
    currency: str
    unit_price: float
    pack_size: int | None = None
    is_active: bool

    model_config = {"from_attributes": True}


class PublicHallDetail(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    address: str | None = None
    city: str | None = None
    capacity: int | None = None
    description: str | None = None
    cancellation_policy: str | None = None
    is_premium: bool
    hero_image_url: str | None = None
    gallery: list[MediaResponse] = []
    products: list[PublicHallProduct] = []
    addons: list[PublicHallAddon] = []
