import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from zalna.models.enums import BillingUnit, PricingModel


# ─── Products ───


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    category: str | None = None
    description: str | None = None
    is_primary: bool = False
    is_active: bool = True


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=150)
    category: str | None = None
    description: str | None = None
    is_primary: bool | None = None
    is_active: bool | None = None


class ProductResponse(BaseModel):
    id: uuid.UUID
    hall_id: uuid.UUID
    name: str
    category: str | None = None
    description: str | None = None
    is_primary: bool
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


# ─── Rates ───


class RateCreate(BaseModel):
    label: str = Field(min_length=1, max_length=150)
    currency: str = Field("USD", max_length=10)
    price: float = Field(ge=0)
    billing_unit: BillingUnit
    min_hours: int | None = Field(None, ge=0)
    max_hours: int | None = Field(None, ge=0)
    extra_unit_price: float | None = Field(None, ge=0)
    day_of_week_mask: str | None = Field(None, max_length=50)
    season_start: date | None = None
    season_end: date | None = None
    is_default: bool = False

    model_config = {"use_enum_values": True}


class RateUpdate(BaseModel):
    label: str | None = Field(None, min_length=1, max_length=150)
    currency: str | None = Field(None, max_length=10)
    price: float | None = Field(None, ge=0)
    billing_unit: BillingUnit | None = None
    min_hours: int | None = Field(None, ge=0)
    max_hours: int | None = Field(None, ge=0)
    extra_unit_price: float | None = Field(None, ge=0)
    day_of_week_mask: str | None = Field(None, max_length=50)
    season_start: date | None = None
    season_end: date | None = None
    is_default: bool | None = None

    model_config = {"use_enum_values": True}


class RateResponse(BaseModel):
    id: uuid.UUID
    hall_product_id: uuid.UUID
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
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


# ─── Addons ───


class AddonCreate(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    description: str | None = None
    pricing_model: PricingModel
    currency: str = Field("USD", max_length=10)
    unit_price: float = Field(ge=0)
    pack_size: int | None = Field(None, ge=1)
    redevance_amount: float | None = Field(None, ge=0)
    is_active: bool = True

    model_config = {"use_enum_values": True}


class AddonUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=150)
    description: str | None = None
    pricing_model: PricingModel | None = None
    currency: str | None = Field(None, max_length=10)
    unit_price: float | None = Field(None, ge=0)
    pack_size: int | None = Field(None, ge=1)
    redevance_amount: float | None = Field(None, ge=0)
    is_active: bool | None = None

    model_config = {"use_enum_values": True}


class AddonResponse(BaseModel):
    id: uuid.UUID
    hall_id: uuid.UUID
    name: str
    description: str | None = None
    pricing_model: str
    currency: str
    unit_price: float
    pack_size: int | None = None
    redevance_amount: float | None = None
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


# ─── Blocked dates ───


class BlockedDateCreate(BaseModel):
    start_date: date
    end_date: date | None = None  # open-ended when omitted
    reason: str | None = None


class BlockedDateResponse(BaseModel):
    id: uuid.UUID
    hall_id: uuid.UUID
    start_date: date
    end_date: date | None = None
    reason: str | None = None
    created_by_user_id: uuid.UUID | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
