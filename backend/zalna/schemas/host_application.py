import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from zalna.models.enums import HostApplicationStatus


class HostApplicationCreate(BaseModel):
    hall_name: str = Field(min_length=1, max_length=255)
    address: str | None = None
    city: str | None = None
    capacity: int | None = Field(None, ge=0)
    description: str | None = None
    additional_details: str | None = None
    contact_name: str = Field(min_length=1, max_length=150)
    contact_email: EmailStr
    contact_phone: str | None = None
    contact_whatsapp: str | None = None


class HostApplicationStatusUpdate(BaseModel):
    status: HostApplicationStatus
    admin_notes: str | None = None

    model_config = {"use_enum_values": True}


class HostApplicationResponse(BaseModel):
    id: uuid.UUID
    applicant_user_id: uuid.UUID | None = None
    hall_name: str
    address: str | None = None
    city: str | None = None
    capacity: int | None = None
    description: str | None = None
    additional_details: str | None = None
    contact_name: str
    contact_email: str
    contact_phone: str | None = None
    contact_whatsapp: str | None = None
    status: str
    admin_notes: str | None = None
    reviewed_by_user_id: uuid.UUID | None = None
    reviewed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
