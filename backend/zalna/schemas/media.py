import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from zalna.models.enums import MediaType


class MediaCreate(BaseModel):
    hall_id: uuid.UUID
    file_url: str = Field(min_length=1, max_length=500)
    storage_provider: str = "LOCAL"
    original_filename: str | None = None
    mime_type: str | None = None
    size_bytes: int | None = Field(None, ge=0)
    width: int | None = None
    height: int | None = None
    media_type: MediaType = MediaType.IMAGE
    sort_order: int | None = None

    model_config = {"use_enum_values": True, "validate_default": True}


class MediaResponse(BaseModel):
    id: uuid.UUID
    hall_id: uuid.UUID
    storage_provider: str
    file_url: str
    original_filename: str | None = None
    mime_type: str | None = None
    size_bytes: int | None = None
    width: int | None = None
    height: int | None = None
    media_type: str
    sort_order: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class MediaTagResponse(BaseModel):
    id: uuid.UUID
    media_id: uuid.UUID
    tag_type_id: uuid.UUID
    is_primary: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class MediaUploadResponse(BaseModel):
    media: list[MediaResponse]
    tags: list[MediaTagResponse | None]
