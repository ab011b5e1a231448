import uuid

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from zalna.database import get_db
from zalna.dependencies import require_admin
from zalna.models.enums import MediaType
from zalna.models.user import User
from zalna.schemas.media import MediaResponse, MediaTagResponse, MediaUploadResponse
from zalna.services.media_service import UploadedFile, media_service

admin_router = APIRouter()
public_router = APIRouter()


@admin_router.post("", status_code=201, response_model=MediaUploadResponse)
async def upload_hall_media(
    hall_id: uuid.UUID,
    file: list[UploadFile] = File(...),
    tag_name: str | None = Form(None),
    is_primary: bool = Form(False),
    sort_order: int | None = Form(None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    uploads = [
        UploadedFile(
            filename=f.filename or "upload",
            content_type=f.content_type or "application/octet-stream",
            content=await f.read(),
        )
        for f in file
    ]
    media, tags = await media_service.upload_media(
        db,
        hall_id,
        uploads,
        tag_name=tag_name.strip() if tag_name and tag_name.strip() else None,
        is_primary=is_primary,
        sort_order=sort_order,
    )
    return MediaUploadResponse(
        media=[MediaResponse.model_validate(m) for m in media],
        tags=[MediaTagResponse.model_validate(t) if t else None for t in tags],
    )


async def _list_media(
    db: AsyncSession, hall_id: uuid.UUID, tag_name: str | None, media_type: MediaType | None
) -> list[MediaResponse]:
    items = await media_service.list_media_for_hall(
        db, hall_id, tag_name=tag_name, media_type=media_type.value if media_type else None
    )
    return [MediaResponse.model_validate(m) for m in items]


@admin_router.get("", response_model=list[MediaResponse])
async def list_hall_media(
    hall_id: uuid.UUID,
    tag_name: str | None = Query(None),
    media_type: MediaType | None = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    return await _list_media(db, hall_id, tag_name, media_type)


@public_router.get("", response_model=list[MediaResponse])
async def list_public_hall_media(
    hall_id: uuid.UUID,
    tag_name: str | None = Query(None),
    media_type: MediaType | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await _list_media(db, hall_id, tag_name, media_type)
