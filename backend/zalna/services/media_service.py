"""Hall media: metadata rows, tagging, and uploads to object storage."""

import asyncio
import logging
import os
import re
import secrets
import time
import uuid
from dataclasses import dataclass

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zalna.config import settings
from zalna.errors import ConflictError, NotFoundError, ValidationError
from zalna.models.enums import MediaType
from zalna.models.hall import Hall
from zalna.models.media import Media, MediaTag, MediaTagType
from zalna.schemas.media import MediaCreate
from zalna.services.hall_service import HallService, hall_service
from zalna.services.supabase_client import StorageError, SupabaseClient, supabase_client

logger = logging.getLogger(__name__)

HERO_TAG = "HERO"
STORAGE_PROVIDER = "SUPABASE"

_UNSAFE_FILENAME = re.compile(r"[^a-zA-Z0-9_-]+")


@dataclass
class UploadedFile:
    filename: str
    content_type: str
    content: bytes


def build_object_path(hall_id: uuid.UUID, filename: str) -> str:
    stem, ext = os.path.splitext(filename or "")
    safe_stem = _UNSAFE_FILENAME.sub("-", stem).strip("-")[:60] or "file"
    unique = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"
    return f"halls/{hall_id}/{safe_stem}-{unique}{ext.lower()}"


class MediaService:
    def __init__(self, halls: HallService, storage: SupabaseClient):
        self.halls = halls
        self.storage = storage

    async def create_media(self, db: AsyncSession, payload: MediaCreate) -> Media:
        """Persist metadata for a file that already lives in storage."""
        media = Media(**payload.model_dump())
        db.add(media)
        await db.commit()
        await db.refresh(media)
        return media

    async def tag_media_by_name(
        self, db: AsyncSession, media_id: uuid.UUID, tag_name: str, is_primary: bool = False
    ) -> MediaTag:
        """Attach a tag to a media item; a primary tag replaces the hall's previous primary of that type.

        Unsetting the previous primary and writing the new tag happen in one
        transaction while the owning hall row is locked, so concurrent primary
        requests for the same hall serialize.
        """
        media = await db.get(Media, media_id)
        if not media:
            raise NotFoundError("Media not found")

        tag_type = await self._find_or_create_tag_type(db, tag_name)

        if is_primary:
            await db.execute(select(Hall.id).where(Hall.id == media.hall_id).with_for_update())
            current_primaries = (
                select(MediaTag.id)
                .join(Media, Media.id == MediaTag.media_id)
                .where(
                    Media.hall_id == media.hall_id,
                    MediaTag.tag_type_id == tag_type.id,
                    MediaTag.is_primary.is_(True),
                )
            )
            await db.execute(
                update(MediaTag)
                .where(MediaTag.id.in_(current_primaries))
                .values(is_primary=False)
                .execution_options(synchronize_session="fetch")
            )

        result = await db.execute(
            select(MediaTag).where(MediaTag.media_id == media.id, MediaTag.tag_type_id == tag_type.id)
        )
        tag = result.scalar_one_or_none()
        if tag:
            tag.is_primary = is_primary
        else:
            tag = MediaTag(media_id=media.id, tag_type_id=tag_type.id, is_primary=is_primary)
            db.add(tag)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Media {media_id} is already tagged '{tag_name}'")
        await db.refresh(tag)
        return tag

    async def _find_or_create_tag_type(self, db: AsyncSession, tag_name: str) -> MediaTagType:
        name = (tag_name or "").strip()
        if not name:
            raise ValidationError("tag_name is required")

        tag_type = await self._get_tag_type(db, name)
        if tag_type:
            return tag_type

        tag_type = MediaTagType(name=name)
        try:
            async with db.begin_nested():
                db.add(tag_type)
        except IntegrityError:
            # Created concurrently under some casing of the same name.
            tag_type = await self._get_tag_type(db, name)
            if tag_type is None:
                raise
            return tag_type
        logger.info(f"Media tag type '{name}' created")
        return tag_type

    async def _get_tag_type(self, db: AsyncSession, name: str) -> MediaTagType | None:
        result = await db.execute(
            select(MediaTagType).where(func.lower(MediaTagType.name) == name.lower())
        )
        return result.scalar_one_or_none()

    async def list_media_for_hall(
        self,
        db: AsyncSession,
        hall_id: uuid.UUID,
        tag_name: str | None = None,
        media_type: str | None = None,
    ) -> list[Media]:
        query = select(Media).where(Media.hall_id == hall_id)
        if tag_name:
            query = (
                query.join(MediaTag, MediaTag.media_id == Media.id)
                .join(MediaTagType, MediaTagType.id == MediaTag.tag_type_id)
                .where(func.lower(MediaTagType.name) == tag_name.strip().lower())
            )
        if media_type:
            query = query.where(Media.media_type == media_type)

        result = await db.execute(
            query.order_by(Media.sort_order.asc().nulls_last(), Media.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_primary_media_for_hall(
        self, db: AsyncSession, hall_id: uuid.UUID, tag_name: str = HERO_TAG
    ) -> Media | None:
        result = await db.execute(
            select(Media)
            .join(MediaTag, MediaTag.media_id == Media.id)
            .join(MediaTagType, MediaTagType.id == MediaTag.tag_type_id)
            .where(
                Media.hall_id == hall_id,
                func.lower(MediaTagType.name) == tag_name.lower(),
                MediaTag.is_primary.is_(True),
            )
            .order_by(Media.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def upload_media(
        self,
        db: AsyncSession,
        hall_id: uuid.UUID,
        files: list[UploadedFile],
        tag_name: str | None = None,
        is_primary: bool = False,
        sort_order: int | None = None,
    ) -> tuple[list[Media], list[MediaTag | None]]:
        """Push images to storage, then record them. Only the first file may become primary."""
        if not files:
            raise ValidationError("At least one file is required")
        for f in files:
            if not (f.content_type or "").startswith("image/"):
                raise ValidationError(f"Only image uploads are allowed ('{f.filename}' is {f.content_type})")
            if len(f.content) > settings.media_max_upload_bytes:
                raise ValidationError(f"'{f.filename}' exceeds the {settings.media_max_upload_bytes} byte limit")

        await self.halls.get_hall_by_id(db, hall_id)

        bucket = settings.supabase_storage_bucket
        paths = [build_object_path(hall_id, f.filename) for f in files]
        try:
            await self.storage.ensure_bucket(bucket)
            await asyncio.gather(*(
                self.storage.upload_object(bucket, path, f.content, f.content_type)
                for path, f in zip(paths, files)
            ))
        except StorageError as e:
            logger.error(f"Media upload for hall {hall_id} failed: {e}")
            raise ValidationError(f"Upload failed: {e}")

        created: list[Media] = []
        tags: list[MediaTag | None] = []
        for index, (path, f) in enumerate(zip(paths, files)):
            media = await self.create_media(db, MediaCreate(
                hall_id=hall_id,
                file_url=self.storage.public_url(bucket, path),
                storage_provider=STORAGE_PROVIDER,
                original_filename=f.filename,
                mime_type=f.content_type,
                size_bytes=len(f.content),
                media_type=MediaType.IMAGE,
                sort_order=sort_order,
            ))
            created.append(media)
            if tag_name:
                tags.append(await self.tag_media_by_name(
                    db, media.id, tag_name, is_primary=is_primary and index == 0
                ))
            else:
                tags.append(None)

        logger.info(f"Uploaded {len(created)} media file(s) for hall {hall_id}")
        return created, tags


media_service = MediaService(hall_service, supabase_client)
