"""User service: mirrors identity-provider accounts into the local users table."""

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from zalna.models.enums import UserRole
from zalna.models.user import User
from zalna.services.supabase_client import IdentityUser

logger = logging.getLogger(__name__)


def _metadata_name(metadata: dict) -> str | None:
    return metadata.get("full_name") or metadata.get("name") or metadata.get("user_name") or None


def _metadata_avatar(metadata: dict) -> str | None:
    return metadata.get("avatar_url") or metadata.get("picture") or None


class UserService:

    async def find_matching_user(self, db: AsyncSession, identity: IdentityUser) -> User | None:
        """Match on provider id, then email, then phone (blank values are ignored)."""
        conditions = [User.id == uuid.UUID(identity.id)]
        if identity.email:
            conditions.append(User.email == identity.email)
        if identity.phone and identity.phone.strip():
            conditions.append(User.phone_number == identity.phone)

        result = await db.execute(select(User).where(or_(*conditions)))
        users = list(result.scalars().all())
        if not users:
            return None
        # Prefer the row whose id is the provider id when several match.
        for user in users:
            if str(user.id) == identity.id:
                return user
        return users[0]

    async def sync_user(
        self, db: AsyncSession, identity: IdentityUser, avatar_url: str | None = None
    ) -> User:
        """Return the local user for an identity, creating or refreshing it as needed.

        A concurrent first request for the same account can hit a unique
        violation on insert; that case is retried once by re-reading.
        """
        metadata = identity.user_metadata or {}
        avatar = avatar_url or _metadata_avatar(metadata)
        phone = identity.phone if identity.phone and identity.phone.strip() else None

        user = await self.find_matching_user(db, identity)
        if user is None:
            user = User(
                id=uuid.UUID(identity.id),
                email=identity.email,
                phone_number=phone,
                first_name=_metadata_name(metadata),
                avatar_url=avatar,
                role=UserRole.CLIENT.value,
                is_active=True,
            )
            db.add(user)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                user = await self.find_matching_user(db, identity)
                if user is None:
                    raise
                return user
            await db.refresh(user)
            logger.info(f"Provisioned user {user.id} ({user.email or user.phone_number})")
            return user

        changed = False
        if identity.email and user.email != identity.email:
            user.email = identity.email
            changed = True
        if phone and user.phone_number != phone:
            user.phone_number = phone
            changed = True
        if avatar and user.avatar_url != avatar:
            user.avatar_url = avatar
            changed = True
        if not user.first_name and _metadata_name(metadata):
            user.first_name = _metadata_name(metadata)
            changed = True

        if changed:
            try:
                await db.commit()
            except IntegrityError as e:
                # Provider email/phone already belongs to another local row; keep the stored values.
                await db.rollback()
                logger.warning(f"Could not sync contact details of user {identity.id}: {e.orig}")
            await db.refresh(user)
        return user


user_service = UserService()
