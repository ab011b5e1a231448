"""Supabase adapter: bearer-token verification, password sign-in and object storage over REST."""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from zalna.config import settings

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Token rejected or sign-in refused by the identity provider."""


class StorageError(Exception):
    """Bucket or object operation failed at the storage provider."""


@dataclass
class IdentityUser:
    id: str
    email: str | None = None
    phone: str | None = None
    user_metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict) -> "IdentityUser":
        return cls(
            id=payload["id"],
            email=payload.get("email") or None,
            phone=payload.get("phone") or None,
            user_metadata=payload.get("user_metadata") or {},
        )


@dataclass
class AuthSession:
    access_token: str
    refresh_token: str | None
    expires_in: int | None
    expires_at: int | None
    token_type: str
    user: IdentityUser


class SupabaseClient:
    """Adapter for the Supabase Auth and Storage REST APIs."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._client: httpx.AsyncClient | None = None
        self._transport = transport
        self._known_buckets: set[str] = set()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=settings.supabase_url.rstrip("/"),
                timeout=settings.http_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    def _service_headers(self) -> dict[str, str]:
        return {
            "apikey": settings.supabase_service_key,
            "Authorization": f"Bearer {settings.supabase_service_key}",
        }

    # ─── Auth ───

    async def verify_access_token(self, token: str) -> IdentityUser:
        client = await self._get_client()
        try:
            resp = await client.get(
                "/auth/v1/user",
                headers={
                    "apikey": settings.supabase_anon_key or settings.supabase_service_key,
                    "Authorization": f"Bearer {token}",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Identity provider unreachable: {e}")
            raise IdentityProviderError("Identity provider unavailable") from e

        if resp.status_code != 200:
            raise IdentityProviderError("Invalid or expired token")
        return IdentityUser.from_payload(resp.json())

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        client = await self._get_client()
        try:
            resp = await client.post(
                "/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers={"apikey": settings.supabase_anon_key or settings.supabase_service_key},
            )
        except httpx.HTTPError as e:
            logger.error(f"Identity provider unreachable: {e}")
            raise IdentityProviderError("Identity provider unavailable") from e

        if resp.status_code != 200:
            logger.info(f"Password sign-in refused for {email}: HTTP {resp.status_code}")
            raise IdentityProviderError("Invalid email or password")

        data = resp.json()
        if not data.get("access_token") or not data.get("user"):
            raise IdentityProviderError("Invalid email or password")

        return AuthSession(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
            expires_at=data.get("expires_at"),
            token_type=data.get("token_type", "bearer"),
            user=IdentityUser.from_payload(data["user"]),
        )

    # ─── Storage ───

    async def ensure_bucket(self, bucket: str) -> None:
        """Create the bucket as public when missing. Checked once per process."""
        if bucket in self._known_buckets:
            return

        client = await self._get_client()
        try:
            resp = await client.get(f"/storage/v1/bucket/{bucket}", headers=self._service_headers())
            if resp.status_code != 200:
                if not _is_not_found(resp):
                    raise StorageError(f"Could not inspect bucket '{bucket}': HTTP {resp.status_code}")
                created = await client.post(
                    "/storage/v1/bucket",
                    json={"id": bucket, "name": bucket, "public": True},
                    headers=self._service_headers(),
                )
                if created.status_code not in (200, 201):
                    raise StorageError(f"Could not create bucket '{bucket}': HTTP {created.status_code}")
                logger.info(f"Storage bucket '{bucket}' created")
        except httpx.HTTPError as e:
            raise StorageError(f"Storage provider unreachable: {e}") from e

        self._known_buckets.add(bucket)

    async def upload_object(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        client = await self._get_client()
        headers = {
            **self._service_headers(),
            "Content-Type": content_type,
            "cache-control": "max-age=3600",
            "x-upsert": "false",
        }
        try:
            resp = await client.post(f"/storage/v1/object/{bucket}/{path}", content=content, headers=headers)
        except httpx.HTTPError as e:
            raise StorageError(f"Storage provider unreachable: {e}") from e

        if resp.status_code not in (200, 201):
            raise StorageError(f"Upload of '{path}' failed: HTTP {resp.status_code} {resp.text[:200]}")
        return path

    def public_url(self, bucket: str, path: str) -> str:
        return f"{settings.supabase_url.rstrip('/')}/storage/v1/object/public/{bucket}/{path}"

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


def _is_not_found(resp: httpx.Response) -> bool:
    if resp.status_code == 404:
        return True
    # Storage reports missing buckets as 400 with a "not found" message.
    return resp.status_code == 400 and "not found" in resp.text.lower()


supabase_client = SupabaseClient()
