"""SendGrid v3 client for transactional mail."""

import logging
from html import escape

import httpx

from zalna.config import settings
from zalna.models.enums import HostApplicationStatus

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    pass


class EmailService:
    """Sends status notifications to host applicants. Disabled when unconfigured."""

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._client: httpx.AsyncClient | None = None
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(settings.email_provider_api_key and settings.email_from)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=self._transport)
        return self._client

    async def send_email(self, to: str, subject: str, html: str, text: str | None = None) -> bool:
        """Returns False when skipped because the provider is not configured."""
        if not self.enabled:
            logger.warning(f"Email provider not configured; skipping '{subject}' to {to}")
            return False

        content = []
        if text:
            content.append({"type": "text/plain", "value": text})
        content.append({"type": "text/html", "value": html})

        client = await self._get_client()
        try:
            resp = await client.post(
                settings.email_api_url,
                json={
                    "personalizations": [{"to": [{"email": to}]}],
                    "from": {"email": settings.email_from},
                    "subject": subject,
                    "content": content,
                },
                headers={"Authorization": f"Bearer {settings.email_provider_api_key}"},
            )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Email provider unreachable: {e}") from e

        if resp.status_code >= 300:
            raise EmailDeliveryError(f"Email provider returned HTTP {resp.status_code}: {resp.text[:200]}")
        logger.info(f"Email '{subject}' sent to {to}")
        return True

    async def send_host_application_status_email(
        self,
        to: str | None,
        contact_name: str,
        hall_name: str,
        status: str,
    ) -> bool:
        if not to:
            logger.warning(f"No recipient for host application status email ({hall_name})")
            return False

        name = escape(contact_name or "there")
        hall = escape(hall_name)

        if status == HostApplicationStatus.UNDER_REVIEW.value:
            subject = f"Your application for {hall_name} is under review"
            text = (
                f"Hello {contact_name},\n\n"
                f"Thanks for applying to list {hall_name} on Zalna. "
                "Our team is now reviewing your application and will get back to you shortly.\n\n"
                "The Zalna Team"
            )
            html = (
                f"<p>Hello {name},</p>"
                f"<p>Thanks for applying to list <strong>{hall}</strong> on Zalna. "
                "Our team is now reviewing your application and will get back to you shortly.</p>"
                "<p>The Zalna Team</p>"
            )
        elif status == HostApplicationStatus.APPROVED.value:
            subject = f"{hall_name} has been approved on Zalna"
            text = (
                f"Hello {contact_name},\n\n"
                f"Good news: your application for {hall_name} has been approved. "
                f"Sign in to your host space to finish your listing: {settings.host_app_url}\n\n"
                "The Zalna Team"
            )
            html = (
                f"<p>Hello {name},</p>"
                f"<p>Good news: your application for <strong>{hall}</strong> has been approved.</p>"
                f'<p><a href="{escape(settings.host_app_url)}">Open your host space</a> to finish your listing.</p>'
                "<p>The Zalna Team</p>"
            )
        else:
            return False

        return await self.send_email(to, subject, html, text)

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


email_service = EmailService()
