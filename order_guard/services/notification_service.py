"""Email notification helpers for order-block events."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr
from typing import Iterable, List, Optional, Sequence

from order_guard.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class EmailNotificationService:
    """Lightweight SMTP helper for block/unblock notifications."""

    def __init__(self, settings: Settings):
        self._settings = settings

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def send_block_alert(
        self,
        *,
        product_id: str,
        platform: str,
        reason: str,
        block_type: str,
        available_quantity: Optional[int] = None,
        auto_unblock_date: Optional[str] = None,
        notes: Optional[str] = None,
        recipients: Optional[Sequence[str]] = None,
    ) -> bool:
        """Send an "orders blocked" email.

        Args:
            product_id: Product whose orders are now blocked.
            platform: Sales platform the block applies to.
            reason: Display reason (custom text for custom blocks).
            block_type: manual, automatic or scheduled.
            recipients: Override the default notification list.
        """
        lines: List[str] = [
            f"Product: {product_id}",
            f"Platform: {platform}",
            f"Reason: {reason}",
            f"Block type: {block_type}",
        ]
        if available_quantity is not None:
            lines.append(f"Available quantity: {available_quantity}")
        if auto_unblock_date:
            lines.append(f"Expected to lift: {auto_unblock_date}")
        if notes:
            lines.append(f"Notes: {notes}")

        subject = f"Orders blocked: {product_id} on {platform}"
        return await self._send(subject, lines, recipients)

    async def send_unblock_alert(
        self,
        *,
        product_id: str,
        platform: str,
        reason: Optional[str] = None,
        recipients: Optional[Sequence[str]] = None,
    ) -> bool:
        lines: List[str] = [
            f"Product: {product_id}",
            f"Platform: {platform}",
        ]
        if reason:
            lines.append(f"Reason: {reason}")

        subject = f"Orders unblocked: {product_id} on {platform}"
        return await self._send(subject, lines, recipients)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _send(self, subject: str, lines: List[str], recipients: Optional[Sequence[str]]) -> bool:
        if not self._ready():
            logger.warning("SMTP configuration incomplete; '%s' email skipped", subject)
            return False

        to_addresses = self._resolve_recipients(recipients)
        if not to_addresses:
            logger.warning("No recipients configured for '%s'; skipping email", subject)
            return False

        lines = lines + ["\nSent automatically by Order Guard"]
        body_text = "\n".join(lines)
        body_html = "".join(f"<p>{line}</p>" for line in lines)

        message = self._build_message(subject, to_addresses, body_text, body_html)
        return await self._dispatch(message)

    def _ready(self) -> bool:
        settings = self._settings
        return bool(settings.SMTP_HOST and settings.SMTP_USERNAME and settings.SMTP_PASSWORD)

    def _resolve_recipients(self, override: Optional[Sequence[str]]) -> List[str]:
        recipients: Iterable[str] = override if override else self._settings.NOTIFICATION_EMAILS
        return [email.strip() for email in recipients if email]

    def _build_message(
        self,
        subject: str,
        to_addresses: Sequence[str],
        body_text: str,
        body_html: Optional[str] = None,
    ) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self._formatted_from_address
        message["To"] = ", ".join(sorted(set(to_addresses)))
        message.set_content(body_text)
        if body_html:
            message.add_alternative(body_html, subtype="html")
        return message

    @property
    def _formatted_from_address(self) -> str:
        from_email = self._settings.SMTP_FROM_EMAIL or self._settings.SMTP_USERNAME
        from_name = self._settings.SMTP_FROM_NAME or "Inventory Alerts"
        return formataddr((from_name, from_email))

    async def _dispatch(self, message: EmailMessage) -> bool:
        try:
            await asyncio.to_thread(self._send_sync, message)
            logger.info("'%s' email sent to %s", message["Subject"], message["To"])
            return True
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send '%s' email: %s", message["Subject"], exc, exc_info=True)
            return False

    def _send_sync(self, message: EmailMessage) -> None:
        settings = self._settings
        host = settings.SMTP_HOST
        port = settings.SMTP_PORT or (465 if settings.SMTP_USE_SSL else 587)
        timeout = settings.SMTP_TIMEOUT

        if settings.SMTP_USE_SSL:
            smtp = smtplib.SMTP_SSL(host=host, port=port, timeout=timeout)
        else:
            smtp = smtplib.SMTP(host=host, port=port, timeout=timeout)
        try:
            if settings.SMTP_USE_TLS and not settings.SMTP_USE_SSL:
                smtp.starttls()

            smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(message)
        finally:
            try:
                smtp.quit()
            except smtplib.SMTPException:
                smtp.close()


def get_email_notification_service() -> EmailNotificationService:
    """Factory for dependency injection."""

    settings = get_settings()
    return EmailNotificationService(settings)
