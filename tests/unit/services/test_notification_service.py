# tests/unit/services/test_notification_service.py
import smtplib

import pytest

from order_guard.core.config import Settings
from order_guard.services.notification_service import EmailNotificationService


def _settings(**overrides):
    values = dict(
        SMTP_HOST="smtp.example.com",
        SMTP_USERNAME="alerts@example.com",
        SMTP_PASSWORD="secret",
        NOTIFICATION_EMAILS="ops@example.com, buyer@example.com",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.mark.asyncio
async def test_block_alert_is_sent_to_configured_recipients(mocker):
    smtp_cls = mocker.patch("order_guard.services.notification_service.smtplib.SMTP")
    service = EmailNotificationService(_settings())

    sent = await service.send_block_alert(
        product_id="SKU-1", platform="shopify", reason="low_stock", block_type="automatic", available_quantity=3,
    )

    assert sent is True
    smtp = smtp_cls.return_value
    smtp.starttls.assert_called_once()
    smtp.login.assert_called_once_with("alerts@example.com", "secret")
    message = smtp.send_message.call_args.args[0]
    assert message["Subject"] == "Orders blocked: SKU-1 on shopify"
    assert message["To"] == "buyer@example.com, ops@example.com"
    assert "Available quantity: 3" in message.get_body(("plain",)).get_content()


@pytest.mark.asyncio
async def test_incomplete_smtp_config_skips_sending(mocker):
    smtp_cls = mocker.patch("order_guard.services.notification_service.smtplib.SMTP")
    service = EmailNotificationService(_settings(SMTP_HOST=""))

    assert await service.send_unblock_alert(product_id="SKU-1", platform="shopify") is False
    smtp_cls.assert_not_called()


@pytest.mark.asyncio
async def test_no_recipients_skips_sending(mocker):
    smtp_cls = mocker.patch("order_guard.services.notification_service.smtplib.SMTP")
    service = EmailNotificationService(_settings(NOTIFICATION_EMAILS=""))

    assert await service.send_unblock_alert(product_id="SKU-1", platform="shopify") is False
    smtp_cls.assert_not_called()


@pytest.mark.asyncio
async def test_smtp_failure_returns_false(mocker):
    smtp_cls = mocker.patch("order_guard.services.notification_service.smtplib.SMTP")
    smtp_cls.return_value.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
    service = EmailNotificationService(_settings())

    assert await service.send_unblock_alert(product_id="SKU-1", platform="shopify", reason="restocked") is False
    smtp_cls.return_value.quit.assert_called_once()


def test_notification_emails_parse_from_comma_list():
    assert _settings(NOTIFICATION_EMAILS=" a@x.com,, b@x.com ").NOTIFICATION_EMAILS == ["a@x.com", "b@x.com"]
