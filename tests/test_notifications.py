"""Tests for outbound notifiers"""

from unittest.mock import MagicMock

import pytest

from propcare.notifications import LogNotifier, create_notifier
from propcare.notifications.twilio import TwilioWhatsAppNotifier, whatsapp_address


class TestCreateNotifier:

    def test_log(self):
        assert isinstance(create_notifier("log"), LogNotifier)

    def test_case_insensitive(self):
        assert isinstance(create_notifier("LOG"), LogNotifier)

    def test_twilio(self):
        notifier = create_notifier("twilio", account_sid="AC1", auth_token="tok", from_number="+441234567890")
        assert isinstance(notifier, TwilioWhatsAppNotifier)
        assert notifier.is_enabled()

    @pytest.mark.parametrize("provider", [None, ""])
    def test_no_provider(self, provider):
        assert create_notifier(provider) is None

    def test_unknown_provider(self):
        assert create_notifier("carrier-pigeon") is None


class TestLogNotifier:

    @pytest.mark.asyncio
    async def test_records_messages(self):
        notifier = LogNotifier()
        assert await notifier.send_message("447700900001", "Hello") is True
        assert notifier.sent == [("+447700900001", "Hello")]


class TestTwilioWhatsAppNotifier:

    @pytest.mark.parametrize("phone, expected", [
        ("+447700900001", "whatsapp:+447700900001"),
        ("447700900001", "whatsapp:+447700900001"),
        ("whatsapp:+447700900001", "whatsapp:+447700900001"),
    ])
    def test_whatsapp_address(self, phone, expected):
        assert whatsapp_address(phone) == expected

    def test_disabled_without_sender(self):
        assert not TwilioWhatsAppNotifier("AC1", "tok").is_enabled()

    @pytest.mark.asyncio
    async def test_disabled_does_not_send(self):
        notifier = TwilioWhatsAppNotifier("", "")
        assert await notifier.send_message("+447700900001", "Hi") is False

    @pytest.mark.asyncio
    async def test_send(self):
        notifier = TwilioWhatsAppNotifier("AC1", "tok", from_number="+441234567890")
        client = MagicMock()
        client.messages.create.return_value = MagicMock(sid="SM123")
        notifier._client = client

        assert await notifier.send_message("+447700900001", "Plumber booked") is True
        client.messages.create.assert_called_once_with(
            to="whatsapp:+447700900001",
            body="Plumber booked",
            from_="whatsapp:+441234567890",
        )

    @pytest.mark.asyncio
    async def test_messaging_service(self):
        notifier = TwilioWhatsAppNotifier("AC1", "tok", messaging_service_sid="MG1")
        client = MagicMock()
        notifier._client = client

        await notifier.send_message("+447700900001", "Hi")

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["messaging_service_sid"] == "MG1"
        assert "from_" not in kwargs

    @pytest.mark.asyncio
    async def test_api_failure_returns_false(self):
        notifier = TwilioWhatsAppNotifier("AC1", "tok", from_number="+441234567890")
        client = MagicMock()
        client.messages.create.side_effect = RuntimeError("rate limited")
        notifier._client = client

        assert await notifier.send_message("+447700900001", "Hi") is False
