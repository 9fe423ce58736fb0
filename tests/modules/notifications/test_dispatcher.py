"""
Unit tests for the notification dispatcher.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from tti_admissions.core.config import Settings
from tti_admissions.modules.notifications.dispatcher import (
    Channel,
    NotificationDispatcher,
    OutboundMessage,
)


def _message(channel: Channel = Channel.EMAIL, recipients=("a@example.com",)) -> OutboundMessage:
    return OutboundMessage(channel=channel, recipients=recipients, subject="Subject", body="Body")


def _sender(result=True, error: Exception | None = None, delay: float = 0.0):
    calls = []

    async def send(message: OutboundMessage) -> bool:
        calls.append(message)
        if delay:
            await asyncio.sleep(delay)
        if error is not None:
            raise error
        return result

    send.calls = calls
    return send


class TestDispatch:
    """Tests for NotificationDispatcher.dispatch."""

    @pytest.mark.asyncio
    async def test_delivered(self):
        send = _sender()
        dispatcher = NotificationDispatcher({Channel.EMAIL: send})

        [result] = await dispatcher.dispatch([_message()])

        assert result.delivered
        assert not result.failed
        assert send.calls[0].subject == "Subject"

    @pytest.mark.asyncio
    async def test_unregistered_channel_is_skipped(self):
        dispatcher = NotificationDispatcher({Channel.EMAIL: _sender()})

        [result] = await dispatcher.dispatch([_message(Channel.SMS, ("+100",))])

        assert result.skipped
        assert not result.failed

    @pytest.mark.asyncio
    async def test_no_recipients_is_skipped(self):
        send = _sender()
        dispatcher = NotificationDispatcher({Channel.EMAIL: send})

        [result] = await dispatcher.dispatch([_message(recipients=())])

        assert result.skipped
        assert send.calls == []

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self):
        """One failing channel doesn't affect the others."""
        dispatcher = NotificationDispatcher(
            {
                Channel.EMAIL: _sender(error=ConnectionError("refused")),
                Channel.SMS: _sender(result=False),
                Channel.PUSH: _sender(),
            }
        )

        results = await dispatcher.dispatch(
            [
                _message(Channel.EMAIL),
                _message(Channel.SMS, ("+100",)),
                _message(Channel.PUSH, ("ExponentPushToken[x]",)),
            ]
        )

        assert [r.channel for r in results] == [Channel.EMAIL, Channel.SMS, Channel.PUSH]
        assert results[0].error == "refused"
        assert results[1].error == "provider did not accept the message"
        assert results[2].delivered

    @pytest.mark.asyncio
    async def test_timeout(self):
        dispatcher = NotificationDispatcher({Channel.EMAIL: _sender(delay=1.0)}, timeout_seconds=0.01)

        [result] = await dispatcher.dispatch([_message()])

        assert result.failed
        assert "timed out" in result.error

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await NotificationDispatcher({}).dispatch([]) == []


class TestFromSettings:
    """Channel registration from settings."""

    def test_email_only_by_default(self):
        dispatcher = NotificationDispatcher.from_settings(Settings())
        assert set(dispatcher.senders) == {Channel.EMAIL}

    @pytest.mark.asyncio
    async def test_email_uses_configured_sender(self):
        settings = Settings(email_from="TTI Admissions <admissions@tti.example>")
        dispatcher = NotificationDispatcher.from_settings(settings)

        with patch(
            "tti_admissions.modules.notifications.dispatcher.send_email",
            AsyncMock(return_value=True),
        ) as send:
            results = await dispatcher.dispatch([_message()])

        assert results[0].delivered is True
        send.assert_awaited_once_with(
            ["a@example.com"], "Subject", "Body", "TTI Admissions <admissions@tti.example>"
        )

    def test_sms_needs_full_configuration(self):
        partial = Settings(sms_enabled=True, twilio_account_sid="AC123")
        full = Settings(
            sms_enabled=True,
            twilio_account_sid="AC123",
            twilio_auth_token="secret",
            twilio_from_number="+15550000000",
            push_enabled=True,
            dispatch_timeout_seconds=2.5,
        )

        assert Channel.SMS not in NotificationDispatcher.from_settings(partial).senders

        dispatcher = NotificationDispatcher.from_settings(full)
        assert set(dispatcher.senders) == {Channel.EMAIL, Channel.SMS, Channel.PUSH}
        assert dispatcher.timeout_seconds == 2.5
