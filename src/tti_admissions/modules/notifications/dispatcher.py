"""
Notification Dispatcher

Best-effort delivery of outward notifications (email, SMS, push). Each
message is an independent attempt: a failure, exception or timeout on one
is captured as a DeliveryResult and never affects the others or the
caller.
"""

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tti_admissions.core.config import Settings
from tti_admissions.core.email import send_email
from tti_admissions.core.push import send_push
from tti_admissions.core.sms import send_sms

logger = logging.getLogger(__name__)


class Channel(str, enum.Enum):
    EMAIL = "EMAIL"
    SMS = "SMS"
    PUSH = "PUSH"


@dataclass(frozen=True)
class OutboundMessage:
    """One message to send over one channel."""

    channel: Channel
    recipients: tuple[str, ...]
    subject: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one dispatch attempt."""

    channel: Channel
    recipients: tuple[str, ...]
    delivered: bool
    skipped: bool = False
    error: str | None = None

    @property
    def failed(self) -> bool:
        return not self.delivered and not self.skipped


# A sender delivers one message and returns True when the provider accepted it
Sender = Callable[[OutboundMessage], Awaitable[bool]]


def email_sender(from_email: str) -> Sender:
    """Email sender bound to one sender address."""

    async def send(message: OutboundMessage) -> bool:
        return await send_email(
            list(message.recipients), message.subject, message.body, from_email
        )

    return send


async def _send_sms(message: OutboundMessage) -> bool:
    return await send_sms(list(message.recipients), message.body)


async def _send_push(message: OutboundMessage) -> bool:
    return await send_push(list(message.recipients), message.subject, message.body, message.data)


class NotificationDispatcher:
    """
    Sends outbound messages through the registered channel senders.

    Args:
        senders: Channel -> sender. Channels without a sender are skipped.
        timeout_seconds: Upper bound for each individual attempt
    """

    def __init__(self, senders: Mapping[Channel, Sender], timeout_seconds: float = 5.0):
        self.senders = dict(senders)
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationDispatcher":
        """Register email always, SMS and push only when configured."""
        senders: dict[Channel, Sender] = {Channel.EMAIL: email_sender(settings.email_from)}
        if settings.sms_configured:
            senders[Channel.SMS] = _send_sms
        if settings.push_enabled:
            senders[Channel.PUSH] = _send_push
        return cls(senders, timeout_seconds=settings.dispatch_timeout_seconds)

    async def _attempt(self, message: OutboundMessage) -> DeliveryResult:
        sender = self.senders.get(message.channel)
        if sender is None or not message.recipients:
            return DeliveryResult(
                channel=message.channel,
                recipients=message.recipients,
                delivered=False,
                skipped=True,
            )

        try:
            delivered = await asyncio.wait_for(sender(message), timeout=self.timeout_seconds)
        except TimeoutError:
            logger.error(
                f"{message.channel.value} delivery timed out after {self.timeout_seconds}s: "
                f"{message.subject}"
            )
            return DeliveryResult(
                channel=message.channel,
                recipients=message.recipients,
                delivered=False,
                error=f"timed out after {self.timeout_seconds}s",
            )
        except Exception as e:
            logger.error(
                f"{message.channel.value} delivery failed: {message.subject}: {e}",
                exc_info=True,
            )
            return DeliveryResult(
                channel=message.channel,
                recipients=message.recipients,
                delivered=False,
                error=str(e) or e.__class__.__name__,
            )

        if not delivered:
            logger.error(f"{message.channel.value} provider did not accept: {message.subject}")
            return DeliveryResult(
                channel=message.channel,
                recipients=message.recipients,
                delivered=False,
                error="provider did not accept the message",
            )

        return DeliveryResult(
            channel=message.channel,
            recipients=message.recipients,
            delivered=True,
        )

    async def dispatch(self, messages: list[OutboundMessage]) -> list[DeliveryResult]:
        """
        Attempt every message concurrently.

        Returns:
            One DeliveryResult per message, in input order. Never raises.
        """
        if not messages:
            return []
        return list(await asyncio.gather(*(self._attempt(m) for m in messages)))
