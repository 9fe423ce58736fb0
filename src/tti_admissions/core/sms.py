"""
SMS Service using Twilio

Sends plain-text SMS through the Twilio REST API. Only used when SMS is
enabled and all Twilio credentials are configured.
"""

import logging

import httpx

from tti_admissions.core.config import settings

logger = logging.getLogger(__name__)

TWILIO_API_BASE_URL = "https://api.twilio.com/2010-04-01"


async def send_sms(to_numbers: list[str], body: str, timeout: float = 10.0) -> bool:
    """
    Send the same SMS to each number.

    Args:
        to_numbers: Destination phone numbers (E.164)
        body: Message text
        timeout: HTTP timeout in seconds

    Returns:
        True if every message was accepted by Twilio

    Raises:
        httpx.HTTPStatusError: If Twilio rejects a message
    """
    if not settings.sms_configured:
        logger.warning("SMS is not configured - skipping send")
        return False

    numbers = [n.strip() for n in to_numbers if n and n.strip()]
    if not numbers or not body:
        return False

    endpoint = f"{TWILIO_API_BASE_URL}/Accounts/{settings.twilio_account_sid}/Messages.json"

    async with httpx.AsyncClient(timeout=timeout) as client:
        for number in numbers:
            response = await client.post(
                endpoint,
                data={"From": settings.twilio_from_number, "To": number, "Body": body},
                auth=(settings.twilio_account_sid, settings.twilio_auth_token),
            )
            response.raise_for_status()

    logger.info(f"SMS sent to {len(numbers)} recipient(s)")
    return True
