"""
Push Notifications using Expo

Sends push notifications to Expo push tokens registered by the mobile app.
"""

import logging
import re
from typing import Any

import httpx

from tti_admissions.core.config import settings

logger = logging.getLogger(__name__)

EXPO_TOKEN_PATTERN = re.compile(r"^ExponentPushToken\[[^\]]+\]$")


def is_expo_push_token(value: str) -> bool:
    return bool(EXPO_TOKEN_PATTERN.match((value or "").strip()))


def unique_tokens(tokens: list[str]) -> list[str]:
    """Strip, de-duplicate and keep only valid Expo tokens, preserving order."""
    seen: dict[str, None] = {}
    for token in tokens:
        token = (token or "").strip()
        if token and is_expo_push_token(token):
            seen.setdefault(token, None)
    return list(seen)


async def send_push(
    tokens: list[str],
    title: str,
    body: str,
    data: dict[str, Any] | None = None,
    timeout: float = 10.0,
) -> bool:
    """
    Send a push notification to every valid token.

    Returns:
        True if Expo accepted the batch, False if there was nothing to send

    Raises:
        httpx.HTTPStatusError: If Expo rejects the request
    """
    valid_tokens = unique_tokens(tokens)
    if not valid_tokens or not title or not body:
        return False

    messages = [
        {
            "to": token,
            "sound": "default",
            "title": title,
            "body": body,
            "data": data or {},
            "priority": "high",
        }
        for token in valid_tokens
    ]

    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.post(
            settings.expo_push_url,
            json=messages,
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()

    logger.info(f"Push sent to {len(valid_tokens)} device(s)")
    return True
