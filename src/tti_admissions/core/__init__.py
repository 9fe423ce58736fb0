"""
Core - settings, database session, token verification, Redis and the
outbound channel clients shared by the feature modules.
"""

from tti_admissions.core.config import get_settings, settings
from tti_admissions.core.database import Base, get_db
from tti_admissions.core.security import create_access_token, decode_token

__all__ = [
    "Base",
    "create_access_token",
    "decode_token",
    "get_db",
    "get_settings",
    "settings",
]
