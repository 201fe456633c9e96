"""Config module - settings and constants."""

from member_sync.config.settings import settings
from member_sync.config.constants import (
    CURRENT_CONGRESS,
    OPEN_START_DATE,
    OPEN_END_DATE,
    NO_PARTY_DATA,
)

__all__ = [
    "settings",
    "CURRENT_CONGRESS",
    "OPEN_START_DATE",
    "OPEN_END_DATE",
    "NO_PARTY_DATA",
]
