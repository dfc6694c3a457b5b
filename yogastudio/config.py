"""
Runtime configuration.

All settings come from environment variables so the same install can point at
a test record store or the production studio without code changes.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from yogastudio.storage import load_session_cookie

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://ci04.ci.xist4c.de/rest"
DEFAULT_COURSES_APP_ID = "6899d0d3ca4dc3817f92802b"
DEFAULT_INSTRUCTORS_APP_ID = "6899d0d63370f71550c5aea6"
DEFAULT_PARTICIPANTS_APP_ID = "6899d0d7ab6cda2d36ea30f4"
DEFAULT_TIMEOUT = 30.0


def _env(name: str, default: str) -> str:
    value = (os.getenv(name) or "").strip()
    return value or default


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid YOGASTUDIO_TIMEOUT '%s'; using %s seconds.", raw, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    # 0 (or negative) means "wait forever", like requests' timeout=None
    return value if value > 0 else None


@dataclass
class Settings:
    base_url: str = DEFAULT_BASE_URL
    courses_app_id: str = DEFAULT_COURSES_APP_ID
    instructors_app_id: str = DEFAULT_INSTRUCTORS_APP_ID
    participants_app_id: str = DEFAULT_PARTICIPANTS_APP_ID
    session_cookie: Optional[str] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from YOGASTUDIO_* variables.

        The session cookie falls back to the one saved by `yogastudio login`.
        """
        cookie = (os.getenv("YOGASTUDIO_SESSION_COOKIE") or "").strip() or load_session_cookie()
        return cls(
            base_url=_env("YOGASTUDIO_API_BASE_URL", DEFAULT_BASE_URL),
            courses_app_id=_env("YOGASTUDIO_COURSES_APP_ID", DEFAULT_COURSES_APP_ID),
            instructors_app_id=_env("YOGASTUDIO_INSTRUCTORS_APP_ID", DEFAULT_INSTRUCTORS_APP_ID),
            participants_app_id=_env("YOGASTUDIO_PARTICIPANTS_APP_ID", DEFAULT_PARTICIPANTS_APP_ID),
            session_cookie=cookie,
            timeout=_parse_timeout(os.getenv("YOGASTUDIO_TIMEOUT")),
        )
