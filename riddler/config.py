"""Process-wide settings, read once at start-up.

Values come from the environment (a .env file is loaded by the launchers via
python-dotenv). The resulting Settings object is immutable and is passed
explicitly to whatever needs it.

    BOT_TOKEN          Telegram bot token
    TELEGRAM_API_URL   Bot API base URL (default https://api.telegram.org)
    ADMINS             comma-separated Telegram user ids allowed to manage riddles
    WEBHOOK_SECRET     secret token Telegram must echo on webhook calls (optional)
    REQUEST_TIMEOUT    HTTP timeout in seconds (default 30)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.telegram.org"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    bot_token: str = ""
    api_url: str = DEFAULT_API_URL
    admins: frozenset[int] = frozenset()
    webhook_secret: str = ""
    request_timeout: float = 30.0

    def is_admin(self, user_id: int | None) -> bool:
        return user_id is not None and user_id in self.admins


def parse_admins(raw: str) -> frozenset[int]:
    """Parse "1, 2,bogus,3" into {1, 2, 3}. Entries that are not integers are skipped."""
    admins: set[int] = set()
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            admins.add(int(part))
        except ValueError:
            logger.warning("Ignoring non-numeric admin id %r", part)
    return frozenset(admins)


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if env is None else env
    return Settings(
        bot_token=env.get("BOT_TOKEN", ""),
        api_url=env.get("TELEGRAM_API_URL", "") or DEFAULT_API_URL,
        admins=parse_admins(env.get("ADMINS", "")),
        webhook_secret=env.get("WEBHOOK_SECRET", ""),
        request_timeout=float(env.get("REQUEST_TIMEOUT", "") or 30.0),
    )
