"""Long-polling runner: fetch updates with getUpdates and dispatch them.

Each update runs in its own task so slow chats never hold up others; the
per-chat lock in the dispatcher keeps a single chat's updates in order.
"""

import asyncio
import logging

from pydantic import ValidationError

from backend.dispatcher import handle_update
from backend.state import BotState
from backend.telegram import Update
from riddler.delivery import TelegramBot
from riddler.errors import DeliveryError

logger = logging.getLogger(__name__)

RETRY_DELAY = 5.0


async def run_polling(
    state: BotState,
    bot: TelegramBot,
    *,
    poll_timeout: int = 25,
    stop: asyncio.Event | None = None,
) -> None:
    """Poll until `stop` is set (or forever), then wait for in-flight updates."""
    offset: int | None = None
    tasks: set[asyncio.Task] = set()

    while stop is None or not stop.is_set():
        try:
            updates = await bot.get_updates(offset, timeout=poll_timeout)
        except DeliveryError as e:
            logger.warning("getUpdates failed: %s; retrying in %ss", e, RETRY_DELAY)
            await asyncio.sleep(RETRY_DELAY)
            continue

        for raw in updates:
            update_id = raw.get("update_id")
            if isinstance(update_id, int):
                offset = update_id + 1
            try:
                update = Update.model_validate(raw)
            except ValidationError as e:
                logger.warning("Skipping malformed update %s: %s", update_id, e)
                continue
            task = asyncio.create_task(_dispatch(state, update))
            tasks.add(task)
            task.add_done_callback(tasks.discard)

    if tasks:
        await asyncio.gather(*tasks)


async def _dispatch(state: BotState, update: Update) -> None:
    try:
        await handle_update(state, update)
    except Exception:
        logger.exception("Update %s failed", update.update_id)
