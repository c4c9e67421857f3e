"""Routes one Telegram update to the admin or player handlers.

The chat's lock is held for the whole update: reading the chat's state,
running the riddle and writing the new state happen as one step, while
updates for other chats proceed independently.
"""

import logging

from backend import admin_commands, commands
from backend.state import BotState, Context
from backend.telegram import Update
from riddler.errors import DeliveryError

logger = logging.getLogger(__name__)


async def handle_update(state: BotState, update: Update) -> None:
    message = update.message
    if message is None or message.text is None:
        return

    ctx = Context(
        state=state,
        chat_id=message.chat.id,
        user_id=message.from_user.id if message.from_user else None,
        text=message.text,
    )

    async with state.locks(ctx.chat_id):
        try:
            if not await admin_commands.handle(ctx):
                await commands.handle(ctx)
        except DeliveryError as e:
            # The chat keeps its previous state; the user can send the input again.
            logger.warning("delivery failed chat_id=%s: %s", ctx.chat_id, e)
