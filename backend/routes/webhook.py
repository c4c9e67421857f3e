"""Health check and Telegram webhook endpoints."""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException

from backend.dispatcher import handle_update
from backend.state import BotState
from backend.telegram import Update

from .deps import get_state

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.post("/webhook")
async def webhook(
    update: Update,
    state: BotState = Depends(get_state),
    x_telegram_bot_api_secret_token: str | None = Header(default=None),
):
    """Receive one update pushed by Telegram."""
    secret = state.settings.webhook_secret
    if secret and x_telegram_bot_api_secret_token != secret:
        logger.warning("Rejected webhook call for update %s: bad secret", update.update_id)
        raise HTTPException(403, "Invalid secret token")
    await handle_update(state, update)
    return {"ok": True}
