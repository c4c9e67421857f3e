"""FastAPI endpoints under /api.

Endpoint groups: health, Telegram webhook, read-only riddle listing.
"""

from fastapi import APIRouter

from .riddles import router as riddles_router
from .webhook import router as webhook_router

router = APIRouter()
router.include_router(webhook_router)
router.include_router(riddles_router)
