"""Read-only riddle endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from backend.state import BotState
from riddler.definition import dump_document
from riddler.registry import Riddle

from .deps import get_state

router = APIRouter()


def _summary(riddle: Riddle) -> dict:
    return {
        "code": riddle.code,
        "name": riddle.name,
        "description": riddle.description,
        "creator": riddle.creator,
    }


@router.get("/riddles")
async def list_riddles(state: BotState = Depends(get_state)):
    """List all registered riddles."""
    return [_summary(r) for r in state.riddles.list_riddles()]


@router.get("/riddles/{code}")
async def get_riddle(code: str, state: BotState = Depends(get_state)):
    """Get one riddle together with its definition document."""
    riddle = state.riddles.get(code)
    if riddle is None:
        raise HTTPException(404, "Riddle not found")
    return {**_summary(riddle), "definition": dump_document(riddle.definition)}
