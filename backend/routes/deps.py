from fastapi import Request

from backend.state import BotState


def get_state(request: Request) -> BotState:
    return request.app.state.riddler
