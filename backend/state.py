"""Bot-wide state shared by every handler, and the per-update context.

All registries are in memory only. BotState is created once per process
(see backend.app.create_app and main.py) and handed to the dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

from pydantic import BaseModel

from riddler.config import Settings
from riddler.delivery import Messenger
from riddler.models import ChatState
from riddler.registry import ChatLocks, ChatRegistry, RiddleRegistry


# ---------------------------------------------------------------------------
# Admin wizards
# ---------------------------------------------------------------------------

class NewRiddleDraft(BaseModel):
    """A riddle being assembled step by step by an admin."""

    step: Literal["code", "name", "description", "definition"] = "code"
    code: str | None = None  # None = pick a random code on creation
    name: str = ""
    description: str = ""


class RemoveRiddlePending(BaseModel):
    """Waiting for the code of the riddle to remove."""


AdminDialogue = Union[NewRiddleDraft, RemoveRiddlePending]


# ---------------------------------------------------------------------------
# Shared state
# ---------------------------------------------------------------------------

@dataclass
class BotState:
    settings: Settings
    messenger: Messenger
    riddles: RiddleRegistry = field(default_factory=RiddleRegistry)
    sessions: ChatRegistry[ChatState] = field(default_factory=ChatRegistry)
    awaiting_code: ChatRegistry[bool] = field(default_factory=ChatRegistry)
    wizards: ChatRegistry[AdminDialogue] = field(default_factory=ChatRegistry)
    locks: ChatLocks = field(default_factory=ChatLocks)


@dataclass
class Context:
    """One inbound text message, as seen by the handlers."""

    state: BotState
    chat_id: int
    user_id: int | None
    text: str

    async def reply(self, text: str) -> None:
        await self.state.messenger.send_message(self.chat_id, text)
