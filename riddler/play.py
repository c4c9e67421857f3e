"""Playing a riddle inside one chat.

Turn flow (play_turn):
  1. Read the chat's ChatState.
  2. Look up its riddle; a riddle removed mid-game ends the chat's session.
  3. Run the machine on the input, delivering actions through the applier.
  4. Accepting state → delete the ChatState (solved).
     Otherwise       → store the new ChatState.

A DeliveryError in step 3 propagates before step 4, so the chat keeps its
pre-transition state and the same input can be sent again.

Callers must hold the chat's lock (registry.ChatLocks) around play_turn so
that steps 1–4 are one critical section per chat.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from riddler import machine
from riddler.delivery import ActionApplier
from riddler.errors import RiddleNotFoundError
from riddler.models import ChatState
from riddler.registry import ChatRegistry, Riddle, RiddleRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResult:
    riddle: Riddle
    state: str
    solved: bool


def start_riddle(
    *,
    riddles: RiddleRegistry,
    sessions: ChatRegistry[ChatState],
    chat_id: int,
    code: str,
) -> Riddle:
    """Put the chat at the initial state of riddle `code`."""
    riddle = riddles.get(code)
    if riddle is None:
        raise RiddleNotFoundError(f"Riddle {code!r} not found")
    sessions.set(
        chat_id,
        ChatState(riddle_code=code, current_state=riddle.definition.initial_state),
    )
    logger.info("riddle started code=%s chat_id=%s", code, chat_id)
    return riddle


def stop_riddle(*, sessions: ChatRegistry[ChatState], chat_id: int) -> bool:
    """End the chat's riddle. Returns False if none was running."""
    if chat_id not in sessions:
        return False
    sessions.clear(chat_id)
    logger.info("riddle stopped chat_id=%s", chat_id)
    return True


async def play_turn(
    *,
    riddles: RiddleRegistry,
    sessions: ChatRegistry[ChatState],
    chat_id: int,
    text: str,
    applier: ActionApplier,
) -> TurnResult:
    """Feed one input to the chat's riddle and store where it lands."""
    chat = sessions.get(chat_id)
    if chat is None:
        raise RiddleNotFoundError(f"No riddle is running in chat {chat_id}")

    riddle = riddles.get(chat.riddle_code)
    if riddle is None:
        sessions.clear(chat_id)
        raise RiddleNotFoundError(f"Riddle {chat.riddle_code!r} not found")

    new_state = await machine.apply(riddle.definition, applier, chat.current_state, text)

    if machine.is_accepting(riddle.definition, new_state):
        sessions.clear(chat_id)
        logger.info("riddle solved code=%s chat_id=%s", riddle.code, chat_id)
        return TurnResult(riddle=riddle, state=new_state, solved=True)

    sessions.set(chat_id, chat.model_copy(update={"current_state": new_state}))
    return TurnResult(riddle=riddle, state=new_state, solved=False)
