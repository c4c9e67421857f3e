"""In-memory registries.

Nothing here survives a restart. All state lives in plain dicts owned by the
running process:

    RiddleRegistry   code    → Riddle
    ChatRegistry[V]  chat id → V   (one value per chat: play state, wizard step, ...)
    ChatLocks        chat id → asyncio.Lock

Registry methods never await, so each call is atomic on the event loop. A
read-modify-write that spans an await (feeding input to a riddle delivers
messages) must run under the chat's lock from ChatLocks.
"""

from __future__ import annotations

import asyncio
import logging
import random
import string
import weakref
from dataclasses import dataclass
from typing import Generic, TypeVar

from riddler.definition import RiddleDefinition
from riddler.errors import RiddleExistsError

logger = logging.getLogger(__name__)

V = TypeVar("V")

RANDOM_CODE_LENGTH = 10
_CODE_ALPHABET = string.ascii_letters + string.digits


@dataclass(frozen=True)
class Riddle:
    code: str
    name: str
    description: str
    creator: int  # Telegram user id of the author
    definition: RiddleDefinition


def random_code(length: int = RANDOM_CODE_LENGTH) -> str:
    return "".join(random.choices(_CODE_ALPHABET, k=length))


class RiddleRegistry:
    def __init__(self) -> None:
        self._riddles: dict[str, Riddle] = {}

    def __contains__(self, code: str) -> bool:
        return code in self._riddles

    def __len__(self) -> int:
        return len(self._riddles)

    def get(self, code: str) -> Riddle | None:
        return self._riddles.get(code)

    def list_riddles(self) -> list[Riddle]:
        return list(self._riddles.values())

    def add(
        self,
        *,
        code: str | None,
        name: str,
        description: str,
        creator: int,
        definition: RiddleDefinition,
    ) -> Riddle:
        """Register a riddle. A None code picks a fresh random one.

        Raises RiddleExistsError if an explicit code is already taken.
        """
        if code is None:
            code = random_code()
            while code in self._riddles:
                code = random_code()
        elif code in self._riddles:
            raise RiddleExistsError(f"Riddle with code {code!r} already exists")

        riddle = Riddle(
            code=code, name=name, description=description,
            creator=creator, definition=definition,
        )
        self._riddles[code] = riddle
        logger.info("riddle created code=%s creator=%s", code, creator)
        return riddle

    def remove(self, code: str) -> bool:
        """Drop a riddle. Returns False if there was nothing to drop."""
        if self._riddles.pop(code, None) is None:
            return False
        logger.info("riddle removed code=%s", code)
        return True


class ChatRegistry(Generic[V]):
    """One value per chat id."""

    def __init__(self) -> None:
        self._data: dict[int, V] = {}

    def get(self, chat_id: int) -> V | None:
        return self._data.get(chat_id)

    def set(self, chat_id: int, value: V) -> None:
        self._data[chat_id] = value

    def clear(self, chat_id: int) -> None:
        self._data.pop(chat_id, None)

    def __contains__(self, chat_id: int) -> bool:
        return chat_id in self._data

    def __len__(self) -> int:
        return len(self._data)


class ChatLocks:
    """Per-chat mutual exclusion.

    Calling with the same chat id returns the same lock for as long as anyone
    holds or waits on it; different chats never share one. Entries are weak,
    so a chat's lock is dropped once nobody references it.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def __call__(self, chat_id: int) -> asyncio.Lock:
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[chat_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)
