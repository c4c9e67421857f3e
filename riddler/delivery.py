"""Message delivery — the output boundary of the riddle machine.

The interpreter talks to an ActionApplier, which offers exactly two
operations:

    async def send_message(self, text: str) -> None: ...          # active chat
    async def send_to(self, chat_id: int, text: str) -> None: ... # any chat

ChatApplier implements it on top of a Messenger (anything that can send text
to a chat id) bound to the chat currently being served.

Two messengers are provided:

    TelegramBot        — real Bot API client over httpx.
    RecordingMessenger — keeps every (chat_id, text) pair in memory. Used by
                         tests to observe what a riddle says, and in what order.

Every transport failure surfaces as DeliveryError.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from riddler.errors import DeliveryError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------

class ActionApplier(Protocol):
    async def send_message(self, text: str) -> None: ...

    async def send_to(self, chat_id: int, text: str) -> None: ...


class Messenger(Protocol):
    async def send_message(self, chat_id: int, text: str) -> None: ...


# ---------------------------------------------------------------------------
# ChatApplier — binds a messenger to one chat
# ---------------------------------------------------------------------------

class ChatApplier:
    """ActionApplier for the chat being served."""

    def __init__(self, messenger: Messenger, chat_id: int) -> None:
        self._messenger = messenger
        self.chat_id = chat_id

    async def send_message(self, text: str) -> None:
        await self._messenger.send_message(self.chat_id, text)

    async def send_to(self, chat_id: int, text: str) -> None:
        await self._messenger.send_message(chat_id, text)


# ---------------------------------------------------------------------------
# TelegramBot — Bot API over HTTPS
# ---------------------------------------------------------------------------

class TelegramBot:
    """Async client for the Telegram Bot API.

    Calls POST {api_url}/bot{token}/{method} with a JSON body.
    Response: {"ok": true, "result": ...} or {"ok": false, "description": ...}

    Args:
        token:    Bot token issued by @BotFather.
        api_url:  Base URL of the Bot API. Defaults to the public endpoint.
        timeout:  HTTP timeout in seconds. Defaults to 30.
    """

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.telegram.org",
        timeout: float = 30.0,
    ) -> None:
        self._token = token
        self._base_url = api_url.rstrip("/")
        self._timeout = timeout

    def _url(self, method: str) -> str:
        return f"{self._base_url}/bot{self._token}/{method}"

    async def _call(self, method: str, body: dict, timeout: float | None = None) -> Any:
        timeout = timeout or self._timeout
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                resp = await client.post(self._url(method), json=body)
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise DeliveryError(f"Cannot connect to Telegram at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise DeliveryError(
                f"Telegram returned HTTP {e.response.status_code} for {method}"
            ) from e
        except httpx.TimeoutException as e:
            raise DeliveryError(f"Telegram timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"Transport error calling {method}: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise DeliveryError(f"Telegram sent a non-JSON response for {method}") from e
        if not data.get("ok"):
            raise DeliveryError(
                f"Telegram rejected {method}: {data.get('description', 'unknown error')}"
            )
        return data.get("result")

    async def send_message(self, chat_id: int, text: str) -> None:
        logger.debug("sendMessage chat_id=%s len=%d", chat_id, len(text))
        await self._call("sendMessage", {"chat_id": chat_id, "text": text})

    async def get_updates(self, offset: int | None = None, timeout: int = 25) -> list[dict]:
        """Long-poll for new updates. `timeout` is the server-side wait."""
        body: dict = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            body["offset"] = offset
        result = await self._call("getUpdates", body, timeout=self._timeout + timeout)
        return result or []


# ---------------------------------------------------------------------------
# RecordingMessenger — in-memory, no network
# ---------------------------------------------------------------------------

class RecordingMessenger:
    """Records every message instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[tuple[int, str]] = []

    async def send_message(self, chat_id: int, text: str) -> None:
        logger.debug("RecordingMessenger chat_id=%s text=%r", chat_id, text)
        self.sent.append((chat_id, text))

    def texts(self, chat_id: int | None = None) -> list[str]:
        """Texts sent so far, optionally only those sent to `chat_id`."""
        return [t for c, t in self.sent if chat_id is None or c == chat_id]
