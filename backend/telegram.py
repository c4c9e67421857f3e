"""Telegram update models and command parsing.

Only the parts of the Bot API payload the bot reads are modelled; every other
field Telegram sends is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    id: int
    is_bot: bool = False
    first_name: str = ""
    username: str | None = None


class Chat(BaseModel):
    id: int
    type: str = "private"


class Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_id: int
    chat: Chat
    from_user: User | None = Field(default=None, alias="from")
    text: str | None = None


class Update(BaseModel):
    update_id: int
    message: Message | None = None


def parse_command(text: str) -> tuple[str, str] | None:
    """Split "/cmd@botname args" into ("cmd", "args").

    Returns None when the text is not a command. Command names are lowercased.
    """
    if not text.startswith("/"):
        return None
    head, _, args = text.partition(" ")
    name = head[1:].split("@", 1)[0].lower()
    if not name:
        return None
    return name, args.strip()


def describe_commands(title: str, commands: dict[str, str]) -> str:
    lines = [f"/{name} - {description}" for name, description in commands.items()]
    return title + "\n\n" + "\n".join(lines)
