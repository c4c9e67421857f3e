"""Document models.

These describe the riddle document an author submits, exactly as it appears
on the wire. Pydantic validates every document before it is compiled; unknown
fields are rejected and prompts/actions are discriminated by their "type".
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _Document(BaseModel):
    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

class TextPrompt(_Document):
    """Matches when the input equals content exactly."""

    type: Literal["text"]
    content: str


class RegexPrompt(_Document):
    """Matches when content is found anywhere in the input."""

    type: Literal["regex"]
    content: str


class EitherPrompt(_Document):
    """Matches any input."""

    type: Literal["either"]


Prompt = Annotated[
    Union[TextPrompt, RegexPrompt, EitherPrompt],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class MessageAction(_Document):
    type: Literal["message"]
    content: str


class SendToAction(_Document):
    type: Literal["send_to"]
    chat_id: int
    message: str


Action = Annotated[
    Union[MessageAction, SendToAction],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------

class Edge(_Document):
    prompt: Prompt
    actions: list[Action]
    next: str | None = None  # None = stay in the current state


class State(_Document):
    name: str
    edges: list[Edge]


class RiddleDocument(_Document):
    """A complete riddle as submitted by its author."""

    initial_state: str
    accepting_states: list[str]
    states: list[State]


# ---------------------------------------------------------------------------
# Chat sessions
# ---------------------------------------------------------------------------

class ChatState(BaseModel):
    """A chat's position inside the riddle it is playing."""

    model_config = ConfigDict(frozen=True)

    riddle_code: str
    current_state: str
