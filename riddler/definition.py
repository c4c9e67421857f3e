"""Definition compiler.

Turns a riddle document into an immutable RiddleDefinition:

    1. Validate the document shape (pydantic, unknown fields rejected).
    2. Compile every regex prompt eagerly.
    3. Check that state names are unique and that every referenced state
       (initial, accepting, edge targets) exists.

Any failure raises DefinitionError; nothing is half-built.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Union

from pydantic import ValidationError

from riddler import models
from riddler.errors import DefinitionError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Prompts (closed set, matched in prompt_matches)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Regex:
    pattern: re.Pattern[str]


@dataclass(frozen=True)
class Either:
    pass


Prompt = Union[Text, Regex, Either]


def prompt_matches(prompt: Prompt, text: str) -> bool:
    if isinstance(prompt, Text):
        return prompt.text == text
    if isinstance(prompt, Regex):
        # Unanchored: a hit anywhere in the input counts.
        return prompt.pattern.search(text) is not None
    if isinstance(prompt, Either):
        return True
    raise TypeError(f"Unknown prompt {prompt!r}")


# ---------------------------------------------------------------------------
# Actions (closed set, executed by riddler.machine)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Message:
    """Deliver text to the chat being served."""

    text: str


@dataclass(frozen=True)
class SendTo:
    """Deliver text to an explicit chat."""

    chat_id: int
    text: str


Action = Union[Message, SendTo]


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Edge:
    prompt: Prompt
    actions: tuple[Action, ...]
    next: str | None = None


@dataclass(frozen=True)
class StateNode:
    edges: tuple[Edge, ...] = ()


@dataclass(frozen=True)
class RiddleDefinition:
    """A compiled riddle graph. Build it with compile_definition()."""

    initial_state: str
    accepting_states: tuple[str, ...]
    states: Mapping[str, StateNode]

    def is_accepting(self, state: str) -> bool:
        return state in self.accepting_states

    def to_document(self) -> models.RiddleDocument:
        """Rebuild the document this definition was compiled from."""
        return models.RiddleDocument(
            initial_state=self.initial_state,
            accepting_states=list(self.accepting_states),
            states=[
                models.State(name=name, edges=[_edge_document(e) for e in node.edges])
                for name, node in self.states.items()
            ],
        )


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------

def compile_definition(
    document: models.RiddleDocument | Mapping[str, Any] | str | bytes,
) -> RiddleDefinition:
    """Validate and compile a riddle document.

    Accepts raw JSON, an already-decoded mapping, or a RiddleDocument.
    Raises DefinitionError if the document is malformed, a regex does not
    compile, a state name is repeated, or a state reference dangles.
    """
    doc = _validate(document)

    states: dict[str, StateNode] = {}
    for state in doc.states:
        if state.name in states:
            raise DefinitionError(f"Duplicate state {state.name!r}")
        states[state.name] = StateNode(
            edges=tuple(_compile_edge(state.name, e) for e in state.edges)
        )

    _check_references(doc, states)

    definition = RiddleDefinition(
        initial_state=doc.initial_state,
        accepting_states=tuple(doc.accepting_states),
        states=MappingProxyType(states),
    )
    logger.debug(
        "compiled riddle definition states=%d accepting=%d",
        len(states), len(definition.accepting_states),
    )
    return definition


def _validate(document: Any) -> models.RiddleDocument:
    if isinstance(document, models.RiddleDocument):
        return document
    try:
        if isinstance(document, (str, bytes)):
            return models.RiddleDocument.model_validate_json(document)
        return models.RiddleDocument.model_validate(document)
    except ValidationError as e:
        raise DefinitionError(_describe_validation_error(e)) from e


def _describe_validation_error(error: ValidationError) -> str:
    lines = []
    for err in error.errors():
        loc = ".".join(str(part) for part in err["loc"])
        lines.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "Invalid riddle document:\n" + "\n".join(lines)


def _compile_edge(state_name: str, edge: models.Edge) -> Edge:
    return Edge(
        prompt=_compile_prompt(state_name, edge.prompt),
        actions=tuple(_compile_action(a) for a in edge.actions),
        next=edge.next,
    )


def _compile_prompt(state_name: str, prompt: models.Prompt) -> Prompt:
    if isinstance(prompt, models.TextPrompt):
        return Text(prompt.content)
    if isinstance(prompt, models.RegexPrompt):
        try:
            return Regex(re.compile(prompt.content))
        except re.error as e:
            raise DefinitionError(
                f"Invalid regex {prompt.content!r} in state {state_name!r}: {e}"
            ) from e
    return Either()


def _compile_action(action: models.Action) -> Action:
    if isinstance(action, models.MessageAction):
        return Message(action.content)
    return SendTo(chat_id=action.chat_id, text=action.message)


def _check_references(doc: models.RiddleDocument, states: Mapping[str, StateNode]) -> None:
    if doc.initial_state not in states:
        raise DefinitionError(f"Initial state {doc.initial_state!r} is not defined")
    for name in doc.accepting_states:
        if name not in states:
            raise DefinitionError(f"Accepting state {name!r} is not defined")
    for state in doc.states:
        for i, edge in enumerate(state.edges):
            if edge.next is not None and edge.next not in states:
                raise DefinitionError(
                    f"Edge {i} of state {state.name!r} points to undefined state {edge.next!r}"
                )


# ---------------------------------------------------------------------------
# Back to documents
# ---------------------------------------------------------------------------

def _edge_document(edge: Edge) -> models.Edge:
    return models.Edge(
        prompt=_prompt_document(edge.prompt),
        actions=[_action_document(a) for a in edge.actions],
        next=edge.next,
    )


def _prompt_document(prompt: Prompt) -> models.Prompt:
    if isinstance(prompt, Text):
        return models.TextPrompt(type="text", content=prompt.text)
    if isinstance(prompt, Regex):
        return models.RegexPrompt(type="regex", content=prompt.pattern.pattern)
    return models.EitherPrompt(type="either")


def _action_document(action: Action) -> models.Action:
    if isinstance(action, Message):
        return models.MessageAction(type="message", content=action.text)
    return models.SendToAction(type="send_to", chat_id=action.chat_id, message=action.text)


def dump_document(definition: RiddleDefinition) -> dict[str, Any]:
    """JSON-ready form of a definition, omitting absent fields."""
    return definition.to_document().model_dump(exclude_none=True)
