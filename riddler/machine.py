"""FSM interpreter — advances a chat through a compiled riddle.

One input, one transition:

  1. Look up the current state's node.
  2. Pick the first edge (declaration order) whose prompt matches the input.
  3. No edge → nothing happens, the state is unchanged.
  4. Otherwise run the edge's actions one after another through the injected
     ActionApplier, awaiting each before starting the next. The first failure
     aborts the transition and propagates.
  5. Return the edge's target, or the current state when it has none.

The interpreter holds no transport; the caller binds an ActionApplier to the
chat being served.
"""

from __future__ import annotations

import logging

from riddler.definition import (
    Action,
    Edge,
    Message,
    RiddleDefinition,
    SendTo,
    prompt_matches,
)
from riddler.delivery import ActionApplier
from riddler.errors import UnknownStateError

logger = logging.getLogger(__name__)


def select_edge(definition: RiddleDefinition, state: str, text: str) -> Edge | None:
    """Return the first edge of `state` whose prompt matches `text`."""
    node = definition.states.get(state)
    if node is None:
        raise UnknownStateError(f"State {state!r} is not defined")
    for edge in node.edges:
        if prompt_matches(edge.prompt, text):
            return edge
    return None


async def apply(
    definition: RiddleDefinition,
    applier: ActionApplier,
    state: str,
    text: str,
) -> str:
    """Feed one input to the machine and return the resulting state name."""
    edge = select_edge(definition, state, text)
    if edge is None:
        logger.debug("no edge matched state=%r", state)
        return state

    for action in edge.actions:
        await run_action(action, applier)

    new_state = edge.next if edge.next is not None else state
    logger.debug(
        "transition %r -> %r actions=%d", state, new_state, len(edge.actions)
    )
    return new_state


async def run_action(action: Action, applier: ActionApplier) -> None:
    if isinstance(action, Message):
        await applier.send_message(action.text)
    elif isinstance(action, SendTo):
        await applier.send_to(action.chat_id, action.text)
    else:
        raise TypeError(f"Unknown action {action!r}")


def is_accepting(definition: RiddleDefinition, state: str) -> bool:
    return definition.is_accepting(state)
