"""Tests for riddler.machine — the FSM interpreter."""

import asyncio

import pytest

from riddler import machine
from riddler.definition import compile_definition
from riddler.delivery import ChatApplier, RecordingMessenger
from riddler.errors import DeliveryError, UnknownStateError


class RecordingApplier:
    """Records the order in which deliveries start and finish."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.events: list[tuple[str, object]] = []
        self.fail_on = fail_on

    async def send_message(self, text: str) -> None:
        self.events.append(("start", text))
        await asyncio.sleep(0)
        if text == self.fail_on:
            raise DeliveryError(f"cannot deliver {text!r}")
        self.events.append(("done", text))

    async def send_to(self, chat_id: int, text: str) -> None:
        self.events.append(("start", (chat_id, text)))
        await asyncio.sleep(0)
        self.events.append(("done", (chat_id, text)))

    def delivered(self) -> list:
        return [payload for kind, payload in self.events if kind == "done"]


def _single_state(edges, accepting=()):
    return compile_definition({
        "initial_state": "s",
        "accepting_states": list(accepting),
        "states": [{"name": "s", "edges": edges}, {"name": "t", "edges": []}],
    })


def _message(text):
    return {"type": "message", "content": text}


# ---------------------------------------------------------------------------
# End-to-end scenario
# ---------------------------------------------------------------------------

class TestExampleScenario:
    async def test_walk_to_acceptance(self, example_definition) -> None:
        d = example_definition
        applier = RecordingApplier()

        state = await machine.apply(d, applier, d.initial_state, "Hello, world!")
        assert state == "1"
        assert applier.delivered() == ["Goodbye, world!"]

        applier = RecordingApplier()
        state = await machine.apply(d, applier, state, "anything")
        assert state == "0"
        assert applier.delivered() == ["Nope"]

        applier = RecordingApplier()
        state = await machine.apply(d, applier, state, "anything")
        assert state == "2"
        assert applier.delivered() == ["Nope"]
        assert machine.is_accepting(d, state)

    async def test_dead_end_state_is_a_no_op(self, example_definition) -> None:
        applier = RecordingApplier()
        assert await machine.apply(example_definition, applier, "2", "Hello, world!") == "2"
        assert applier.events == []

    async def test_with_chat_applier(self, example_definition) -> None:
        messenger = RecordingMessenger()
        applier = ChatApplier(messenger, chat_id=5)
        await machine.apply(example_definition, applier, "0", "Hello, world!")
        assert messenger.sent == [(5, "Goodbye, world!")]


# ---------------------------------------------------------------------------
# Laws
# ---------------------------------------------------------------------------

class TestNoOp:
    async def test_no_matching_edge_keeps_state(self) -> None:
        d = _single_state([
            {"prompt": {"type": "text", "content": "open"}, "actions": [_message("ok")], "next": "t"},
        ])
        applier = RecordingApplier()
        for text in ["", "Open", "open sesame", "nope"]:
            assert await machine.apply(d, applier, "s", text) == "s"
        assert applier.events == []

    async def test_select_edge_returns_none(self) -> None:
        d = _single_state([
            {"prompt": {"type": "text", "content": "open"}, "actions": [], "next": "t"},
        ])
        assert machine.select_edge(d, "s", "closed") is None


class TestDeterminism:
    async def test_repeated_calls_agree(self, example_definition) -> None:
        results = []
        for _ in range(3):
            applier = RecordingApplier()
            state = await machine.apply(example_definition, applier, "0", "Hello, world!")
            results.append((state, applier.delivered()))
        assert results[0] == results[1] == results[2]


class TestFirstMatch:
    async def test_earlier_edge_wins(self) -> None:
        d = compile_definition({
            "initial_state": "s",
            "accepting_states": [],
            "states": [
                {"name": "s", "edges": [
                    {"prompt": {"type": "text", "content": "X"}, "actions": [_message("A")], "next": "A"},
                    {"prompt": {"type": "either"}, "actions": [_message("B")], "next": "B"},
                ]},
                {"name": "A", "edges": []},
                {"name": "B", "edges": []},
            ],
        })
        applier = RecordingApplier()
        assert await machine.apply(d, applier, "s", "X") == "A"
        assert applier.delivered() == ["A"]

    async def test_fallback_after_specific(self) -> None:
        d = _single_state([
            {"prompt": {"type": "regex", "content": "cat"}, "actions": [_message("meow")], "next": "t"},
            {"prompt": {"type": "either"}, "actions": [_message("what?")]},
        ])
        applier = RecordingApplier()
        assert await machine.apply(d, applier, "s", "dog") == "s"
        assert await machine.apply(d, applier, "s", "a concatenation") == "t"
        assert applier.delivered() == ["what?", "meow"]

    async def test_either_first_shadows_later_edges(self) -> None:
        d = _single_state([
            {"prompt": {"type": "either"}, "actions": [_message("first")]},
            {"prompt": {"type": "text", "content": "x"}, "actions": [_message("second")], "next": "t"},
        ])
        edge = machine.select_edge(d, "s", "x")
        assert edge is d.states["s"].edges[0]


class TestSelfLoop:
    async def test_missing_next_stays_but_runs_actions(self) -> None:
        d = _single_state([
            {"prompt": {"type": "either"}, "actions": [_message("again")]},
        ])
        applier = RecordingApplier()
        assert await machine.apply(d, applier, "s", "hi") == "s"
        assert applier.delivered() == ["again"]


class TestAcceptance:
    def test_membership(self, example_definition) -> None:
        assert machine.is_accepting(example_definition, "2")
        assert not machine.is_accepting(example_definition, "0")
        assert not machine.is_accepting(example_definition, "no-such-state")

    def test_empty_accepting_set(self) -> None:
        d = _single_state([])
        assert not any(machine.is_accepting(d, s) for s in ["s", "t", ""])

    def test_no_side_effects(self, example_definition) -> None:
        before = example_definition.to_document()
        machine.is_accepting(example_definition, "2")
        assert example_definition.to_document() == before


# ---------------------------------------------------------------------------
# Action execution
# ---------------------------------------------------------------------------

class TestActions:
    async def test_actions_run_strictly_in_order(self) -> None:
        d = _single_state([
            {"prompt": {"type": "either"}, "actions": [_message("a"), _message("b")], "next": "t"},
        ])
        applier = RecordingApplier()
        await machine.apply(d, applier, "s", "go")
        assert applier.events == [
            ("start", "a"), ("done", "a"),
            ("start", "b"), ("done", "b"),
        ]

    async def test_send_to_goes_to_explicit_chat(self) -> None:
        d = _single_state([
            {"prompt": {"type": "either"}, "actions": [
                _message("to you"),
                {"type": "send_to", "chat_id": 99, "message": "to them"},
            ]},
        ])
        messenger = RecordingMessenger()
        await machine.apply(d, ChatApplier(messenger, chat_id=1), "s", "go")
        assert messenger.sent == [(1, "to you"), (99, "to them")]

    async def test_failure_aborts_remaining_actions(self) -> None:
        d = _single_state([
            {"prompt": {"type": "either"}, "actions": [
                _message("a"), _message("b"), _message("c"),
            ], "next": "t"},
        ])
        applier = RecordingApplier(fail_on="b")
        with pytest.raises(DeliveryError):
            await machine.apply(d, applier, "s", "go")
        assert applier.delivered() == ["a"]
        assert ("start", "c") not in applier.events


class TestUnknownState:
    async def test_apply_raises(self, example_definition) -> None:
        with pytest.raises(UnknownStateError):
            await machine.apply(example_definition, RecordingApplier(), "missing", "x")

    def test_select_edge_raises(self, example_definition) -> None:
        with pytest.raises(LookupError):
            machine.select_edge(example_definition, "missing", "x")
