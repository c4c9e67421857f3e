import copy

import pytest

from riddler.definition import compile_definition

# States 0, 1, 2; 2 is accepting.
#   0 --"Hello, world!"--> 1   says "Goodbye, world!"
#   0 --anything-->        2   says "Nope"
#   1 --anything-->        0   says "Nope"
EXAMPLE_DOCUMENT = {
    "initial_state": "0",
    "accepting_states": ["2"],
    "states": [
        {
            "name": "0",
            "edges": [
                {
                    "prompt": {"type": "text", "content": "Hello, world!"},
                    "actions": [{"type": "message", "content": "Goodbye, world!"}],
                    "next": "1",
                },
                {
                    "prompt": {"type": "either"},
                    "actions": [{"type": "message", "content": "Nope"}],
                    "next": "2",
                },
            ],
        },
        {
            "name": "1",
            "edges": [
                {
                    "prompt": {"type": "either"},
                    "actions": [{"type": "message", "content": "Nope"}],
                    "next": "0",
                },
            ],
        },
        {"name": "2", "edges": []},
    ],
}


@pytest.fixture
def example_document() -> dict:
    """A fresh copy per test so mutations don't bleed across tests."""
    return copy.deepcopy(EXAMPLE_DOCUMENT)


@pytest.fixture
def example_definition(example_document):
    return compile_definition(example_document)
