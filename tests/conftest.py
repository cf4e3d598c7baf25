import random
from pathlib import Path

import pytest

from tunnelsat.network import Network, Pop, Push, Symbol, Transmit

A, B = Symbol.A, Symbol.B

NETWORKS_DIR = Path(__file__).resolve().parent.parent / "experiments" / "networks"

ALL_ACTIONS = (
    [Transmit(s) for s in (A, B)]
    + [Push(r, w) for r in (A, B) for w in (A, B)]
    + [Pop(t, u) for t in (A, B) for u in (A, B)]
)


@pytest.fixture
def transmit_network():
    return Network.from_named({"s": [Transmit(A)], "t": []}, [("s", "t")], "s", "t")


@pytest.fixture
def push_pop_network():
    return Network.from_named(
        {"s": [Push(A, B)], "m": [Pop(B, A)], "t": []},
        [("s", "m"), ("m", "t")],
        "s",
        "t",
    )


@pytest.fixture
def disconnected_network():
    return Network.from_named(
        {"s": [Transmit(A), Push(A, B)], "a": [Transmit(A)], "t": [Transmit(A)]},
        [("s", "a"), ("a", "s")],
        "s",
        "t",
    )


@pytest.fixture
def wrong_symbol_network():
    return Network.from_named({"s": [Transmit(B)], "t": [Transmit(B)]}, [("s", "t")], "s", "t")


@pytest.fixture
def nested_network():
    return Network.from_named(
        {
            "s": [Push(A, B)],
            "a": [Push(B, A)],
            "b": [Transmit(A)],
            "c": [Pop(A, B)],
            "d": [Pop(B, A)],
            "t": [],
        },
        [("s", "a"), ("a", "b"), ("b", "c"), ("c", "d"), ("d", "t"), ("s", "t"), ("b", "d")],
        "s",
        "t",
    )


def apply_action(action, stack):
    """Stack after ``action`` (a tuple, bottom first), or ``None`` if it cannot fire."""
    top = stack[-1]
    if isinstance(action, Transmit):
        return stack if top == action.symbol else None
    if isinstance(action, Push):
        return stack + (action.write,) if top == action.read else None
    if len(stack) >= 2 and top == action.top_before and stack[-2] == action.top_after:
        return stack[:-1]
    return None


def brute_force_path_exists(network, length):
    """Enumerate every simple path of exactly ``length`` steps on a concrete stack."""

    def extend(node, stack, visited, remaining):
        if remaining == 0:
            return node == network.final and stack == (A,)
        for action in network.enabled_actions(node):
            next_stack = apply_action(action, stack)
            if next_stack is None:
                continue
            for v in network.successors(node):
                state = (v, len(next_stack) - 1)
                if state in visited:
                    continue
                if extend(v, next_stack, visited | {state}, remaining - 1):
                    return True
        return False

    return extend(network.initial, (A,), {(network.initial, 0)}, length)


def random_network(rng: random.Random, max_nodes: int = 4) -> Network:
    n = rng.randint(2, max_nodes)
    names = [f"n{i}" for i in range(n)]
    edges = [(u, v) for u in range(n) for v in range(n) if rng.random() < 0.45]
    actions = {u: [a for a in ALL_ACTIONS if rng.random() < 0.3] for u in range(n)}
    return Network(names, edges, actions, 0, rng.randrange(n))
