"""
Tunnel networks: directed graphs whose nodes carry stack actions.

A node may enable several actions at once. Every action reads (and possibly
rewrites) the top of a stack over the two-symbol alphabet ``{A, B}``:

* ``Transmit(s)`` keeps the height and requires the top to be ``s``.
* ``Push(r, w)`` requires the top to be ``r`` and pushes ``w`` on it.
* ``Pop(t, a)`` requires the top to be ``t``, removes it, and claims the
  newly exposed top is ``a``.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Sequence, Tuple, Union

from tunnelsat.errors import MalformedNetworkError


class Symbol(Enum):
    A = "A"
    B = "B"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Transmit:
    symbol: Symbol

    @property
    def label(self) -> str:
        return f"{self.symbol}→{self.symbol}"

    @property
    def token(self) -> str:
        return f"transmit_{self.symbol}"


@dataclass(frozen=True)
class Push:
    read: Symbol
    write: Symbol

    @property
    def label(self) -> str:
        return f"{self.read}↑{self.read}{self.write}"

    @property
    def token(self) -> str:
        return f"push_{self.read}_{self.write}"


@dataclass(frozen=True)
class Pop:
    top_before: Symbol
    top_after: Symbol

    @property
    def label(self) -> str:
        return f"{self.top_after}{self.top_before}↓{self.top_after}"

    @property
    def token(self) -> str:
        return f"pop_{self.top_before}_{self.top_after}"


Action = Union[Transmit, Push, Pop]
ACTION_KINDS = (Transmit, Push, Pop)


def parse_action(token: str) -> Action:
    """Inverse of ``Action.token``: ``transmit_A``, ``push_A_B``, ``pop_B_A``."""
    parts = token.strip().split("_")
    try:
        symbols = [Symbol(part.upper()) for part in parts[1:]]
    except ValueError:
        raise ValueError(f"Unknown symbol in action {token!r}") from None

    kind = parts[0].lower()
    if kind == "transmit" and len(symbols) == 1:
        return Transmit(symbols[0])
    if kind == "push" and len(symbols) == 2:
        return Push(symbols[0], symbols[1])
    if kind == "pop" and len(symbols) == 2:
        return Pop(symbols[0], symbols[1])
    raise ValueError(f"Unknown action {token!r}")


def _action_order(action: Action) -> Tuple[int, str]:
    return ACTION_KINDS.index(type(action)), action.token


@dataclass(frozen=True)
class PathStep:
    action: Action
    source: int
    target: int


class Network:
    """Immutable tunnel network over nodes ``0..num_nodes-1``."""

    def __init__(
        self,
        names: Sequence[str],
        edges: Iterable[Tuple[int, int]],
        actions: Mapping[int, Iterable[Action]],
        initial: int,
        final: int,
    ):
        self._names: Tuple[str, ...] = tuple(names)
        self._edges: FrozenSet[Tuple[int, int]] = frozenset((int(u), int(v)) for u, v in edges)
        self._actions: Dict[int, FrozenSet[Action]] = {
            node: frozenset(actions.get(node, ())) for node in range(len(self._names))
        }
        self.initial = initial
        self.final = final

        self.validate(extra_nodes=set(actions) - set(range(len(self._names))))

        self._transmits = {node: self._sorted(node, Transmit) for node in range(self.num_nodes)}
        self._pushes = {node: self._sorted(node, Push) for node in range(self.num_nodes)}
        self._pops = {node: self._sorted(node, Pop) for node in range(self.num_nodes)}

    @classmethod
    def from_named(
        cls,
        nodes: Mapping[str, Iterable[Action]],
        edges: Iterable[Tuple[str, str]],
        initial: str,
        final: str,
    ) -> "Network":
        """Build a network from node names; node indices follow ``nodes`` order."""
        names = list(nodes)
        edges = list(edges)
        index = {name: i for i, name in enumerate(names)}
        missing = [name for edge in edges for name in edge if name not in index]
        missing += [name for name in (initial, final) if name not in index]
        if missing:
            raise MalformedNetworkError(f"Unknown node(s): {', '.join(sorted(set(missing)))}")
        return cls(
            names,
            [(index[u], index[v]) for u, v in edges],
            {index[name]: acts for name, acts in nodes.items()},
            index[initial],
            index[final],
        )

    def validate(self, extra_nodes=()) -> None:
        """Reject networks that cannot be reduced at all."""
        n = self.num_nodes
        if n <= 0:
            raise MalformedNetworkError("A network needs at least one node")
        if extra_nodes:
            raise MalformedNetworkError(f"Actions given for unknown node(s) {sorted(extra_nodes)}")
        for label, node in (("initial", self.initial), ("final", self.final)):
            if not isinstance(node, int) or not 0 <= node < n:
                raise MalformedNetworkError(f"The {label} node {node!r} is out of range 0..{n - 1}")
        for u, v in self._edges:
            if not (0 <= u < n and 0 <= v < n):
                raise MalformedNetworkError(f"Edge ({u}, {v}) has an endpoint out of range 0..{n - 1}")
        for node, acts in self._actions.items():
            for action in acts:
                if not isinstance(action, ACTION_KINDS):
                    raise MalformedNetworkError(f"Node {self._names[node]!r} has an invalid action {action!r}")

    def _sorted(self, node: int, kind) -> Tuple[Action, ...]:
        return tuple(sorted((a for a in self._actions[node] if isinstance(a, kind)), key=_action_order))

    # ------------------------------------------------------------------
    @property
    def num_nodes(self) -> int:
        return len(self._names)

    def is_edge(self, u: int, v: int) -> bool:
        return (u, v) in self._edges

    def successors(self, u: int) -> List[int]:
        return [v for v in range(self.num_nodes) if (u, v) in self._edges]

    @property
    def edges(self) -> List[Tuple[int, int]]:
        return sorted(self._edges)

    def enabled_actions(self, node: int) -> FrozenSet[Action]:
        return self._actions[node]

    def transmits(self, node: int) -> Tuple[Transmit, ...]:
        return self._transmits[node]

    def pushes(self, node: int) -> Tuple[Push, ...]:
        return self._pushes[node]

    def pops(self, node: int) -> Tuple[Pop, ...]:
        return self._pops[node]

    def node_name(self, node: int) -> str:
        return self._names[node]

    def index_of(self, name: str) -> int:
        try:
            return self._names.index(name)
        except ValueError:
            raise KeyError(name) from None

    def __repr__(self) -> str:
        return (
            f"Network(nodes={self.num_nodes}, edges={len(self._edges)}, "
            f"initial={self.node_name(self.initial)!r}, final={self.node_name(self.final)!r})"
        )
