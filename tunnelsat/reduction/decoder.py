"""
Decoding a satisfying assignment back into path steps.
"""
from __future__ import annotations

from typing import Hashable, Iterable, List, Mapping, Optional, Tuple, Union

from tunnelsat.encoding.formula import Atom
from tunnelsat.errors import DecodingError
from tunnelsat.network import Action, Network, PathStep, Pop, Push, Symbol, Transmit
from tunnelsat.reduction.variables import AtomRegistry, StateKey, SymbolKey, stack_capacity


class Model:
    """Total assignment returned by an oracle, queried through the registry."""

    def __init__(self, literals: Iterable[int], registry: AtomRegistry):
        self.registry = registry
        self._true = {lit for lit in literals if lit > 0}

    @classmethod
    def from_valuation(cls, valuation: Mapping[Hashable, bool], registry: AtomRegistry) -> "Model":
        literals = [registry.atom_for(key).var for key, value in valuation.items() if value]
        return cls(literals, registry)

    def value_of(self, item: Union[Atom, Hashable]) -> bool:
        atom = item if isinstance(item, Atom) else self.registry.get(item)
        if atom is None:
            return False
        return atom.var in self._true

    def true_keys(self):
        return [atom.key for atom in self.registry.atoms() if atom.var in self._true]


def states_at(model: Model, network: Network, length: int, pos: int) -> List[Tuple[int, int]]:
    """All (node, height) pairs the model places at ``pos``."""
    return [
        (node, h)
        for node in range(network.num_nodes)
        for h in range(stack_capacity(length))
        if model.value_of(StateKey(node, pos, h))
    ]


def cell_symbol(model: Model, pos: int, height: int) -> Optional[Symbol]:
    """Symbol held by a cell, or ``None`` when the cell holds neither or both."""
    has_a = model.value_of(SymbolKey(pos, height, Symbol.A))
    has_b = model.value_of(SymbolKey(pos, height, Symbol.B))
    if has_a == has_b:
        return None
    return Symbol.A if has_a else Symbol.B


def _unique_state(model: Model, network: Network, length: int, pos: int) -> Tuple[int, int]:
    states = states_at(model, network, length, pos)
    if len(states) != 1:
        raise DecodingError(f"Position {pos} holds {len(states)} states instead of exactly one: {states}")
    return states[0]


def _symbol(model: Model, pos: int, height: int) -> Symbol:
    symbol = cell_symbol(model, pos, height)
    if symbol is None:
        raise DecodingError(f"Stack cell {height} at position {pos} does not hold exactly one symbol")
    return symbol


def decode(model: Model, network: Network, length: int) -> List[PathStep]:
    """Path steps described by ``model`` for a reduction of ``length`` steps."""
    steps: List[PathStep] = []
    source, height = _unique_state(model, network, length, 0)

    for pos in range(length):
        target, next_height = _unique_state(model, network, length, pos + 1)
        delta = next_height - height

        action: Action
        if delta == 0:
            action = Transmit(_symbol(model, pos, height))
        elif delta == 1:
            action = Push(_symbol(model, pos, height), _symbol(model, pos + 1, next_height))
        elif delta == -1:
            action = Pop(_symbol(model, pos, height), _symbol(model, pos, next_height))
        else:
            raise DecodingError(f"Height jumps from {height} to {next_height} at position {pos}")

        if not network.is_edge(source, target):
            raise DecodingError(
                f"Position {pos}: no edge {network.node_name(source)} -> {network.node_name(target)}"
            )
        if action not in network.enabled_actions(source):
            raise DecodingError(
                f"Position {pos}: {action.label} is not enabled at {network.node_name(source)}"
            )

        steps.append(PathStep(action, source, target))
        source, height = target, next_height

    return steps
