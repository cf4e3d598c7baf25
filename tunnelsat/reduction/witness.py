"""
Checking explicit paths without a solver.

``replay_path`` runs a path on a concrete stack. ``assignment_from_path``
builds the assignment a satisfying model would give for that path, which
lets a path be checked against ``reduce`` directly.
"""
from __future__ import annotations

from typing import Dict, Hashable, List, Sequence

from tunnelsat.errors import InvalidPathError
from tunnelsat.network import Network, PathStep, Pop, Push, Symbol, Transmit
from tunnelsat.reduction.variables import AtomRegistry, StateKey, SymbolKey


def replay_path(network: Network, steps: Sequence[PathStep]) -> List[List[Symbol]]:
    """Execute ``steps`` and return the stack at every position (bottom first)."""
    if not steps:
        raise InvalidPathError("a path has at least one step")
    if steps[0].source != network.initial:
        raise InvalidPathError(f"path starts at {network.node_name(steps[0].source)}, not at the initial node", 0)

    stack = [Symbol.A]
    stacks = [list(stack)]
    visited = {(network.initial, 0)}
    node = network.initial

    for index, step in enumerate(steps):
        action = step.action
        if step.source != node:
            raise InvalidPathError(f"step leaves {network.node_name(step.source)} but the path is at {network.node_name(node)}", index)
        if not network.is_edge(step.source, step.target):
            raise InvalidPathError(f"no edge {network.node_name(step.source)} -> {network.node_name(step.target)}", index)
        if action not in network.enabled_actions(step.source):
            raise InvalidPathError(f"{action.label} is not enabled at {network.node_name(step.source)}", index)

        if isinstance(action, Transmit):
            if stack[-1] != action.symbol:
                raise InvalidPathError(f"{action.label} needs {action.symbol} on top, found {stack[-1]}", index)
        elif isinstance(action, Push):
            if stack[-1] != action.read:
                raise InvalidPathError(f"{action.label} needs {action.read} on top, found {stack[-1]}", index)
            stack.append(action.write)
        elif isinstance(action, Pop):
            if len(stack) < 2:
                raise InvalidPathError(f"{action.label} on a stack of height 0", index)
            if stack[-1] != action.top_before or stack[-2] != action.top_after:
                raise InvalidPathError(f"{action.label} does not match the stack top {stack[-2]}{stack[-1]}", index)
            stack.pop()
        else:
            raise InvalidPathError(f"unknown action {action!r}", index)

        node = step.target
        state = (node, len(stack) - 1)
        if state in visited:
            raise InvalidPathError(f"state ({network.node_name(node)}, {state[1]}) is visited twice", index)
        visited.add(state)
        stacks.append(list(stack))

    if node != network.final:
        raise InvalidPathError(f"path ends at {network.node_name(node)}, not at the final node")
    if stack != [Symbol.A]:
        raise InvalidPathError("path does not end with the initial stack")
    return stacks


def assignment_from_path(
    network: Network, steps: Sequence[PathStep], registry: AtomRegistry
) -> Dict[Hashable, bool]:
    """Value of every registered atom in the model describing ``steps``."""
    stacks = replay_path(network, steps)
    nodes = [steps[0].source] + [step.target for step in steps]

    true_keys = set()
    for pos, (node, stack) in enumerate(zip(nodes, stacks)):
        true_keys.add(StateKey(node, pos, len(stack) - 1))
        for height, symbol in enumerate(stack):
            true_keys.add(SymbolKey(pos, height, symbol))

    return {atom.key: atom.key in true_keys for atom in registry.atoms()}
