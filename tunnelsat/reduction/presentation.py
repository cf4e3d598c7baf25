"""Human-readable renderings of paths and models."""
from __future__ import annotations

from typing import Sequence

from tabulate import tabulate

from tunnelsat.network import Network, PathStep, Symbol
from tunnelsat.reduction.decoder import Model, states_at
from tunnelsat.reduction.variables import SymbolKey, stack_capacity


def format_path(network: Network, steps: Sequence[PathStep]) -> str:
    """``s -(A↑AB)-> m -(AB↓A)-> t``"""
    if not steps:
        return ""
    parts = [network.node_name(steps[0].source)]
    for step in steps:
        parts.append(f"-({step.action.label})->")
        parts.append(network.node_name(step.target))
    return " ".join(parts)


def _stack_cells(model: Model, pos: int, top: int):
    """Cell strings bottom first up to ``top``, and whether any of them is ill-defined."""
    cells = []
    misdefined = False
    for height in range(top + 1):
        has_a = model.value_of(SymbolKey(pos, height, Symbol.A))
        has_b = model.value_of(SymbolKey(pos, height, Symbol.B))
        if has_a and has_b:
            cells.append("X")
        elif has_a or has_b:
            cells.append("A" if has_a else "B")
        else:
            cells.append("?")
        misdefined = misdefined or has_a == has_b
    return cells, misdefined


def format_model(model: Model, network: Network, length: int) -> str:
    """Per-position dump of states and stack cells, flagging inconsistencies."""
    capacity = stack_capacity(length)
    rows = []
    for pos in range(length + 1):
        states = states_at(model, network, length, pos)
        # cells above the top are unconstrained; without a unique state show them all
        top = states[0][1] if len(states) == 1 else capacity - 1
        cells, misdefined = _stack_cells(model, pos, top)

        notes = []
        if not states:
            notes.append("no node at that position")
        elif len(states) > 1:
            notes.append("several (node, height) pairs")
        if misdefined:
            notes.append("ill-defined stack")

        rows.append([
            pos,
            " ".join(f"({network.node_name(node)},{h})" for node, h in states) or "-",
            "|" + "|".join(cells),
            "; ".join(notes),
        ])
    return tabulate(rows, headers=["pos", "state", "stack", "warnings"], tablefmt="simple")
