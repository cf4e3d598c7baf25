"""
Constraint families of the bounded simple-path reduction.

Every builder takes ``(registry, network, length)`` and returns one
conjunction. Positions range over ``0..length`` and heights over
``0..stack_capacity(length)-1``; ``x(u,p,h)`` below stands for
``registry.state(u, p, h)`` and ``y(p,h,s)`` for ``registry.symbol(p, h, s)``.
"""
from __future__ import annotations

from typing import List

from tunnelsat.encoding.formula import (
    And,
    Eq,
    ExactlyOne,
    Formula,
    Implies,
    Not,
    conj,
    disj,
    forbid,
    xor,
)
from tunnelsat.network import Network, Symbol
from tunnelsat.reduction.variables import AtomRegistry, stack_capacity

A, B = Symbol.A, Symbol.B


def phi_state_uniqueness(registry: AtomRegistry, network: Network, length: int) -> Formula:
    """At every position exactly one (node, height) pair holds."""
    capacity = stack_capacity(length)
    constraints: List[Formula] = []
    for pos in range(length + 1):
        candidates = tuple(
            registry.state(node, pos, h) for node in range(network.num_nodes) for h in range(capacity)
        )
        constraints.append(ExactlyOne(candidates))
    return And(tuple(constraints))


def phi_boundary(registry: AtomRegistry, network: Network, length: int) -> Formula:
    """Start at (initial, 0) and end at (final, 0), with A at the bottom of the stack."""
    return And((
        registry.state(network.initial, 0, 0),
        registry.symbol(0, 0, A),
        registry.state(network.final, length, 0),
        registry.symbol(length, 0, A),
    ))


def phi_transitions(registry: AtomRegistry, network: Network, length: int) -> Formula:
    """Transition legality plus top-of-stack/action consistency.

    * Heights of consecutive positions differ by at most one.
    * Only edges of the network are followed.
    * A transmit (resp. push, pop) move out of ``u`` needs the top of the
      stack to match one of the transmit (resp. push, pop) actions ``u``
      enables; without any such action the move is forbidden.
    * An occupied state that is not the last one has an occupied successor
      among those ``u`` can reach.
    """
    n = network.num_nodes
    capacity = stack_capacity(length)
    constraints: List[Formula] = []

    def sym(pos, h, s):
        return registry.symbol(pos, h, s)

    for pos in range(length):
        for u in range(n):
            transmits = network.transmits(u)
            pushes = network.pushes(u)
            pops = network.pops(u)

            for h in range(capacity):
                at_u = registry.state(u, pos, h)

                # height jumps
                for v in range(n):
                    for h_next in range(capacity):
                        if abs(h_next - h) > 1:
                            constraints.append(forbid(at_u, registry.state(v, pos + 1, h_next)))

                successors = []
                for v in range(n):
                    same = registry.state(v, pos + 1, h)
                    up = registry.state(v, pos + 1, h + 1) if h + 1 < capacity else None
                    down = registry.state(v, pos + 1, h - 1) if h > 0 else None

                    if not network.is_edge(u, v):
                        for target in (same, up, down):
                            if target is not None:
                                constraints.append(forbid(at_u, target))
                        continue

                    move = conj(at_u, same)
                    if transmits:
                        constraints.append(Implies(move, disj(*(sym(pos, h, t.symbol) for t in transmits))))
                        successors.append(same)
                    else:
                        constraints.append(Not(move))

                    if up is not None:
                        move = conj(at_u, up)
                        if pushes:
                            options = [conj(sym(pos, h, p.read), sym(pos + 1, h + 1, p.write)) for p in pushes]
                            constraints.append(Implies(move, disj(*options)))
                            successors.append(up)
                        else:
                            constraints.append(Not(move))

                    if down is not None:
                        move = conj(at_u, down)
                        if pops:
                            options = [conj(sym(pos, h, p.top_before), sym(pos, h - 1, p.top_after)) for p in pops]
                            constraints.append(Implies(move, disj(*options)))
                            successors.append(down)
                        else:
                            constraints.append(Not(move))

                if successors:
                    constraints.append(Implies(at_u, disj(*successors)))

    return And(tuple(constraints))


def phi_stack_well_defined(registry: AtomRegistry, network: Network, length: int) -> Formula:
    """Below an occupied height every cell holds exactly one of A and B."""
    capacity = stack_capacity(length)
    constraints: List[Formula] = []
    for pos in range(length + 1):
        for h in range(capacity):
            at_height = disj(*(registry.state(node, pos, h) for node in range(network.num_nodes)))
            cells = [xor(registry.symbol(pos, k, A), registry.symbol(pos, k, B)) for k in range(h + 1)]
            constraints.append(Implies(at_height, conj(*cells)))
    return And(tuple(constraints))


def _preserved(registry: AtomRegistry, pos: int, cells: range) -> List[Formula]:
    kept = []
    for k in cells:
        for s in (A, B):
            kept.append(Eq(registry.symbol(pos, k, s), registry.symbol(pos + 1, k, s)))
    return kept


def phi_stack_evolution(registry: AtomRegistry, network: Network, length: int) -> Formula:
    """Cells the move does not touch are copied from ``pos`` to ``pos+1``.

    Transmit keeps cells ``0..h``; push keeps ``0..h`` and writes one of the
    enabled ``write`` symbols at ``h+1``; pop keeps ``0..h-1``.
    """
    capacity = stack_capacity(length)
    constraints: List[Formula] = []
    for pos in range(length):
        for u in range(network.num_nodes):
            has_transmit = bool(network.transmits(u))
            writes = sorted({p.write for p in network.pushes(u)}, key=lambda s: s.value)
            has_pop = bool(network.pops(u))

            for v in network.successors(u):
                for h in range(capacity):
                    at_u = registry.state(u, pos, h)

                    if has_transmit:
                        move = conj(at_u, registry.state(v, pos + 1, h))
                        constraints.append(Implies(move, conj(*_preserved(registry, pos, range(h + 1)))))

                    if writes and h + 1 < capacity:
                        move = conj(at_u, registry.state(v, pos + 1, h + 1))
                        new_top = disj(*(registry.symbol(pos + 1, h + 1, w) for w in writes))
                        body = _preserved(registry, pos, range(h + 1)) + [new_top]
                        constraints.append(Implies(move, conj(*body)))

                    if has_pop and h > 0:
                        move = conj(at_u, registry.state(v, pos + 1, h - 1))
                        constraints.append(Implies(move, conj(*_preserved(registry, pos, range(h)))))

    return And(tuple(constraints))


def phi_simple_path(registry: AtomRegistry, network: Network, length: int) -> Formula:
    """No (node, height) state is occupied at two distinct positions."""
    capacity = stack_capacity(length)
    constraints: List[Formula] = []
    for node in range(network.num_nodes):
        for h in range(capacity):
            for i in range(length + 1):
                for j in range(i + 1, length + 1):
                    constraints.append(forbid(registry.state(node, i, h), registry.state(node, j, h)))
    return And(tuple(constraints))


CONSTRAINT_FAMILIES = (
    ("phi_1 state uniqueness", phi_state_uniqueness),
    ("phi_2 boundary", phi_boundary),
    ("phi_3 transitions", phi_transitions),
    ("phi_4 stack well defined", phi_stack_well_defined),
    ("phi_6 stack evolution", phi_stack_evolution),
    ("phi_8 simple path", phi_simple_path),
)
