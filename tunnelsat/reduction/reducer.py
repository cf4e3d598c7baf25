"""
Bounded reduction driver and the increasing-length search.

``reduce`` compiles "is there a simple path of exactly ``length`` steps" into
one formula; ``search`` asks an oracle backend for lengths ``1, 2, ...`` and
stops at the first satisfiable one.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from tunnelsat.encoding.clausifier import to_cnf
from tunnelsat.encoding.formula import And, Formula
from tunnelsat.errors import SolverError
from tunnelsat.network import Network, PathStep
from tunnelsat.reduction.constraints import CONSTRAINT_FAMILIES
from tunnelsat.reduction.decoder import Model, decode
from tunnelsat.reduction.variables import AtomRegistry, stack_capacity
from tunnelsat.solvers import load_solver

Sink = Callable[[str], None]


def _silent(message: str) -> None:
    return None


def reduce(
    network: Network,
    length: int,
    registry: Optional[AtomRegistry] = None,
    sink: Optional[Sink] = None,
) -> Formula:
    """Formula satisfiable iff ``network`` has a simple path of ``length`` steps."""
    sink = sink or _silent
    if length < 1:
        raise ValueError(f"Path length must be at least 1, got {length}")
    network.validate()
    registry = registry if registry is not None else AtomRegistry()

    sink(
        f"Reduction for length {length}: {network.num_nodes} nodes, "
        f"stack capacity {stack_capacity(length)}, "
        f"initial {network.node_name(network.initial)}, final {network.node_name(network.final)}"
    )
    families = []
    for name, builder in CONSTRAINT_FAMILIES:
        family = builder(registry, network, length)
        sink(f"  {name}: {len(family.args)} constraints")
        families.append(family)
    sink(f"  {len(registry)} atoms")
    return And(tuple(families))


@dataclass
class SearchResult:
    found: bool
    length: Optional[int] = None
    steps: List[PathStep] = field(default_factory=list)
    model: Optional[Model] = None
    tried: List[int] = field(default_factory=list)
    elapsed: float = 0.0


def search(
    network: Network,
    max_length: int,
    solver: str = "sat_solver",
    solver_options: Optional[Dict[str, Any]] = None,
    sink: Optional[Sink] = None,
) -> SearchResult:
    """Look for the shortest simple path of at most ``max_length`` steps."""
    sink = sink or _silent
    if max_length < 1:
        raise ValueError(f"Maximum length must be at least 1, got {max_length}")
    network.validate()

    oracle_class = load_solver(solver)
    result = SearchResult(found=False)
    start_time = time.time()

    for length in range(1, max_length + 1):
        registry = AtomRegistry()
        formula = reduce(network, length, registry, sink)
        cnf = to_cnf(formula, registry.vpool)
        sink(f"  CNF: {cnf.nv} variables, {len(cnf.clauses)} clauses")

        try:
            oracle = oracle_class(cnf, **(solver_options or {}))
        except TypeError as exc:
            raise SolverError(f"Backend {solver} does not accept options {sorted(solver_options or {})}: {exc}") from exc
        try:
            satisfiable = oracle.compute()
            literals = oracle.model
        finally:
            oracle.delete()

        result.tried.append(length)
        if not satisfiable:
            sink(f"Length {length}: UNSAT")
            continue

        sink(f"Length {length}: SAT")
        model = Model(literals, registry)
        result.found = True
        result.length = length
        result.model = model
        result.steps = decode(model, network, length)
        break

    result.elapsed = time.time() - start_time
    return result
