"""
SAT oracle backed by a PySAT solver (Minisat 2.2 unless told otherwise).
"""
from __future__ import annotations

from typing import List

from pysat.formula import CNF
from pysat.solvers import Solver


class PathOracle:
    """Decides a CNF with one call to a PySAT solver."""

    def __init__(self, cnf: CNF, name: str = "m22"):
        self.sat_solver = Solver(name=name, bootstrap_with=cnf.clauses)
        self.satisfiable: bool | None = None
        self.solution: List[int] | None = None

    # ------------------------------------------------------------------
    def compute(self) -> bool:
        self.satisfiable = bool(self.sat_solver.solve())
        self.solution = self.sat_solver.get_model() if self.satisfiable else None
        return self.satisfiable

    # ------------------------------------------------------------------
    @property
    def model(self) -> List[int] | None:
        return self.solution

    # ------------------------------------------------------------------
    def delete(self) -> None:
        if hasattr(self, "sat_solver") and self.sat_solver is not None:
            self.sat_solver.delete()
            self.sat_solver = None
