"""
0-1 feasibility oracle in Gurobi.

Each CNF variable becomes a binary, each clause the row
``sum(x for positive literals) + sum(1 - x for negative literals) >= 1``.
There is no objective: any feasible point is a model, infeasibility means
the formula is unsatisfiable.
"""
from __future__ import annotations

from typing import List

import gurobipy as gp
from gurobipy import GRB
from pysat.formula import CNF

from tunnelsat.errors import SolverError


class PathOracle:
    def __init__(self, cnf: CNF, output: bool = False):
        self.gurobi_model = gp.Model("tunnel_path_feasibility")
        self.gurobi_model.setParam("OutputFlag", 1 if output else 0)

        self.variables = self.gurobi_model.addVars(range(1, cnf.nv + 1), vtype=GRB.BINARY, name="x")
        self.satisfiable: bool | None = None
        self.solution: List[int] | None = None

        self._build_model_from_cnf(cnf)

    def _build_model_from_cnf(self, cnf: CNF) -> None:
        for i, clause in enumerate(cnf.clauses):
            self.gurobi_model.addConstr(
                gp.quicksum(
                    self.variables[abs(l)] if l > 0 else (1 - self.variables[abs(l)])
                    for l in clause
                ) >= 1,
                name=f"clause_{i}"
            )
        self.gurobi_model.setObjective(gp.LinExpr(), GRB.MINIMIZE)
        self.gurobi_model.update()

    # ------------------------------------------------------------------
    def compute(self) -> bool:
        try:
            self.gurobi_model.optimize()
        except gp.GurobiError as exc:
            raise SolverError(f"Gurobi failed: {exc}") from exc

        status = self.gurobi_model.status
        if status == GRB.OPTIMAL:
            self.satisfiable = True
            self.solution = [
                var_id if var_obj.X > 0.5 else -var_id
                for var_id, var_obj in self.variables.items()
            ]
        elif status in (GRB.INFEASIBLE, GRB.INF_OR_UNBD):
            self.satisfiable = False
            self.solution = None
        else:
            raise SolverError(f"Gurobi stopped with status {status}")
        return self.satisfiable

    # ------------------------------------------------------------------
    @property
    def model(self) -> List[int] | None:
        return self.solution

    # ------------------------------------------------------------------
    def delete(self) -> None:
        if hasattr(self, "gurobi_model") and self.gurobi_model:
            self.gurobi_model.dispose()
            self.gurobi_model = None
