"""
Tseitin clausification of formula trees into PySAT CNF.

Top-level conjunctions are split, and top-level clauses (disjunctions,
implications between literals/conjunctions and disjunctions, negated
conjunctions) are emitted directly. Only nested connectives get an
auxiliary variable. Auxiliary variables are drawn from the same ``IDPool``
as the atoms so that ids never collide.
"""
from __future__ import annotations

from typing import Dict, List

from pysat.card import CardEnc, EncType, IDPool
from pysat.formula import CNF

from tunnelsat.encoding.formula import And, Atom, Eq, ExactlyOne, Formula, Implies, Not, Or

_TRUE_KEY = ("tseitin", "true")


class Clausifier:
    def __init__(self, vpool: IDPool):
        self.vpool = vpool
        self.cnf = CNF()
        self._defined: Dict[Formula, int] = {}
        self._true = None

    # ------------------------------------------------------------------
    def _true_literal(self) -> int:
        if self._true is None:
            self._true = self.vpool.id(_TRUE_KEY)
            self.cnf.append([self._true])
        return self._true

    def _aux(self, formula: Formula) -> int:
        return self.vpool.id(("tseitin", formula))

    # ------------------------------------------------------------------
    def literal(self, formula: Formula) -> int:
        """Literal equivalent to ``formula``, adding definitions as needed."""
        if isinstance(formula, Atom):
            return formula.var
        if isinstance(formula, Not):
            return -self.literal(formula.arg)
        if isinstance(formula, (And, Or)) and len(formula.args) == 1:
            return self.literal(formula.args[0])
        if isinstance(formula, And) and not formula.args:
            return self._true_literal()
        if isinstance(formula, Or) and not formula.args:
            return -self._true_literal()

        if formula in self._defined:
            return self._defined[formula]

        if isinstance(formula, And):
            lits = [self.literal(arg) for arg in formula.args]
            aux = self._aux(formula)
            for lit in lits:
                self.cnf.append([-aux, lit])
            self.cnf.append([aux] + [-lit for lit in lits])
        elif isinstance(formula, Or):
            lits = [self.literal(arg) for arg in formula.args]
            aux = self._aux(formula)
            for lit in lits:
                self.cnf.append([aux, -lit])
            self.cnf.append([-aux] + lits)
        elif isinstance(formula, Implies):
            aux = self.literal(Or((Not(formula.lhs), formula.rhs)))
        elif isinstance(formula, Eq):
            a = self.literal(formula.lhs)
            b = self.literal(formula.rhs)
            aux = self._aux(formula)
            self.cnf.append([-aux, -a, b])
            self.cnf.append([-aux, a, -b])
            self.cnf.append([aux, a, b])
            self.cnf.append([aux, -a, -b])
        elif isinstance(formula, ExactlyOne):
            raise TypeError("ExactlyOne is only supported as a top-level conjunct")
        else:
            raise TypeError(f"Not a formula: {formula!r}")

        self._defined[formula] = aux
        return aux

    def _negated_lhs(self, formula: Formula) -> List[int]:
        if isinstance(formula, And):
            return [-self.literal(arg) for arg in formula.args]
        return [-self.literal(formula)]

    def _rhs(self, formula: Formula) -> List[int]:
        if isinstance(formula, Or):
            return [self.literal(arg) for arg in formula.args]
        return [self.literal(formula)]

    # ------------------------------------------------------------------
    def add(self, formula: Formula) -> None:
        """Assert ``formula``."""
        if isinstance(formula, And):
            for arg in formula.args:
                self.add(arg)
        elif isinstance(formula, Or):
            self._clause([self.literal(arg) for arg in formula.args])
        elif isinstance(formula, Not) and isinstance(formula.arg, And):
            self._clause(self._negated_lhs(formula.arg))
        elif isinstance(formula, Not) and isinstance(formula.arg, Not):
            self.add(formula.arg.arg)
        elif isinstance(formula, Implies):
            if isinstance(formula.rhs, And):
                for arg in formula.rhs.args:
                    self.add(Implies(formula.lhs, arg))
            else:
                self._clause(self._negated_lhs(formula.lhs) + self._rhs(formula.rhs))
        elif isinstance(formula, Eq):
            a = self.literal(formula.lhs)
            b = self.literal(formula.rhs)
            self.cnf.append([-a, b])
            self.cnf.append([a, -b])
        elif isinstance(formula, ExactlyOne):
            self._exactly_one([atom.var for atom in formula.atoms])
        else:
            self._clause([self.literal(formula)])

    def _clause(self, lits: List[int]) -> None:
        if not lits:
            lits = [-self._true_literal()]
        self.cnf.append(lits)

    def _exactly_one(self, lits: List[int]) -> None:
        if len(lits) <= 1:
            self._clause(lits)
            return
        encoded = CardEnc.equals(lits=lits, bound=1, vpool=self.vpool, encoding=EncType.seqcounter)
        self.cnf.extend(encoded.clauses)


def to_cnf(formula: Formula, vpool: IDPool) -> CNF:
    clausifier = Clausifier(vpool)
    clausifier.add(formula)
    return clausifier.cnf
