"""
Propositional formula trees over registry atoms.

Nodes are frozen dataclasses, so structurally equal formulas compare and
hash equal. ``And(())`` is true and ``Or(())`` is false.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Mapping, Tuple


class Formula:
    __slots__ = ()


@dataclass(frozen=True)
class Atom(Formula):
    key: Hashable
    var: int

    def __repr__(self) -> str:
        return f"Atom({self.key!r})"


@dataclass(frozen=True)
class Not(Formula):
    arg: Formula


@dataclass(frozen=True)
class And(Formula):
    args: Tuple[Formula, ...]


@dataclass(frozen=True)
class Or(Formula):
    args: Tuple[Formula, ...]


@dataclass(frozen=True)
class Implies(Formula):
    lhs: Formula
    rhs: Formula


@dataclass(frozen=True)
class Eq(Formula):
    lhs: Formula
    rhs: Formula


@dataclass(frozen=True)
class ExactlyOne(Formula):
    """Exactly one of ``atoms`` holds; clausified with a cardinality encoding."""
    atoms: Tuple[Atom, ...]


TRUE = And(())
FALSE = Or(())


def conj(*args: Formula) -> Formula:
    return args[0] if len(args) == 1 else And(tuple(args))


def disj(*args: Formula) -> Formula:
    return args[0] if len(args) == 1 else Or(tuple(args))


def forbid(*args: Formula) -> Formula:
    """Not all of ``args`` hold together."""
    return Not(conj(*args))


def xor(a: Formula, b: Formula) -> Formula:
    """Exactly one of ``a``/``b``, written as a disjunction of two exclusive conjunctions."""
    return Or((And((a, Not(b))), And((Not(a), b))))


def evaluate(formula: Formula, valuation: Mapping[Hashable, bool]) -> bool:
    """Truth value of ``formula`` when each atom takes ``valuation[atom.key]`` (default false)."""
    if isinstance(formula, Atom):
        return bool(valuation.get(formula.key, False))
    if isinstance(formula, Not):
        return not evaluate(formula.arg, valuation)
    if isinstance(formula, And):
        return all(evaluate(arg, valuation) for arg in formula.args)
    if isinstance(formula, Or):
        return any(evaluate(arg, valuation) for arg in formula.args)
    if isinstance(formula, Implies):
        return not evaluate(formula.lhs, valuation) or evaluate(formula.rhs, valuation)
    if isinstance(formula, Eq):
        return evaluate(formula.lhs, valuation) == evaluate(formula.rhs, valuation)
    if isinstance(formula, ExactlyOne):
        return sum(1 for atom in formula.atoms if evaluate(atom, valuation)) == 1
    raise TypeError(f"Not a formula: {formula!r}")


def atoms_of(formula: Formula):
    """Set of atoms occurring in ``formula``."""
    found = set()
    stack = [formula]
    while stack:
        node = stack.pop()
        if isinstance(node, Atom):
            found.add(node)
        elif isinstance(node, Not):
            stack.append(node.arg)
        elif isinstance(node, (And, Or)):
            stack.extend(node.args)
        elif isinstance(node, (Implies, Eq)):
            stack.extend((node.lhs, node.rhs))
        elif isinstance(node, ExactlyOne):
            found.update(node.atoms)
        else:
            raise TypeError(f"Not a formula: {node!r}")
    return found
