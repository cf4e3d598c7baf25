"""
Variable scheme of the reduction.

Two families of atoms are used:

* ``StateKey(node, pos, height)`` is true when the path is at ``node`` at
  position ``pos`` with the top of the stack at cell ``height``.
* ``SymbolKey(pos, height, symbol)`` is true when cell ``height`` of the
  stack at position ``pos`` holds ``symbol``.

The registry maps each structural key to a single ``Atom`` for the whole
lifetime of one reduction, backed by a PySAT ``IDPool``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Hashable, Optional

from pysat.card import IDPool

from tunnelsat.encoding.formula import Atom
from tunnelsat.network import Symbol


@dataclass(frozen=True)
class StateKey:
    node: int
    pos: int
    height: int


@dataclass(frozen=True)
class SymbolKey:
    pos: int
    height: int
    symbol: Symbol


def stack_capacity(length: int) -> int:
    """Number of stack cells a path of ``length`` steps may use (heights ``0..capacity-1``)."""
    return length // 2 + 1


def height_range(length: int) -> range:
    return range(stack_capacity(length))


class AtomRegistry:
    def __init__(self, vpool: Optional[IDPool] = None):
        self.vpool = vpool if vpool is not None else IDPool()
        self._atoms: Dict[Hashable, Atom] = {}

    def atom_for(self, key: Hashable) -> Atom:
        atom = self._atoms.get(key)
        if atom is None:
            atom = Atom(key, self.vpool.id(key))
            self._atoms[key] = atom
        return atom

    def state(self, node: int, pos: int, height: int) -> Atom:
        return self.atom_for(StateKey(node, pos, height))

    def symbol(self, pos: int, height: int, symbol: Symbol) -> Atom:
        return self.atom_for(SymbolKey(pos, height, symbol))

    def get(self, key: Hashable) -> Optional[Atom]:
        """Atom already registered for ``key``, without creating one."""
        return self._atoms.get(key)

    def atoms(self):
        return list(self._atoms.values())

    def __len__(self) -> int:
        return len(self._atoms)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._atoms
