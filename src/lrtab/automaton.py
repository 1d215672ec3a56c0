# region License
# -----------------------------------------------------------------------------
# lrtab: automaton.py
#
# Copyright (C) 2016-2018
# David M. Beazley (Dabeaz LLC)
# Copyright (C) 2024, Sachaa-Thanasius
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are
# met:
#
# * Redistributions of source code must retain the above copyright notice,
#   this list of conditions and the following disclaimer.
# * Redistributions in binary form must reproduce the above copyright notice,
#   this list of conditions and the following disclaimer in the documentation
#   and/or other materials provided with the distribution.
# * Neither the name of the David Beazley or Dabeaz LLC may be used to
#   endorse or promote products derived from this software without
#  specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR
# A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT
# OWNER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL,
# SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE,
# DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY
# THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT
# (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# -----------------------------------------------------------------------------
# endregion

"""Construction of the canonical collection of LR(1) item sets."""

from collections import deque
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

from ._misc import override
from .grammar import END, Grammar, Symbol
from .items import ItemSet, LRItem, closure, goto

__all__ = ("Automaton", "build_automaton")


class Automaton:
    """The LR(1) automaton of a grammar: its states and the transitions between them.

    Attributes
    ----------
    grammar: Grammar
        The grammar the automaton was built from.
    states: tuple[ItemSet, ...]
        Item sets, numbered in discovery order. State 0 is the closure of [S' -> . start, $end].
    transitions: Mapping[tuple[int, Symbol], int]
        (state, symbol) -> target state. There is at most one target for each pair.
    """

    def __init__(
        self,
        grammar: Grammar,
        states: tuple[ItemSet, ...],
        transitions: Mapping[tuple[int, Symbol], int],
    ) -> None:
        self.grammar = grammar
        self.states = states
        self.transitions: Mapping[tuple[int, Symbol], int] = MappingProxyType(dict(transitions))

        outgoing: list[dict[Symbol, int]] = [{} for _ in states]
        for (st, sym), target in self.transitions.items():
            outgoing[st][sym] = target
        self._outgoing = tuple(MappingProxyType(d) for d in outgoing)
        self._index = {items: i for i, items in enumerate(states)}

    def __len__(self) -> int:
        return len(self.states)

    def successors(self, state: int) -> Mapping[Symbol, int]:
        """Return the outgoing transitions of `state` as symbol -> target."""

        return self._outgoing[state]

    def target(self, state: int, symbol: Symbol) -> Optional[int]:
        return self._outgoing[state].get(symbol)

    def state_of(self, items: ItemSet) -> Optional[int]:
        """Return the number of the state whose item set equals `items`, if any."""

        return self._index.get(items)

    @override
    def __repr__(self) -> str:
        return f"<Automaton states={len(self.states)} transitions={len(self.transitions)}>"


def build_automaton(grammar: Grammar) -> Automaton:
    """Compute the canonical collection of LR(1) item sets.

    Extended Summary
    ----------------
    States are processed first-in, first-out. For every symbol appearing after a dot in a state, goto() gives the
    target item set; an identical item set anywhere in the collection is reused instead of becoming a new state.
    Numbering only depends on the grammar's production order, so building twice gives the same automaton.
    """

    initial = closure(grammar, [LRItem(0, 0, END)])
    states: list[ItemSet] = [initial]
    index: dict[ItemSet, int] = {initial: 0}
    transitions: dict[tuple[int, Symbol], int] = {}

    worklist = deque([0])
    while worklist:
        st = worklist.popleft()
        items = states[st]
        for x in items.next_symbols(grammar):
            g = goto(grammar, items, x)
            if not g:
                continue
            j = index.get(g)
            if j is None:
                j = index[g] = len(states)
                states.append(g)
                worklist.append(j)
            transitions[(st, x)] = j

    return Automaton(grammar, tuple(states), transitions)
