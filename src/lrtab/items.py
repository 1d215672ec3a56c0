# region License
# -----------------------------------------------------------------------------
# lrtab: items.py
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

"""LR(1) items, item sets, and the closure and goto operations over them."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Optional

from ._misc import override
from .grammar import Grammar, NonTerminal, Symbol, Terminal

__all__ = ("ItemSet", "LRItem", "closure", "goto")


@dataclass(frozen=True, order=True)
class LRItem:
    """This class represents a specific stage of parsing a production rule, e.g. "expr -> expr . PLUS term, $end".

    Extended Summary
    ----------------
    In the example given in the short summary, the "." represents the current location of the parse and "$end" is the
    lookahead terminal that must follow the production for it to be reduced.

    Items are plain values: two items are equal iff their production number, dot position, and lookahead all match.
    They sort by that same triple.

    Attributes
    ----------
    production: int
        Production number.
    dot: int
        Location of the "." in the production body, from 0 to len(body).
    lookahead: Terminal
        LR(1) lookahead terminal.
    """

    production: int
    dot: int
    lookahead: Terminal

    def next_symbol(self, grammar: Grammar) -> Optional[Symbol]:
        """Return the symbol right after the ".", or None if the item is reduce-ready."""

        body = grammar[self.production].body
        return body[self.dot] if self.dot < len(body) else None

    def is_reduce_ready(self, grammar: Grammar) -> bool:
        return self.dot == len(grammar[self.production])

    def advance(self) -> "LRItem":
        return LRItem(self.production, self.dot + 1, self.lookahead)

    def format(self, grammar: Grammar) -> str:
        p = grammar[self.production]
        syms = [s.name for s in p.body]
        syms.insert(self.dot, ".")
        return f'{p.head} -> {" ".join(syms)}, {self.lookahead}'


class ItemSet:
    """An immutable set of `LRItem`s, i.e. one state of the LR(1) automaton.

    Extended Summary
    ----------------
    Equality and hashing follow set semantics, so two item sets discovered in different orders are still the same
    state. Iteration is always in sorted item order, which keeps everything computed from an item set deterministic.
    """

    __slots__ = ("_items", "_members")

    def __init__(self, items: Iterable[LRItem] = ()) -> None:
        self._members = frozenset(items)
        self._items = tuple(sorted(self._members))

    def __iter__(self) -> Iterator[LRItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._members

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ItemSet):
            return NotImplemented
        return self._members == other._members

    @override
    def __hash__(self) -> int:
        return hash(self._members)

    def __le__(self, other: "ItemSet") -> bool:
        return self._members <= other._members

    @override
    def __repr__(self) -> str:
        return f"ItemSet({list(self._items)!r})"

    @property
    def items(self) -> tuple[LRItem, ...]:
        return self._items

    def kernel(self) -> "ItemSet":
        """Items that aren't the product of closure: the dot isn't at the start, or it's the initial item."""

        return ItemSet(it for it in self._items if it.dot > 0 or it.production == 0)

    def next_symbols(self, grammar: Grammar) -> list[Symbol]:
        """Collect the symbols that appear right after a "." in this set, in item order and without duplicates."""

        syms: dict[Symbol, None] = {}
        for it in self._items:
            x = it.next_symbol(grammar)
            if x is not None:
                syms[x] = None
        return list(syms)

    def format(self, grammar: Grammar) -> list[str]:
        """Render the set one line per item core, with the lookaheads of that core joined by "/"."""

        cores: dict[tuple[int, int], list[str]] = {}
        for it in self._items:
            cores.setdefault((it.production, it.dot), []).append(it.lookahead.name)

        lines: list[str] = []
        for (prod, dot), lookaheads in cores.items():
            p = grammar[prod]
            syms = [s.name for s in p.body]
            syms.insert(dot, ".")
            lines.append(f'({prod}) {p.head} -> {" ".join(syms)}, {"/".join(lookaheads)}')
        return lines


def closure(grammar: Grammar, items: Iterable[LRItem]) -> ItemSet:
    """Compute the LR(1) closure operation on a set of LR(1) items.

    Extended Summary
    ----------------
    For every item [A -> α . B β, a] with a non-terminal B after the dot, add [B -> . γ, b] for every production
    B -> γ and every terminal b in FIRST(β a). Repeat until nothing new is added.

    Parameters
    ----------
    grammar: Grammar
        The grammar the items refer to.
    items: Iterable[LRItem]
        A set of LR(1) items.
    """

    result = set(items)
    pending = sorted(result)
    while pending:
        item = pending.pop()
        body = grammar[item.production].body
        if item.dot >= len(body):
            continue
        b = body[item.dot]
        if not isinstance(b, NonTerminal):
            continue

        lookaheads, beta_nullable = grammar.first_of(body[item.dot + 1 :])
        if beta_nullable:
            lookaheads = lookaheads | {item.lookahead}

        for p in grammar.productions_for(b):
            for la in sorted(lookaheads):
                # Add [B -> . γ, b] to the set
                new = LRItem(p.number, 0, la)
                if new not in result:
                    result.add(new)
                    pending.append(new)

    return ItemSet(result)


def goto(grammar: Grammar, items: Iterable[LRItem], symbol: Symbol) -> ItemSet:
    """Compute the goto function goto(I, X) where I is a set of LR(1) items and X is a grammar symbol.

    Returns
    -------
    ItemSet
        The closure of every item of `items` with its dot moved over `symbol`. It's empty when no item has `symbol`
        right after the dot, meaning there is no transition on `symbol`.
    """

    moved = [it.advance() for it in items if it.next_symbol(grammar) == symbol]
    if not moved:
        return ItemSet()
    return closure(grammar, moved)
