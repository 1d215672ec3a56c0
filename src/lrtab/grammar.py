# region License
# -----------------------------------------------------------------------------
# lrtab: grammar.py
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

import functools
import threading
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Union

from ._misc import TypeAlias, override
from .errors import EmptyGrammarError, GrammarError, UndeclaredSymbolError

__all__ = (
    "AUGMENTED_START",
    "END",
    "Grammar",
    "GrammarBuilder",
    "NonTerminal",
    "Production",
    "Symbol",
    "Terminal",
)


# ============================================================================
# region -------- Symbols --------
# ============================================================================


@functools.total_ordering
class Symbol:
    """A grammar symbol, tagged as either a terminal or a non-terminal.

    Extended Summary
    ----------------
    Symbols are interned: constructing ``Terminal("x")`` twice returns the same object. Two symbols are equal only if
    both their tag and name match, so ``Terminal("x") != NonTerminal("x")``.

    Symbols sort with all terminals ahead of all non-terminals, then by name. Item sets rely on this total order to
    have a canonical ordering.
    """

    __slots__ = ("name",)

    _rank: ClassVar[int]
    _interned: ClassVar[dict[tuple[type["Symbol"], str], "Symbol"]] = {}
    _intern_lock: ClassVar[threading.Lock] = threading.Lock()

    if TYPE_CHECKING:
        name: str

    def __new__(cls, name: str):
        if cls is Symbol:
            msg = "Symbol can't be instantiated directly; use Terminal or NonTerminal."
            raise TypeError(msg)
        if not isinstance(name, str) or not name:
            msg = f"Symbol name must be a non-empty string, not {name!r}."
            raise TypeError(msg)

        key = (cls, name)
        try:
            return Symbol._interned[key]
        except KeyError:
            pass

        with Symbol._intern_lock:
            sym = Symbol._interned.get(key)
            if sym is None:
                sym = super().__new__(cls)
                object.__setattr__(sym, "name", name)
                Symbol._interned[key] = sym
        return sym

    @override
    def __setattr__(self, name: str, value: object) -> None:
        msg = f"{type(self).__name__} is immutable."
        raise AttributeError(msg)

    def __reduce__(self) -> tuple[type["Symbol"], tuple[str]]:
        return (type(self), (self.name,))

    @property
    def is_terminal(self) -> bool:
        return isinstance(self, Terminal)

    @override
    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Symbol):
            return NotImplemented
        return type(self) is type(other) and self.name == other.name

    def __lt__(self, other: "Symbol") -> bool:
        if not isinstance(other, Symbol):
            return NotImplemented
        return (self._rank, self.name) < (other._rank, other.name)

    @override
    def __hash__(self) -> int:
        return hash((self._rank, self.name))

    @override
    def __str__(self) -> str:
        return self.name

    @override
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class Terminal(Symbol):
    """A token produced by the lexer."""

    __slots__ = ()
    _rank = 0


class NonTerminal(Symbol):
    """A symbol defined by one or more grammar rules."""

    __slots__ = ()
    _rank = 1


END = Terminal("$end")
"""End-of-input marker. It is the lookahead of the initial item and the only terminal an accept action sits on."""

AUGMENTED_START = NonTerminal("S'")
"""Head of the synthetic production 0, ``S' -> start``."""

_RESERVED_NAMES = frozenset({END.name, AUGMENTED_START.name})

# endregion


# ============================================================================
# region -------- Productions --------
# ============================================================================


@dataclass(frozen=True)
class Production:
    """This class stores the information about a single production or grammar rule.

    Extended Summary
    ----------------
    A grammar rule refers to a specification such as this: "expr -> expr PLUS term".

    Attributes
    ----------
    number: int
        Production number. Number 0 is always the augmented start production.
    head: NonTerminal
        Left-hand side, e.g. ``expr``.
    body: tuple[Symbol, ...]
        Symbols on the right side, e.g. ``(expr, PLUS, term)``. Empty for an epsilon rule.
    action: Any
        Opaque semantic action payload. Never interpreted; it is carried through to the table for emitters.
    """

    number: int
    head: NonTerminal
    body: tuple[Symbol, ...]
    action: Any = field(default=None, compare=False)

    def __len__(self) -> int:
        return len(self.body)

    def __getitem__(self, index: int) -> Symbol:
        return self.body[index]

    @override
    def __str__(self) -> str:
        if self.body:
            return f'{self.head} -> {" ".join(s.name for s in self.body)}'
        return f"{self.head} -> <empty>"

    @override
    def __repr__(self) -> str:
        return f"Production({self.number}, {self})"


Rule: TypeAlias = Union[
    tuple[NonTerminal, Sequence[Symbol]],
    tuple[NonTerminal, Sequence[Symbol], Any],
]
"""A raw rule handed to `Grammar`: (head, body) or (head, body, action)."""

# endregion


# ============================================================================
# region -------- Grammar --------
# ============================================================================


class Grammar:
    """An immutable, validated context-free grammar, augmented with ``S' -> start``.

    Parameters
    ----------
    terminals: Iterable[Terminal | str]
        The declared terminals, in declaration order. Plain strings are converted to `Terminal`.
    rules: Iterable[Rule]
        The productions as (head, body) or (head, body, action) tuples, in declaration order. They are numbered from 1.
    start: NonTerminal | str, optional
        The start symbol. Defaults to the head of the first rule.

    Attributes
    ----------
    productions: tuple[Production, ...]
        All productions. Entry 0 is the augmented production ``S' -> start``.
    start: NonTerminal
        The start symbol.
    terminals: tuple[Terminal, ...]
        Declared terminals in declaration order, followed by `END`.
    nonterminals: tuple[NonTerminal, ...]
        Non-terminals in order of first definition. The augmented start symbol isn't included.
    nullable: frozenset[NonTerminal]
        Non-terminals that derive the empty string.
    first: Mapping[NonTerminal, frozenset[Terminal]]
        FIRST sets of every non-terminal (without epsilon; see `nullable`).
    unreachable: tuple[NonTerminal, ...]
        Non-terminals that can't be reached from the start symbol.
    underivable: tuple[NonTerminal, ...]
        Non-terminals that can't derive any string of terminals.
    unused_terminals: tuple[Terminal, ...]
        Declared terminals that never appear in a production body.

    Raises
    ------
    EmptyGrammarError
        If there are no rules.
    UndeclaredSymbolError
        If a body uses a terminal that wasn't declared or a non-terminal that has no rules.
    GrammarError
        For any other malformed definition: reserved names, duplicate rules, bad heads, an undefined start symbol.
    """

    def __init__(
        self,
        terminals: Iterable[Union[Terminal, str]],
        rules: Iterable[Rule],
        start: Optional[Union[NonTerminal, str]] = None,
    ) -> None:
        raw_rules = list(rules)
        if not raw_rules:
            raise EmptyGrammarError

        declared: dict[Terminal, None] = {}
        for term in terminals:
            if isinstance(term, str):
                term = Terminal(term)  # noqa: PLW2901
            if not isinstance(term, Terminal):
                msg = f"Declared terminal {term!r} is not a Terminal."
                raise GrammarError(msg)
            if term.name in _RESERVED_NAMES:
                msg = f"Illegal token name {term.name!r}. Is a reserved word."
                raise GrammarError(msg)
            declared[term] = None

        productions: list[Production] = [None]  # pyright: ignore # Reserved spot for the augmented production.
        prodnames: dict[NonTerminal, list[Production]] = {}
        seen: set[tuple[NonTerminal, tuple[Symbol, ...]]] = set()

        for rule in raw_rules:
            head, body, action = _unpack_rule(rule)
            if head.name in _RESERVED_NAMES:
                msg = f"Illegal rule name {head.name!r}. Is a reserved word."
                raise GrammarError(msg)
            for sym in body:
                if not isinstance(sym, Symbol):
                    msg = f"Rule for {head.name!r} contains {sym!r}, which is not a Symbol."
                    raise GrammarError(msg)
                if sym.name in _RESERVED_NAMES:
                    msg = f"Rule for {head.name!r} uses the reserved symbol {sym.name!r}."
                    raise GrammarError(msg)

            if (head, body) in seen:
                msg = f"Duplicate rule {head} -> {' '.join(s.name for s in body) or '<empty>'}."
                raise GrammarError(msg)
            seen.add((head, body))

            p = Production(len(productions), head, body, action)
            productions.append(p)
            prodnames.setdefault(head, []).append(p)

        if start is None:
            start = productions[1].head
        elif isinstance(start, str):
            start = NonTerminal(start)
        if start not in prodnames:
            msg = f"Start symbol {start.name!r} undefined."
            raise GrammarError(msg)

        productions[0] = Production(0, AUGMENTED_START, (start,))

        undeclared = [
            (sym, p)
            for p in productions[1:]
            for sym in p.body
            if (sym not in declared if sym.is_terminal else sym not in prodnames)
        ]
        if undeclared:
            raise UndeclaredSymbolError(undeclared)

        # fmt: off
        self.productions:   tuple[Production, ...]  = tuple(productions)
        self.start:         NonTerminal             = start
        self.terminals:     tuple[Terminal, ...]    = (*declared, END)
        self.nonterminals:  tuple[NonTerminal, ...] = tuple(prodnames)
        # fmt: on
        self._prodnames: Mapping[NonTerminal, tuple[Production, ...]] = MappingProxyType(
            {AUGMENTED_START: (productions[0],), **{n: tuple(ps) for n, ps in prodnames.items()}}
        )

        self.nullable: frozenset[NonTerminal] = self._compute_nullable()
        self.first: Mapping[NonTerminal, frozenset[Terminal]] = self._compute_first()
        self.unreachable: tuple[NonTerminal, ...] = self._find_unreachable()
        self.underivable: tuple[NonTerminal, ...] = self._find_underivable()
        used = {sym for p in self.productions for sym in p.body}
        self.unused_terminals: tuple[Terminal, ...] = tuple(t for t in declared if t not in used)

    def __len__(self) -> int:
        return len(self.productions)

    def __getitem__(self, index: int) -> Production:
        return self.productions[index]

    def __iter__(self) -> Iterator[Production]:
        return iter(self.productions)

    def productions_for(self, head: NonTerminal) -> tuple[Production, ...]:
        """Return the productions of `head`, in declaration order."""

        return self._prodnames.get(head, ())

    def first_of(self, beta: Sequence[Symbol]) -> tuple[frozenset[Terminal], bool]:
        """Compute FIRST(beta) where beta is a sequence of symbols.

        Returns
        -------
        tuple[frozenset[Terminal], bool]
            The terminals that can begin a string derived from `beta`, and whether `beta` can derive the empty string.
        """

        result: set[Terminal] = set()
        for x in beta:
            if isinstance(x, Terminal):
                result.add(x)
                return frozenset(result), False
            result |= self.first[x]
            if x not in self.nullable:
                return frozenset(result), False
        return frozenset(result), True

    def _compute_nullable(self) -> frozenset[NonTerminal]:
        nullable: set[NonTerminal] = set()
        while True:
            some_change = False
            for p in self.productions:
                if p.head not in nullable and all(s in nullable for s in p.body):
                    nullable.add(p.head)
                    some_change = True
            if not some_change:
                return frozenset(nullable)

    def _compute_first(self) -> Mapping[NonTerminal, frozenset[Terminal]]:
        first: dict[NonTerminal, set[Terminal]] = {n: set() for n in self._prodnames}
        self.first = first  # pyright: ignore # Partial sets are enough for first_of() while propagating.

        # Propagate symbols until no change.
        while True:
            some_change = False
            for p in self.productions:
                fst, _ = self.first_of(p.body)
                if not fst <= first[p.head]:
                    first[p.head] |= fst
                    some_change = True
            if not some_change:
                break

        return MappingProxyType({n: frozenset(f) for n, f in first.items()})

    def _find_unreachable(self) -> tuple[NonTerminal, ...]:
        """Find all of the nonterminal symbols that can't be reached from the starting symbol."""

        reachable: set[NonTerminal] = {self.start}
        stack = [self.start]
        while stack:
            for p in self.productions_for(stack.pop()):
                for s in p.body:
                    if isinstance(s, NonTerminal) and s not in reachable:
                        reachable.add(s)
                        stack.append(s)
        return tuple(n for n in self.nonterminals if n not in reachable)

    def _find_underivable(self) -> tuple[NonTerminal, ...]:
        """Find all of the nonterminal symbols that can never derive a string of only terminals.

        Notes
        -----
        These are the infinite recursion cycles, e.g. "a -> a b" with no other rule for "a".
        """

        terminates: set[NonTerminal] = set()
        while True:
            some_change = False
            for p in self.productions[1:]:
                if p.head in terminates:
                    continue
                # Production p terminates iff all of its rhs symbols terminate.
                if all(s.is_terminal or s in terminates for s in p.body):
                    terminates.add(p.head)
                    some_change = True
            if not some_change:
                break
        return tuple(n for n in self.nonterminals if n not in terminates)

    @override
    def __str__(self) -> str:
        """Return str(self).

        Extended Summary
        ----------------
        Serves as debugging output. Printing the grammar will produce a detailed description along with some
        diagnostics.
        """

        out: list[str] = []
        out.append("Grammar:\n")
        out.extend(f"Rule {p.number:<5d} {p}" for p in self.productions)

        if self.unused_terminals:
            out.append("\nUnused terminals:\n")
            out.extend(f"    {term}" for term in self.unused_terminals)

        if self.unreachable:
            out.append("\nUnreachable nonterminals:\n")
            out.extend(f"    {n}" for n in self.unreachable)

        if self.underivable:
            out.append("\nNonterminals deriving no terminal string:\n")
            out.extend(f"    {n}" for n in self.underivable)

        out.append("\nTerminals, with rules where they appear:\n")
        out.extend(f"{term} : {self._uses(term)}".rstrip() for term in self.terminals)

        out.append("\nNonterminals, with rules where they appear:\n")
        out.extend(f"{nonterm} : {self._uses(nonterm)}".rstrip() for nonterm in self.nonterminals)

        out.append("")
        return "\n".join(out)

    @override
    def __repr__(self) -> str:
        return f"<Grammar start={self.start.name!r} rules={len(self.productions) - 1}>"

    def _uses(self, sym: Symbol) -> str:
        return " ".join(str(p.number) for p in self.productions if sym in p.body)


def _unpack_rule(rule: Rule) -> tuple[NonTerminal, tuple[Symbol, ...], Any]:
    if len(rule) == 2:
        head, body = rule  # pyright: ignore[reportGeneralTypeIssues]
        action = None
    elif len(rule) == 3:
        head, body, action = rule  # pyright: ignore[reportGeneralTypeIssues]
    else:
        msg = f"Malformed rule {rule!r}. Must be (head, body) or (head, body, action)."
        raise GrammarError(msg)

    if not isinstance(head, NonTerminal):
        msg = f"Illegal rule name {getattr(head, 'name', head)!r}. A rule's head must be a NonTerminal."
        raise GrammarError(msg)
    return head, tuple(body), action


# endregion


# ============================================================================
# region -------- Builder --------
# ============================================================================


class GrammarBuilder:
    """Assemble a `Grammar` from symbol names, the way a grammar-file reader would.

    Extended Summary
    ----------------
    Names listed in `terminals` are terminals. A single character in quotes, e.g. ``'+'``, is a literal token and is
    declared as a terminal automatically. Every other name is a non-terminal.

    Examples
    --------
    >>> builder = GrammarBuilder(["id"])
    >>> builder.add_production("E", "E '+' T")
    >>> builder.add_production("E", "T")
    >>> builder.add_production("T", "id")
    >>> grammar = builder.build()
    """

    def __init__(self, terminals: Iterable[str] = ()) -> None:
        self.terminals: dict[str, None] = {}
        for term in terminals:
            self.declare(term)
        self.rules: list[tuple[str, list[str], Any]] = []
        self.start: Optional[str] = None

    def declare(self, name: str) -> None:
        """Declare `name` as a terminal."""

        if name in _RESERVED_NAMES:
            msg = f"Illegal token name {name!r}. Is a reserved word."
            raise GrammarError(msg)
        self.terminals[name] = None

    def add_production(self, prodname: str, syms: Union[str, Sequence[str]], action: Any = None) -> None:
        """Add the rule ``prodname -> syms``.

        Parameters
        ----------
        prodname: str
            The name of the production, e.g. "expr" for the rule "expr -> expr PLUS term".
        syms: str | Sequence[str]
            The symbols of the body, either as a list or as a whitespace-separated string. Empty for an epsilon rule.
        action: Any, optional
            Opaque semantic action attached to the production.

        Raises
        ------
        GrammarError
            If the rule name is a token or a reserved word, or a literal token is malformed.
        """

        if prodname in self.terminals:
            msg = f"Illegal rule name {prodname!r}. Already defined as a token."
            raise GrammarError(msg)
        if prodname in _RESERVED_NAMES:
            msg = f"Illegal rule name {prodname!r}. Is a reserved word."
            raise GrammarError(msg)

        syms = syms.split() if isinstance(syms, str) else list(syms)

        # Look for literal tokens
        for n, s in enumerate(syms):
            if not s:
                msg = f"Empty symbol name in rule {prodname!r}."
                raise GrammarError(msg)
            if s[0] in "'\"" and s[0] == s[-1]:
                c = s[1:-1]
                if len(c) != 1:
                    msg = f"Literal token {s} in rule {prodname!r} may only be a single character."
                    raise GrammarError(msg)
                if c not in self.terminals:
                    self.declare(c)
                syms[n] = c

        self.rules.append((prodname, syms, action))

    def set_start(self, start: Optional[str] = None) -> None:
        """Set the start symbol. If not given, the head of the first rule is used."""

        self.start = start

    def build(self) -> Grammar:
        """Create the validated, immutable `Grammar`."""

        def to_symbol(name: str) -> Symbol:
            return Terminal(name) if name in self.terminals else NonTerminal(name)

        rules = [(NonTerminal(name), [to_symbol(s) for s in syms], action) for name, syms, action in self.rules]
        return Grammar(self.terminals, rules, self.start)


# endregion
