# region License
# -----------------------------------------------------------------------------
# lrtab: table.py
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

"""Compile an LR(1) automaton into ACTION and GOTO tables."""

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

from ._misc import TypeAlias, override
from .automaton import Automaton
from .grammar import END, Grammar, NonTerminal, Production, Terminal

__all__ = ("Accept", "Action", "Conflict", "ConflictKind", "ParsingTable", "Reduce", "Shift", "compile_table")


@dataclass(frozen=True)
class Shift:
    """Consume the lookahead terminal and go to `state`."""

    state: int

    @override
    def __str__(self) -> str:
        return f"shift and go to state {self.state}"


@dataclass(frozen=True)
class Reduce:
    """Replace the body of production number `production` on the stack with its head."""

    production: int

    @override
    def __str__(self) -> str:
        return f"reduce using rule {self.production}"


@dataclass(frozen=True)
class Accept:
    @override
    def __str__(self) -> str:
        return "accept"


Action: TypeAlias = Union[Shift, Reduce, Accept]


class ConflictKind(str, enum.Enum):
    SHIFT_REDUCE = "shift_reduce"
    REDUCE_REDUCE = "reduce_reduce"

    @override
    def __str__(self) -> str:
        return self.value.replace("_", "/")


@dataclass(frozen=True)
class Conflict:
    """A (state, terminal) cell for which more than one action applied.

    Attributes
    ----------
    state: int
        The state the conflict is in.
    terminal: Terminal
        The lookahead terminal.
    kind: ConflictKind
        shift/reduce or reduce/reduce.
    chosen: Action
        The action that ended up in the table.
    rejected: Action
        The action that lost.
    """

    state: int
    terminal: Terminal
    kind: ConflictKind
    chosen: Action
    rejected: Action

    @override
    def __str__(self) -> str:
        return (
            f"{self.kind} conflict for {self.terminal} in state {self.state} "
            f"resolved as {self.chosen} (rejected {self.rejected})"
        )


def _rule_number(action: Union[Reduce, Accept]) -> int:
    # Accepting is reducing by the augmented production 0.
    return 0 if isinstance(action, Accept) else action.production


def _resolve(candidates: list[Action]) -> tuple[Action, ConflictKind, list[Action]]:
    """Pick the winning action among the distinct `candidates` for one cell.

    Shifting always beats reducing. Among reductions, the rule that was defined first in the grammar wins.
    """

    shifts = [a for a in candidates if isinstance(a, Shift)]
    reduces: list[Union[Reduce, Accept]] = sorted(
        (a for a in candidates if not isinstance(a, Shift)),
        key=_rule_number,
    )
    if shifts:
        return shifts[0], ConflictKind.SHIFT_REDUCE, list(reduces)
    return reduces[0], ConflictKind.REDUCE_REDUCE, list(reduces[1:])


class ParsingTable:
    """The finished ACTION/GOTO tables along with the conflicts found while building them.

    Attributes
    ----------
    grammar: Grammar
        The grammar the table was built for.
    action: Mapping[tuple[int, Terminal], Action]
        (state, terminal) -> action. A missing cell is a syntax error.
    goto: Mapping[tuple[int, NonTerminal], int]
        (state, non-terminal) -> state.
    conflicts: tuple[Conflict, ...]
        Every conflict, with the action chosen and the one rejected.
    n_states: int
        Number of states.
    """

    def __init__(
        self,
        grammar: Grammar,
        n_states: int,
        action: Mapping[tuple[int, Terminal], Action],
        goto: Mapping[tuple[int, NonTerminal], int],
        conflicts: tuple[Conflict, ...],
        state_descriptions: tuple[str, ...] = (),
    ) -> None:
        self.grammar = grammar
        self.n_states = n_states
        self.action: Mapping[tuple[int, Terminal], Action] = MappingProxyType(dict(action))
        self.goto: Mapping[tuple[int, NonTerminal], int] = MappingProxyType(dict(goto))
        self.conflicts = conflicts
        self.state_descriptions = state_descriptions

    # ---- Views for emitters

    @property
    def terminals(self) -> tuple[Terminal, ...]:
        return self.grammar.terminals

    @property
    def nonterminals(self) -> tuple[NonTerminal, ...]:
        return self.grammar.nonterminals

    @property
    def start(self) -> NonTerminal:
        return self.grammar.start

    @property
    def productions(self) -> tuple[Production, ...]:
        return self.grammar.productions

    @property
    def sr_conflicts(self) -> tuple[Conflict, ...]:
        return tuple(c for c in self.conflicts if c.kind is ConflictKind.SHIFT_REDUCE)

    @property
    def rr_conflicts(self) -> tuple[Conflict, ...]:
        return tuple(c for c in self.conflicts if c.kind is ConflictKind.REDUCE_REDUCE)

    def actions_for(self, state: int) -> dict[Terminal, Action]:
        """Return the non-error actions of `state`, in terminal declaration order."""

        return {t: self.action[(state, t)] for t in self.terminals if (state, t) in self.action}

    def gotos_for(self, state: int) -> dict[NonTerminal, int]:
        return {n: self.goto[(state, n)] for n in self.nonterminals if (state, n) in self.goto}

    def expected(self, state: int) -> tuple[Terminal, ...]:
        """Terminals that don't lead to a syntax error in `state`."""

        return tuple(self.actions_for(state))

    def describe(self) -> str:
        """Return a listing of all of the states, their actions, and the conflicts."""

        out = list(self.state_descriptions)

        if self.conflicts:
            out.append("\nConflicts:\n")
            out.extend(str(c) for c in self.conflicts)

            reduced = {a.production for a in self.action.values() if isinstance(a, Reduce)}
            warned_never: set[int] = set()
            for c in self.rr_conflicts:
                rejected = c.rejected
                if isinstance(rejected, Reduce) and rejected.production not in reduced | warned_never:
                    out.append(f"Rule ({self.grammar[rejected.production]}) is never reduced")
                    warned_never.add(rejected.production)

        return "\n".join(out)

    @override
    def __str__(self) -> str:
        return self.describe()

    @override
    def __repr__(self) -> str:
        return f"<ParsingTable states={self.n_states} conflicts={len(self.conflicts)}>"


def compile_table(automaton: Automaton) -> ParsingTable:
    """Build the ACTION and GOTO tables from the states of `automaton`.

    Extended Summary
    ----------------
    For each item [A -> α . , a] the table reduces by A -> α on `a` (accepting instead if A -> α is the augmented
    production); for each item [A -> α . t β, a] with a terminal `t` it shifts to the target of `t`. Transitions on
    non-terminals become the GOTO table.

    Conflicts never abort the build: shift wins a shift/reduce conflict and the earliest rule wins a reduce/reduce
    conflict. Each losing action is recorded as a `Conflict`.
    """

    grammar = automaton.grammar
    action: dict[tuple[int, Terminal], Action] = {}
    goto: dict[tuple[int, NonTerminal], int] = {}
    conflicts: list[Conflict] = []
    descriptions: list[str] = []

    for st, items in enumerate(automaton.states):
        successors = automaton.successors(st)
        candidates: dict[Terminal, dict[Action, None]] = {}

        for it in items:
            p = grammar[it.production]
            if it.dot == len(p):
                if p.number == 0:
                    # Start symbol. Accept!
                    candidates.setdefault(END, {})[Accept()] = None
                else:
                    # We are at the end of a production. Reduce!
                    candidates.setdefault(it.lookahead, {})[Reduce(p.number)] = None
            else:
                a = p.body[it.dot]
                if isinstance(a, Terminal):
                    candidates.setdefault(a, {})[Shift(successors[a])] = None

        descrip = [f"\nstate {st}\n", *(f"    {line}" for line in items.format(grammar)), ""]
        notes: list[str] = []

        for t in grammar.terminals:
            acts = candidates.get(t)
            if not acts:
                continue
            chosen, kind, rejected = _resolve(list(acts))
            action[(st, t)] = chosen
            descrip.append(f"    {t.name:<15s} {_describe_action(grammar, chosen)}")
            for r in rejected:
                conflicts.append(Conflict(st, t, kind, chosen, r))
                notes.append(f"  ! {kind} conflict for {t} resolved as {_describe_action(grammar, chosen)}")

        for x, j in successors.items():
            if isinstance(x, NonTerminal):
                goto[(st, x)] = j
                descrip.append(f"    {x.name:<30s} shift and go to state {j}")

        descrip.extend(notes)
        descriptions.append("\n".join(descrip))

    return ParsingTable(grammar, len(automaton), action, goto, tuple(conflicts), tuple(descriptions))


def _describe_action(grammar: Grammar, act: Action) -> str:
    if isinstance(act, Reduce):
        return f"{act} ({grammar[act.production]})"
    return str(act)
