# region License
# -----------------------------------------------------------------------------
# lrtab: runtime.py
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

"""A small table-driven LR parser, for checking that a table recognizes what its grammar describes."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Optional, Union

from ._misc import override
from .errors import ParseError
from .grammar import END, NonTerminal, Production, Terminal
from .table import Accept, ParsingTable, Reduce, Shift

__all__ = ("LRParser", "ParseNode")


@dataclass(frozen=True)
class ParseNode:
    """An interior node of a parse tree: a reduced production and the symbols it was reduced from.

    Attributes
    ----------
    production: Production
        The production that was reduced. Its action payload is carried along, never run.
    children: tuple[ParseNode | Any, ...]
        Sub-nodes for non-terminals, and the original tokens for terminals.
    """

    production: Production
    children: tuple[Union["ParseNode", Any], ...]

    @property
    def head(self) -> NonTerminal:
        return self.production.head

    def leaves(self) -> Iterator[Any]:
        """Yield the tokens under this node, left to right."""

        for child in self.children:
            if isinstance(child, ParseNode):
                yield from child.leaves()
            else:
                yield child

    @override
    def __str__(self) -> str:
        inner = " ".join(str(c) if isinstance(c, ParseNode) else str(getattr(c, "type", c)) for c in self.children)
        return f"({self.head} {inner})" if inner else f"({self.head})"


def _token_name(token: Any) -> str:
    return token if isinstance(token, str) else token.type


class LRParser:
    """Run a `ParsingTable` over a stream of tokens.

    Tokens are either terminal names or objects with a ``type`` attribute naming the terminal, like sly lexer tokens.
    Only the table's declared terminals are recognized; the end marker comes from running out of tokens, never from a
    token. There is no error recovery: the first syntax error raises `ParseError`.
    """

    def __init__(self, table: ParsingTable) -> None:
        self.table = table
        self._terminals = {t.name: t for t in table.terminals if t != END}

    def parse(self, tokens: Iterable[Any]) -> ParseNode:
        """Parse the given input tokens and return the parse tree of the start symbol."""

        actions = self.table.action  # Local reference to action table (to avoid lookup on self.)
        goto = self.table.goto  # Local reference to goto table (to avoid lookup on self.)
        prod = self.table.productions  # Local reference to production list (to avoid lookup on self.)
        terminals = self._terminals

        given_tokens = iter(tokens)
        statestack: list[int] = [0]  # Stack of parsing states
        symstack: list[Any] = []  # Stack of grammar symbols

        lookahead = next(given_tokens, None)
        while True:
            state = statestack[-1]
            ltype: Optional[Terminal] = END if lookahead is None else terminals.get(_token_name(lookahead))
            t = None if ltype is None else actions.get((state, ltype))

            if isinstance(t, Shift):
                # shift a symbol on the stack
                statestack.append(t.state)
                symstack.append(lookahead)
                lookahead = next(given_tokens, None)
                continue

            if isinstance(t, Reduce):
                # reduce a symbol on the stack, emit a production
                p = prod[t.production]
                plen = len(p)
                children = tuple(symstack[-plen:]) if plen else ()
                if plen:
                    del symstack[-plen:]
                    del statestack[-plen:]
                symstack.append(ParseNode(p, children))
                statestack.append(goto[(statestack[-1], p.head)])
                continue

            if isinstance(t, Accept):
                return symstack[-1]

            raise ParseError(lookahead, state, self.table.expected(state))
