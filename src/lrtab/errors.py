"""Exceptions raised while validating grammars, building tables, or parsing with them."""

from collections.abc import Collection
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .grammar import Production, Symbol, Terminal

__all__ = ("LRTabError", "GrammarError", "EmptyGrammarError", "UndeclaredSymbolError", "ParseError")


class LRTabError(Exception):
    """Base class for all lrtab errors."""


class GrammarError(LRTabError):
    """Exception raised when something goes wrong in constructing the grammar."""


class EmptyGrammarError(GrammarError):
    """Exception raised when a grammar has no productions at all."""

    def __init__(self) -> None:
        super().__init__("No grammar rules are defined.")


class UndeclaredSymbolError(GrammarError):
    """Exception raised when production bodies refer to symbols that are neither declared terminals nor defined rules.

    Attributes
    ----------
    undeclared: tuple[tuple[Symbol, Production], ...]
        Every offending (symbol, production) pair, in production order.
    """

    def __init__(self, undeclared: Collection[tuple["Symbol", "Production"]]) -> None:
        self.undeclared = tuple(undeclared)
        lines = [
            f"Symbol {sym.name!r} used in rule ({prod}), but not defined as a token or a rule"
            for sym, prod in self.undeclared
        ]
        super().__init__("\n".join(["Unable to build grammar.", *lines]))


class ParseError(LRTabError):
    """Syntax error detected by the table-driven parser.

    Attributes
    ----------
    token: Any
        The offending token, or None at end of input.
    state: int
        Parser state in which the error was detected.
    expected: tuple[Terminal, ...]
        Terminals that would have been accepted in that state.
    """

    def __init__(self, token: Optional[Any], state: int, expected: Collection["Terminal"]) -> None:
        self.token = token
        self.state = state
        self.expected = tuple(expected)
        where = "at end of input" if token is None else f"at token {getattr(token, 'type', token)!r}"
        names = ", ".join(t.name for t in self.expected) or "nothing"
        super().__init__(f"Syntax error {where} in state {state}; expected one of: {names}")
