"""Canonical LR(1) automaton and parsing table construction."""

from .automaton import Automaton, build_automaton
from .errors import EmptyGrammarError, GrammarError, LRTabError, ParseError, UndeclaredSymbolError
from .generator import BuildResult, TableGenerator, TableLogger, generate
from .grammar import AUGMENTED_START, END, Grammar, GrammarBuilder, NonTerminal, Production, Symbol, Terminal
from .items import ItemSet, LRItem, closure, goto
from .runtime import LRParser, ParseNode
from .table import Accept, Action, Conflict, ConflictKind, ParsingTable, Reduce, Shift, compile_table

__version__ = "0.1.0"

__all__ = (
    "AUGMENTED_START",
    "END",
    "Accept",
    "Action",
    "Automaton",
    "BuildResult",
    "Conflict",
    "ConflictKind",
    "EmptyGrammarError",
    "Grammar",
    "GrammarBuilder",
    "GrammarError",
    "ItemSet",
    "LRItem",
    "LRParser",
    "LRTabError",
    "NonTerminal",
    "ParseError",
    "ParseNode",
    "ParsingTable",
    "Production",
    "Reduce",
    "Shift",
    "Symbol",
    "TableGenerator",
    "TableLogger",
    "Terminal",
    "UndeclaredSymbolError",
    "build_automaton",
    "closure",
    "compile_table",
    "generate",
    "goto",
)
