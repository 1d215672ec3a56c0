# region License
# -----------------------------------------------------------------------------
# lrtab: generator.py
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

import sys
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Protocol, TextIO

from ._misc import MISSING
from .automaton import Automaton, build_automaton
from .grammar import Grammar
from .table import Conflict, ParsingTable, compile_table

__all__ = ("BuildResult", "TableGenerator", "TableLogger", "generate")


# ============================================================================
# region -------- Logging --------
# ============================================================================


class _Logger(Protocol):
    def debug(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...
    def info(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...
    def warning(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...
    def error(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...


class TableLogger:
    """Write generator diagnostics to a text stream, one line per message.

    Extended Summary
    ----------------
    This is the default sink for grammar warnings and conflict reports. It has the same ``debug``/``info``/
    ``warning``/``error`` surface as `logging.Logger`, including lazy ``%`` formatting, so a real logger can replace
    it without changing any call sites. Warnings and errors are prefixed with their level; other messages are not.

    Parameters
    ----------
    f: TextIO
        Where the lines are written, e.g. ``sys.stderr`` or an open file.
    """

    def __init__(self, f: TextIO) -> None:
        self.f = f

    def _emit(self, prefix: str, msg: str, args: tuple[object, ...]) -> None:
        self.f.write(f"{prefix}{msg % args if args else msg}\n")

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._emit("", msg, args)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._emit("", msg, args)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._emit("WARNING: ", msg, args)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._emit("ERROR: ", msg, args)

    def critical(self, msg: str, *args: object, **kwargs: object) -> None:
        self._emit("CRITICAL: ", msg, args)


# endregion


# ============================================================================
# region -------- Generator --------
# ============================================================================


@dataclass(frozen=True)
class BuildResult:
    """Everything produced from one grammar: the automaton, the table, and the table's conflicts."""

    grammar: Grammar
    automaton: Automaton
    table: ParsingTable

    @property
    def conflicts(self) -> tuple[Conflict, ...]:
        return self.table.conflicts


class TableGenerator:
    """Drive the Grammar -> Automaton -> ParsingTable pipeline and report on it.

    Extended Summary
    ----------------
    The class attributes below are the configuration knobs. Change them in a subclass, or pass them as keyword
    arguments to override them for a single generator.

    Examples
    --------
    >>> class QuietGenerator(TableGenerator):
    ...     log = logging.getLogger("grammar")
    ...     expected_shift_reduce = 1
    >>> result = QuietGenerator(grammar).build()
    """

    log: ClassVar[_Logger] = TableLogger(sys.stderr)
    """Logging object where debugging/diagnostic messages are sent."""

    debugfile: ClassVar[Optional[str]] = None
    """Debugging filename where the grammar and state listing is written."""

    expected_shift_reduce: ClassVar[Optional[int]] = None
    """Number of shift/reduce conflicts the grammar is known to have. The conflict warning is skipped if it matches."""

    expected_reduce_reduce: ClassVar[Optional[int]] = None
    """Number of reduce/reduce conflicts the grammar is known to have. The conflict warning is skipped if it matches."""

    def __init__(
        self,
        grammar: Grammar,
        *,
        log: _Logger = MISSING,
        debugfile: Optional[str] = MISSING,
        expected_shift_reduce: Optional[int] = MISSING,
        expected_reduce_reduce: Optional[int] = MISSING,
    ) -> None:
        self.grammar = grammar
        if log is not MISSING:
            self.log = log  # pyright: ignore # Instance-level override of a class knob.
        if debugfile is not MISSING:
            self.debugfile = debugfile  # pyright: ignore
        if expected_shift_reduce is not MISSING:
            self.expected_shift_reduce = expected_shift_reduce  # pyright: ignore
        if expected_reduce_reduce is not MISSING:
            self.expected_reduce_reduce = expected_reduce_reduce  # pyright: ignore

    def build(self) -> BuildResult:
        """Build the automaton and the parsing table.

        Grammar diagnostics and conflicts are logged as warnings; neither stops the build.
        """

        self._report_grammar()

        automaton = build_automaton(self.grammar)
        self.log.debug("Built LR(1) automaton with %d states", len(automaton))

        table = compile_table(automaton)
        self._report_conflicts(table)

        if self.debugfile:
            with open(self.debugfile, "w") as f:
                f.write(str(self.grammar))
                f.write("\n")
                f.write(str(table))
            self.log.info("Parser debugging written to %s", self.debugfile)

        return BuildResult(self.grammar, automaton, table)

    def _report_grammar(self) -> None:
        grammar = self.grammar

        unused_terminals = grammar.unused_terminals
        if unused_terminals:
            unused_str = "{" + ",".join(t.name for t in unused_terminals) + "}"
            self.log.warning("Token%s %s defined, but not used", "(s)" if len(unused_terminals) > 1 else "", unused_str)

        if len(unused_terminals) == 1:
            self.log.warning("There is 1 unused token")
        if len(unused_terminals) > 1:
            self.log.warning("There are %d unused tokens", len(unused_terminals))

        for u in grammar.unreachable:
            self.log.warning("Symbol %r is unreachable", u.name)

        for inf in grammar.underivable:
            self.log.warning("Infinite recursion detected for symbol %r", inf.name)

    def _report_conflicts(self, table: ParsingTable) -> None:
        # Report shift/reduce and reduce/reduce conflicts
        num_sr = len(table.sr_conflicts)
        if num_sr != self.expected_shift_reduce:
            if num_sr == 1:
                self.log.warning("1 shift/reduce conflict")
            elif num_sr > 1:
                self.log.warning("%d shift/reduce conflicts", num_sr)

        num_rr = len(table.rr_conflicts)
        if num_rr != self.expected_reduce_reduce:
            if num_rr == 1:
                self.log.warning("1 reduce/reduce conflict")
            elif num_rr > 1:
                self.log.warning("%d reduce/reduce conflicts", num_rr)

        for c in table.conflicts:
            self.log.debug("%s", c)


def generate(grammar: Grammar, **options: Any) -> BuildResult:
    """Build the automaton and parsing table for `grammar`. Keyword arguments override `TableGenerator` settings."""

    return TableGenerator(grammar, **options).build()


# endregion
