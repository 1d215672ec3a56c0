from collections.abc import Callable

import pytest
from conftest import ALL_GRAMMARS, make_reduce_reduce_grammar
from lrtab import (
    END,
    Accept,
    ConflictKind,
    Grammar,
    GrammarBuilder,
    NonTerminal,
    Reduce,
    Shift,
    Terminal,
    build_automaton,
    compile_table,
)

E, T = NonTerminal("E"), NonTerminal("T")
ID, PLUS = Terminal("id"), Terminal("+")
ELSE = Terminal("ELSE")


def test_expr_table(expr_grammar: Grammar):
    table = compile_table(build_automaton(expr_grammar))

    assert table.n_states == 6
    assert dict(table.action) == {
        (0, ID): Shift(3),
        (1, PLUS): Shift(4),
        (1, END): Accept(),
        (2, PLUS): Reduce(2),
        (2, END): Reduce(2),
        (3, PLUS): Reduce(3),
        (3, END): Reduce(3),
        (4, ID): Shift(3),
        (5, PLUS): Reduce(1),
        (5, END): Reduce(1),
    }
    assert dict(table.goto) == {(0, E): 1, (0, T): 2, (4, T): 5}
    assert table.conflicts == ()


def test_accept_follows_start_symbol(expr_grammar: Grammar):
    automaton = build_automaton(expr_grammar)
    table = compile_table(automaton)
    after_start = table.goto[(0, expr_grammar.start)]

    assert table.action[(after_start, END)] == Accept()
    assert [st for (st, t), a in table.action.items() if isinstance(a, Accept)] == [after_start]


def test_emitter_views(expr_grammar: Grammar):
    table = compile_table(build_automaton(expr_grammar))

    assert table.terminals == (ID, PLUS, END)
    assert table.nonterminals == (E, T)
    assert table.start == E
    assert table.productions == expr_grammar.productions
    assert table.actions_for(1) == {PLUS: Shift(4), END: Accept()}
    assert list(table.actions_for(1)) == [PLUS, END]
    assert table.gotos_for(0) == {E: 1, T: 2}
    assert table.expected(3) == (PLUS, END)
    assert table.expected(4) == (ID,)


def test_table_is_read_only(expr_grammar: Grammar):
    table = compile_table(build_automaton(expr_grammar))
    with pytest.raises(TypeError):
        table.action[(0, END)] = Accept()  # pyright: ignore
    with pytest.raises(TypeError):
        table.goto[(0, E)] = 0  # pyright: ignore


def test_dangling_else(dangling_else_grammar: Grammar):
    automaton = build_automaton(dangling_else_grammar)
    table = compile_table(automaton)

    assert table.conflicts
    assert table.rr_conflicts == ()
    for c in table.conflicts:
        assert c.kind is ConflictKind.SHIFT_REDUCE
        assert c.terminal == ELSE
        assert c.rejected == Reduce(1)
        assert c.chosen == Shift(automaton.transitions[(c.state, ELSE)])
        assert table.action[(c.state, ELSE)] == c.chosen


@pytest.mark.parametrize("make_grammar", ALL_GRAMMARS)
def test_every_item_has_a_cell(make_grammar: Callable[[], Grammar]):
    grammar = make_grammar()
    automaton = build_automaton(grammar)
    table = compile_table(automaton)

    for st, items in enumerate(automaton.states):
        for it in items:
            nxt = it.next_symbol(grammar)
            if nxt is None:
                expected = Accept() if it.production == 0 else Reduce(it.production)
                chosen = table.action[(st, it.lookahead)]
                if chosen != expected:
                    assert any(
                        c.state == st and c.terminal == it.lookahead and c.rejected == expected
                        for c in table.conflicts
                    )
            elif isinstance(nxt, Terminal):
                assert table.action[(st, nxt)] == Shift(automaton.transitions[(st, nxt)])
            else:
                assert table.goto[(st, nxt)] == automaton.transitions[(st, nxt)]


@pytest.mark.parametrize("make_grammar", ALL_GRAMMARS)
def test_table_is_deterministic(make_grammar: Callable[[], Grammar]):
    first = compile_table(build_automaton(make_grammar()))
    second = compile_table(build_automaton(make_grammar()))
    assert dict(first.action) == dict(second.action)
    assert dict(first.goto) == dict(second.goto)
    assert first.conflicts == second.conflicts
    assert str(first) == str(second)


def test_reduce_reduce_prefers_earlier_rule():
    table = compile_table(build_automaton(make_reduce_reduce_grammar()))

    assert table.sr_conflicts == ()
    [conflict] = table.rr_conflicts
    assert conflict.terminal == Terminal("x")
    assert conflict.chosen == Reduce(3)
    assert conflict.rejected == Reduce(4)
    assert table.action[(conflict.state, Terminal("x"))] == Reduce(3)
    assert "Rule (B -> a) is never reduced" in table.describe()


def test_accept_beats_reduce():
    builder = GrammarBuilder(["a"])
    builder.add_production("S", "S")
    builder.add_production("S", "a")
    table = compile_table(build_automaton(builder.build()))

    [conflict] = table.conflicts
    assert conflict.kind is ConflictKind.REDUCE_REDUCE
    assert conflict.terminal == END
    assert conflict.chosen == Accept()
    assert conflict.rejected == Reduce(1)
    assert table.action[(conflict.state, END)] == Accept()


def test_conflict_kind_text():
    assert ConflictKind.SHIFT_REDUCE == "shift_reduce"
    assert str(ConflictKind.SHIFT_REDUCE) == "shift/reduce"
    assert str(ConflictKind.REDUCE_REDUCE) == "reduce/reduce"


def test_action_payload_is_carried():
    def make_sum(p: object) -> object:
        return p

    builder = GrammarBuilder(["NUMBER"])
    builder.add_production("expr", "expr '+' NUMBER", make_sum)
    builder.add_production("expr", "NUMBER")
    table = compile_table(build_automaton(builder.build()))

    assert table.productions[1].action is make_sum
    assert table.productions[2].action is None


def test_describe(expr_grammar: Grammar):
    text = compile_table(build_automaton(expr_grammar)).describe()

    assert "state 0" in text
    assert "state 5" in text
    assert "    (0) S' -> . E, $end" in text
    assert "    (1) E -> E + T ., $end/+" in text
    assert "    id              shift and go to state 3" in text
    assert "    $end            reduce using rule 1 (E -> E + T)" in text
    assert "Conflicts:" not in text


def test_describe_conflicts(dangling_else_grammar: Grammar):
    table = compile_table(build_automaton(dangling_else_grammar))
    text = str(table)

    assert "Conflicts:" in text
    assert "  ! shift/reduce conflict for ELSE resolved as shift and go to state" in text
    assert str(table.conflicts[0]) in text
    assert repr(table) == f"<ParsingTable states={table.n_states} conflicts={len(table.conflicts)}>"
