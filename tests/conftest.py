import io

import pytest
from lrtab import Grammar, GrammarBuilder, TableLogger


def make_expr_grammar() -> Grammar:
    builder = GrammarBuilder(["id"])
    builder.add_production("E", "E '+' T")
    builder.add_production("E", "T")
    builder.add_production("T", "id")
    return builder.build()


def make_dangling_else_grammar() -> Grammar:
    builder = GrammarBuilder(["IF", "ELSE", "OTHER", "COND"])
    builder.add_production("stmt", "IF expr stmt")
    builder.add_production("stmt", "IF expr stmt ELSE stmt")
    builder.add_production("stmt", "OTHER")
    builder.add_production("expr", "COND")
    return builder.build()


def make_reduce_reduce_grammar() -> Grammar:
    builder = GrammarBuilder(["a", "x"])
    builder.add_production("S", "A x")
    builder.add_production("S", "B x")
    builder.add_production("A", "a")
    builder.add_production("B", "a")
    return builder.build()


def make_epsilon_grammar() -> Grammar:
    builder = GrammarBuilder(["a", "b"])
    builder.add_production("S", "A b")
    builder.add_production("A", "")
    builder.add_production("A", "a")
    return builder.build()


def make_paren_grammar() -> Grammar:
    builder = GrammarBuilder(["NUMBER"])
    builder.add_production("expr", "expr '+' term")
    builder.add_production("expr", "term")
    builder.add_production("term", "term '*' factor")
    builder.add_production("term", "factor")
    builder.add_production("factor", "'(' expr ')'")
    builder.add_production("factor", "NUMBER")
    return builder.build()


ALL_GRAMMARS = [
    pytest.param(make_expr_grammar, id="expr"),
    pytest.param(make_dangling_else_grammar, id="dangling else"),
    pytest.param(make_reduce_reduce_grammar, id="reduce/reduce"),
    pytest.param(make_epsilon_grammar, id="epsilon"),
    pytest.param(make_paren_grammar, id="arithmetic"),
]


@pytest.fixture
def expr_grammar() -> Grammar:
    return make_expr_grammar()


@pytest.fixture
def dangling_else_grammar() -> Grammar:
    return make_dangling_else_grammar()


@pytest.fixture
def log_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def log(log_stream: io.StringIO) -> TableLogger:
    return TableLogger(log_stream)
