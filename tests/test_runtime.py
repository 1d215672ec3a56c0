from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pytest
from conftest import ALL_GRAMMARS, make_epsilon_grammar
from lrtab import (
    END,
    Grammar,
    LRParser,
    ParseError,
    ParseNode,
    ParsingTable,
    Symbol,
    Terminal,
    build_automaton,
    compile_table,
)


@dataclass
class Token:
    type: str
    value: Any


def make_parser(grammar: Grammar) -> LRParser:
    return LRParser(compile_table(build_automaton(grammar)))


def shortest_sentence(grammar: Grammar) -> list[str]:
    best: dict[Any, tuple[str, ...]] = {}
    changed = True
    while changed:
        changed = False
        for p in grammar.productions[1:]:
            if all(s.is_terminal or s in best for s in p.body):
                sentence = tuple(t for s in p.body for t in ((s.name,) if s.is_terminal else best[s]))
                if p.head not in best or len(sentence) < len(best[p.head]):
                    best[p.head] = sentence
                    changed = True
    return list(best[grammar.start])


def test_parse_expr(expr_grammar: Grammar):
    tree = make_parser(expr_grammar).parse(["id", "+", "id"])

    assert str(tree) == "(E (E (T id)) + (T id))"
    assert tree.production.number == 1
    assert tree.head.name == "E"
    assert list(tree.leaves()) == ["id", "+", "id"]


def test_parse_token_objects(expr_grammar: Grammar):
    tokens = [Token("id", "x"), Token("+", "+"), Token("id", "y"), Token("+", "+"), Token("id", "z")]
    tree = make_parser(expr_grammar).parse(iter(tokens))

    assert str(tree) == "(E (E (E (T id)) + (T id)) + (T id))"
    assert [tok.value for tok in tree.leaves()] == ["x", "+", "y", "+", "z"]
    assert all(isinstance(child, ParseNode) for child in tree.children[::2])


def test_parse_epsilon():
    parser = make_parser(make_epsilon_grammar())

    assert str(parser.parse(["b"])) == "(S (A) b)"
    assert str(parser.parse(["a", "b"])) == "(S (A a) b)"


def test_else_binds_to_nearest_if(dangling_else_grammar: Grammar):
    tokens = "IF COND IF COND OTHER ELSE OTHER".split()
    tree = make_parser(dangling_else_grammar).parse(tokens)

    assert str(tree) == "(stmt IF (expr COND) (stmt IF (expr COND) (stmt OTHER) ELSE (stmt OTHER)))"


def test_unexpected_token(expr_grammar: Grammar):
    with pytest.raises(ParseError) as excinfo:
        make_parser(expr_grammar).parse(["id", "id"])

    err = excinfo.value
    assert err.token == "id"
    assert err.state == 3
    assert err.expected == (Terminal("+"), END)
    assert str(err) == "Syntax error at token 'id' in state 3; expected one of: +, $end"


def test_unexpected_end_of_input(expr_grammar: Grammar):
    with pytest.raises(ParseError) as excinfo:
        make_parser(expr_grammar).parse([])

    err = excinfo.value
    assert err.token is None
    assert err.state == 0
    assert err.expected == (Terminal("id"),)
    assert str(err) == "Syntax error at end of input in state 0; expected one of: id"


def test_unknown_token_object(expr_grammar: Grammar):
    bad = Token("NUMBER", 3)
    with pytest.raises(ParseError, match="at token 'NUMBER' in state 0") as excinfo:
        make_parser(expr_grammar).parse([bad])
    assert excinfo.value.token is bad


@pytest.mark.parametrize("make_grammar", ALL_GRAMMARS)
def test_shortest_sentence_is_accepted(make_grammar: Callable[[], Grammar]):
    grammar = make_grammar()
    table: ParsingTable = compile_table(build_automaton(grammar))

    tree = LRParser(table).parse(shortest_sentence(grammar))
    assert tree.head == grammar.start
    assert [str(tok) for tok in tree.leaves()] == shortest_sentence(grammar)


@pytest.mark.parametrize(
    "tokens",
    [
        pytest.param(["id", "$end", "+", "garbage"], id="end marker mid-stream"),
        pytest.param(["id", "$end"], id="end marker last"),
        pytest.param([Token("id", "x"), Token("$end", None)], id="end marker token object"),
    ],
)
def test_end_marker_token_is_rejected(expr_grammar: Grammar, tokens: list[Any]):
    with pytest.raises(ParseError) as excinfo:
        make_parser(expr_grammar).parse(tokens)

    err = excinfo.value
    assert _name(err.token) == "$end"
    assert err.state == 3
    assert err.expected == (Terminal("+"), END)


def test_unknown_token_names_are_not_interned(expr_grammar: Grammar):
    name = "never-declared-token-type"
    with pytest.raises(ParseError):
        make_parser(expr_grammar).parse(["id", "+", name])
    assert (Terminal, name) not in Symbol._interned  # pyright: ignore[reportPrivateUsage]


def _name(token: Any) -> str:
    return token if isinstance(token, str) else token.type
