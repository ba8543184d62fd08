import json

from hypothesis import given
from hypothesis import strategies as st

from sema.sema_ast import (
    AddExpr,
    Arg,
    ArrayLiteral,
    Call,
    Closure,
    FuncDecl,
    IntLit,
    Return,
    Start,
    Term,
    Var,
)
from sema.sema_lexer import tokenize
from sema.sema_parser import Parser
from sema.sema_types import INT, Param, TypeSpec


def test_equality_ignores_line() -> None:
    assert IntLit(1, line=3) == IntLit(1, line=7)


def test_equality_checks_fields() -> None:
    assert Var("x") != Var("y")
    assert Var("x") != Var("x", [AddExpr(Term(IntLit(0)))])
    assert IntLit(1) != Var("x")


def test_call_to_dict() -> None:
    node = Call("print", [Arg("x", AddExpr(Term(IntLit(2))))], line=1)
    d = node.to_dict()
    assert d["kind"] == "call"
    assert d["id"] == "print"
    assert "line" not in d
    arg = d["args"][0]
    assert arg["kind"] == "arg"
    assert arg["expr"]["term"]["factor"] == {"kind": "int", "value": 2}


def test_types_render_as_source_text() -> None:
    node = FuncDecl(
        "f",
        (Param("xs", TypeSpec.of_primitive("int", 1), ArrayLiteral([])),),
        INT,
        [Return(AddExpr(Term(IntLit(1))))],
    )
    d = node.to_dict()
    assert d["return_type"] == "int"
    assert d["params"] == [
        {"id": "xs", "type": "[int]", "default": {"kind": "array", "entries": []}}
    ]
    assert d["body"][0]["kind"] == "return"


def test_closure_to_dict_without_default() -> None:
    d = Closure((Param("a", INT),), INT).to_dict()
    assert d["params"] == [{"id": "a", "type": "int", "default": None}]
    assert d["body"] == []


def test_parsed_tree_is_json_serializable() -> None:
    source = """
let xs: [float] <- [1.5, 2.5];
fun pick(i: int <- 0) : float <- begin
    if i < 1 then return xs[i]; else return 0.5; fi
end
while 1 < 2 do print(x: pick()); done
"""
    start = Parser(tokenize(source)).parse()
    d = json.loads(json.dumps(start.to_dict()))
    assert d["kind"] == "start"
    assert [s["kind"] for s in d["statements"]] == ["vardecl", "funcdecl", "while"]
    if_stmt = d["statements"][1]["body"][0]
    assert if_stmt["kind"] == "if"
    assert if_stmt["cond"]["relop"] == "<"
    assert if_stmt["else_block"][0]["kind"] == "return"


@given(st.integers(min_value=0, max_value=10**9))  # type: ignore[misc]
def test_int_literal_to_dict(value: int) -> None:
    assert IntLit(value).to_dict() == {"kind": "int", "value": value}


def test_start_default_is_empty() -> None:
    assert Start().to_dict() == {"kind": "start", "statements": []}
