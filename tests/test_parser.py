import pytest
from hypothesis import given
from hypothesis import strategies as st

from sema.sema_ast import (
    AddExpr,
    Arg,
    ArrayLiteral,
    Assign,
    Call,
    Closure,
    Condition,
    FloatLit,
    FuncDecl,
    If,
    IntLit,
    Paren,
    Return,
    Start,
    Term,
    Var,
    VarDecl,
    While,
)
from sema.sema_errors import LexError, ParseError
from sema.sema_lexer import tokenize
from sema.sema_parser import Parser, parse_tokens
from sema.sema_types import FLOAT, INT, NONE, FunctionType, Param, TypeSpec


def parse(source: str) -> Start:
    return Parser(tokenize(source)).parse()


def num(value: int) -> AddExpr:
    return AddExpr(Term(IntLit(value)))


def var(name: str) -> AddExpr:
    return AddExpr(Term(Var(name)))


def test_call_statement() -> None:
    assert parse("print(x: 2);") == Start([Call("print", [Arg("x", num(2))])])


def test_call_statement_with_padding() -> None:
    assert parse(" print ( x : 2 ) ; ") == parse("print(x: 2);")


def test_call_without_arguments() -> None:
    assert parse("thing();") == Start([Call("thing", [])])


def test_call_with_several_arguments() -> None:
    result = parse("f(a: 1, b: 2.5);")
    assert result.statements == [
        Call("f", [Arg("a", num(1)), Arg("b", AddExpr(Term(FloatLit(2.5))))])
    ]


def test_positional_argument_is_rejected() -> None:
    with pytest.raises(ParseError):
        parse("print(2);")


def test_parse_error_is_a_syntax_error() -> None:
    with pytest.raises(SyntaxError):
        parse("print(2);")


def test_missing_semicolon_is_rejected() -> None:
    with pytest.raises(ParseError):
        parse("print(x: 2)")


def test_empty_program() -> None:
    assert parse("") == Start([])


def test_assignment() -> None:
    assert parse("x <- 1;") == Start([Assign("x", num(1))])


def test_vardecl_with_array_type() -> None:
    result = parse("let grid: [[int]] <- [[1]];")
    decl = result.statements[0]
    assert isinstance(decl, VarDecl)
    assert decl.id == "grid"
    assert decl.type.array_depth == 2
    assert str(decl.type) == "[[int]]"
    assert decl.expr == ArrayLiteral([ArrayLiteral([num(1)])])


def test_unbalanced_type_brackets() -> None:
    with pytest.raises(ParseError):
        parse("let a: [int <- 1;")


def test_missing_type() -> None:
    with pytest.raises(ParseError, match="type"):
        parse("let a: <- 1;")


def test_empty_array_literal() -> None:
    decl = parse("let e: [int] <- [];").statements[0]
    assert isinstance(decl, VarDecl)
    assert decl.expr == ArrayLiteral([])


def test_if_else() -> None:
    result = parse("if a < 1 then x <- 1; else x <- 2; fi")
    assert result == Start(
        [
            If(
                Condition(var("a"), "<", num(1)),
                [Assign("x", num(1))],
                [Assign("x", num(2))],
            )
        ]
    )


def test_if_without_else() -> None:
    stmt = parse("if a == 1 then fi").statements[0]
    assert isinstance(stmt, If)
    assert stmt.then_block == []
    assert stmt.else_block is None


def test_if_requires_relational_condition() -> None:
    with pytest.raises(ParseError, match="relop"):
        parse("if a then fi")


def test_if_missing_fi() -> None:
    with pytest.raises(ParseError):
        parse("if a < 1 then x <- 1;")


def test_while_loop() -> None:
    result = parse("while i < 10 do i <- i + 1; done")
    assert result == Start(
        [
            While(
                Condition(var("i"), "<", num(10)),
                [Assign("i", AddExpr(Term(Var("i")), "+", num(1)))],
            )
        ]
    )


def test_condition_chain() -> None:
    stmt = parse("if a < 1 and b > 2 or c != 3 then fi").statements[0]
    assert isinstance(stmt, If)
    cond = stmt.cond
    assert cond.boolop == "and"
    assert cond.next is not None
    assert cond.next.relop == ">"
    assert cond.next.boolop == "or"
    assert cond.next.next == Condition(var("c"), "!=", num(3))


def test_boolop_needs_a_full_condition() -> None:
    with pytest.raises(ParseError):
        parse("if a < 1 and b then fi")


def test_return_statement() -> None:
    assert parse("return x;") == Start([Return(var("x"))])


def test_function_declaration() -> None:
    source = """
fun square(x: int) : int <- begin
    return x * x;
end
"""
    assert parse(source) == Start(
        [
            FuncDecl(
                "square",
                (Param("x", INT),),
                INT,
                [Return(AddExpr(Term(Var("x"), "*", Term(Var("x")))))],
            )
        ]
    )


def test_function_parameter_defaults() -> None:
    decl = parse("fun f(x: int <- 3, y: float) : none <- begin end").statements[0]
    assert isinstance(decl, FuncDecl)
    assert decl.params == (Param("x", INT), Param("y", FLOAT))
    assert decl.params[0].default == num(3)
    assert decl.params[1].default is None
    assert decl.return_type == NONE


def test_function_parameters_keep_duplicates() -> None:
    decl = parse("fun f(x: int, x: int) : int <- begin end").statements[0]
    assert isinstance(decl, FuncDecl)
    assert len(decl.params) == 2


def test_function_type_annotation_and_closure() -> None:
    source = "let f: (x: int): int <- (x: int): int <- { return x; };"
    decl = parse(source).statements[0]
    assert isinstance(decl, VarDecl)
    assert decl.type == TypeSpec(FunctionType((Param("x", INT),), INT))
    assert decl.expr == Closure((Param("x", INT),), INT, [Return(var("x"))])


def test_closure_without_parameters() -> None:
    decl = parse("let f: (): int <- (): int <- { return 1; };").statements[0]
    assert isinstance(decl, VarDecl)
    assert decl.expr == Closure((), INT, [Return(num(1))])


def test_parenthesized_expression_is_not_a_closure() -> None:
    stmt = parse("x <- (1 + 2) * 3;").statements[0]
    assert stmt == Assign(
        "x",
        AddExpr(
            Term(
                Paren(AddExpr(Term(IntLit(1)), "+", num(2))),
                "*",
                Term(IntLit(3)),
            )
        ),
    )


def test_parenthesized_condition() -> None:
    stmt = parse("x <- (a < b);").statements[0]
    assert isinstance(stmt, Assign)
    assert stmt.expr == AddExpr(Term(Paren(Condition(var("a"), "<", var("b")))))


def test_indexed_variable() -> None:
    stmt = parse("x <- grid[0][i + 1];").statements[0]
    assert stmt == Assign(
        "x",
        AddExpr(Term(Var("grid", [num(0), AddExpr(Term(Var("i")), "+", num(1))]))),
    )


def test_call_expression() -> None:
    stmt = parse("x <- square(x: 4) + 1;").statements[0]
    assert stmt == Assign(
        "x", AddExpr(Term(Call("square", [Arg("x", num(4))])), "+", num(1))
    )


def test_right_nested_arithmetic() -> None:
    stmt = parse("x <- 1 - 2 - 3;").statements[0]
    assert isinstance(stmt, Assign)
    expr = stmt.expr
    assert isinstance(expr, AddExpr)
    assert expr.addop == "-"
    assert expr.next == AddExpr(Term(IntLit(2)), "-", num(3))


def test_leftover_tokens_are_rejected() -> None:
    with pytest.raises(ParseError, match="Unexpected"):
        parse("x <- 1; fi")


def test_unknown_character_is_a_lex_error() -> None:
    with pytest.raises(LexError):
        parse("$")


def test_unknown_character_inside_statement() -> None:
    with pytest.raises(LexError):
        parse("let x: int <- 4 $;")


def test_lex_error_is_a_syntax_error() -> None:
    with pytest.raises(SyntaxError):
        parse("x <- 1 # comment")


def test_parse_statement_returns_none_at_block_end() -> None:
    parser = Parser(tokenize("fi"))
    assert parser.parse_statement() is None
    assert parser.position == 0


def test_statement_lines() -> None:
    result = parse("x <- 1;\n\nprint(x: x);")
    assert [stmt.line for stmt in result.statements] == [1, 3]


def test_parse_error_context() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse("print(2);")
    assert excinfo.value.context["expected"] == "id"
    assert excinfo.value.context["category"] == "num"


def test_parse_tokens_helper() -> None:
    assert parse_tokens(tokenize("x <- 1;")) == parse("x <- 1;")


@given(
    a=st.integers(min_value=0, max_value=10_000),
    b=st.integers(min_value=0, max_value=10_000),
)  # type: ignore[misc]
def test_addition_parses(a: int, b: int) -> None:
    stmt = parse(f"let x: int <- {a} + {b};").statements[0]
    assert stmt == VarDecl("x", INT, AddExpr(Term(IntLit(a)), "+", num(b)))


@given(depth=st.integers(min_value=0, max_value=6))  # type: ignore[misc]
def test_type_spec_depth(depth: int) -> None:
    source = f"let x: {'[' * depth}float{']' * depth} <- 1.0;"
    decl = parse(source).statements[0]
    assert isinstance(decl, VarDecl)
    assert decl.type.array_depth == depth


def test_long_addition_chain_is_right_nested() -> None:
    count = 5000
    stmt = parse("x <- " + " + ".join(str(i) for i in range(count)) + ";").statements[0]
    assert isinstance(stmt, Assign)
    link = stmt.expr
    assert isinstance(link, AddExpr)
    values = []
    while link is not None:
        values.append(link.term.factor.value)  # type: ignore[union-attr]
        assert link.addop == ("+" if link.next is not None else None)
        link = link.next
    assert values == list(range(count))


def test_long_multiplication_chain() -> None:
    stmt = parse("x <- " + " * ".join(["2"] * 5000) + ";").statements[0]
    assert isinstance(stmt, Assign)
    term = stmt.expr.term  # type: ignore[union-attr]
    length = 0
    while term is not None:
        length += 1
        term = term.next
    assert length == 5000


def test_mixed_operators_keep_their_order() -> None:
    stmt = parse("x <- a - b + c;").statements[0]
    assert stmt == Assign(
        "x",
        AddExpr(Term(Var("a")), "-", AddExpr(Term(Var("b")), "+", var("c"))),
    )


def test_long_condition_chain() -> None:
    source = "if " + " and ".join(["a < b"] * 2000) + " then fi"
    stmt = parse(source).statements[0]
    assert isinstance(stmt, If)
    cond = stmt.cond
    length = 0
    while cond is not None:
        length += 1
        cond = cond.next
    assert length == 2000


def test_condition_chain_needs_relop_after_every_boolop() -> None:
    with pytest.raises(ParseError, match="relop"):
        parse("if a < 1 and b < 2 or c then fi")
