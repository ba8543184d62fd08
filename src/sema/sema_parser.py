"""
SEMA Language Parser

Parses a SEMA token list into a `Start` tree.

The parser is predictive recursive descent: every production either consumes a
token of an expected category or dispatches on the category of the current
token. Grammar:

    start       -> stmt-list
    stmt-list   -> stmt*
    stmt        -> if-stmt | while-stmt | return-stmt | vardec-stmt
                 | fundec-stmt | id-stmt
    if-stmt     -> "if" cond "then" stmt-list ("else" stmt-list)? "fi"
    while-stmt  -> "while" cond "do" stmt-list "done"
    id-stmt     -> id "<-" expr ";"
                 | id "(" (arg ("," arg)*)? ")" ";"
    return-stmt -> "return" expr ";"
    vardec-stmt -> "let" id ":" type-spec "<-" expr ";"
    fundec-stmt -> "fun" id "(" params ")" ":" type-spec "<-" "begin" stmt-list "end"
    type-spec   -> "["* type-base "]"*
    type-base   -> primitive | "(" params ")" ":" type-spec
    expr        -> array-lit | closure | cond
    cond        -> add-expr (relop add-expr (boolop cond)?)?
    add-expr    -> term (addop term)*
    term        -> factor (mulop factor)*
    factor      -> id-factor | num | float | "(" expr ")"
    id-factor   -> id ("[" expr "]")* | id "(" (arg ("," arg)*)? ")"
    array-lit   -> "[" (expr ("," expr)*)? "]"
    closure     -> "(" params ")" ":" type-spec "<-" "{" stmt-list "}"
    params      -> (param ("," param)*)?
    param       -> id ":" type-spec ("<-" expr)?
    arg         -> id ":" expr

Parser Behavior
---------------
- A statement list ends at the first token that cannot start a statement;
  `parse_statement()` signals that by returning None.
- Once a statement form has been entered, any mismatch raises immediately.
- An expression starting with "(" is a closure when it continues with ")" or
  with `id ":"`; otherwise the parenthesis opens a grouped sub-expression.
- `if` and `while` need a full condition (with a relational operator).
- `parse()` requires every token to be consumed.
- Operator chains are read in a loop and nested to the right, so long
  chains do not grow the Python call stack.

Raises
------
ParseError
    When an expected token category is not found, or tokens are left over.
LexError
    When the offending token is an `Error` token produced by the lexer.
"""

from __future__ import annotations

from collections.abc import Callable

from sema.sema_ast import (
    AddExpr,
    Arg,
    ArrayLiteral,
    Assign,
    Call,
    Closure,
    Condition,
    Expr,
    Factor,
    FloatLit,
    FuncDecl,
    If,
    IntLit,
    Paren,
    Return,
    Start,
    Stmt,
    Term,
    Var,
    VarDecl,
    While,
)
from sema.sema_constants import EOF_CATEGORY, ERROR_CATEGORY
from sema.sema_errors import LexError, ParseError, SemaError
from sema.sema_lexer import Token
from sema.sema_types import FunctionType, Param, Primitive, TypeBase, TypeSpec


class Parser:
    """
    SEMA Parser Class

    Attributes
    ----------
    tokens : list[Token]
        The input token stream to be parsed.
    position : int
        Index of the current (lookahead) token.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = tokens
        self.position: int = 0
        self.statement_parsers: dict[str, Callable[[], Stmt]] = {
            "if": self.parse_if,
            "while": self.parse_while,
            "return": self.parse_return,
            "let": self.parse_vardec,
            "fun": self.parse_fundec,
            "id": self.parse_id_statement,
        }

    def current(self) -> Token:
        return self.peek(0)

    def peek(self, offset: int = 1) -> Token:
        index = self.position + offset
        if index < len(self.tokens):
            return self.tokens[index]
        last = self.tokens[-1] if self.tokens else Token(EOF_CATEGORY, "", 1, 1)
        return Token(EOF_CATEGORY, "", last.line, last.col + len(last.lexeme))

    def at(self, *categories: str) -> bool:
        return self.current().category in categories

    def advance(self) -> Token:
        """Consumes the current token and returns it."""
        tok = self.current()
        self.position += 1
        return tok

    def match(self, category: str) -> Token:
        """Consumes a token of `category` or raises."""
        if self.at(category):
            return self.advance()
        raise self.error(category)

    def error(self, expected: str) -> SemaError:
        tok = self.current()
        if tok.category == ERROR_CATEGORY:
            return LexError(
                f"Unrecognized character {tok.lexeme!r} at line {tok.line}, col {tok.col}",
                lexeme=tok.lexeme,
                line=tok.line,
                col=tok.col,
            )
        if tok.category == EOF_CATEGORY:
            return ParseError(
                f"Expected {expected!r}, got end of input", expected=expected
            )
        return ParseError(
            f"Expected {expected!r}, got {tok} at line {tok.line}, col {tok.col}",
            expected=expected,
            lexeme=tok.lexeme,
            category=tok.category,
            line=tok.line,
            col=tok.col,
        )

    # Statements

    def parse(self) -> Start:
        """Parse a full program. Every token must be consumed."""
        statements = self.parse_stmt_list()
        if self.position < len(self.tokens):
            tok = self.current()
            if tok.category == ERROR_CATEGORY:
                raise self.error("end of input")
            raise ParseError(
                f"Unexpected {tok} at line {tok.line}, col {tok.col}",
                lexeme=tok.lexeme,
                category=tok.category,
                line=tok.line,
                col=tok.col,
            )
        return Start(statements, line=1)

    def parse_stmt_list(self) -> list[Stmt]:
        """Parse statements until none starts at the current token."""
        stmts: list[Stmt] = []
        while True:
            stmt = self.parse_statement()
            if stmt is None:
                return stmts
            stmts.append(stmt)

    def parse_statement(self) -> Stmt | None:
        """Parse one statement, or return None if none starts here."""
        parse_fn = self.statement_parsers.get(self.current().category)
        if parse_fn is None:
            return None
        return parse_fn()

    def parse_if(self) -> If:
        """Parse an IF statement with THEN block, optional ELSE block and FI."""
        if_tok = self.match("if")
        cond = self.parse_full_condition()
        self.match("then")
        then_block = self.parse_stmt_list()
        else_block = None
        if self.at("else"):
            self.advance()
            else_block = self.parse_stmt_list()
        self.match("fi")
        return If(cond, then_block, else_block, line=if_tok.line)

    def parse_while(self) -> While:
        """Parse a WHILE loop with condition and DO ... DONE body."""
        while_tok = self.match("while")
        cond = self.parse_full_condition()
        self.match("do")
        body = self.parse_stmt_list()
        self.match("done")
        return While(cond, body, line=while_tok.line)

    def parse_return(self) -> Return:
        """Parse a RETURN statement and its expression."""
        ret_tok = self.match("return")
        expr = self.parse_expr()
        self.match(";")
        return Return(expr, line=ret_tok.line)

    def parse_vardec(self) -> VarDecl:
        """Parse a LET declaration with type annotation and initializer."""
        let_tok = self.match("let")
        name = self.match("id").lexeme
        self.match(":")
        type_spec = self.parse_type_spec()
        self.match("<-")
        expr = self.parse_expr()
        self.match(";")
        return VarDecl(name, type_spec, expr, line=let_tok.line)

    def parse_fundec(self) -> FuncDecl:
        """Parse a FUN declaration with parameters, return type and BEGIN ... END body."""
        fun_tok = self.match("fun")
        name = self.match("id").lexeme
        self.match("(")
        params = self.parse_params()
        self.match(")")
        self.match(":")
        return_type = self.parse_type_spec()
        self.match("<-")
        self.match("begin")
        body = self.parse_stmt_list()
        self.match("end")
        return FuncDecl(name, params, return_type, body, line=fun_tok.line)

    def parse_id_statement(self) -> Assign | Call:
        """Parse an assignment or a call statement starting with an identifier."""
        id_tok = self.match("id")
        if self.at("<-"):
            self.advance()
            expr = self.parse_expr()
            self.match(";")
            return Assign(id_tok.lexeme, expr, line=id_tok.line)

        args = self.parse_args()
        self.match(";")
        return Call(id_tok.lexeme, args, line=id_tok.line)

    # Types

    def parse_type_spec(self) -> TypeSpec:
        """Parse a type with its surrounding array brackets."""
        depth = 0
        while self.at("["):
            self.advance()
            depth += 1
        base = self.parse_type_base()
        for _ in range(depth):
            self.match("]")
        return TypeSpec(base, depth)

    def parse_type_base(self) -> TypeBase:
        """Parse a primitive name or a function type signature."""
        if self.at("primitive"):
            return Primitive(self.advance().lexeme)
        if self.at("("):
            self.advance()
            params = self.parse_params()
            self.match(")")
            self.match(":")
            return FunctionType(params, self.parse_type_spec())
        raise self.error("type")

    def parse_params(self) -> tuple[Param, ...]:
        """Parse a comma-separated parameter list, possibly empty."""
        params: list[Param] = []
        if self.at(")"):
            return ()
        while True:
            params.append(self.parse_param())
            if not self.at(","):
                break
            self.advance()
        return tuple(params)

    def parse_param(self) -> Param:
        """Parse one `id: type` parameter with an optional default."""
        name = self.match("id").lexeme
        self.match(":")
        type_spec = self.parse_type_spec()
        default = None
        if self.at("<-"):
            self.advance()
            default = self.parse_expr()
        return Param(name, type_spec, default)

    # Expressions

    def closure_ahead(self) -> bool:
        """Tell a closure apart from a parenthesized expression at `(`."""
        if not self.at("("):
            return False
        nxt = self.peek(1)
        return nxt.category == ")" or (
            nxt.category == "id" and self.peek(2).category == ":"
        )

    def parse_expr(self) -> Expr:
        """Parse an array literal, a closure or a condition."""
        if self.at("["):
            return self.parse_array_literal()
        if self.closure_ahead():
            return self.parse_closure()
        return self.parse_condition()

    def parse_array_literal(self) -> ArrayLiteral:
        """Parse a bracketed, comma-separated array literal."""
        open_tok = self.match("[")
        entries: list[Expr] = []
        if not self.at("]"):
            while True:
                entries.append(self.parse_expr())
                if not self.at(","):
                    break
                self.advance()
        self.match("]")
        return ArrayLiteral(entries, line=open_tok.line)

    def parse_closure(self) -> Closure:
        """Parse an anonymous function with a `{ ... }` body."""
        open_tok = self.match("(")
        params = self.parse_params()
        self.match(")")
        self.match(":")
        return_type = self.parse_type_spec()
        self.match("<-")
        self.match("{")
        body = self.parse_stmt_list()
        self.match("}")
        return Closure(params, return_type, body, line=open_tok.line)

    def parse_full_condition(self) -> Condition:
        """Parse a condition that must contain a relational operator."""
        cond = self.parse_condition()
        if not isinstance(cond, Condition):
            raise self.error("relop")
        return cond

    def parse_condition(self) -> Condition | AddExpr:
        """Parse an arithmetic expression or a boolop-joined chain of comparisons."""
        left = self.parse_add_expr()
        if not self.at("relop"):
            return left
        links: list[tuple[AddExpr, str, AddExpr, str | None]] = []
        while True:
            relop = self.advance().lexeme
            right = self.parse_add_expr()
            if not self.at("boolop"):
                links.append((left, relop, right, None))
                break
            links.append((left, relop, right, self.advance().lexeme))
            left = self.parse_add_expr()
            if not self.at("relop"):
                raise self.error("relop")

        # chains nest to the right: a < b and (c < d or (e < f))
        left, relop, right, _ = links.pop()
        cond = Condition(left, relop, right, line=left.line)
        for left, relop, right, boolop in reversed(links):
            cond = Condition(left, relop, right, boolop, cond, line=left.line)
        return cond

    def parse_add_expr(self) -> AddExpr:
        """Parse `term (addop term)*` into a right-nested AddExpr chain."""
        terms = [self.parse_term()]
        ops: list[str] = []
        while self.at("addop"):
            ops.append(self.advance().lexeme)
            terms.append(self.parse_term())

        expr = AddExpr(terms[-1], line=terms[-1].line)
        for term, addop in zip(reversed(terms[:-1]), reversed(ops)):
            expr = AddExpr(term, addop, expr, line=term.line)
        return expr

    def parse_term(self) -> Term:
        """Parse `factor (mulop factor)*` into a right-nested Term chain."""
        factors = [self.parse_factor()]
        ops: list[str] = []
        while self.at("mulop"):
            ops.append(self.advance().lexeme)
            factors.append(self.parse_factor())

        term = Term(factors[-1], line=factors[-1].line)
        for factor, mulop in zip(reversed(factors[:-1]), reversed(ops)):
            term = Term(factor, mulop, term, line=factor.line)
        return term

    def parse_factor(self) -> Factor:
        """Parse a literal, a variable or call, or a parenthesized expression."""
        tok = self.current()
        if tok.category == "id":
            return self.parse_id_factor()
        if tok.category == "num":
            self.advance()
            return IntLit(int(tok.lexeme), line=tok.line)
        if tok.category == "float":
            self.advance()
            return FloatLit(float(tok.lexeme), line=tok.line)
        if tok.category == "(":
            self.advance()
            expr = self.parse_expr()
            self.match(")")
            return Paren(expr, line=tok.line)
        raise self.error("factor")

    def parse_id_factor(self) -> Var | Call:
        """Parse a call or an optionally indexed variable."""
        id_tok = self.match("id")
        if self.at("("):
            return Call(id_tok.lexeme, self.parse_args(), line=id_tok.line)
        indices: list[Expr] = []
        while self.at("["):
            self.advance()
            indices.append(self.parse_expr())
            self.match("]")
        return Var(id_tok.lexeme, indices, line=id_tok.line)

    def parse_args(self) -> list[Arg]:
        """Parse a parenthesized list of keyword arguments."""
        self.match("(")
        args: list[Arg] = []
        if not self.at(")"):
            while True:
                args.append(self.parse_arg())
                if not self.at(","):
                    break
                self.advance()
        self.match(")")
        return args

    def parse_arg(self) -> Arg:
        """Parse one `id: expr` keyword argument."""
        id_tok = self.match("id")
        self.match(":")
        return Arg(id_tok.lexeme, self.parse_expr(), line=id_tok.line)


def parse_tokens(tokens: list[Token]) -> Start:
    """Parse a token list into a `Start` tree."""
    return Parser(tokens).parse()
