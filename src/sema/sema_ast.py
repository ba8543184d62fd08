"""
Abstract syntax tree for the SEMA language.

Nodes are small dataclasses grouped into three tagged unions the parser
produces and the verifier matches on:

    Stmt:   If, While, Assign, Return, VarDecl, FuncDecl, Call
    Expr:   Condition, AddExpr, ArrayLiteral, Closure
    Factor: Var, Call, IntLit, FloatLit, Paren

`Term` sits between `AddExpr` and `Factor`, `Arg` is one keyword argument of a
`Call`, and `Start` is the root. `Call` is the only node that is both a
statement and a factor.

Every node carries the 1-based source `line` it starts on. The line is
metadata: it is excluded from equality, so trees built by hand in tests
compare equal to parsed ones.

Usage:
    node.to_dict() turns a tree into plain dicts/lists/strings, ready for
    `json.dumps`. Types are rendered in source syntax (`[int]`).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Union

from sema.sema_types import Param, TypeSpec

ASTDict = dict[str, Any]


def _plain(value: Any) -> Any:
    if isinstance(value, ASTNode):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, TypeSpec):
        return str(value)
    if isinstance(value, Param):
        return {
            "id": value.id,
            "type": str(value.type),
            "default": _plain(value.default),
        }
    return value


class ASTNode:
    """Common behaviour of all tree nodes."""

    kind: ClassVar[str] = "node"
    line: int

    def to_dict(self) -> ASTDict:
        d: ASTDict = {"kind": self.kind}
        for f in fields(self):  # type: ignore[arg-type]
            if f.name == "line":
                continue
            d[f.name] = _plain(getattr(self, f.name))
        return d


def _line() -> Any:
    return field(default=0, compare=False, repr=False, kw_only=True)


# Factors


@dataclass
class IntLit(ASTNode):
    kind: ClassVar[str] = "int"
    value: int
    line: int = _line()


@dataclass
class FloatLit(ASTNode):
    kind: ClassVar[str] = "float"
    value: float
    line: int = _line()


@dataclass
class Var(ASTNode):
    kind: ClassVar[str] = "var"
    id: str
    indices: list[Expr] = field(default_factory=list)
    line: int = _line()


@dataclass
class Arg(ASTNode):
    kind: ClassVar[str] = "arg"
    id: str
    expr: Expr
    line: int = _line()


@dataclass
class Call(ASTNode):
    kind: ClassVar[str] = "call"
    id: str
    args: list[Arg] = field(default_factory=list)
    line: int = _line()


@dataclass
class Paren(ASTNode):
    kind: ClassVar[str] = "paren"
    expr: Expr
    line: int = _line()


# Expressions


@dataclass
class Term(ASTNode):
    kind: ClassVar[str] = "term"
    factor: Factor
    mulop: str | None = None
    next: Term | None = None
    line: int = _line()


@dataclass
class AddExpr(ASTNode):
    kind: ClassVar[str] = "add"
    term: Term
    addop: str | None = None
    next: AddExpr | None = None
    line: int = _line()


@dataclass
class Condition(ASTNode):
    kind: ClassVar[str] = "condition"
    left: AddExpr
    relop: str
    right: AddExpr
    boolop: str | None = None
    next: Condition | None = None
    line: int = _line()


@dataclass
class ArrayLiteral(ASTNode):
    kind: ClassVar[str] = "array"
    entries: list[Expr] = field(default_factory=list)
    line: int = _line()


@dataclass
class Closure(ASTNode):
    kind: ClassVar[str] = "closure"
    params: tuple[Param, ...]
    return_type: TypeSpec
    body: list[Stmt] = field(default_factory=list)
    line: int = _line()


# Statements


@dataclass
class If(ASTNode):
    kind: ClassVar[str] = "if"
    cond: Condition
    then_block: list[Stmt] = field(default_factory=list)
    else_block: list[Stmt] | None = None
    line: int = _line()


@dataclass
class While(ASTNode):
    kind: ClassVar[str] = "while"
    cond: Condition
    body: list[Stmt] = field(default_factory=list)
    line: int = _line()


@dataclass
class Assign(ASTNode):
    kind: ClassVar[str] = "assign"
    id: str
    expr: Expr
    line: int = _line()


@dataclass
class Return(ASTNode):
    kind: ClassVar[str] = "return"
    expr: Expr
    line: int = _line()


@dataclass
class VarDecl(ASTNode):
    kind: ClassVar[str] = "vardecl"
    id: str
    type: TypeSpec
    expr: Expr
    line: int = _line()


@dataclass
class FuncDecl(ASTNode):
    kind: ClassVar[str] = "funcdecl"
    id: str
    params: tuple[Param, ...]
    return_type: TypeSpec
    body: list[Stmt] = field(default_factory=list)
    line: int = _line()


@dataclass
class Start(ASTNode):
    kind: ClassVar[str] = "start"
    statements: list[Stmt] = field(default_factory=list)
    line: int = _line()


Factor = Union[Var, Call, IntLit, FloatLit, Paren]
Expr = Union[Condition, AddExpr, ArrayLiteral, Closure]
Stmt = Union[If, While, Assign, Return, VarDecl, FuncDecl, Call]
