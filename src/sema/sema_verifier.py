"""
Static semantic checks for SEMA programs.

The verifier walks a `Start` tree depth-first and raises on the first fault.
A program that verifies produces no output at all.

Rules, by construct:
    If / While      condition checked; every block runs in a fresh scope.
    Assign          value type equals the variable's bound type.
    Return          value type equals the enclosing function's return type.
    VarDecl         value type equals the declared type; name bound in the
                    current scope.
    FuncDecl        body checked with the parameters in scope; the function's
                    own name is bound afterwards, so it cannot call itself.
    Closure         like FuncDecl, plus duplicate parameter names and default
                    value types are rejected.
    Condition       both sides equal; ordering operators need non-arrays.
    AddExpr / Term  chained operands equal and arithmetic.
    Var             no more indices than the declared array depth.
    Call            callee is a function; keyword arguments cover every
                    parameter without a default and name no unknown one;
                    argument types equal parameter types.

Classes:
    Verifier: Runs the checks against one `AnalysisContext`.

Functions:
    verify_program(start): Verify with a freshly seeded context.
"""

from __future__ import annotations

from sema.sema_ast import (
    AddExpr,
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
from sema.sema_errors import ArityError, NameResolutionError, TypeCheckError
from sema.sema_scope import AnalysisContext
from sema.sema_types import (
    ANY,
    BOOL,
    FLOAT,
    INT,
    FunctionType,
    Param,
    TypeSpec,
    distinct_types,
    is_arithmetic,
)


class Verifier:
    """Type-checks a parsed program.

    Attributes:
        ctx (AnalysisContext): Scope and function-context stacks for this run.
    """

    def __init__(self, ctx: AnalysisContext | None = None) -> None:
        self.ctx = ctx or AnalysisContext.fresh()

    def verify(self, start: Start) -> None:
        """Check every top-level statement of `start` in order."""
        self.verify_block(start.statements)

    @staticmethod
    def expect_equal(expected: TypeSpec, actual: TypeSpec, message: str) -> None:
        """Raise `TypeCheckError` with `message` unless the types are equal."""
        if expected != actual:
            raise TypeCheckError(message, types=(str(expected), str(actual)))

    # Statements

    def verify_block(self, stmts: list[Stmt]) -> None:
        """Check statements in the current scope."""
        for stmt in stmts:
            self.verify_stmt(stmt)

    def verify_scoped(self, stmts: list[Stmt]) -> None:
        """Check statements inside a fresh child scope."""
        self.ctx.scopes.push_scope()
        self.verify_block(stmts)
        self.ctx.scopes.pop_scope()

    def verify_stmt(self, stmt: Stmt) -> None:
        """Check one statement against the current context."""
        match stmt:
            case If(cond=cond, then_block=then_block, else_block=else_block):
                self.verify_condition(cond)
                self.verify_scoped(then_block)
                if else_block is not None:
                    self.verify_scoped(else_block)
            case While(cond=cond, body=body):
                self.verify_condition(cond)
                self.verify_scoped(body)
            case Assign(id=name, expr=expr):
                actual = self.verify_expr(expr)
                declared = self.ctx.scopes.get(name)
                self.expect_equal(
                    declared,
                    actual,
                    f"Cannot assign {actual} to '{name}' of type {declared} (line {stmt.line})",
                )
            case Return(expr=expr):
                expected = self.ctx.functions.top()
                actual = self.verify_expr(expr)
                self.expect_equal(
                    expected,
                    actual,
                    f"Cannot return {actual} from a function returning {expected} (line {stmt.line})",
                )
            case VarDecl(id=name, type=declared, expr=expr):
                actual = self.verify_expr(expr)
                self.expect_equal(
                    declared,
                    actual,
                    f"Cannot initialize '{name}' of type {declared} with {actual} (line {stmt.line})",
                )
                self.ctx.scopes.add(name, declared)
            case FuncDecl(id=name, params=params, return_type=return_type, body=body):
                self.verify_function_body(params, return_type, body)
                self.ctx.scopes.add(name, TypeSpec(FunctionType(params, return_type)))
            case Call():
                self.verify_call(stmt)
            case _:
                raise AssertionError(f"Unexpected statement node: {stmt!r}")

    def verify_function_body(
        self, params: tuple[Param, ...], return_type: TypeSpec, body: list[Stmt]
    ) -> None:
        """Check a function body in its own return context and parameter scope."""
        # one mapping for all parameters: a repeated name silently wins
        self.ctx.functions.push_func(return_type)
        self.ctx.scopes.push_scope({p.id: p.type for p in params})
        self.verify_block(body)
        self.ctx.scopes.pop_scope()
        self.ctx.functions.pop_func()

    # Expressions

    def verify_expr(self, expr: Expr) -> TypeSpec:
        """Return the type of an expression."""
        match expr:
            case Condition():
                return self.verify_condition(expr)
            case AddExpr():
                return self.verify_add(expr)
            case ArrayLiteral():
                return self.verify_array(expr)
            case Closure():
                return self.verify_closure(expr)
            case _:
                raise AssertionError(f"Unexpected expression node: {expr!r}")

    def verify_condition(self, cond: Condition) -> TypeSpec:
        """Check every comparison in a boolop chain; the chain is `bool`."""
        link: Condition | None = cond
        while link is not None:
            left = self.verify_add(link.left)
            right = self.verify_add(link.right)
            self.expect_equal(
                left,
                right,
                f"Cannot compare {left} with {right} using '{link.relop}' (line {link.line})",
            )
            if ("<" in link.relop or ">" in link.relop) and left.array_depth != 0:
                raise TypeCheckError(
                    f"Operator '{link.relop}' cannot order arrays of type {left} (line {link.line})",
                    types=(str(left),),
                )
            link = link.next
        return BOOL

    def check_operands(self, head: TypeSpec, tail: TypeSpec, op: str, line: int) -> None:
        """Neighbouring operands must be equal and arithmetic."""
        self.expect_equal(
            head,
            tail,
            f"Operands of '{op}' differ: {head} and {tail} (line {line})",
        )
        if not is_arithmetic(head):
            raise TypeCheckError(
                f"Operator '{op}' needs an arithmetic operand, got {head} (line {line})",
                types=(str(head),),
            )

    def verify_add(self, node: AddExpr) -> TypeSpec:
        """Type of an additive chain, walked left to right along `.next`."""
        head = self.verify_term(node.term)
        prev, link = head, node
        while link.next is not None:
            tail = self.verify_term(link.next.term)
            self.check_operands(prev, tail, link.addop or "+", link.line)
            prev, link = tail, link.next
        return head

    def verify_term(self, node: Term) -> TypeSpec:
        """Type of a multiplicative chain, walked left to right along `.next`."""
        head = self.verify_factor(node.factor)
        prev, link = head, node
        while link.next is not None:
            tail = self.verify_factor(link.next.factor)
            self.check_operands(prev, tail, link.mulop or "*", link.line)
            prev, link = tail, link.next
        return head

    def verify_array(self, node: ArrayLiteral) -> TypeSpec:
        """Entries must share one type; `[]` is an array of `ANY`."""
        types = distinct_types(self.verify_expr(e) for e in node.entries)
        if len(types) > 1:
            rendered = ", ".join(str(t) for t in types)
            raise TypeCheckError(
                f"Array literal mixes types {rendered} (line {node.line})",
                types=tuple(str(t) for t in types),
            )
        if types:
            return types[0].array_of()
        return ANY.array_of()

    def verify_closure(self, node: Closure) -> TypeSpec:
        """Check a closure body and defaults; return its function type."""
        seen: set[str] = set()
        for p in node.params:
            if p.id in seen:
                raise NameResolutionError(
                    f"Duplicate parameter '{p.id}' in closure (line {node.line})",
                    name=p.id,
                )
            seen.add(p.id)

        self.verify_function_body(node.params, node.return_type, node.body)

        for p in node.params:
            if p.default is not None:
                actual = self.verify_expr(p.default)
                self.expect_equal(
                    p.type,
                    actual,
                    f"Default for '{p.id}' has type {actual}, expected {p.type} (line {node.line})",
                )
        return TypeSpec(FunctionType(node.params, node.return_type))

    # Factors

    def verify_factor(self, factor: Factor) -> TypeSpec:
        """Return the type of a single factor."""
        match factor:
            case Var():
                return self.verify_var(factor)
            case Call():
                return self.verify_call(factor)
            case IntLit():
                return INT
            case FloatLit():
                return FLOAT
            case Paren(expr=inner):
                return self.verify_expr(inner)
            case _:
                raise AssertionError(f"Unexpected factor node: {factor!r}")

    def verify_var(self, var: Var) -> TypeSpec:
        """Return the type of a variable after its indices are applied."""
        declared = self.ctx.scopes.get(var.id)
        if len(var.indices) > declared.array_depth:
            raise TypeCheckError(
                f"'{var.id}' of type {declared} cannot take {len(var.indices)} "
                f"index(es) (line {var.line})",
                types=(str(declared),),
            )
        return declared.indexed(len(var.indices))

    def verify_call(self, call: Call) -> TypeSpec:
        """Check keyword arguments against the callee; return its result type."""
        callee = self.ctx.scopes.get(call.id)
        if not callee.is_function or not isinstance(callee.base, FunctionType):
            raise TypeCheckError(
                f"'{call.id}' of type {callee} is not callable (line {call.line})",
                types=(str(callee),),
            )
        func = callee.base
        param_ids = {p.id for p in func.params}
        supplied = {a.id for a in call.args}

        for arg in call.args:
            if arg.id not in param_ids:
                raise ArityError(
                    f"'{call.id}' has no parameter '{arg.id}' (line {call.line})",
                    name=arg.id,
                )
        for p in func.params:
            if p.default is None and p.id not in supplied:
                raise ArityError(
                    f"Call to '{call.id}' is missing argument '{p.id}' (line {call.line})",
                    name=p.id,
                )
        for arg in call.args:
            for p in func.params:
                if p.id != arg.id:
                    continue
                actual = self.verify_expr(arg.expr)
                self.expect_equal(
                    p.type,
                    actual,
                    f"Argument '{arg.id}' of '{call.id}' has type {actual}, "
                    f"expected {p.type} (line {call.line})",
                )
        return func.return_type


def verify_program(start: Start) -> AnalysisContext:
    """Verify `start` in a fresh context and return that context."""
    verifier = Verifier()
    verifier.verify(start)
    return verifier.ctx
