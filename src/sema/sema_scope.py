"""
Name scopes and function contexts used during verification.

Classes:
    ScopeStack: Nested name -> TypeSpec mappings, outermost first.
    FunctionContextStack: Expected return types of enclosing function bodies.
    AnalysisContext: Both stacks for one verification run, with the global
        scope seeded with the built-in functions.

A fresh `AnalysisContext` is built for every run; nothing is shared between
runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sema.sema_constants import BUILTIN_SIGNATURES
from sema.sema_errors import NameResolutionError, SemaError, TypeCheckError
from sema.sema_types import FunctionType, Param, TypeSpec


class ScopeStack:
    """Lexical scopes searched innermost-first.

    Attributes:
        scopes (list[dict[str, TypeSpec]]): Index 0 is the global scope.
    """

    def __init__(self) -> None:
        self.scopes: list[dict[str, TypeSpec]] = [{}]

    @property
    def depth(self) -> int:
        return len(self.scopes)

    def push_scope(self, bindings: dict[str, TypeSpec] | None = None) -> None:
        """Enters a new scope, optionally pre-populated with `bindings`."""
        self.scopes.append(dict(bindings or {}))

    def pop_scope(self) -> None:
        """Leaves the innermost scope, discarding its bindings."""
        if len(self.scopes) == 1:
            raise SemaError("Cannot pop the global scope")
        self.scopes.pop()

    def add(self, name: str, type_spec: TypeSpec) -> None:
        """Binds `name` in the innermost scope.

        Raises:
            NameResolutionError: If `name` is already bound in that scope.
        """
        if name in self.scopes[-1]:
            raise NameResolutionError(
                f"'{name}' is already declared in this scope", name=name
            )
        self.scopes[-1][name] = type_spec

    def get(self, name: str) -> TypeSpec:
        """Looks `name` up from the innermost scope outwards.

        Raises:
            NameResolutionError: If no scope binds `name`.
        """
        for scope in reversed(self.scopes):
            if name in scope:
                return scope[name]
        raise NameResolutionError(f"'{name}' is not defined", name=name)

    def __contains__(self, name: object) -> bool:
        return any(name in scope for scope in self.scopes)


class FunctionContextStack:
    """Return types expected by the enclosing function or closure bodies."""

    def __init__(self) -> None:
        self.returns: list[TypeSpec] = []

    def push_func(self, return_type: TypeSpec) -> None:
        self.returns.append(return_type)

    def pop_func(self) -> TypeSpec:
        if not self.returns:
            raise SemaError("No function context to leave")
        return self.returns.pop()

    def top(self) -> TypeSpec:
        if not self.returns:
            raise TypeCheckError("'return' outside of a function body")
        return self.returns[-1]

    def __len__(self) -> int:
        return len(self.returns)


def builtin_types() -> dict[str, TypeSpec]:
    """Builds the signatures of the built-in functions."""
    builtins: dict[str, TypeSpec] = {}
    for name, (params, ret) in BUILTIN_SIGNATURES.items():
        builtins[name] = TypeSpec(
            FunctionType(
                tuple(Param(pid, TypeSpec.of_primitive(ptype)) for pid, ptype in params),
                TypeSpec.of_primitive(ret),
            )
        )
    return builtins


@dataclass
class AnalysisContext:
    """All mutable state of one verification run."""

    scopes: ScopeStack = field(default_factory=ScopeStack)
    functions: FunctionContextStack = field(default_factory=FunctionContextStack)

    @classmethod
    def fresh(cls) -> AnalysisContext:
        """Creates empty stacks with the built-ins bound in the global scope."""
        ctx = cls()
        for name, type_spec in builtin_types().items():
            ctx.scopes.add(name, type_spec)
        return ctx
