"""
Type model of the SEMA language.

A `TypeSpec` is a base type (a `Primitive` or a `FunctionType`) wrapped in zero
or more array levels. Equality is structural:

    - a TypeSpec whose base is the wildcard primitive `ANY` equals every other
      TypeSpec, whatever either array depth is;
    - otherwise the array depths must match and the bases must be equal;
    - primitives are equal by name (or when either is `ANY`);
    - function types are equal when their return types are equal and their
      parameters are equal as an unordered set of `(id, type)` pairs.
      Default values never take part in equality.

Because the wildcard makes equality non-transitive, type specs are not
hashable. Use `distinct_types()` instead of `set()`.

Classes:
    Primitive, FunctionType, TypeSpec, Param

Functions:
    is_arithmetic(t), distinct_types(types), same_params(a, b)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from sema.sema_constants import ANY_TYPE, ARITHMETIC_PRIMITIVES

if TYPE_CHECKING:
    from sema.sema_ast import Expr


@dataclass(frozen=True, eq=False)
class Primitive:
    name: str

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Primitive):
            return False
        return self.name == other.name or ANY_TYPE in (self.name, other.name)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Param:
    """A named, typed parameter with an optional default value.

    Only `id` and `type` are compared; `default` is carried for call binding.
    """

    id: str
    type: TypeSpec
    default: Expr | None = field(default=None, compare=False)

    def __str__(self) -> str:
        return f"{self.id}: {self.type}"


def same_params(a: Iterable[Param], b: Iterable[Param]) -> bool:
    """Compares two parameter collections as unordered sets."""
    left, right = list(a), list(b)
    return all(p in right for p in left) and all(q in left for q in right)


@dataclass(frozen=True, eq=False)
class FunctionType:
    params: tuple[Param, ...]
    return_type: TypeSpec

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FunctionType):
            return False
        return self.return_type == other.return_type and same_params(
            self.params, other.params
        )

    def param(self, name: str) -> Param | None:
        for p in self.params:
            if p.id == name:
                return p
        return None

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        return f"({params}): {self.return_type}"


TypeBase = Union[Primitive, FunctionType]


@dataclass(frozen=True, eq=False)
class TypeSpec:
    """A base type nested in `array_depth` levels of arrays."""

    base: TypeBase
    array_depth: int = 0

    @classmethod
    def of_primitive(cls, name: str, array_depth: int = 0) -> TypeSpec:
        return cls(Primitive(name), array_depth)

    @property
    def is_wildcard(self) -> bool:
        return isinstance(self.base, Primitive) and self.base.name == ANY_TYPE

    @property
    def is_function(self) -> bool:
        return self.array_depth == 0 and isinstance(self.base, FunctionType)

    def array_of(self) -> TypeSpec:
        return TypeSpec(self.base, self.array_depth + 1)

    def indexed(self, count: int) -> TypeSpec:
        return TypeSpec(self.base, self.array_depth - count)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TypeSpec):
            return NotImplemented
        if self.is_wildcard or other.is_wildcard:
            return True
        if self.array_depth != other.array_depth:
            return False
        return self.base == other.base

    def __str__(self) -> str:
        return "[" * self.array_depth + str(self.base) + "]" * self.array_depth


def is_arithmetic(t: TypeSpec) -> bool:
    return (
        t.array_depth == 0
        and isinstance(t.base, Primitive)
        and t.base.name in ARITHMETIC_PRIMITIVES
    )


def distinct_types(types: Iterable[TypeSpec]) -> list[TypeSpec]:
    """Returns the first representative of each structurally distinct type."""
    seen: list[TypeSpec] = []
    for t in types:
        if not any(t == s for s in seen):
            seen.append(t)
    return seen


ANY = TypeSpec.of_primitive(ANY_TYPE)
INT = TypeSpec.of_primitive("int")
FLOAT = TypeSpec.of_primitive("float")
BOOL = TypeSpec.of_primitive("bool")
NONE = TypeSpec.of_primitive("none")
