"""Parsed type declarations and type expressions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class NamedType:
    """A type reference, possibly generic: ``V1Pod``, ``Array<V1Pod>``."""

    name: str
    args: tuple[TypeExpr, ...] = ()


@dataclass(frozen=True)
class ArrayType:
    """``T[]``."""

    element: TypeExpr


@dataclass(frozen=True)
class UnionType:
    options: tuple[TypeExpr, ...]


@dataclass(frozen=True)
class IntersectionType:
    parts: tuple[TypeExpr, ...]


@dataclass(frozen=True)
class ObjectType:
    """An inline object type, optionally with an index signature."""

    fields: tuple[FieldDescriptor, ...] = ()
    index_value: TypeExpr | None = None


@dataclass(frozen=True)
class LiteralType:
    """A string or number literal type."""

    text: str


@dataclass(frozen=True)
class FunctionType:
    returns: TypeExpr


TypeExpr = Union[NamedType, ArrayType, UnionType, IntersectionType, ObjectType, LiteralType, FunctionType]

PRIMITIVE_TYPES = frozenset(
    {
        "string",
        "number",
        "boolean",
        "bigint",
        "symbol",
        "any",
        "unknown",
        "object",
        "void",
        "never",
        "null",
        "undefined",
        "true",
        "false",
        "Date",
        "Object",
        "String",
        "Number",
        "Boolean",
        "Function",
    }
)

# Generic containers whose arguments, not the container itself, are the interesting types.
CONTAINER_TYPES = frozenset(
    {
        "Array",
        "ReadonlyArray",
        "Record",
        "Map",
        "Set",
        "Promise",
        "Partial",
        "Readonly",
        "Required",
        "Pick",
        "Omit",
    }
)

_NULLISH = frozenset({"null", "undefined"})


@dataclass(frozen=True)
class FieldDescriptor:
    """A property of a declared type."""

    name: str
    type_signature: str
    optional: bool = False
    doc_comment: str | None = None
    type_expr: TypeExpr = field(default=NamedType("any"), compare=False, repr=False)


@dataclass(frozen=True)
class TypeDescriptor:
    """A declared type and its ordered fields."""

    name: str
    fields: tuple[FieldDescriptor, ...] = ()
    doc_comment: str | None = None
    location: str | None = None

    def get_field(self, name: str) -> FieldDescriptor | None:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None


def is_nullish(expr: TypeExpr) -> bool:
    return isinstance(expr, NamedType) and not expr.args and expr.name in _NULLISH


def element_type_name(expr: TypeExpr) -> str | None:
    """Reduce a field type to the single named type a path continues into.

    Arrays and single-argument generics reduce to their element, unions to
    their first alternative that is not null or undefined. Returns None when
    no single named type applies.
    """
    if isinstance(expr, NamedType):
        if len(expr.args) == 1:
            return element_type_name(expr.args[0])
        if expr.args or expr.name in _NULLISH:
            return None
        return expr.name
    if isinstance(expr, ArrayType):
        return element_type_name(expr.element)
    if isinstance(expr, UnionType):
        for option in expr.options:
            if not is_nullish(option):
                return element_type_name(option)
        return None
    if isinstance(expr, IntersectionType):
        return element_type_name(expr.parts[0]) if expr.parts else None
    return None


def referenced_type_names(expr: TypeExpr) -> list[str]:
    """Named, non-primitive types mentioned anywhere in a type expression."""
    names: list[str] = []

    def visit(node: TypeExpr) -> None:
        if isinstance(node, NamedType):
            if node.name not in PRIMITIVE_TYPES and node.name not in CONTAINER_TYPES:
                names.append(node.name)
            for arg in node.args:
                visit(arg)
        elif isinstance(node, ArrayType):
            visit(node.element)
        elif isinstance(node, UnionType):
            for option in node.options:
                visit(option)
        elif isinstance(node, IntersectionType):
            for part in node.parts:
                visit(part)
        elif isinstance(node, ObjectType):
            for member in node.fields:
                visit(member.type_expr)
            if node.index_value is not None:
                visit(node.index_value)
        elif isinstance(node, FunctionType):
            visit(node.returns)

    visit(expr)
    return names


def nested_type_names(descriptor: TypeDescriptor) -> list[str]:
    """Types referenced by a descriptor's fields, in field order, excluding itself."""
    seen: dict[str, None] = {}
    for member in descriptor.fields:
        for name in referenced_type_names(member.type_expr):
            if name != descriptor.name:
                seen.setdefault(name, None)
    return list(seen)


def render_type(expr: TypeExpr) -> str:
    """Render a type expression back to declaration syntax."""
    if isinstance(expr, NamedType):
        if expr.args:
            return f"{expr.name}<{', '.join(render_type(arg) for arg in expr.args)}>"
        return expr.name
    if isinstance(expr, ArrayType):
        inner = render_type(expr.element)
        if isinstance(expr.element, (UnionType, IntersectionType, FunctionType)):
            inner = f"({inner})"
        return f"{inner}[]"
    if isinstance(expr, UnionType):
        return " | ".join(render_type(option) for option in expr.options)
    if isinstance(expr, IntersectionType):
        return " & ".join(render_type(part) for part in expr.parts)
    if isinstance(expr, ObjectType):
        members = [
            f"{member.name}{'?' if member.optional else ''}: {member.type_signature}"
            for member in expr.fields
        ]
        if expr.index_value is not None:
            members.append(f"[key: string]: {render_type(expr.index_value)}")
        return "{ " + "; ".join(members) + "; }" if members else "{}"
    if isinstance(expr, LiteralType):
        return expr.text
    return f"() => {render_type(expr.returns)}"
