"""Parser for TypeScript-style type declarations.

Understands the subset of declaration syntax used to describe Kubernetes
models: ``class`` and ``interface`` blocks with property signatures, JSDoc
comments, arrays, unions, intersections, generics, inline object types and
literal types. Methods, constructors, index signatures and static members
are recognised and skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from kube_discovery_mcp.domains.types.models import (
    ArrayType,
    FieldDescriptor,
    FunctionType,
    IntersectionType,
    LiteralType,
    NamedType,
    ObjectType,
    TypeDescriptor,
    TypeExpr,
    UnionType,
)
from kube_discovery_mcp.utils.errors import DeclarationParseError

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<doc>/\*\*(?!/).*?\*/)
  | (?P<comment>/\*.*?\*/|//[^\n]*)
  | (?P<ws>\s+)
  | (?P<string>'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*"|`(?:\\.|[^`\\])*`)
  | (?P<number>-?\d+(?:\.\d+)?)
  | (?P<ident>[A-Za-z_$][\w$]*)
  | (?P<arrow>=>)
  | (?P<punct>.)
    """,
    re.VERBOSE | re.DOTALL,
)

_DECLARATION_KEYWORDS = frozenset({"class", "interface"})
_MEMBER_MODIFIERS = frozenset(
    {"public", "private", "protected", "readonly", "static", "declare", "abstract", "override", "get", "set"}
)
# Serializer bookkeeping on generated model classes.
_BOOKKEEPING_FIELDS = frozenset({"discriminator", "mapping", "attributeTypeMap", "constructor"})


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    start: int
    end: int


def tokenize(text: str) -> list[Token]:
    """Split declaration text into tokens, dropping whitespace and plain comments."""
    tokens: list[Token] = []
    for match in _TOKEN_PATTERN.finditer(text):
        kind = match.lastgroup or "punct"
        if kind in ("ws", "comment"):
            continue
        tokens.append(Token(kind, match.group(), match.start(), match.end()))
    return tokens


def clean_doc_comment(raw: str) -> str | None:
    """Strip JSDoc delimiters and leading asterisks, joining lines with spaces."""
    body = raw[3:-2] if raw.startswith("/**") and raw.endswith("*/") else raw
    lines = (line.strip().lstrip("*").strip() for line in body.splitlines())
    text = " ".join(line for line in lines if line)
    return text or None


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in "'\"`" and value[-1] == value[0]:
        return value[1:-1]
    return value


class DeclarationParser:
    """Recursive-descent parser over a token stream."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = tokenize(text)
        self._pos = 0

    # Token stream helpers

    def _peek(self, offset: int = 0) -> Token | None:
        index = self._pos + offset
        if index < len(self._tokens):
            return self._tokens[index]
        return None

    def _at(self, value: str, offset: int = 0) -> bool:
        token = self._peek(offset)
        return token is not None and token.kind != "string" and token.value == value

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise DeclarationParseError("Unexpected end of declaration text", len(self._text))
        self._pos += 1
        return token

    def _expect(self, value: str) -> Token:
        token = self._peek()
        if token is None:
            raise DeclarationParseError(f"Expected '{value}' but reached end of text", len(self._text))
        if token.value != value:
            raise DeclarationParseError(f"Expected '{value}' but found '{token.value}'", token.start)
        self._pos += 1
        return token

    def _skip_balanced(self, opening: str, closing: str) -> None:
        """Skip from an opening token to its matching closing token, inclusive."""
        start = self._expect(opening)
        depth = 1
        while depth:
            token = self._peek()
            if token is None:
                raise DeclarationParseError(f"Unbalanced '{opening}'", start.start)
            self._pos += 1
            if token.kind == "punct":
                if token.value == opening:
                    depth += 1
                elif token.value == closing:
                    depth -= 1

    def _skip_member(self) -> None:
        """Skip to the end of the current member without consuming a closing brace."""
        depth = 0
        while True:
            token = self._peek()
            if token is None:
                raise DeclarationParseError("Unterminated declaration body", len(self._text))
            if token.kind == "punct":
                if token.value in "{([":
                    depth += 1
                elif token.value in ")]":
                    depth -= 1
                elif token.value == "}":
                    if depth == 0:
                        return
                    depth -= 1
                elif token.value in ";," and depth == 0:
                    self._pos += 1
                    return
            self._pos += 1

    # Declarations

    def parse(self) -> list[TypeDescriptor]:
        """Parse every class and interface declaration in the text."""
        descriptors: list[TypeDescriptor] = []
        pending_doc: Token | None = None
        while (token := self._peek()) is not None:
            if token.kind == "doc":
                pending_doc = token
                self._pos += 1
                continue
            next_token = self._peek(1)
            if (
                token.kind == "ident"
                and token.value in _DECLARATION_KEYWORDS
                and next_token is not None
                and next_token.kind == "ident"
            ):
                descriptors.append(self._parse_declaration(pending_doc))
                pending_doc = None
                continue
            if token.value not in ("export", "declare", "abstract", "default"):
                pending_doc = None
            self._pos += 1
        return descriptors

    def _parse_declaration(self, doc: Token | None) -> TypeDescriptor:
        self._advance()
        name = self._advance().value
        if self._at("<"):
            self._skip_balanced("<", ">")
        # Heritage clauses run up to the body.
        while not self._at("{"):
            token = self._advance()
            if token.value == ";":
                return TypeDescriptor(name=name, doc_comment=clean_doc_comment(doc.value) if doc else None)
        self._expect("{")
        fields = self._parse_members()
        return TypeDescriptor(
            name=name,
            fields=tuple(fields),
            doc_comment=clean_doc_comment(doc.value) if doc else None,
        )

    def _parse_members(self) -> list[FieldDescriptor]:
        """Parse members up to and including the closing brace."""
        fields: list[FieldDescriptor] = []
        doc: Token | None = None
        while True:
            token = self._peek()
            if token is None:
                raise DeclarationParseError("Unterminated declaration body", len(self._text))
            if token.kind == "punct" and token.value == "}":
                self._pos += 1
                return fields
            if token.kind == "doc":
                doc = token
                self._pos += 1
                continue
            if token.kind == "punct" and token.value in ";,":
                self._pos += 1
                continue

            start = self._pos
            try:
                member = self._parse_member(doc)
            except DeclarationParseError as e:
                if self._peek() is None:
                    raise
                logger.debug(f"Skipping unparseable member: {e}")
                self._pos = start
                self._skip_member()
                member = None
            doc = None
            if member is not None:
                fields.append(member)

    def _parse_member(self, doc: Token | None) -> FieldDescriptor | None:
        is_static = False
        while (token := self._peek()) is not None and token.kind == "ident" and token.value in _MEMBER_MODIFIERS:
            following = self._peek(1)
            if following is None or not (following.kind in ("ident", "string") or following.value == "["):
                break
            is_static = is_static or token.value == "static"
            self._pos += 1

        token = self._advance()
        if token.value == "[" and token.kind == "punct":
            # Index signature or computed name.
            self._pos -= 1
            self._skip_balanced("[", "]")
            self._skip_member()
            return None
        if token.kind not in ("ident", "string", "number"):
            self._pos -= 1
            self._skip_member()
            return None
        name = _unquote(token.value)

        optional = False
        if self._at("?"):
            optional = True
            self._pos += 1
        if self._at("!"):
            self._pos += 1

        if self._at("(") or self._at("<"):
            if self._at("<"):
                self._skip_balanced("<", ">")
            self._skip_balanced("(", ")")
            if self._at(":"):
                self._pos += 1
                self._parse_type()
            if self._at("{"):
                self._skip_balanced("{", "}")
            self._consume_terminator()
            return None

        if self._at(":"):
            self._pos += 1
            type_start = self._peek()
            if type_start is None:
                raise DeclarationParseError("Missing type annotation", len(self._text))
            expr = self._parse_type()
            type_end = self._tokens[self._pos - 1].end
            signature = " ".join(self._text[type_start.start : type_end].split())
        else:
            expr = NamedType("any")
            signature = "any"
        self._consume_terminator()

        if is_static or name in _BOOKKEEPING_FIELDS:
            return None
        return FieldDescriptor(
            name=name,
            type_signature=signature,
            optional=optional,
            doc_comment=clean_doc_comment(doc.value) if doc else None,
            type_expr=expr,
        )

    def _consume_terminator(self) -> None:
        if self._at(";") or self._at(","):
            self._pos += 1

    # Type expressions

    def _parse_type(self) -> TypeExpr:
        if self._at("|"):
            self._pos += 1
        options = [self._parse_intersection()]
        while self._at("|"):
            self._pos += 1
            options.append(self._parse_intersection())
        return options[0] if len(options) == 1 else UnionType(tuple(options))

    def _parse_intersection(self) -> TypeExpr:
        if self._at("&"):
            self._pos += 1
        parts = [self._parse_postfix()]
        while self._at("&"):
            self._pos += 1
            parts.append(self._parse_postfix())
        return parts[0] if len(parts) == 1 else IntersectionType(tuple(parts))

    def _parse_postfix(self) -> TypeExpr:
        expr = self._parse_primary()
        while self._at("[") and self._at("]", 1):
            self._pos += 2
            expr = ArrayType(expr)
        return expr

    def _closing_paren_index(self) -> int:
        depth = 0
        for index in range(self._pos, len(self._tokens)):
            token = self._tokens[index]
            if token.kind != "punct":
                continue
            if token.value == "(":
                depth += 1
            elif token.value == ")":
                depth -= 1
                if depth == 0:
                    return index
        raise DeclarationParseError("Unbalanced '('", self._tokens[self._pos].start)

    def _parse_primary(self) -> TypeExpr:
        token = self._peek()
        if token is None:
            raise DeclarationParseError("Expected a type but reached end of text", len(self._text))

        if token.kind == "punct" and token.value == "(":
            closing = self._closing_paren_index()
            after = self._tokens[closing + 1] if closing + 1 < len(self._tokens) else None
            if after is not None and after.kind == "arrow":
                self._pos = closing + 2
                return FunctionType(self._parse_type())
            self._pos += 1
            inner = self._parse_type()
            self._expect(")")
            return inner

        if token.kind == "punct" and token.value == "{":
            return self._parse_object_type()

        if token.kind in ("string", "number"):
            self._pos += 1
            return LiteralType(token.value)

        if token.kind == "ident":
            self._pos += 1
            if token.value == "keyof":
                self._parse_postfix()
                return NamedType("string")
            if token.value == "typeof":
                self._parse_postfix()
                return NamedType("any")
            name = token.value
            while self._at(".") and (part := self._peek(1)) is not None and part.kind == "ident":
                name = f"{name}.{part.value}"
                self._pos += 2
            args: list[TypeExpr] = []
            if self._at("<"):
                self._pos += 1
                args.append(self._parse_type())
                while self._at(","):
                    self._pos += 1
                    args.append(self._parse_type())
                self._expect(">")
            return NamedType(name, tuple(args))

        raise DeclarationParseError(f"Unexpected '{token.value}' in type", token.start)

    def _parse_object_type(self) -> ObjectType:
        self._expect("{")
        fields: list[FieldDescriptor] = []
        index_value: TypeExpr | None = None
        doc: Token | None = None
        while True:
            token = self._peek()
            if token is None:
                raise DeclarationParseError("Unterminated object type", len(self._text))
            if token.kind == "punct" and token.value == "}":
                self._pos += 1
                return ObjectType(tuple(fields), index_value)
            if token.kind == "doc":
                doc = token
                self._pos += 1
                continue
            if token.kind == "punct" and token.value in ";,":
                self._pos += 1
                continue
            if token.kind == "punct" and token.value == "[":
                self._skip_balanced("[", "]")
                if self._at("?"):
                    self._pos += 1
                self._expect(":")
                index_value = self._parse_type()
                self._consume_terminator()
                continue
            member = self._parse_member(doc)
            doc = None
            if member is not None:
                fields.append(member)


def parse_declarations(text: str) -> list[TypeDescriptor]:
    """Parse all class and interface declarations in ``text``.

    Raises:
        DeclarationParseError: If a declaration body is not terminated.
    """
    return DeclarationParser(text).parse()


def find_declaration(text: str, type_name: str) -> TypeDescriptor | None:
    """Parse ``text`` and return the declaration named ``type_name``, if present."""
    for descriptor in parse_declarations(text):
        if descriptor.name == type_name:
            return descriptor
    return None
