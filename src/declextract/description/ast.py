# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Description document nodes."""

import copy
import re
from dataclasses import dataclass, field

IDENT_RE = re.compile(r"(?<![\w$])[A-Za-z_][\w$]*")
_STRING_RE = re.compile(r'"[^"]*"|`[^`]*`')


@dataclass(frozen=True)
class Pos:
    """Represent a source position (1-based line and column)."""

    file: str
    line: int
    col: int = 1

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.col}"


@dataclass
class Node:
    """Base declaration node.

    Identity of a declaration is ``(kind, name)``; ``pos.file`` tells which
    description file the node came from.
    """

    pos: Pos

    kind = "node"

    @property
    def name(self) -> str:
        return ""

    def info(self) -> tuple[Pos, str, str]:
        return self.pos, self.kind, self.name

    def type_exprs(self) -> list[str]:
        """Return type expressions referenced by this node."""
        return []


@dataclass
class NewLine(Node):
    kind = "newline"


@dataclass
class Comment(Node):
    text: str = ""

    kind = "comment"


@dataclass
class Include(Node):
    path: str = ""

    kind = "include"

    @property
    def name(self) -> str:
        return self.path


@dataclass
class Define(Node):
    ident: str = ""
    value: str = ""

    kind = "define"

    @property
    def name(self) -> str:
        return self.ident


@dataclass
class Resource(Node):
    ident: str = ""
    base: str = ""
    values: list[str] = field(default_factory=list)

    kind = "resource"

    @property
    def name(self) -> str:
        return self.ident

    def type_exprs(self) -> list[str]:
        return [self.base]


@dataclass
class TypeDef(Node):
    ident: str = ""
    params: list[str] | None = None
    expr: str = ""

    kind = "type"

    @property
    def name(self) -> str:
        return self.ident

    def type_exprs(self) -> list[str]:
        return [self.expr]


@dataclass
class Field:
    """Represent a struct/union field, a call argument or a body comment."""

    name: str
    type: str
    comment: str | None = None


@dataclass
class Struct(Node):
    ident: str = ""
    fields: list[Field] = field(default_factory=list)
    attrs: str | None = None
    is_union: bool = False

    kind = "struct"

    @property
    def name(self) -> str:
        return self.ident

    def info(self) -> tuple[Pos, str, str]:
        return self.pos, "union" if self.is_union else "struct", self.ident

    def type_exprs(self) -> list[str]:
        return [f.type for f in self.fields if f.comment is None]


@dataclass
class Call(Node):
    ident: str = ""
    args: list[Field] = field(default_factory=list)
    ret: str | None = None

    kind = "call"

    @property
    def name(self) -> str:
        return self.ident

    @property
    def call_name(self) -> str:
        """Return the syscall name without the ``$variant`` suffix."""
        return self.ident.partition("$")[0]

    def type_exprs(self) -> list[str]:
        exprs = [arg.type for arg in self.args]
        if self.ret:
            exprs.append(self.ret)
        return exprs


@dataclass
class Flags(Node):
    ident: str = ""
    values: list[str] = field(default_factory=list)
    is_str: bool = False

    kind = "flags"

    @property
    def name(self) -> str:
        return self.ident

    def info(self) -> tuple[Pos, str, str]:
        return self.pos, "strflags" if self.is_str else "flags", self.ident


@dataclass
class Description:
    """Represent a set of parsed description files."""

    nodes: list[Node] = field(default_factory=list)

    def clone(self) -> "Description":
        """Return an unshared copy for independent analysis."""
        return Description(nodes=copy.deepcopy(self.nodes))


def identifiers(expr: str) -> list[str]:
    """Return identifiers in a type expression, ignoring string literals."""
    return IDENT_RE.findall(_STRING_RE.sub(" ", expr))


def type_head(expr: str) -> str:
    """Return the leading identifier of a type expression."""
    match = IDENT_RE.match(expr.strip())
    return match.group(0) if match else ""
