# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Line-oriented parser for description files."""

import glob
import logging
import re
from pathlib import Path

from declextract.description.ast import (
    Call,
    Comment,
    Define,
    Description,
    Field,
    Flags,
    Include,
    NewLine,
    Node,
    Pos,
    Resource,
    Struct,
    TypeDef,
)
from declextract.diagnostics import Diagnostics

logger = logging.getLogger(__name__)

_NAME = r"[A-Za-z_][\w$]*"
_INCLUDE_RE = re.compile(r"^include\s+<([^>]+)>$")
_DEFINE_RE = re.compile(rf"^define\s+({_NAME})\s+(.+)$")
_RESOURCE_RE = re.compile(rf"^resource\s+({_NAME})\[(.+?)\](?:\s*:\s*(.+))?$")
_TYPE_RE = re.compile(rf"^type\s+({_NAME})(?:\[([^\]]*)\])?\s+(.+)$")
_CALL_RE = re.compile(rf"^({_NAME})\((.*)\)(?:\s+(.+))?$")
_FLAGS_RE = re.compile(rf"^({_NAME})\s*=\s*(.+)$")
_STRUCT_OPEN_RE = re.compile(rf"^({_NAME})\s*([{{\[])$")
_FIELD_RE = re.compile(rf"^({_NAME})\s+(.+)$")
_TOKEN_RE = re.compile(r'"[^"]*"|`[^`]*`|[\w$]+|\S')


def parse(data: str, filename: str, errors: Diagnostics) -> Description | None:
    """Parse one description file.

    Args:
        data: File content.
        filename: File name recorded in node positions.
        errors: Diagnostics collector.

    Returns:
        Parsed description, or ``None`` if any error was reported.
    """
    before = len(errors)
    nodes = _Parser(data=data, filename=filename, errors=errors).parse()
    if len(errors) != before:
        return None
    return Description(nodes=nodes)


def parse_glob(pattern: str, errors: Diagnostics) -> Description | None:
    """Parse every file matching a glob pattern as one description set.

    Files are parsed in sorted path order; all files are parsed even after a
    failure so that every diagnostic is collected.
    """
    files = sorted(glob.glob(pattern))
    if not files:
        errors(Pos(file=pattern, line=0, col=0), "no description files found")
        return None
    before = len(errors)
    nodes: list[Node] = []
    for file in files:
        try:
            data = Path(file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            errors(Pos(file=file, line=0, col=0), f"failed to read file: {exc}")
            continue
        nodes.extend(_Parser(data=data, filename=file, errors=errors).parse())
    if len(errors) != before:
        logger.warning(
            f"Description parsing failed (pattern={pattern} errors={len(errors) - before})"
        )
        return None
    logger.info(f"Parsed descriptions (files={len(files)} nodes={len(nodes)})")
    return Description(nodes=nodes)


def normalize_type(expr: str) -> str:
    """Return the canonical spelling of a type expression."""
    out = ""
    for token in _TOKEN_RE.findall(expr):
        if token == ",":
            out += ", "
        elif token == "(" and out and not out.endswith(("[", " ", "(")):
            out += " ("
        else:
            out += token
    return out


def split_top_level(text: str) -> list[str]:
    """Split on commas that are not nested in brackets, parens or strings."""
    parts: list[str] = []
    depth = 0
    quote = ""
    current = ""
    for char in text:
        if quote:
            if char == quote:
                quote = ""
        elif char in "\"`":
            quote = char
        elif char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        current += char
    if current.strip():
        parts.append(current.strip())
    return parts


class _Parser:
    def __init__(self, data: str, filename: str, errors: Diagnostics) -> None:
        self._lines = data.splitlines()
        self._filename = filename
        self._errors = errors
        self._index = 0

    def parse(self) -> list[Node]:
        nodes: list[Node] = []
        while self._index < len(self._lines):
            raw = self._lines[self._index]
            self._index += 1
            line = raw.strip()
            pos = self._pos(raw)
            if not line:
                nodes.append(NewLine(pos=pos))
            elif line.startswith("#"):
                nodes.append(Comment(pos=pos, text=line))
            else:
                node = self._parse_decl(line, pos)
                if node is not None:
                    nodes.append(node)
        return _fixup_newlines(nodes)

    def _pos(self, raw: str) -> Pos:
        col = len(raw) - len(raw.lstrip()) + 1
        return Pos(file=self._filename, line=self._index, col=col)

    def _parse_decl(self, line: str, pos: Pos) -> Node | None:
        if match := _INCLUDE_RE.match(line):
            return Include(pos=pos, path=match.group(1).strip())
        if match := _DEFINE_RE.match(line):
            return Define(pos=pos, ident=match.group(1), value=match.group(2).strip())
        if match := _RESOURCE_RE.match(line):
            values = split_top_level(match.group(3) or "")
            return Resource(
                pos=pos,
                ident=match.group(1),
                base=normalize_type(match.group(2)),
                values=values,
            )
        if match := _TYPE_RE.match(line):
            params = None
            if match.group(2) is not None:
                params = split_top_level(match.group(2))
            return TypeDef(
                pos=pos,
                ident=match.group(1),
                params=params,
                expr=normalize_type(match.group(3)),
            )
        if match := _STRUCT_OPEN_RE.match(line):
            return self._parse_struct(
                name=match.group(1), is_union=match.group(2) == "[", pos=pos
            )
        if match := _CALL_RE.match(line):
            args = self._parse_args(match.group(2), pos)
            if args is None:
                return None
            ret = normalize_type(match.group(3)) if match.group(3) else None
            return Call(pos=pos, ident=match.group(1), args=args, ret=ret)
        if match := _FLAGS_RE.match(line):
            values = split_top_level(match.group(2))
            is_str = bool(values) and all(v.startswith(('"', "`")) for v in values)
            return Flags(pos=pos, ident=match.group(1), values=values, is_str=is_str)
        self._errors(pos, f"unexpected declaration: {line!r}")
        return None

    def _parse_args(self, text: str, pos: Pos) -> list[Field] | None:
        args: list[Field] = []
        for part in split_top_level(text):
            match = _FIELD_RE.match(part)
            if match is None:
                self._errors(pos, f"bad argument: {part!r}")
                return None
            args.append(Field(name=match.group(1), type=normalize_type(match.group(2))))
        return args

    def _parse_struct(self, name: str, is_union: bool, pos: Pos) -> Struct | None:
        close = "]" if is_union else "}"
        fields: list[Field] = []
        ok = True
        while self._index < len(self._lines):
            raw = self._lines[self._index]
            self._index += 1
            line = raw.strip()
            if not line:
                continue
            if line.startswith(close):
                attrs = line[1:].strip()
                if attrs and not (attrs.startswith("[") and attrs.endswith("]")):
                    self._errors(self._pos(raw), f"bad attributes for {name}: {attrs!r}")
                    return None
                if not ok:
                    return None
                return Struct(
                    pos=pos,
                    ident=name,
                    fields=fields,
                    attrs=attrs[1:-1].strip() or None,
                    is_union=is_union,
                )
            if line.startswith("#"):
                fields.append(Field(name="", type="", comment=line))
                continue
            match = _FIELD_RE.match(line)
            if match is None:
                self._errors(self._pos(raw), f"bad field in {name}: {line!r}")
                ok = False
                continue
            fields.append(Field(name=match.group(1), type=normalize_type(match.group(2))))
        kind = "union" if is_union else "struct"
        self._errors(pos, f"unterminated {kind} {name}")
        return None


def _fixup_newlines(nodes: list[Node]) -> list[Node]:
    """Ensure every struct or union is followed by an empty line."""
    fixed: list[Node] = []
    for index, node in enumerate(nodes):
        fixed.append(node)
        if not isinstance(node, Struct) or index + 1 == len(nodes):
            continue
        if not isinstance(nodes[index + 1], NewLine):
            fixed.append(NewLine(pos=node.pos))
    return fixed
