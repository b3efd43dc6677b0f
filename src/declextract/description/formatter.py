# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Canonical text rendering of description nodes."""

from declextract.description.ast import (
    Call,
    Comment,
    Define,
    Description,
    Flags,
    Include,
    NewLine,
    Node,
    Resource,
    Struct,
    TypeDef,
)


def format_description(desc: Description) -> str:
    """Render nodes as canonical description text.

    Runs of empty lines collapse to one; leading and trailing empty lines are
    dropped. Output ends with a newline unless it is empty.
    """
    lines: list[str] = []
    blank = True
    for node in desc.nodes:
        if isinstance(node, NewLine):
            if not blank:
                lines.append("")
                blank = True
            continue
        lines.extend(format_node(node))
        blank = False
    while lines and not lines[-1]:
        lines.pop()
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def format_node(node: Node) -> list[str]:
    """Render one node as text lines."""
    if isinstance(node, Comment):
        return [node.text]
    if isinstance(node, Include):
        return [f"include <{node.path}>"]
    if isinstance(node, Define):
        return [f"define {node.ident} {node.value}"]
    if isinstance(node, Resource):
        line = f"resource {node.ident}[{node.base}]"
        if node.values:
            line += ": " + ", ".join(node.values)
        return [line]
    if isinstance(node, TypeDef):
        params = f"[{', '.join(node.params)}]" if node.params is not None else ""
        return [f"type {node.ident}{params} {node.expr}"]
    if isinstance(node, Call):
        args = ", ".join(f"{arg.name} {arg.type}" for arg in node.args)
        line = f"{node.ident}({args})"
        if node.ret:
            line += f" {node.ret}"
        return [line]
    if isinstance(node, Flags):
        return [f"{node.ident} = {', '.join(node.values)}"]
    if isinstance(node, Struct):
        return _format_struct(node)
    raise TypeError(f"unknown description node {type(node).__name__}")


def _format_struct(node: Struct) -> list[str]:
    opening, closing = ("[", "]") if node.is_union else ("{", "}")
    width = max((len(f.name) for f in node.fields if f.comment is None), default=0)
    lines = [f"{node.ident} {opening}"]
    for field in node.fields:
        if field.comment is not None:
            lines.append(f"\t{field.comment}")
        else:
            lines.append(f"\t{field.name.ljust(width)}\t{field.type}")
    lines.append(f"{closing} [{node.attrs}]" if node.attrs else closing)
    return lines
