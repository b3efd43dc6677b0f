# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Type checking, reachability and constant extraction for descriptions."""

import logging
import re
from collections import deque
from dataclasses import dataclass, field

from declextract.description.ast import (
    Call,
    Define,
    Description,
    Flags,
    Node,
    Pos,
    Resource,
    Struct,
    TypeDef,
    identifiers,
    type_head,
)
from declextract.diagnostics import Diagnostics
from declextract.target import TargetPlatform

logger = logging.getLogger(__name__)

BUILTIN_TYPES: frozenset[str] = frozenset(
    {
        "int8", "int16", "int32", "int64", "intptr",
        "int16be", "int32be", "int64be",
        "bool8", "bool16", "bool32", "bool64",
        "fileoff", "flags", "const", "len", "bytesize", "bitsize", "offsetof",
        "ptr", "ptr64", "array", "string", "stringnoz", "filename", "buffer",
        "void", "vma", "vma64", "proc", "csum", "fmt", "text", "glob",
    }
)
_CONST_RE = re.compile(r"^[A-Z_][A-Z0-9_]*$")
_NUMBER_RE = re.compile(r"^-?(0x[0-9a-fA-F]+|\d+)$")
# Type arguments that are neither types nor constants.
KEYWORDS: frozenset[str] = frozenset(
    {"in", "out", "inout", "opt", "dec", "hex", "oct", "inet", "pseudo"}
)
# The first argument of these names a field, not a type.
_FIELD_REF_RE = re.compile(r"\b(len|bytesize|bitsize|offsetof|csum)\[[^,\]]*")


@dataclass(frozen=True)
class Const:
    """Represent one constant referenced by a description file."""

    name: str
    pos: Pos


@dataclass
class ConstInfo:
    """Represent the constants one description file needs.

    Attributes:
        file: Description file path.
        arch: Architecture the constants were extracted for.
        consts: Constants sorted by name.
    """

    file: str
    arch: str
    consts: list[Const] = field(default_factory=list)


def collect_unused(
    desc: Description, platform: TargetPlatform, errors: Diagnostics
) -> list[Node] | None:
    """Return declarations that no syscall reaches.

    Syscalls are the roots; a declaration is used when its name is referenced,
    directly or transitively, from the type expressions of a syscall.

    Returns:
        Unused declaration nodes in document order, or ``None`` on type errors.
    """
    decls = _typecheck(desc, errors)
    if decls is None:
        return None
    reached: set[str] = set()
    pending = deque(
        ident
        for node in desc.nodes
        if isinstance(node, Call)
        for expr in node.type_exprs()
        for ident in identifiers(expr)
    )
    while pending:
        ident = pending.popleft()
        if ident in reached or ident not in decls:
            continue
        reached.add(ident)
        for expr in decls[ident].type_exprs():
            pending.extend(identifiers(expr))
    unused = [node for node in decls.values() if node.name not in reached]
    logger.info(
        f"Collected unused declarations (target={platform} declarations={len(decls)} "
        f"unused={len(unused)})"
    )
    return unused


def extract_consts(
    desc: Description, platform: TargetPlatform, errors: Diagnostics
) -> dict[str, ConstInfo] | None:
    """Return the constants each description file uses or declares.

    Every syscall contributes its ``__NR_<name>`` constant.

    Returns:
        Per-file constant info keyed by file path, or ``None`` on type errors.
    """
    decls = _typecheck(desc, errors)
    if decls is None:
        return None
    found: dict[str, dict[str, Const]] = {}
    for node in desc.nodes:
        names: list[str] = []
        if isinstance(node, Define):
            names.append(node.ident)
        elif isinstance(node, Flags) and not node.is_str:
            names.extend(v for v in node.values if not _NUMBER_RE.match(v))
        elif isinstance(node, Resource):
            names.extend(v for v in node.values if not _NUMBER_RE.match(v))
        if isinstance(node, Call):
            names.append(f"__NR_{node.call_name}")
        for expr in node.type_exprs():
            names.extend(
                ident
                for ident in identifiers(expr)
                if _CONST_RE.match(ident) and ident not in decls
            )
        consts = found.setdefault(node.pos.file, {})
        for name in names:
            consts.setdefault(name, Const(name=name, pos=node.pos))
    return {
        file: ConstInfo(
            file=file,
            arch=platform.arch,
            consts=[consts[name] for name in sorted(consts)],
        )
        for file, consts in sorted(found.items())
    }


def _typecheck(desc: Description, errors: Diagnostics) -> dict[str, Node] | None:
    """Check declarations and return them keyed by name."""
    before = len(errors)
    decls: dict[str, Node] = {}
    for node in desc.nodes:
        if not isinstance(node, (Resource, TypeDef, Struct, Flags)):
            continue
        previous = decls.get(node.name)
        if previous is not None:
            errors(
                node.pos,
                f"{node.name} redeclared, previously declared at {previous.pos}",
            )
            continue
        decls[node.name] = node
    for node in desc.nodes:
        params = set(node.params or []) if isinstance(node, TypeDef) else set()
        for expr in node.type_exprs():
            if not type_head(expr):
                errors(node.pos, f"missing type in {node.name}")
                continue
            for ident in _unknown_references(expr, decls, params):
                errors(node.pos, f"unknown type {ident}")
    calls: dict[str, Pos] = {}
    for node in desc.nodes:
        if not isinstance(node, Call):
            continue
        if node.ident in calls:
            errors(
                node.pos,
                f"syscall {node.ident} redeclared, previously declared at {calls[node.ident]}",
            )
        else:
            calls[node.ident] = node.pos
    if len(errors) != before:
        return None
    return decls


def _unknown_references(expr: str, decls: dict[str, Node], params: set[str]) -> list[str]:
    """Return names in a type expression that resolve to nothing.

    The leading name must be a type; nested names may also be keywords or
    constants.
    """
    unknown: list[str] = []
    for index, ident in enumerate(identifiers(_FIELD_REF_RE.sub(r"\1[", expr))):
        if ident in unknown or ident in BUILTIN_TYPES or ident in decls or ident in params:
            continue
        if index > 0 and (ident in KEYWORDS or _CONST_RE.match(ident)):
            continue
        unknown.append(ident)
    return unknown
