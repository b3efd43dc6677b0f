# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Draft description synthesis from extraction facts."""

import logging
from typing import Any, Protocol

from declextract.errors import ExtractionToolError
from declextract.extractor import Facts
from declextract.interface import IFACE_SYSCALL, Interface
from declextract.syscall_table import IdentityMap

logger = logging.getLogger(__name__)

HEADER = "# Code generated by syz-declextract. DO NOT EDIT."
AUTO_SUFFIX = "$auto"
SYSCALL_PREFIXES = ("__do_sys_", "__se_sys_", "__x64_sys_", "sys_")


class DescriptionSynthesizer(Protocol):
    """Define the draft document synthesis contract."""

    def synthesize(
        self, facts: Facts, identity: IdentityMap
    ) -> tuple[str, list[Interface]]:
        """Return draft description text and the draft interface catalog."""


class SyscallSynthesizer:
    """Synthesize syscall and struct descriptions.

    Syscall functions are renamed through the identity map; a function with no
    syscall table entry produces nothing. Synthesized declarations carry the
    ``$auto`` suffix so they never collide with hand-authored ones.
    """

    def synthesize(
        self, facts: Facts, identity: IdentityMap
    ) -> tuple[str, list[Interface]]:
        """Build the draft document and catalog.

        Args:
            facts: Merged extraction tool output.
            identity: Entry-point symbol to syscall names map.

        Returns:
            Draft description text and interface records.

        Raises:
            ExtractionToolError: If the facts are malformed.
        """
        calls: list[tuple[str, str]] = []
        interfaces: list[Interface] = []
        unmapped = 0
        for fact in _entries(facts, "syscalls"):
            func = _require(fact, "func", "syscall")
            names = identity.get(_strip_prefix(func), frozenset())
            if not names:
                unmapped += 1
                continue
            args = ", ".join(
                f"{arg.get('name') or f'arg{index}'} {render_type(arg.get('type'))}"
                for index, arg in enumerate(_objects(fact, "args"))
            )
            files = [fact["source_file"]] if fact.get("source_file") else []
            for name in sorted(names):
                calls.append((name, f"{name}{AUTO_SUFFIX}({args})"))
                interfaces.append(
                    Interface(
                        type=IFACE_SYSCALL,
                        name=name,
                        func=func,
                        access=fact.get("access") or "unknown",
                        auto_desc=True,
                        identifying_const=f"__NR_{name}",
                        files=list(files),
                    )
                )

        blocks: list[str] = [HEADER]
        blocks.extend(line for _, line in sorted(calls))
        for fact in sorted(_entries(facts, "structs"), key=lambda s: str(s.get("name"))):
            blocks.append(_render_struct(fact))
        interfaces.sort(key=lambda iface: (iface.type, iface.name))
        logger.info(
            f"Synthesized descriptions (syscalls={len(calls)} unmapped={unmapped} "
            f"structs={len(blocks) - 1 - len(calls)})"
        )
        return "\n\n".join(blocks) + "\n", interfaces


def render_type(spec: Any) -> str:
    """Render one extracted type as a description type expression."""
    if not isinstance(spec, dict) or "kind" not in spec:
        raise ExtractionToolError(f"malformed type: {spec!r}")
    kind = spec["kind"]
    if kind == "int":
        bits = spec.get("bits")
        return f"int{bits}" if bits else "intptr"
    if kind == "ptr":
        return f"ptr[{spec.get('dir', 'in')}, {render_type(spec.get('elem'))}]"
    if kind == "buffer":
        return f"buffer[{spec.get('dir', 'in')}]"
    if kind in ("string", "filename"):
        return kind
    if kind == "array":
        elem = render_type(spec.get("elem"))
        return f"array[{elem}, {spec['len']}]" if spec.get("len") else f"array[{elem}]"
    if kind == "struct":
        return _require(spec, "name", "struct type") + AUTO_SUFFIX
    if kind == "named":
        return _require(spec, "name", "named type")
    if kind == "const":
        value = spec.get("value")
        if value is None or value == "":
            raise ExtractionToolError(f"const type without value: {spec!r}")
        bits = spec.get("bits")
        return f"const[{value}, {f'int{bits}' if bits else 'intptr'}]"
    raise ExtractionToolError(f"unsupported type kind {kind!r}")


def _render_struct(fact: dict[str, Any]) -> str:
    name = _require(fact, "name", "struct") + AUTO_SUFFIX
    opening, closing = ("[", "]") if fact.get("is_union") else ("{", "}")
    lines = [f"{name} {opening}"]
    for index, field in enumerate(_objects(fact, "fields")):
        lines.append(f"\t{field.get('name') or f'field{index}'}\t{render_type(field.get('type'))}")
    lines.append(closing)
    return "\n".join(lines)


def _entries(facts: Facts, key: str) -> list[dict[str, Any]]:
    entries = facts.get(key, [])
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise ExtractionToolError(f"tool output key {key!r} must be a list of objects")
    return entries


def _objects(fact: dict[str, Any], key: str) -> list[dict[str, Any]]:
    values = fact.get(key, [])
    if not isinstance(values, list) or not all(isinstance(v, dict) for v in values):
        owner = fact.get("func") or fact.get("name")
        raise ExtractionToolError(f"{key} of {owner!r} must be a list of objects")
    return values


def _require(fact: dict[str, Any], key: str, what: str) -> str:
    value = fact.get(key)
    if not isinstance(value, str) or not value:
        raise ExtractionToolError(f"{what} without {key}: {fact!r}")
    return value


def _strip_prefix(func: str) -> str:
    for prefix in SYSCALL_PREFIXES:
        if func.startswith(prefix):
            return func[len(prefix):]
    return func
