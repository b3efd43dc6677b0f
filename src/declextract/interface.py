# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Interface catalog records, serialization and enrichment."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from declextract.description import ConstInfo
from declextract.subsystem import Crash, SubsystemClassifier

logger = logging.getLogger(__name__)

IFACE_SYSCALL = "SYSCALL"


@dataclass
class Interface:
    """Represent one kernel interface in the output catalog.

    Records are created by synthesis and mutated in place by enrichment.

    Attributes:
        type: Interface kind, e.g. ``SYSCALL``.
        name: Externally visible interface name.
        func: Implementing kernel function.
        access: Access level required to reach the interface.
        manual_desc: Whether hand-authored descriptions cover it.
        auto_desc: Whether synthesized descriptions cover it.
        identifying_const: Constant that identifies the interface.
        files: Source files implementing the interface.
        subsystems: Owning subsystem names, sorted.
    """

    type: str
    name: str
    func: str
    access: str = "unknown"
    manual_desc: bool = False
    auto_desc: bool = False
    identifying_const: str = ""
    files: list[str] = field(default_factory=list)
    subsystems: list[str] = field(default_factory=list)


def serialize_interfaces(interfaces: list[Interface]) -> str:
    """Render the catalog as one tab-separated line per interface."""
    lines: list[str] = []
    for iface in interfaces:
        fields = [
            iface.type,
            iface.name,
            f"func:{iface.func}",
            f"access:{iface.access}",
            f"manual_desc:{_bool(iface.manual_desc)}",
            f"auto_desc:{_bool(iface.auto_desc)}",
        ]
        fields.extend(f"file:{file}" for file in iface.files)
        fields.extend(f"subsystem:{name}" for name in iface.subsystems)
        lines.append("\t".join(fields) + "\n")
    return "".join(lines)


def finish_interfaces(
    interfaces: list[Interface],
    consts: dict[str, ConstInfo],
    auto_file: Path,
    classifier: SubsystemClassifier,
) -> None:
    """Fill in provenance and ownership of every interface in place.

    Args:
        interfaces: Records from synthesis.
        consts: Per-file constant usage of the full description set.
        auto_file: Synthesized description file path.
        classifier: Subsystem classifier queried per record.
    """
    manual: set[str] = set()
    for file, info in consts.items():
        if Path(file) == auto_file:
            continue
        manual.update(const.name for const in info.consts)

    for iface in interfaces:
        iface.manual_desc = iface.identifying_const in manual
        crashes = [Crash(guilty_path=file) for file in iface.files]
        names = {subsystem.name for subsystem in classifier.extract(crashes)}
        iface.subsystems = sorted(names | set(iface.subsystems))
    logger.info(
        f"Interfaces enriched (interfaces={len(interfaces)} "
        f"manual={sum(1 for iface in interfaces if iface.manual_desc)})"
    )


def _bool(value: bool) -> str:
    return "true" if value else "false"
