# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Syscall identity resolution from per-architecture syscall tables.

Kernel ``*.tbl`` files map syscall names to the functions defined with
``SYSCALL_DEFINE`` macros, e.g.::

    288      common  accept4                 sys_accept4

Some syscalls have entry points named differently from the syscall itself
(``SYSCALL_DEFINE1(setuid16, ...)`` is listed as ``setuid``), so the
extracted functions need to be renamed. The mapping is many-to-many across
architectures; each syscall name is resolved to one entry point by preferring
the target architecture, then 64-bit records, then architecture name order.
Syscalls without a record for any supported architecture are not mapped.
"""

import concurrent.futures
import logging
from dataclasses import dataclass
from pathlib import Path

from declextract.errors import NoTableFilesFound, TableReadError
from declextract.target import TargetPlatform

logger = logging.getLogger(__name__)

TABLE_SUFFIX = ".tbl"
ENTRY_PREFIX = "sys_"

IdentityMap = dict[str, frozenset[str]]


@dataclass(frozen=True)
class TableRecord:
    """Represent one candidate entry point for a syscall name.

    Attributes:
        entry_symbol: Entry-point function with the ``sys_`` prefix removed.
        arch: Machine identifier of the table the record came from.
        is_64bit: Whether the record belongs to a 64-bit (or common) group.
    """

    entry_symbol: str
    arch: str
    is_64bit: bool


def find_table_files(kernel_src: Path, platform: TargetPlatform) -> dict[Path, list[str]]:
    """Discover syscall table files for every architecture of the platform OS.

    Args:
        kernel_src: Kernel source tree root.
        platform: Target platform whose OS architectures are scanned.

    Returns:
        Table file paths mapped to the sorted machine identifiers they serve.
    """
    files: dict[Path, set[str]] = {}
    for arch in platform.arches:
        arch_dir = kernel_src / "arch" / arch.kernel_header_arch
        if not arch_dir.is_dir():
            logger.debug(f"Skipping missing arch directory (path={arch_dir})")
            continue
        for path in arch_dir.rglob(f"*{TABLE_SUFFIX}"):
            if path.is_file():
                files.setdefault(path, set()).add(arch.vm_arch)
    return {path: sorted(arches) for path, arches in sorted(files.items())}


def parse_table_file(data: str, arch: str) -> list[tuple[str, TableRecord]]:
    """Parse one table file for one architecture.

    Args:
        data: Table file content.
        arch: Machine identifier to attach to every record.

    Returns:
        ``(syscall_name, record)`` pairs in file order, after exclusions.
    """
    records: list[tuple[str, TableRecord]] = []
    for line in data.splitlines():
        fields = line.split()
        if len(fields) < 4 or fields[0].startswith("#"):
            continue
        group = fields[1]
        syscall = fields[2]
        entry_symbol = fields[3].removeprefix(ENTRY_PREFIX)
        if _is_excluded(group=group, syscall=syscall, entry_symbol=entry_symbol):
            continue
        records.append(
            (
                syscall,
                TableRecord(
                    entry_symbol=entry_symbol,
                    arch=arch,
                    is_64bit=group == "common" or "64" in group,
                ),
            )
        )
    return records


def _is_excluded(group: str, syscall: str, entry_symbol: str) -> bool:
    if syscall.startswith("unused") or entry_symbol == "-":
        return True
    # powerpc spu group defines syscalls that no other architecture has.
    if group == "spu":
        return True
    # arm64 pulls scripts/syscall.tbl, where llseek exists only for 32-bit.
    if syscall == "llseek":
        return True
    return syscall == "reboot"


def resolution_key(record: TableRecord, platform: TargetPlatform) -> tuple[bool, bool, str]:
    """Return the sort key ranking candidate records for one syscall name.

    Lower keys win: target architecture first, then 64-bit records, then
    architecture identifier order.
    """
    return (record.arch != platform.arch, not record.is_64bit, record.arch)


def resolve(
    candidates: dict[str, list[TableRecord]], platform: TargetPlatform
) -> IdentityMap:
    """Pick one entry point per syscall name and invert the mapping.

    Args:
        candidates: Candidate records per syscall name, in discovery order.
        platform: Target platform used for the architecture preference.

    Returns:
        Entry-point symbol mapped to the syscall names it implements.
    """
    names_by_symbol: dict[str, set[str]] = {}
    for syscall in sorted(candidates):
        ranked = sorted(
            candidates[syscall], key=lambda record: resolution_key(record, platform)
        )
        names_by_symbol.setdefault(ranked[0].entry_symbol, set()).add(syscall)
    return {symbol: frozenset(names) for symbol, names in sorted(names_by_symbol.items())}


def build_identity_map(
    kernel_src: Path, platform: TargetPlatform, max_workers: int = 4
) -> IdentityMap:
    """Build the entry-point to syscall-name map for a kernel tree.

    Args:
        kernel_src: Kernel source tree root.
        platform: Target platform.
        max_workers: Maximum number of threads reading table files.

    Returns:
        The resolved identity map.

    Raises:
        NoTableFilesFound: If the tree has no table files.
        TableReadError: If any discovered table file cannot be read.
    """
    table_files = find_table_files(kernel_src, platform)
    if not table_files:
        raise NoTableFilesFound(f"found no *{TABLE_SUFFIX} files in the kernel dir {kernel_src}")

    jobs = [(path, arch) for path, arches in table_files.items() for arch in arches]
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(_read_and_parse, path, arch) for path, arch in jobs]
        parsed = [future.result() for future in futures]

    candidates: dict[str, list[TableRecord]] = {}
    for records in parsed:
        for syscall, record in records:
            candidates.setdefault(syscall, []).append(record)
    identity = resolve(candidates, platform)
    logger.info(
        f"Syscall identity map built (table_files={len(table_files)} "
        f"syscalls={len(candidates)} entry_points={len(identity)})"
    )
    return identity


def _read_and_parse(path: Path, arch: str) -> list[tuple[str, TableRecord]]:
    try:
        data = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning(f"Failed to read syscall table (path={path} error={exc})")
        raise TableReadError(f"failed to read {path}: {exc}") from exc
    return parse_table_file(data, arch)
