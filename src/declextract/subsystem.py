# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Subsystem ownership classification of kernel source paths."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import pathspec

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"^([A-Z]):\s*(.*)$")


@dataclass(frozen=True)
class Subsystem:
    """Represent one ownership grouping of source paths."""

    name: str


@dataclass(frozen=True)
class Crash:
    """Represent a minimal crash-like locator carrying one guilty path."""

    guilty_path: str


class SubsystemClassifier(Protocol):
    """Define the subsystem extraction contract."""

    def extract(self, crashes: list[Crash]) -> list[Subsystem]:
        """Return the subsystems responsible for the given locators."""


@dataclass(frozen=True)
class _Pattern:
    spec: pathspec.GitIgnoreSpec
    depth: int | None

    def matches(self, path: str) -> bool:
        if self.depth is not None and path.count("/") != self.depth:
            return False
        return self.spec.match_file(path)


@dataclass(frozen=True)
class _Rule:
    subsystem: Subsystem
    files: tuple[_Pattern, ...]
    excludes: tuple[_Pattern, ...]

    def matches(self, path: str) -> bool:
        if not any(pattern.matches(path) for pattern in self.files):
            return False
        return not any(pattern.matches(path) for pattern in self.excludes)


class MaintainersClassifier:
    """Classify paths using the ``F:``/``X:`` patterns of a MAINTAINERS file.

    A pattern ending in ``/`` covers everything below the directory; a pattern
    whose last component has a wildcard covers that directory level only.
    ``X:`` patterns override ``F:`` patterns of the same section.

    The subsystem name is the local part of the section's first mailing list
    with any ``linux-`` prefix removed, e.g. ``linux-ext4@vger.kernel.org``
    yields ``ext4``. Sections without a list or without file patterns are
    ignored.
    """

    def __init__(self, rules: list[_Rule]) -> None:
        self._rules = rules

    @classmethod
    def from_text(cls, text: str) -> "MaintainersClassifier":
        """Build a classifier from MAINTAINERS content."""
        rules: list[_Rule] = []
        for section in _split_sections(text):
            lists = [value for tag, value in section if tag == "L"]
            files = tuple(_compile(value) for tag, value in section if tag == "F" and value)
            if not lists or not files:
                continue
            excludes = tuple(_compile(value) for tag, value in section if tag == "X" and value)
            rules.append(
                _Rule(
                    subsystem=Subsystem(name=_list_name(lists[0])),
                    files=files,
                    excludes=excludes,
                )
            )
        logger.debug(f"Loaded subsystem rules (rules={len(rules)})")
        return cls(rules=rules)

    @classmethod
    def from_kernel_tree(cls, kernel_src: Path) -> "MaintainersClassifier":
        """Build a classifier from ``<kernel_src>/MAINTAINERS``.

        A missing file yields a classifier that matches nothing.

        Raises:
            OSError: If the file exists but cannot be read.
        """
        path = kernel_src / "MAINTAINERS"
        if not path.is_file():
            logger.warning(f"MAINTAINERS file not found; subsystems stay empty (path={path})")
            return cls(rules=[])
        return cls.from_text(path.read_text(encoding="utf-8", errors="replace"))

    def extract(self, crashes: list[Crash]) -> list[Subsystem]:
        """Return the subsystems of all locators, deduplicated by name."""
        found: dict[str, Subsystem] = {}
        for crash in crashes:
            path = crash.guilty_path.replace("\\", "/").lstrip("/")
            for rule in self._rules:
                if rule.matches(path):
                    found.setdefault(rule.subsystem.name, rule.subsystem)
        return [found[name] for name in sorted(found)]


def _split_sections(text: str) -> list[list[tuple[str, str]]]:
    sections: list[list[tuple[str, str]]] = []
    current: list[tuple[str, str]] = []
    for line in text.splitlines():
        if not line.strip():
            if current:
                sections.append(current)
            current = []
            continue
        match = _TAG_RE.match(line)
        if match:
            current.append((match.group(1), match.group(2).strip()))
    if current:
        sections.append(current)
    return sections


def _compile(value: str) -> _Pattern:
    """Anchor a MAINTAINERS file pattern at the tree root."""
    value = value.strip().lstrip("/")
    depth = None
    last = value.rsplit("/", 1)[-1]
    if last and any(char in last for char in "*?["):
        depth = value.count("/")
    return _Pattern(spec=pathspec.GitIgnoreSpec.from_lines(["/" + value]), depth=depth)


def _list_name(address: str) -> str:
    local = address.split()[0].split("@", 1)[0]
    return local.removeprefix("linux-")
