# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Compact syzlang-style description language."""

from declextract.description.ast import Description, Node, Pos
from declextract.description.checker import ConstInfo, collect_unused, extract_consts
from declextract.description.formatter import format_description
from declextract.description.parser import parse, parse_glob
from declextract.diagnostics import Diagnostics
from declextract.target import TargetPlatform


class SyzlangLite:
    """Expose the bundled description language through one object."""

    def parse_glob(self, pattern: str, errors: Diagnostics) -> Description | None:
        return parse_glob(pattern, errors)

    def parse(self, data: str, filename: str, errors: Diagnostics) -> Description | None:
        return parse(data, filename, errors)

    def format(self, desc: Description) -> str:
        return format_description(desc)

    def collect_unused(
        self, desc: Description, platform: TargetPlatform, errors: Diagnostics
    ) -> list[Node] | None:
        return collect_unused(desc, platform, errors)

    def extract_consts(
        self, desc: Description, platform: TargetPlatform, errors: Diagnostics
    ) -> dict[str, ConstInfo] | None:
        return extract_consts(desc, platform, errors)


__all__ = [
    "ConstInfo",
    "Description",
    "Node",
    "Pos",
    "SyzlangLite",
]
