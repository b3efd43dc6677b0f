# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Description language contract."""

from typing import Protocol

from declextract.description import ConstInfo, Description, Node
from declextract.diagnostics import Diagnostics
from declextract.target import TargetPlatform


class DescriptionLanguage(Protocol):
    """Parse, format and check description documents.

    Every failing operation reports positioned messages to ``errors`` and
    returns ``None``.
    """

    def parse_glob(self, pattern: str, errors: Diagnostics) -> Description | None:
        """Parse all files matching ``pattern`` as one document set."""

    def parse(self, data: str, filename: str, errors: Diagnostics) -> Description | None:
        """Parse one file's content, attributing nodes to ``filename``."""

    def format(self, desc: Description) -> str:
        """Render a document as canonical text."""

    def collect_unused(
        self, desc: Description, platform: TargetPlatform, errors: Diagnostics
    ) -> list[Node] | None:
        """Type-check and return declarations unreachable from any syscall.

        May mutate ``desc``; callers pass a clone.
        """

    def extract_consts(
        self, desc: Description, platform: TargetPlatform, errors: Diagnostics
    ) -> dict[str, ConstInfo] | None:
        """Type-check and return per-file constant usage.

        May mutate ``desc``; callers pass a clone.
        """
