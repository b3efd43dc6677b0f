# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Positioned diagnostic collection."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from declextract.description.ast import Pos

logger = logging.getLogger(__name__)


class Diagnostics:
    """Collect positioned messages reported by the parser and checker.

    Messages are rendered as ``<file basename>:<line>:<col>: <message>``.
    """

    def __init__(self) -> None:
        self._messages: list[str] = []

    def __call__(self, pos: Pos, msg: str) -> None:
        message = f"{Path(pos.file).name}:{pos.line}:{pos.col}: {msg}"
        logger.debug(f"Description diagnostic (message={message})")
        self._messages.append(message)

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> list[str]:
        return list(self._messages)

    def text(self) -> str:
        return "".join(f"{message}\n" for message in self._messages)
