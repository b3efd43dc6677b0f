# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Static-analysis tool invocation with an on-disk output cache."""

import concurrent.futures
import json
import logging
import os
import subprocess
from pathlib import Path
from typing import Any, Protocol

from declextract.config import ToolConfig
from declextract.errors import ExtractionToolError

logger = logging.getLogger(__name__)

Facts = dict[str, Any]

COMPILE_COMMANDS = "compile_commands.json"
CACHE_FILE = "output.json"


class ExtractionTool(Protocol):
    """Define the raw fact extraction contract."""

    def run(self) -> Facts:
        """Return merged declaration facts for the whole kernel tree.

        Raises:
            ExtractionToolError: If the tool fails or its output is malformed.
        """


class ClangTool:
    """Run the analysis binary over every translation unit of a kernel build.

    Each ``.c`` file listed in ``compile_commands.json`` is processed with
    ``<tool_bin> -p <kernel_obj> <file>``; the tool prints a JSON object of
    list-valued keys. Outputs are merged in sorted file order with duplicate
    entries dropped, since headers are seen from many translation units.
    """

    def __init__(self, config: ToolConfig, max_workers: int | None = None) -> None:
        """Initialize the runner.

        Args:
            config: Tool invocation settings.
            max_workers: Maximum number of concurrent tool processes.

        Raises:
            ValueError: If ``max_workers`` is not greater than zero.
        """
        if max_workers is None:
            max_workers = os.cpu_count() or 4
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        self._config = config
        self._max_workers = max_workers

    @property
    def cache_file(self) -> Path:
        return self._config.cache_dir / CACHE_FILE

    def run(self) -> Facts:
        """Return cached output when reuse is enabled, otherwise run the tool."""
        if self._config.reuse_cache and self.cache_file.is_file():
            logger.info(f"Reusing cached extraction output (path={self.cache_file})")
            try:
                cached = self.cache_file.read_text(encoding="utf-8")
            except OSError as exc:
                raise ExtractionToolError(f"failed to read {self.cache_file}: {exc}") from exc
            return _load_json(cached, self.cache_file)

        files = self._translation_units()
        with concurrent.futures.ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            outputs = list(executor.map(self._run_one, files))
        facts = merge_outputs(outputs)
        logger.info(
            f"Extraction tool finished (files={len(files)} "
            f"keys={','.join(sorted(facts)) or '-'})"
        )
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            self.cache_file.write_text(json.dumps(facts, indent=1), encoding="utf-8")
        except OSError as exc:
            logger.warning(f"Failed to write extraction cache (path={self.cache_file} error={exc})")
        return facts

    def _translation_units(self) -> list[Path]:
        path = self._config.kernel_obj / COMPILE_COMMANDS
        try:
            entries = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ExtractionToolError(f"failed to load {path}: {exc}") from exc
        if not isinstance(entries, list):
            raise ExtractionToolError(f"{path} must contain a JSON array")
        files: set[Path] = set()
        for entry in entries:
            if not isinstance(entry, dict) or "file" not in entry:
                raise ExtractionToolError(f"malformed entry in {path}: {entry!r}")
            file = Path(entry.get("directory", "")) / entry["file"]
            if file.suffix == ".c":
                files.add(file)
        return sorted(files)

    def _run_one(self, file: Path) -> Facts:
        cmd = [self._config.tool_bin, "-p", str(self._config.kernel_obj), str(file)]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise ExtractionToolError(f"failed to run {self._config.tool_bin}: {exc}") from exc
        if result.returncode != 0:
            logger.warning(
                f"Extraction tool failed (file={file} returncode={result.returncode})"
            )
            raise ExtractionToolError(
                f"{self._config.tool_bin} failed on {file} "
                f"(exit {result.returncode}):\n{result.stderr}"
            )
        return _load_json(result.stdout, file)


def merge_outputs(outputs: list[Facts]) -> Facts:
    """Merge per-file outputs, concatenating list values without duplicates."""
    merged: Facts = {}
    seen: dict[str, set[str]] = {}
    for output in outputs:
        for key, values in output.items():
            if not isinstance(values, list):
                raise ExtractionToolError(f"tool output key {key!r} is not a list")
            bucket = merged.setdefault(key, [])
            keys = seen.setdefault(key, set())
            for value in values:
                identity = json.dumps(value, sort_keys=True)
                if identity not in keys:
                    keys.add(identity)
                    bucket.append(value)
    return merged


def _load_json(text: str, source: Path) -> Facts:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ExtractionToolError(f"bad tool output for {source}: {exc}") from exc
    if not isinstance(data, dict):
        raise ExtractionToolError(f"tool output for {source} must be a JSON object")
    return data
