# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Manager configuration loading."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from declextract.errors import ConfigurationError
from declextract.target import DEFAULT_TARGET, TargetPlatform

logger = logging.getLogger(__name__)

CACHE_DIR_NAME = "declextract.cache"


@dataclass(frozen=True)
class ManagerConfig:
    """Represent the subset of a manager config the extractor needs.

    Attributes:
        kernel_src: Kernel source tree root.
        kernel_obj: Kernel build output directory.
        workdir: Manager working directory.
        target: Platform descriptions are extracted for.
    """

    kernel_src: Path
    kernel_obj: Path
    workdir: Path
    target: TargetPlatform = DEFAULT_TARGET


@dataclass(frozen=True)
class ToolConfig:
    """Describe one static-analysis tool invocation.

    Attributes:
        tool_bin: Path of the analysis tool binary.
        kernel_src: Kernel source tree root.
        kernel_obj: Kernel build output directory holding compile commands.
        cache_dir: Directory for cached tool output.
        reuse_cache: Reuse cached output verbatim when present.
    """

    tool_bin: str
    kernel_src: Path
    kernel_obj: Path
    cache_dir: Path
    reuse_cache: bool = False

    @classmethod
    def from_manager_config(
        cls, config: ManagerConfig, tool_bin: str, reuse_cache: bool
    ) -> "ToolConfig":
        """Derive the tool configuration from a manager config."""
        return cls(
            tool_bin=tool_bin,
            kernel_src=config.kernel_src,
            kernel_obj=config.kernel_obj,
            cache_dir=config.workdir / CACHE_DIR_NAME,
            reuse_cache=reuse_cache,
        )


def load_config(path: Path) -> ManagerConfig:
    """Load a JSON manager config file.

    Args:
        path: Config file path.

    Returns:
        Parsed manager config. ``kernel_src`` defaults to ``kernel_obj``.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid JSON or
            lacks required keys.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"failed to read config {path}: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"failed to parse config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"config {path} must contain a JSON object")
    return parse_config(data, base_dir=path.parent)


def parse_config(data: dict, base_dir: Path) -> ManagerConfig:
    """Build a manager config from decoded JSON.

    Relative paths are resolved against ``base_dir``.
    """
    missing = [key for key in ("kernel_obj", "workdir") if not data.get(key)]
    if missing:
        raise ConfigurationError(f"config is missing required keys: {', '.join(missing)}")
    for key in ("kernel_src", "kernel_obj", "workdir", "target"):
        if key in data and not isinstance(data[key], str):
            raise ConfigurationError(f"config key {key} must be a string")

    kernel_obj = base_dir / data["kernel_obj"]
    kernel_src = base_dir / data["kernel_src"] if data.get("kernel_src") else kernel_obj
    target = TargetPlatform.parse(data["target"]) if data.get("target") else DEFAULT_TARGET
    config = ManagerConfig(
        kernel_src=kernel_src,
        kernel_obj=kernel_obj,
        workdir=base_dir / data["workdir"],
        target=target,
    )
    logger.debug(
        f"Loaded manager config (kernel_src={config.kernel_src} "
        f"kernel_obj={config.kernel_obj} workdir={config.workdir} target={target})"
    )
    return config
