# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command line entry point for description extraction."""

import argparse
import logging
import sys
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from declextract.config import ToolConfig, load_config
from declextract.description import SyzlangLite
from declextract.errors import ConfigurationError, DeclExtractError
from declextract.extractor import ClangTool
from declextract.pipeline import DeclExtractPipeline, RunSummary
from declextract.subsystem import MaintainersClassifier
from declextract.synthesizer import SyscallSynthesizer

logger = logging.getLogger(__name__)

DEFAULT_AUTO_FILE = "sys/linux/auto.txt"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(prog="syz-declextract")
    parser.add_argument("--config", required=True, help="Manager config file.")
    parser.add_argument(
        "--binary",
        default="syz-declextract",
        help="Path to the static-analysis tool binary.",
    )
    parser.add_argument(
        "--cache-extract",
        action="store_true",
        help="Use cached extract results if present (cached in <workdir>/declextract.cache).",
    )
    parser.add_argument(
        "--auto-file",
        default=DEFAULT_AUTO_FILE,
        help="Synthesized description file to write.",
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run the extraction command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    _emit_marker(console=console, phase="config", state="start")
    try:
        config = load_config(Path(args.config))
    except ConfigurationError as exc:
        logger.warning("Configuration failed (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return 2
    _emit_marker(console=console, phase="config", state="done")

    tool_config = ToolConfig.from_manager_config(
        config, tool_bin=args.binary, reuse_cache=args.cache_extract
    )
    _emit_marker(console=console, phase="extract", state="start")
    try:
        pipeline = DeclExtractPipeline(
            kernel_src=config.kernel_src,
            platform=config.target,
            extractor=ClangTool(tool_config),
            synthesizer=SyscallSynthesizer(),
            language=SyzlangLite(),
            classifier=MaintainersClassifier.from_kernel_tree(config.kernel_src),
        )
        summary = pipeline.run(Path(args.auto_file))
    except (DeclExtractError, OSError) as exc:
        logger.warning("Extraction failed (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return 2
    _emit_marker(console=console, phase="extract", state="done")
    _emit_summary(console=console, summary=summary)
    return 0


def _emit_marker(console: Console, phase: str, state: str) -> None:
    console.print(f"phase={phase} state={state}", markup=False, highlight=False)


def _emit_summary(console: Console, summary: RunSummary) -> None:
    table = Table(show_header=True, expand=False)
    table.add_column("metric")
    table.add_column("value", justify="right")
    rows = {
        "auto_file": str(summary.auto_file),
        "info_file": str(summary.info_file),
        "entry_points": str(summary.entry_points),
        "interfaces": str(summary.interfaces),
        "unused_nodes": str(summary.unused_nodes),
        "pruned_nodes": str(summary.pruned_nodes),
        "elapsed_ms": str(summary.elapsed_ms),
    }
    for key, value in rows.items():
        table.add_row(key, value)
    console.print(table)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
