# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Canonicalization pipeline producing the synthesized description file.

Every step consumes the complete output of the previous one:

1. resolve syscall identities, run extraction and synthesis, checkpoint the
   draft description and catalog;
2. parse all descriptions in the synthesized file's directory, because the
   synthesized file uses types declared by hand-authored ones;
3. collect unused declarations on a clone of the parsed set;
4. extract per-file constants on another clone;
5. enrich the catalog and persist it;
6. drop unused synthesized declarations and every hand-authored node;
7. format, parse back and format again, since parsing fixes up empty lines
   that only the second formatting pass settles.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from declextract.description import Description
from declextract.diagnostics import Diagnostics
from declextract.errors import ParseFailure, TypeCheckFailure
from declextract.extractor import ExtractionTool
from declextract.interface import finish_interfaces, serialize_interfaces
from declextract.language import DescriptionLanguage
from declextract.persistence import write_file
from declextract.subsystem import SubsystemClassifier
from declextract.synthesizer import DescriptionSynthesizer
from declextract.syscall_table import build_identity_map
from declextract.target import TargetPlatform

logger = logging.getLogger(__name__)

INFO_SUFFIX = ".info"


@dataclass(frozen=True)
class RunSummary:
    """Represent the outcome of one pipeline run."""

    auto_file: Path
    info_file: Path
    entry_points: int
    interfaces: int
    unused_nodes: int
    pruned_nodes: int
    elapsed_ms: int


class DeclExtractPipeline:
    """Synthesize, check, prune and canonicalize extracted descriptions."""

    def __init__(
        self,
        kernel_src: Path,
        platform: TargetPlatform,
        extractor: ExtractionTool,
        synthesizer: DescriptionSynthesizer,
        language: DescriptionLanguage,
        classifier: SubsystemClassifier,
    ) -> None:
        """Initialize the pipeline with its collaborators.

        Args:
            kernel_src: Kernel source tree holding the syscall tables.
            platform: Target platform threaded through every component.
            extractor: Static-analysis tool runner.
            synthesizer: Draft description synthesizer.
            language: Description parser, formatter and checker.
            classifier: Subsystem classifier for interface enrichment.
        """
        self._kernel_src = kernel_src
        self._platform = platform
        self._extractor = extractor
        self._synthesizer = synthesizer
        self._language = language
        self._classifier = classifier

    def run(self, auto_file: Path) -> RunSummary:
        """Run every step and persist the final outputs.

        Args:
            auto_file: Synthesized description file; its directory holds the
                hand-authored descriptions.

        Returns:
            Run summary.

        Raises:
            DeclExtractError: Any subclass, on the first failing step. The
                step 1 checkpoint stays on disk.
        """
        started_at = time.monotonic()
        info_file = auto_file.with_name(auto_file.name + INFO_SUFFIX)

        identity = build_identity_map(self._kernel_src, self._platform)
        facts = self._extractor.run()
        descriptions, interfaces = self._synthesizer.synthesize(facts, identity)
        write_file(auto_file, descriptions)
        write_file(info_file, serialize_interfaces(interfaces))
        logger.info(f"Checkpoint written (auto_file={auto_file} interfaces={len(interfaces)})")

        errors = Diagnostics()
        pattern = str(auto_file.parent / "*.txt")
        desc = self._language.parse_glob(pattern, errors)
        if desc is None:
            raise ParseFailure("failed to parse descriptions", errors.messages)

        unused_nodes = self._language.collect_unused(desc.clone(), self._platform, errors)
        if unused_nodes is None:
            raise TypeCheckFailure("failed to typecheck descriptions", errors.messages)
        consts = self._language.extract_consts(desc.clone(), self._platform, errors)
        if consts is None:
            raise TypeCheckFailure("failed to typecheck descriptions", errors.messages)

        finish_interfaces(interfaces, consts, auto_file, self._classifier)
        write_file(info_file, serialize_interfaces(interfaces))

        unused = {(kind, name) for _, kind, name in (n.info() for n in unused_nodes)}
        before = sum(1 for node in desc.nodes if Path(node.pos.file) == auto_file)
        pruned = prune(desc, auto_file, unused)

        formatted = self._reformat(pruned, auto_file, errors)
        write_file(auto_file, formatted)

        summary = RunSummary(
            auto_file=auto_file,
            info_file=info_file,
            entry_points=len(identity),
            interfaces=len(interfaces),
            unused_nodes=len(unused),
            pruned_nodes=before - len(pruned.nodes),
            elapsed_ms=int((time.monotonic() - started_at) * 1000),
        )
        logger.info(
            f"Descriptions written (auto_file={auto_file} pruned={summary.pruned_nodes} "
            f"elapsed_ms={summary.elapsed_ms})"
        )
        return summary

    def _reformat(self, desc: Description, auto_file: Path, errors: Diagnostics) -> str:
        reparsed = self._language.parse(self._language.format(desc), str(auto_file), errors)
        if reparsed is None:
            raise ParseFailure("failed to parse formatted descriptions", errors.messages)
        return self._language.format(reparsed)


def prune(desc: Description, auto_file: Path, unused: set[tuple[str, str]]) -> Description:
    """Keep synthesized nodes that are not unused.

    Hand-authored nodes are dropped from the result because only the
    synthesized file is rewritten; they are never deleted from their own files.

    Args:
        desc: Parsed description set.
        auto_file: Synthesized description file path.
        unused: ``(kind, name)`` pairs reported unused by the checker.

    Returns:
        The nodes that make up the new synthesized file.
    """
    kept = []
    for node in desc.nodes:
        pos, kind, name = node.info()
        if Path(pos.file) != auto_file or (kind, name) in unused:
            continue
        kept.append(node)
    return Description(nodes=kept)
