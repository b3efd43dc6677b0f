# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for MAINTAINERS based subsystem classification."""

from pathlib import Path

from declextract.subsystem import Crash, MaintainersClassifier

MAINTAINERS = "\n".join(
    [
        "List of maintainers",
        "===================",
        "",
        "EXT4 FILE SYSTEM",
        "M:\tTheodore Ts'o <tytso@mit.edu>",
        "L:\tlinux-ext4@vger.kernel.org",
        "S:\tMaintained",
        "F:\tfs/ext4/",
        "F:\tinclude/trace/events/ext4.h",
        "",
        "FILESYSTEMS (VFS and infrastructure)",
        "L:\tlinux-fsdevel@vger.kernel.org",
        "F:\tfs/*",
        "X:\tfs/ext4/",
        "",
        "NETWORKING [GENERAL]",
        "L:\tnetdev@vger.kernel.org",
        "F:\tnet/",
        "",
        "NO LIST SECTION",
        "M:\tSomeone <someone@example.org>",
        "F:\tdrivers/",
        "",
    ]
)


def _names(classifier: MaintainersClassifier, *paths: str) -> list[str]:
    crashes = [Crash(guilty_path=path) for path in paths]
    return [subsystem.name for subsystem in classifier.extract(crashes)]


def test_ph3_subsys_001_directory_patterns_match_recursively() -> None:
    classifier = MaintainersClassifier.from_text(MAINTAINERS)

    assert _names(classifier, "fs/ext4/inode.c") == ["ext4"]
    assert _names(classifier, "net/ipv4/tcp.c") == ["netdev"]


def test_ph3_subsys_002_wildcards_do_not_cross_directories() -> None:
    classifier = MaintainersClassifier.from_text(MAINTAINERS)

    assert _names(classifier, "fs/open.c") == ["fsdevel"]
    assert _names(classifier, "fs/btrfs/inode.c") == []


def test_ph3_subsys_003_union_is_sorted_and_deduplicated() -> None:
    classifier = MaintainersClassifier.from_text(MAINTAINERS)

    names = _names(
        classifier,
        "net/socket.c",
        "fs/read_write.c",
        "include/trace/events/ext4.h",
        "net/core/sock.c",
    )

    assert names == ["ext4", "fsdevel", "netdev"]


def test_ph3_subsys_004_sections_without_list_are_ignored() -> None:
    classifier = MaintainersClassifier.from_text(MAINTAINERS)

    assert _names(classifier, "drivers/net/tun.c") == []
    assert _names(classifier) == []


def test_ph3_subsys_005_missing_maintainers_file_matches_nothing(tmp_path: Path) -> None:
    classifier = MaintainersClassifier.from_kernel_tree(tmp_path)

    assert _names(classifier, "net/socket.c") == []
