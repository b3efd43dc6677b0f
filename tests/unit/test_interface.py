# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the interface catalog and its enrichment."""

from pathlib import Path

from declextract.description.ast import Pos
from declextract.description.checker import Const, ConstInfo
from declextract.interface import Interface, finish_interfaces, serialize_interfaces
from declextract.subsystem import Crash, Subsystem

AUTO_FILE = Path("sys/linux/auto.txt")


class _PathPrefixClassifier:
    def __init__(self, owners: dict[str, str]) -> None:
        self._owners = owners
        self.calls: list[list[Crash]] = []

    def extract(self, crashes: list[Crash]) -> list[Subsystem]:
        self.calls.append(crashes)
        return [
            Subsystem(name=name)
            for crash in crashes
            for prefix, name in self._owners.items()
            if crash.guilty_path.startswith(prefix)
        ]


def _consts(file: str, *names: str) -> ConstInfo:
    return ConstInfo(
        file=file,
        arch="amd64",
        consts=[Const(name=name, pos=Pos(file=file, line=1)) for name in names],
    )


def test_ph3_iface_001_serialize_fixed_fields_before_repeated_ones() -> None:
    iface = Interface(
        type="SYSCALL",
        name="accept4",
        func="__do_sys_accept4",
        access="unknown",
        manual_desc=True,
        auto_desc=True,
        identifying_const="__NR_accept4",
        files=["net/socket.c", "include/linux/net.h"],
        subsystems=["fs", "net"],
    )

    line = serialize_interfaces([iface])

    assert line == (
        "SYSCALL\taccept4\tfunc:__do_sys_accept4\taccess:unknown\t"
        "manual_desc:true\tauto_desc:true\t"
        "file:net/socket.c\tfile:include/linux/net.h\t"
        "subsystem:fs\tsubsystem:net\n"
    )


def test_ph3_iface_002_serialize_without_files_or_subsystems() -> None:
    ifaces = [
        Interface(type="SYSCALL", name="a", func="sys_a"),
        Interface(type="SYSCALL", name="b", func="sys_b", auto_desc=True),
    ]

    lines = serialize_interfaces(ifaces).splitlines()

    assert [line.split("\t") for line in lines] == [
        ["SYSCALL", "a", "func:sys_a", "access:unknown", "manual_desc:false", "auto_desc:false"],
        ["SYSCALL", "b", "func:sys_b", "access:unknown", "manual_desc:false", "auto_desc:true"],
    ]


def test_ph3_iface_003_manual_flag_ignores_synthesized_file() -> None:
    only_auto = Interface(
        type="SYSCALL", name="accept4", func="f", identifying_const="__NR_accept4"
    )
    manual = Interface(
        type="SYSCALL", name="openat", func="g", identifying_const="__NR_openat"
    )
    consts = {
        str(AUTO_FILE): _consts(str(AUTO_FILE), "__NR_accept4", "__NR_openat"),
        "sys/linux/fs.txt": _consts("sys/linux/fs.txt", "__NR_openat", "O_RDONLY"),
    }

    finish_interfaces([only_auto, manual], consts, AUTO_FILE, _PathPrefixClassifier({}))

    assert only_auto.manual_desc is False
    assert manual.manual_desc is True


def test_ph3_iface_004_subsystems_are_unioned_and_sorted() -> None:
    iface = Interface(
        type="SYSCALL",
        name="sendfile",
        func="f",
        files=["net/core/sock.c", "fs/read_write.c", "net/socket.c"],
    )
    classifier = _PathPrefixClassifier({"net/": "net", "fs/": "fs"})

    finish_interfaces([iface], {}, AUTO_FILE, classifier)

    assert iface.subsystems == ["fs", "net"]
    assert classifier.calls == [
        [
            Crash(guilty_path="net/core/sock.c"),
            Crash(guilty_path="fs/read_write.c"),
            Crash(guilty_path="net/socket.c"),
        ]
    ]
    assert serialize_interfaces([iface]).rstrip("\n").split("\t")[-2:] == [
        "subsystem:fs",
        "subsystem:net",
    ]


def test_ph3_iface_005_unmatched_record_stays_empty() -> None:
    iface = Interface(type="SYSCALL", name="x", func="f", files=["drivers/x.c"])

    finish_interfaces([iface], {}, AUTO_FILE, _PathPrefixClassifier({"net/": "net"}))

    assert iface.subsystems == []
    assert iface.manual_desc is False
