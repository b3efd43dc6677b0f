# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for draft description synthesis."""

import pytest

from declextract.errors import ExtractionToolError
from declextract.synthesizer import HEADER, SyscallSynthesizer, render_type

IDENTITY = {
    "accept4": frozenset({"accept4"}),
    "setuid16": frozenset({"setuid", "setuid16"}),
}

FACTS = {
    "syscalls": [
        {
            "func": "__do_sys_setuid16",
            "source_file": "kernel/uid16.c",
            "args": [{"name": "uid", "type": {"kind": "int", "bits": 16}}],
        },
        {
            "func": "__do_sys_accept4",
            "source_file": "net/socket.c",
            "access": "user",
            "args": [
                {"name": "fd", "type": {"kind": "int", "bits": 32}},
                {
                    "type": {
                        "kind": "ptr",
                        "dir": "out",
                        "elem": {"kind": "struct", "name": "sockaddr"},
                    }
                },
            ],
        },
        {"func": "__do_sys_not_a_syscall", "args": []},
    ],
    "structs": [
        {
            "name": "sockaddr",
            "fields": [
                {"name": "family", "type": {"kind": "int", "bits": 16}},
                {"name": "data", "type": {"kind": "array", "elem": {"kind": "int", "bits": 8}, "len": 14}},
            ],
        },
        {
            "name": "addr_any",
            "is_union": True,
            "fields": [{"name": "raw", "type": {"kind": "buffer", "dir": "in"}}],
        },
    ],
}


def test_ph2_syn_001_renders_calls_and_structs_in_sorted_order() -> None:
    text, _ = SyscallSynthesizer().synthesize(FACTS, IDENTITY)

    assert text == "\n".join(
        [
            HEADER,
            "",
            "accept4$auto(fd int32, arg1 ptr[out, sockaddr$auto])",
            "",
            "setuid$auto(uid int16)",
            "",
            "setuid16$auto(uid int16)",
            "",
            "addr_any$auto [",
            "\traw\tbuffer[in]",
            "]",
            "",
            "sockaddr$auto {",
            "\tfamily\tint16",
            "\tdata\tarray[int8, 14]",
            "}",
            "",
        ]
    )


def test_ph2_syn_002_one_interface_per_syscall_name() -> None:
    _, interfaces = SyscallSynthesizer().synthesize(FACTS, IDENTITY)

    assert [(iface.name, iface.func) for iface in interfaces] == [
        ("accept4", "__do_sys_accept4"),
        ("setuid", "__do_sys_setuid16"),
        ("setuid16", "__do_sys_setuid16"),
    ]
    accept4 = interfaces[0]
    assert accept4.type == "SYSCALL"
    assert accept4.access == "user"
    assert accept4.auto_desc is True
    assert accept4.manual_desc is False
    assert accept4.identifying_const == "__NR_accept4"
    assert accept4.files == ["net/socket.c"]
    assert interfaces[1].access == "unknown"
    assert interfaces[1].identifying_const == "__NR_setuid"


def test_ph2_syn_003_unmapped_functions_produce_nothing() -> None:
    text, interfaces = SyscallSynthesizer().synthesize(
        {"syscalls": [{"func": "__do_sys_not_a_syscall", "args": []}]}, IDENTITY
    )

    assert text == HEADER + "\n"
    assert interfaces == []


@pytest.mark.parametrize(
    ("spec", "expected"),
    [
        ({"kind": "int", "bits": 64}, "int64"),
        ({"kind": "int"}, "intptr"),
        ({"kind": "ptr", "dir": "inout", "elem": {"kind": "named", "name": "fd"}}, "ptr[inout, fd]"),
        ({"kind": "buffer"}, "buffer[in]"),
        ({"kind": "string"}, "string"),
        ({"kind": "filename"}, "filename"),
        ({"kind": "array", "elem": {"kind": "int", "bits": 8}}, "array[int8]"),
        ({"kind": "struct", "name": "stat"}, "stat$auto"),
        ({"kind": "const", "value": "AT_FDCWD", "bits": 32}, "const[AT_FDCWD, int32]"),
    ],
)
def test_ph2_syn_004_render_type(spec: dict, expected: str) -> None:
    assert render_type(spec) == expected


@pytest.mark.parametrize(
    "spec",
    [
        None,
        {"bits": 8},
        {"kind": "bitfield"},
        {"kind": "struct"},
        {"kind": "const", "bits": 32},
        {"kind": "const", "value": ""},
    ],
)
def test_ph2_syn_005_malformed_types_fail(spec) -> None:
    with pytest.raises(ExtractionToolError):
        render_type(spec)


@pytest.mark.parametrize(
    ("facts", "message"),
    [
        ({"syscalls": ["__do_sys_accept4"]}, "syscalls"),
        ({"syscalls": [{"func": "sys_accept4", "args": ["int"]}]}, "args"),
        ({"syscalls": [{"func": "sys_accept4", "args": {"fd": "int"}}]}, "args"),
        ({"structs": [{"name": "stat", "fields": [None]}]}, "fields"),
        ({"structs": [{"name": "stat", "fields": "st_mode"}]}, "fields"),
    ],
)
def test_ph2_syn_006_malformed_fact_lists_fail(facts: dict, message: str) -> None:
    with pytest.raises(ExtractionToolError, match=message):
        SyscallSynthesizer().synthesize(facts, IDENTITY)
