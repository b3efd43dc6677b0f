import sys
from pathlib import Path

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()


@pytest.fixture
def kernel_tree(tmp_path: Path) -> Path:
    """Minimal kernel tree with one x86 syscall table."""
    root = tmp_path / "linux"
    table = root / "arch" / "x86" / "entry" / "syscalls" / "syscall_64.tbl"
    table.parent.mkdir(parents=True)
    table.write_text(
        "# 64-bit system call numbers\n"
        "#\n"
        "288  common  accept4  sys_accept4\n",
        encoding="utf-8",
    )
    return root
