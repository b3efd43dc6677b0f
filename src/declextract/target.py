# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Target platform definitions for extracted descriptions."""

from dataclasses import dataclass

from declextract.errors import ConfigurationError


@dataclass(frozen=True)
class TargetArch:
    """Describe one architecture of an operating system.

    Attributes:
        os: Operating system name.
        arch: Architecture identifier used by the fuzzer.
        kernel_header_arch: Directory name under the kernel ``arch/`` tree.
        vm_arch: Machine identifier the architecture runs on.
    """

    os: str
    arch: str
    kernel_header_arch: str
    vm_arch: str


LINUX = "linux"
AMD64 = "amd64"

ARCHES: dict[str, tuple[TargetArch, ...]] = {
    LINUX: (
        TargetArch(os=LINUX, arch="amd64", kernel_header_arch="x86", vm_arch="amd64"),
        TargetArch(os=LINUX, arch="386", kernel_header_arch="x86", vm_arch="amd64"),
        TargetArch(os=LINUX, arch="arm64", kernel_header_arch="arm64", vm_arch="arm64"),
        TargetArch(os=LINUX, arch="arm", kernel_header_arch="arm", vm_arch="arm64"),
        TargetArch(os=LINUX, arch="mips64le", kernel_header_arch="mips", vm_arch="mips64le"),
        TargetArch(os=LINUX, arch="ppc64le", kernel_header_arch="powerpc", vm_arch="ppc64le"),
        TargetArch(os=LINUX, arch="riscv64", kernel_header_arch="riscv", vm_arch="riscv64"),
        TargetArch(os=LINUX, arch="s390x", kernel_header_arch="s390", vm_arch="s390x"),
    ),
}


@dataclass(frozen=True)
class TargetPlatform:
    """Represent the fixed platform descriptions are extracted for.

    The platform is passed explicitly to every component so that alternate
    targets can be exercised in tests.
    """

    os: str
    arch: str
    arches: tuple[TargetArch, ...]

    @classmethod
    def get(cls, os_name: str, arch: str) -> "TargetPlatform":
        """Look up a supported platform.

        Args:
            os_name: Operating system name, e.g. ``linux``.
            arch: Architecture identifier, e.g. ``amd64``.

        Returns:
            The platform with the full architecture list of its OS.

        Raises:
            ConfigurationError: If the OS or architecture is unknown.
        """
        arches = ARCHES.get(os_name)
        if arches is None:
            raise ConfigurationError(f"unknown target OS: {os_name}")
        if not any(candidate.arch == arch for candidate in arches):
            raise ConfigurationError(f"unknown target arch: {os_name}/{arch}")
        return cls(os=os_name, arch=arch, arches=arches)

    @classmethod
    def parse(cls, value: str) -> "TargetPlatform":
        """Parse an ``os/arch`` string."""
        os_name, sep, arch = value.partition("/")
        if not sep or not os_name or not arch:
            raise ConfigurationError(f"bad target {value!r}, expected os/arch")
        return cls.get(os_name, arch)

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


DEFAULT_TARGET = TargetPlatform.get(LINUX, AMD64)
