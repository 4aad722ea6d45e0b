"""Normalized (os, arch) platform identity."""

import platform as _platform
import sys
from dataclasses import dataclass

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "x86": "386",
    "i386": "386",
    "i686": "386",
    "aarch64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
}


def normalize_arch(arch: str) -> str:
    lowered = arch.lower()
    return _ARCH_ALIASES.get(lowered, lowered)


def normalize_os(os_name: str) -> str:
    lowered = os_name.lower()
    if lowered.startswith("linux"):
        return "linux"
    if lowered in ("darwin", "macos", "osx"):
        return "darwin"
    if lowered in ("win32", "cygwin", "windows", "win"):
        return "windows"
    return lowered


@dataclass(frozen=True)
class Platform:
    """Target platform, e.g. Platform("linux", "amd64")."""

    os: str
    arch: str

    @staticmethod
    def current() -> "Platform":
        return Platform(os=normalize_os(sys.platform), arch=normalize_arch(_platform.machine()))

    @staticmethod
    def parse(value: str) -> "Platform":
        """Parse an "os-arch" string as stored in package records."""
        os_name, sep, arch = value.partition("-")
        if not sep or not os_name or not arch:
            msg = f"Invalid platform string: {value!r} (expected os-arch)"
            raise ValueError(msg)
        return Platform(os=normalize_os(os_name), arch=normalize_arch(arch))

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"
