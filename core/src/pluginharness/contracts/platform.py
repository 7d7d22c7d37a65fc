from __future__ import annotations

import platform
import sys
from dataclasses import dataclass

_OS_ALIASES = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
}

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
}


@dataclass(frozen=True, slots=True, order=True)
class OSArch:
    os: str
    arch: str

    @classmethod
    def current(cls) -> OSArch:
        os_name = _OS_ALIASES.get(sys.platform, sys.platform)
        machine = platform.machine().lower()
        return cls(os=os_name, arch=_ARCH_ALIASES.get(machine, machine))

    @classmethod
    def parse(cls, value: str) -> OSArch:
        os_name, sep, arch = value.partition("-")
        if not sep or not os_name or not arch:
            raise ValueError(f"platform must be of the form 'os-arch', got {value!r}")
        return cls(os=os_name, arch=arch)

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"
