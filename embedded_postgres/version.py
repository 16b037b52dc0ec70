from __future__ import annotations

import dataclasses
import enum
import platform
from pathlib import Path


class PostgresVersion(str, enum.Enum):
    """
    Postgres releases published as zonky embedded binaries.
    """

    V16 = "16.4.0"
    V15 = "15.8.0"
    V14 = "14.13.0"
    V13 = "13.16.0"
    V12 = "12.20.0"
    V11 = "11.22.0"
    V10 = "10.23.0"
    V9 = "9.6.24"

    @classmethod
    def parse(cls, value: str | PostgresVersion) -> PostgresVersion:
        """
        Accept a member, a member name ("V14", "14") or a full version ("14.13.0").
        """
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        name = text.upper() if text.upper().startswith("V") else f"V{text}"
        if name in cls.__members__:
            return cls[name]
        return cls(text)


_ARCHITECTURES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64v8",
    "arm64": "arm64v8",
    "armv7l": "arm32v7",
    "armv6l": "arm32v6",
    "i386": "i386",
    "i686": "i386",
    "ppc64le": "ppc64le",
}

_ALPINE_RELEASE = Path("/etc/alpine-release")


@dataclasses.dataclass(frozen=True)
class BinaryTarget:
    """
    The os/architecture/version triple that names a binary distribution.
    """

    os: str
    arch: str
    version: PostgresVersion

    @property
    def artifact(self) -> str:
        return f"embedded-postgres-binaries-{self.os}-{self.arch}"

    @property
    def artifact_file_stem(self) -> str:
        return f"{self.artifact}-{self.version.value}"


def detect_os() -> str:
    return platform.system().lower()


def detect_arch() -> str:
    machine = platform.machine().lower()
    return _ARCHITECTURES.get(machine, machine)


class VersionStrategy:
    """
    Resolve the binary target for the host this process runs on.
    """

    def __init__(
        self,
        version: PostgresVersion,
        os_name: str | None = None,
        arch: str | None = None,
    ):
        self.version = version
        self.os_name = os_name
        self.arch = arch

    def __call__(self) -> BinaryTarget:
        os_name = self.os_name or detect_os()
        arch = self.arch or detect_arch()
        if self.arch is None and os_name == "linux" and _ALPINE_RELEASE.exists():
            arch += "-alpine"
        return BinaryTarget(os=os_name, arch=arch, version=self.version)
