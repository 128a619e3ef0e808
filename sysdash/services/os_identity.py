"""
Host OS identity strategies.

Each platform supplies its own way of naming the OS and formatting its
version, so the build-number heuristic for Windows stays contained here.
"""

import platform
import re
from abc import ABC, abstractmethod

# First Windows 11 build; everything below reports as Windows 10
WINDOWS_11_FIRST_BUILD = 22000

_VERSION_PATTERN = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")


def classify_windows_build(build: int) -> str:
    return "Windows 11" if build >= WINDOWS_11_FIRST_BUILD else "Windows 10"


def _three_part_version(raw: str) -> str:
    """Reduce a version string like '6.8.0-45-generic' to '6.8.0'."""
    match = _VERSION_PATTERN.match(raw.strip())
    if not match:
        raise ValueError(f"unparseable version string {raw!r}")
    return ".".join(part or "0" for part in match.groups())


class OsIdentity(ABC):
    """Strategy naming the host OS and its major.minor.build version."""

    @abstractmethod
    def name(self) -> str:
        """OS name, e.g. "Windows 11"."""

    @abstractmethod
    def version(self) -> str:
        """Version as major.minor.build."""


class WindowsOsIdentity(OsIdentity):
    def _build(self) -> int:
        # platform.version() is "10.0.22631" on Windows
        return int(self.version().split(".")[2])

    def name(self) -> str:
        return classify_windows_build(self._build())

    def version(self) -> str:
        return _three_part_version(platform.version())


class LinuxOsIdentity(OsIdentity):
    def name(self) -> str:
        return "Linux"

    def version(self) -> str:
        return _three_part_version(platform.release())


class MacOsIdentity(OsIdentity):
    def name(self) -> str:
        return "macOS"

    def version(self) -> str:
        release = platform.mac_ver()[0]
        if not release:
            raise ValueError("platform.mac_ver() returned no release")
        return _three_part_version(release)


class GenericOsIdentity(OsIdentity):
    def name(self) -> str:
        system = platform.system()
        if not system:
            raise ValueError("platform.system() returned an empty string")
        return system

    def version(self) -> str:
        return _three_part_version(platform.release())


def default_os_identity() -> OsIdentity:
    system = platform.system()
    if system == "Windows":
        return WindowsOsIdentity()
    if system == "Linux":
        return LinuxOsIdentity()
    if system == "Darwin":
        return MacOsIdentity()
    return GenericOsIdentity()
