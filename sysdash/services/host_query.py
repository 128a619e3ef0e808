import platform
import re
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import cpuinfo
import psutil

# Neutral object classes and properties understood by every QuerySource
COMPUTER_SYSTEM = "ComputerSystem"
PROCESSOR = "Processor"
VIDEO_CONTROLLER = "VideoController"

MODEL = "Model"
NAME = "Name"
TOTAL_PHYSICAL_MEMORY = "TotalPhysicalMemory"

_QUERY_TIMEOUT_SECONDS = 10

_DMI_PRODUCT_NAME_PATH = Path("/sys/class/dmi/id/product_name")

# Example lspci line:
# 00:02.0 VGA compatible controller: Intel Corporation UHD Graphics 620 (rev 07)
_LSPCI_DISPLAY_PATTERN = re.compile(
    r"(?:VGA compatible controller|3D controller|Display controller):\s*(.+?)(?:\s+\(rev [0-9a-f]+\))?$",
    re.IGNORECASE,
)


class QuerySource(ABC):
    """
    Source of management data about the host.

    ``query`` returns one raw value per row the OS reports for ``prop`` of
    ``object_class``. Implementations may raise on any failure; callers
    decide how to degrade.
    """

    @abstractmethod
    def query(self, object_class: str, prop: str) -> List[Any]:
        """Return the raw values of ``prop`` for every ``object_class`` row."""


class CimQuerySource(QuerySource):
    """Windows source backed by CIM/WMI through PowerShell's Get-CimInstance."""

    def query(self, object_class: str, prop: str) -> List[Any]:
        result = subprocess.run(
            [
                "powershell",
                "-NoProfile",
                "-NonInteractive",
                "-Command",
                f"Get-CimInstance -ClassName Win32_{object_class} "
                f"| Select-Object -ExpandProperty {prop}",
            ],
            check=True,
            capture_output=True,
            text=True,
            timeout=_QUERY_TIMEOUT_SECONDS,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def _read_dmi_model() -> List[Any]:
    return [_DMI_PRODUCT_NAME_PATH.read_text(encoding="utf-8").strip()]


def _read_cpu_brand() -> List[Any]:
    # py-cpuinfo reads cpuid, procfs or sysctl depending on the platform
    return [cpuinfo.get_cpu_info().get("brand_raw")]


def _read_lspci_display_names() -> List[Any]:
    result = subprocess.run(
        ["lspci"],
        check=True,
        capture_output=True,
        text=True,
        timeout=_QUERY_TIMEOUT_SECONDS,
    )
    names = []
    for line in result.stdout.splitlines():
        match = _LSPCI_DISPLAY_PATTERN.search(line)
        if match:
            names.append(match.group(1).strip())
    return names


def _read_total_memory() -> List[Any]:
    return [psutil.virtual_memory().total]


class PortableQuerySource(QuerySource):
    """
    Source for any platform: processor name via py-cpuinfo, memory via psutil.

    Classes or properties without a reader raise LookupError.
    """

    _readers: Dict[Tuple[str, str], Callable[[], List[Any]]] = {
        (COMPUTER_SYSTEM, TOTAL_PHYSICAL_MEMORY): _read_total_memory,
        (PROCESSOR, NAME): _read_cpu_brand,
    }

    def __init__(self, system: Optional[str] = None) -> None:
        self.system = system or platform.system()

    def query(self, object_class: str, prop: str) -> List[Any]:
        try:
            reader = self._readers[(object_class, prop)]
        except KeyError as exc:
            raise LookupError(
                f"no {self.system} reader for {object_class}.{prop}"
            ) from exc
        return reader()


class LinuxQuerySource(PortableQuerySource):
    """Linux source adding sysfs DMI data and lspci to the portable readers."""

    _readers = {
        **PortableQuerySource._readers,
        (COMPUTER_SYSTEM, MODEL): _read_dmi_model,
        (VIDEO_CONTROLLER, NAME): _read_lspci_display_names,
    }

    def __init__(self) -> None:
        super().__init__("Linux")


def default_query_source() -> QuerySource:
    system = platform.system()
    if system == "Windows":
        return CimQuerySource()
    if system == "Linux":
        return LinuxQuerySource()
    return PortableQuerySource(system)
