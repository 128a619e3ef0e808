import ctypes
import platform
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Tuple

import psutil

_MEMINFO_PATH = Path("/proc/meminfo")


class Counter(ABC):
    """Live handle to an OS performance metric."""

    name = "counter"

    @abstractmethod
    def next_value(self) -> float:
        """Read the counter once; may raise on any OS failure."""

    def close(self) -> None:
        """Release the handle; psutil keeps no per-handle OS resources."""


class CpuLoadCounter(Counter):
    """
    Total CPU utilisation in percent.

    Like any delta-based counter, a reading reflects the time since the
    previous reading; the very first one is meaningless and must be thrown
    away after opening. psutil keeps that baseline module-global, so it is
    shared by every reader in the process.
    """

    name = "cpu"

    def next_value(self) -> float:
        return psutil.cpu_percent(interval=None)


def _read_meminfo() -> Dict[str, int]:
    values = {}
    for line in _MEMINFO_PATH.read_text(encoding="utf-8").splitlines():
        key, sep, rest = line.partition(":")
        if sep:
            # "Committed_AS:    8123456 kB"
            values[key.strip()] = int(rest.split()[0])
    return values


def _read_linux_commit() -> Tuple[int, int]:
    meminfo = _read_meminfo()
    return meminfo["Committed_AS"], meminfo["MemTotal"] + meminfo.get("SwapTotal", 0)


class _PerformanceInformation(ctypes.Structure):
    # PERFORMANCE_INFORMATION from psapi.h; DWORD is c_ulong on Windows
    _fields_ = [
        ("cb", ctypes.c_ulong),
        ("CommitTotal", ctypes.c_size_t),
        ("CommitLimit", ctypes.c_size_t),
        ("CommitPeak", ctypes.c_size_t),
        ("PhysicalTotal", ctypes.c_size_t),
        ("PhysicalAvailable", ctypes.c_size_t),
        ("SystemCache", ctypes.c_size_t),
        ("KernelTotal", ctypes.c_size_t),
        ("KernelPaged", ctypes.c_size_t),
        ("KernelNonpaged", ctypes.c_size_t),
        ("PageSize", ctypes.c_size_t),
        ("HandleCount", ctypes.c_ulong),
        ("ProcessCount", ctypes.c_ulong),
        ("ThreadCount", ctypes.c_ulong),
    ]


def _read_windows_commit() -> Tuple[int, int]:
    """Commit charge and commit limit, both in pages, from GetPerformanceInfo."""
    info = _PerformanceInformation()
    info.cb = ctypes.sizeof(info)
    if not ctypes.windll.psapi.GetPerformanceInfo(ctypes.byref(info), info.cb):
        raise ctypes.WinError()
    return info.CommitTotal, info.CommitLimit


class MemoryCommittedCounter(Counter):
    """
    Committed memory in use, in percent of the commit limit.

    Windows reports commit charge / commit limit ("% Committed Bytes In
    Use"); on Linux the limit is RAM plus swap. Platforms without commit
    accounting fall back to psutil's used-memory percentage.
    """

    name = "ram"

    def next_value(self) -> float:
        system = platform.system()
        if system == "Windows":
            committed, limit = _read_windows_commit()
        elif system == "Linux":
            committed, limit = _read_linux_commit()
        else:
            return psutil.virtual_memory().percent
        return committed / limit * 100


class DiskFreeCounter(Counter):
    """Free space of one volume, in percent of its total size."""

    name = "disk"

    def __init__(self, path: str) -> None:
        self.path = path

    def next_value(self) -> float:
        usage = psutil.disk_usage(self.path)
        return usage.free / usage.total * 100


class CounterSet:
    """The three counter handles a sampler reads, owned as one resource."""

    def __init__(self, cpu: Counter, ram: Counter, disk: Counter) -> None:
        self.cpu = cpu
        self.ram = ram
        self.disk = disk

    @classmethod
    def open(cls, disk_path: str) -> "CounterSet":
        return cls(
            cpu=CpuLoadCounter(),
            ram=MemoryCommittedCounter(),
            disk=DiskFreeCounter(disk_path),
        )

    def close(self) -> None:
        for counter in (self.cpu, self.ram, self.disk):
            counter.close()
