import logging
import math
import time
from typing import Callable, Optional

import psutil

from sysdash.models.stats import MetricSnapshot, Uptime
from sysdash.services.counters import Counter, CounterSet

logger = logging.getLogger(__name__)

# Neutral value for a counter whose read failed
DEGRADED_VALUE = 0.0

DEFAULT_CPU_SAMPLE_SECONDS = 0.2


def _percent(value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"non-finite counter value {value!r}")
    return min(100.0, max(0.0, value))


def _used_from_free(free_percent: float) -> float:
    return 100 - free_percent


class MetricsSampler:
    """
    Produce MetricSnapshots from three long-lived counter handles.

    The CPU counter is warmed up once on construction and then read after a
    fixed pause on every snapshot, since a delta-based counter read back to
    back reports ~0%. The pause has to stay well below the client poll
    interval.

    A failing counter read degrades only its own field to 0.0; snapshot()
    does not raise. The handles are shared between concurrent requests
    without locking. psutil keeps a single process-wide CPU baseline, so when
    two requests overlap (two open dashboards) the second CPU reading covers
    only the time since the first one returned.
    """

    def __init__(
        self,
        counters: CounterSet,
        cpu_sample_seconds: float = DEFAULT_CPU_SAMPLE_SECONDS,
        boot_time: Callable[[], float] = psutil.boot_time,
    ) -> None:
        self._counters = counters
        self.cpu_sample_seconds = cpu_sample_seconds

        # Wall-clock uptime at start, advanced with the monotonic clock afterwards
        self._started = time.monotonic()
        try:
            self._base_ms = max(0.0, (time.time() - boot_time()) * 1000)
        except Exception as exc:
            logger.warning("Boot time unavailable, reporting process uptime: %s", exc)
            self._base_ms = 0.0

        # Throwaway read, the first CPU value has no baseline
        self._read(self._counters.cpu)

    @classmethod
    def open(
        cls,
        disk_path: str,
        cpu_sample_seconds: float = DEFAULT_CPU_SAMPLE_SECONDS,
    ) -> "MetricsSampler":
        return cls(CounterSet.open(disk_path), cpu_sample_seconds=cpu_sample_seconds)

    def _read(
        self,
        counter: Counter,
        transform: Optional[Callable[[float], float]] = None,
    ) -> float:
        try:
            value = counter.next_value()
            if transform is not None:
                value = transform(value)
            return _percent(value)
        except Exception as exc:
            logger.warning("Reading %s counter failed: %s", counter.name, exc)
            return DEGRADED_VALUE

    def _sample_cpu(self) -> float:
        time.sleep(self.cpu_sample_seconds)
        return self._read(self._counters.cpu)

    def uptime(self) -> Uptime:
        elapsed_ms = (time.monotonic() - self._started) * 1000
        return Uptime.from_milliseconds(self._base_ms + elapsed_ms)

    def snapshot(self) -> MetricSnapshot:
        return MetricSnapshot(
            cpu=self._sample_cpu(),
            ram=self._read(self._counters.ram),
            disk=self._read(self._counters.disk, _used_from_free),
            uptime=str(self.uptime()),
        )

    def close(self) -> None:
        self._counters.close()
