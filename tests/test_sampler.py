import math
import os
import re
import time

import pytest

from sysdash.models.stats import UPTIME_PATTERN, Uptime
from sysdash.services.counters import Counter, CounterSet
from sysdash.services.metrics_sampler import MetricsSampler


class FakeCounter(Counter):
    def __init__(self, name, values=(0.0,), error=None):
        self.name = name
        self.values = list(values)
        self.error = error
        self.calls = 0
        self.closed = False

    def next_value(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]

    def close(self):
        self.closed = True


def make_counters(cpu=(0.0, 42.5), ram=(63.0,), disk_free=(25.0,), errors=None):
    errors = errors or {}
    return CounterSet(
        cpu=FakeCounter("cpu", cpu, errors.get("cpu")),
        ram=FakeCounter("ram", ram, errors.get("ram")),
        disk=FakeCounter("disk", disk_free, errors.get("disk")),
    )


def make_sampler(counters=None, boot_time=None, cpu_sample_seconds=0.0):
    counters = counters or make_counters()
    if boot_time is None:
        boot_time = lambda: time.time() - 3600  # noqa: E731
    return MetricsSampler(counters, cpu_sample_seconds=cpu_sample_seconds, boot_time=boot_time)


def test_construction_performs_one_throwaway_cpu_read():
    counters = make_counters()
    make_sampler(counters)

    assert counters.cpu.calls == 1
    assert counters.ram.calls == 0
    assert counters.disk.calls == 0


def test_snapshot_reads_all_counters():
    snapshot = make_sampler().snapshot()

    # The warm-up value (0.0) is discarded, the snapshot sees the second read
    assert snapshot.cpu == 42.5
    assert snapshot.ram == 63.0
    assert snapshot.disk == 75.0
    assert re.fullmatch(UPTIME_PATTERN, snapshot.uptime)


@pytest.mark.parametrize("free_percent", [0.0, 12.5, 50.0, 87.3, 99.9, 100.0])
def test_disk_is_reported_as_used_space(free_percent):
    snapshot = make_sampler(make_counters(disk_free=(free_percent,))).snapshot()
    assert snapshot.disk == 100 - free_percent


def test_out_of_range_values_are_clamped():
    counters = make_counters(cpu=(0.0, 100.4), ram=(103.0,), disk_free=(-2.0,))
    snapshot = make_sampler(counters).snapshot()

    assert snapshot.cpu == 100.0
    assert snapshot.ram == 100.0
    assert snapshot.disk == 100.0


@pytest.mark.parametrize("failing", ["cpu", "ram", "disk"])
def test_failing_counter_degrades_only_its_field(failing):
    counters = make_counters(errors={failing: OSError("counter unavailable")})
    snapshot = make_sampler(counters).snapshot()

    expected = {"cpu": 42.5, "ram": 63.0, "disk": 75.0}
    expected[failing] = 0.0
    assert snapshot.cpu == expected["cpu"]
    assert snapshot.ram == expected["ram"]
    assert snapshot.disk == expected["disk"]


def test_non_finite_counter_value_degrades():
    counters = make_counters(ram=(math.nan,))
    assert make_sampler(counters).snapshot().ram == 0.0


def test_all_values_within_percent_range():
    sampler = make_sampler(make_counters(cpu=(0.0, 3.2, 97.1, 55.0)))
    for _ in range(3):
        snapshot = sampler.snapshot()
        for value in (snapshot.cpu, snapshot.ram, snapshot.disk):
            assert 0.0 <= value <= 100.0


def test_uptime_is_counted_from_boot():
    boot = time.time() - (1 * 86400 + 2 * 3600 + 3 * 60 + 4)
    uptime = make_sampler(boot_time=lambda: boot).uptime()

    assert (uptime.days, uptime.hours, uptime.minutes) == (1, 2, 3)
    assert uptime.seconds in (4, 5)


def test_uptime_falls_back_to_process_uptime():
    def broken_boot_time():
        raise OSError("boot time unavailable")

    uptime = make_sampler(boot_time=broken_boot_time).uptime()
    assert str(uptime) == "0d 0h 0m 0s"


def test_uptime_is_monotonic_across_snapshots():
    sampler = make_sampler(cpu_sample_seconds=0.01)
    readings = []
    for _ in range(5):
        uptime = sampler.uptime()
        readings.append((uptime.days, uptime.hours, uptime.minutes, uptime.seconds))
        sampler.snapshot()

    assert readings == sorted(readings)


def test_snapshot_pays_the_cpu_pause_once():
    pause = 0.05
    sampler = make_sampler(cpu_sample_seconds=pause)

    for _ in range(2):
        started = time.perf_counter()
        sampler.snapshot()
        elapsed = time.perf_counter() - started
        assert pause <= elapsed < pause + 0.25


def test_close_releases_all_counters():
    counters = make_counters()
    make_sampler(counters).close()

    assert counters.cpu.closed
    assert counters.ram.closed
    assert counters.disk.closed


@pytest.mark.parametrize(
    "milliseconds, expected",
    [
        (0, "0d 0h 0m 0s"),
        (999, "0d 0h 0m 0s"),
        (61_000, "0d 0h 1m 1s"),
        (90_061_999, "1d 1h 1m 1s"),
        (10 * 86_400_000, "10d 0h 0m 0s"),
        (-5_000, "0d 0h 0m 0s"),
    ],
)
def test_uptime_from_milliseconds(milliseconds, expected):
    assert str(Uptime.from_milliseconds(milliseconds)) == expected


def test_real_host_snapshot_ranges():
    """Soft sanity check against the machine running the tests."""
    sampler = MetricsSampler.open(os.path.abspath(os.sep), cpu_sample_seconds=0.05)
    try:
        snapshot = sampler.snapshot()
    finally:
        sampler.close()

    assert 0.0 <= snapshot.cpu <= 100.0
    assert 0.0 <= snapshot.ram <= 100.0
    assert 0.0 <= snapshot.disk <= 100.0
    assert re.fullmatch(UPTIME_PATTERN, snapshot.uptime)
