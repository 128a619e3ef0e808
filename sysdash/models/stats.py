from pydantic import BaseModel, ConfigDict, Field

UPTIME_PATTERN = r"^\d+d \d+h \d+m \d+s$"

_MS_PER_SECOND = 1000
_SECONDS_PER_DAY = 86400


class Uptime(BaseModel):
    """Elapsed time since boot, split into whole days, hours, minutes and seconds."""

    model_config = ConfigDict(frozen=True)

    days: int = Field(..., ge=0)
    hours: int = Field(..., ge=0, lt=24)
    minutes: int = Field(..., ge=0, lt=60)
    seconds: int = Field(..., ge=0, lt=60)

    @classmethod
    def from_milliseconds(cls, milliseconds: float) -> "Uptime":
        # Sub-second precision is dropped
        total_seconds = max(0, int(milliseconds // _MS_PER_SECOND))
        days, rest = divmod(total_seconds, _SECONDS_PER_DAY)
        hours, rest = divmod(rest, 3600)
        minutes, seconds = divmod(rest, 60)
        return cls(days=days, hours=hours, minutes=minutes, seconds=seconds)

    def __str__(self) -> str:
        return f"{self.days}d {self.hours}h {self.minutes}m {self.seconds}s"


class MetricSnapshot(BaseModel):
    """Point-in-time reading of the live counters, as served by /api/stats."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cpu: float = Field(
        ...,
        ge=0,
        le=100,
        description="CPU utilisation in percent over the sampling pause",
    )
    ram: float = Field(
        ...,
        ge=0,
        le=100,
        description="Committed memory in use, in percent",
    )
    disk: float = Field(
        ...,
        ge=0,
        le=100,
        description="Used space of the primary volume in percent (100 - free)",
    )
    uptime: str = Field(
        ...,
        pattern=UPTIME_PATTERN,
        description="Time since boot formatted as '<d>d <h>h <m>m <s>s'",
    )
