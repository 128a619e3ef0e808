import os
import platform
from functools import lru_cache

from pydantic import BaseModel, Field, field_validator, model_validator


def _default_disk_path() -> str:
    if platform.system() == "Windows":
        return os.environ.get("SystemDrive", "C:") + "\\"
    return "/"


class Settings(BaseModel):
    # HTTP listener
    host: str = Field(
        default="0.0.0.0",
        description="Interface the dashboard listens on (all interfaces by default)",
    )
    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="TCP port of the dashboard",
    )

    # Sampling
    cpu_sample_seconds: float = Field(
        default=0.2,
        gt=0,
        description="Pause between warming and reading the CPU counter per snapshot",
    )
    poll_interval_ms: int = Field(
        default=800,
        gt=0,
        description="How often the browser polls /api/stats, in milliseconds",
    )
    disk_path: str = Field(
        default_factory=_default_disk_path,
        description="Mount point or drive root of the primary volume, e.g. / or C:\\",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level for the sysdash logger",
    )
    crash_log: str = Field(
        default="error.log",
        description="File an uncaught exception is written to before the process exits",
    )

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def _sample_fits_poll_interval(self) -> "Settings":
        # Sample delay has to stay well under one poll period.
        if self.cpu_sample_seconds * 1000 * 2 >= self.poll_interval_ms:
            raise ValueError(
                f"cpu_sample_seconds={self.cpu_sample_seconds} must be less than half "
                f"of poll_interval_ms={self.poll_interval_ms}"
            )
        return self

    @classmethod
    def from_env(cls) -> "Settings":
        values = {
            "host": os.getenv("SYSDASH_HOST"),
            "port": os.getenv("SYSDASH_PORT"),
            "cpu_sample_seconds": os.getenv("SYSDASH_CPU_SAMPLE_SECONDS"),
            "poll_interval_ms": os.getenv("SYSDASH_POLL_INTERVAL_MS"),
            "disk_path": os.getenv("SYSDASH_DISK_PATH"),
            "log_level": os.getenv("SYSDASH_LOG_LEVEL"),
            "crash_log": os.getenv("SYSDASH_CRASH_LOG"),
        }
        # Unset variables fall back to the field defaults
        return cls(**{key: value for key, value in values.items() if value})


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
