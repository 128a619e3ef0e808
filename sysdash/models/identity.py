from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "Unknown"


class HostIdentity(BaseModel):
    """Static facts about the host, resolved once per process."""

    model_config = ConfigDict(frozen=True)

    os: str = Field(
        ...,
        description="Operating system name, e.g. Windows 11 or Linux",
    )
    version: str = Field(
        ...,
        description="OS version as major.minor.build",
    )
    model: str = Field(
        ...,
        description="Hardware model reported by the firmware",
    )
    cpu: str = Field(
        ...,
        description="Processor name",
    )
    gpu: str = Field(
        ...,
        description="Name of the first video controller",
    )
    ram_gb: float = Field(
        ...,
        ge=0.0,
        description="Total physical memory in GiB, rounded to 2 decimals",
    )
