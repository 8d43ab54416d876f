from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ServerState(str, Enum):
    """Overall server state shown by the dashboard."""

    ONLINE = "online"
    WARNING = "warning"
    ERROR = "error"
    MAINTENANCE = "maintenance"


class TemperatureState(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


class UptimeInfo(BaseModel):
    percentage: float = Field(
        ...,
        ge=0,
        le=99.99,
        description="Uptime relative to a 30 day reference window",
    )
    duration: str = Field(..., description="Time since boot, e.g. '3d 4h 12m'")


class CpuInfo(BaseModel):
    usage: int = Field(
        ...,
        ge=0,
        le=100,
        description="CPU usage in percent derived from the 1-minute load average",
    )
    cores: int = Field(..., ge=0, description="Number of logical CPU cores")
    temperature: float = Field(
        ...,
        description="CPU temperature in degrees Celsius, 0 if no sensor answered",
    )


class MemoryInfo(BaseModel):
    usage: int = Field(..., ge=0, le=100, description="RAM usage in percent")
    total: str = Field(..., description="Total RAM, e.g. '8.0 GB'")
    used: str = Field(..., description="Used RAM, e.g. '4.0 GB'")


class TemperatureInfo(BaseModel):
    value: float = Field(..., description="Temperature in degrees Celsius")
    status: TemperatureState = Field(
        ...,
        description="normal, warning (>70 C) or critical (>80 C)",
    )
    sensor: Optional[str] = Field(
        None,
        description="Name of the sensor probe that produced the reading; "
        "missing when no sensor was available and value is the 0 default",
    )


class ServerSnapshot(BaseModel):
    """
    One point-in-time health measurement of the server.

    errorCode/errorMessage are only allowed (and required) when the status is
    'error'; the validator below rejects every other combination.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: ServerState
    error_code: Optional[int] = Field(None, alias="errorCode")
    error_message: Optional[str] = Field(None, alias="errorMessage")
    error: Optional[str] = Field(
        None,
        description="Set only on the degraded snapshot returned after a collector failure",
    )
    uptime: UptimeInfo
    cpu: CpuInfo
    memory: MemoryInfo
    temperature: TemperatureInfo
    timestamp: datetime = Field(..., description="Collection instant (UTC)")

    @model_validator(mode="after")
    def _check_error_fields(self) -> "ServerSnapshot":
        has_error = self.error_code is not None or self.error_message is not None
        if self.status == ServerState.ERROR:
            if self.error_code is None or not self.error_message:
                raise ValueError("status 'error' requires errorCode and errorMessage")
        elif has_error:
            raise ValueError(
                f"errorCode/errorMessage are not allowed with status {self.status.value!r}"
            )
        return self
