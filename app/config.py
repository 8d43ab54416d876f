from typing import Optional
from pydantic import BaseModel, Field, field_validator
import os
from functools import lru_cache


class Settings(BaseModel):
    # Reverse proxy whose systemd unit drives the overall status
    proxy_service_name: str = Field(
        default="nginx",
        description="Name of the systemd service to check, e.g. nginx",
    )

    # Upper bound for every external command (sensors, systemctl)
    command_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout in seconds for a single external command",
    )

    log_level: str = Field(
        default="INFO",
        description="Log level for the application logger, e.g. DEBUG or INFO",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @classmethod
    def from_env(cls) -> "Settings":
        raw_timeout: Optional[str] = os.getenv("COMMAND_TIMEOUT_SECONDS")
        timeout = float(raw_timeout) if raw_timeout and raw_timeout.strip() else 5.0

        return cls(
            proxy_service_name=os.getenv("PROXY_SERVICE_NAME", "").strip() or "nginx",
            command_timeout_seconds=timeout,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
