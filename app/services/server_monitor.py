import logging
import math
from datetime import datetime, timezone
from typing import Optional, Tuple

from app.config import Settings, get_settings
from app.models.server import (
    CpuInfo,
    MemoryInfo,
    ServerSnapshot,
    ServerState,
    TemperatureInfo,
    TemperatureState,
    UptimeInfo,
)
from app.services.system_provider import LocalSystemProvider, SystemMetricsProvider
from app.services.temperature import first_reading, temperature_status

logger = logging.getLogger(__name__)

_GIB = 1024 ** 3
_SECONDS_PER_DAY = 86400
# 30 days of continuous uptime count as 100 %
_UPTIME_REFERENCE_SECONDS = 30 * _SECONDS_PER_DAY
_MAX_UPTIME_PERCENTAGE = 99.99
# Rough load -> percent factor when /proc/loadavg is not available
_FALLBACK_LOAD_FACTOR = 25

_BAD_GATEWAY = (502, "Bad Gateway")
_FAILED_TO_START_PHRASE = "Failed to start"


class CollectionError(RuntimeError):
    """Raised when the server snapshot could not be collected at all."""


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def cpu_usage_percent(load: float, cores: int) -> int:
    return _round_half_up(min(load / cores * 100, 100))


def fallback_cpu_usage_percent(load: float) -> int:
    return max(0, min(_round_half_up(load * _FALLBACK_LOAD_FACTOR), 100))


def format_gigabytes(num_bytes: float) -> str:
    return f"{num_bytes / _GIB:.1f} GB"


def format_uptime(seconds: float) -> str:
    seconds = int(seconds)
    days = seconds // _SECONDS_PER_DAY
    hours = (seconds % _SECONDS_PER_DAY) // 3600
    minutes = (seconds % 3600) // 60
    return f"{days}d {hours}h {minutes}m"


def uptime_percentage(seconds: float) -> float:
    return float(
        min(
            _round_half_up(seconds / _UPTIME_REFERENCE_SECONDS * 100),
            _MAX_UPTIME_PERCENTAGE,
        )
    )


def _collect_cpu(provider: SystemMetricsProvider) -> Tuple[int, int]:
    cores = provider.cpu_count()
    try:
        usage = cpu_usage_percent(provider.load_average(), cores)
    except (OSError, ValueError, IndexError) as exc:
        logger.debug("Primary load average unavailable (%s), using estimate", exc)
        usage = fallback_cpu_usage_percent(provider.fallback_load_average())
    return usage, cores


def _collect_memory(provider: SystemMetricsProvider) -> MemoryInfo:
    total, free = provider.memory()
    used = total - free
    return MemoryInfo(
        usage=_round_half_up(used / total * 100),
        total=format_gigabytes(total),
        used=format_gigabytes(used),
    )


def _collect_temperature(provider: SystemMetricsProvider) -> TemperatureInfo:
    """
    Try the sensor probes in priority order and return the first reading.

    Without any reading the value stays 0 with status 'normal', which looks
    the same as a genuinely cold sensor; `sensor` is left unset in that case.
    """
    try:
        output = provider.read_sensors()
    except RuntimeError as exc:
        logger.debug("Could not read temperature: %s", exc)
        output = ""

    reading = first_reading(output)
    if reading is None:
        return TemperatureInfo(value=0.0, status=TemperatureState.NORMAL)

    sensor, value = reading
    return TemperatureInfo(value=value, status=temperature_status(value), sensor=sensor)


def _check_proxy(
    provider: SystemMetricsProvider, service: str
) -> Optional[Tuple[int, str]]:
    """Return None if the proxy service is active, otherwise (errorCode, errorMessage)."""
    try:
        if provider.service_is_active(service):
            logger.debug("%s is running", service)
            return None
    except RuntimeError as exc:
        logger.warning("Could not query %s state: %s", service, exc)

    code, message = _BAD_GATEWAY
    try:
        detail = provider.service_status(service)
    except RuntimeError as exc:
        logger.debug("No status detail for %s: %s", service, exc)
    else:
        if _FAILED_TO_START_PHRASE in detail:
            message = f"Failed to start {service} service"

    logger.warning("%s is not active: %s", service, message)
    return code, message


def get_server_snapshot(
    provider: Optional[SystemMetricsProvider] = None,
    settings: Optional[Settings] = None,
) -> ServerSnapshot:
    """
    Collect CPU, memory, uptime, temperature and reverse proxy health into one
    ServerSnapshot.

    Anticipated failures of single measurements are absorbed into fallback
    values. Anything else is logged and raised as CollectionError so the
    caller never receives a partial snapshot.
    """
    settings = settings or get_settings()
    if provider is None:
        provider = LocalSystemProvider(timeout_seconds=settings.command_timeout_seconds)

    try:
        cpu_usage, cores = _collect_cpu(provider)
        memory = _collect_memory(provider)
        seconds = provider.uptime_seconds()
        temperature = _collect_temperature(provider)
        failure = _check_proxy(provider, settings.proxy_service_name)

        if failure is None:
            status, error_code, error_message = ServerState.ONLINE, None, None
        else:
            status = ServerState.ERROR
            error_code, error_message = failure

        return ServerSnapshot(
            status=status,
            error_code=error_code,
            error_message=error_message,
            uptime=UptimeInfo(
                percentage=uptime_percentage(seconds),
                duration=format_uptime(seconds),
            ),
            cpu=CpuInfo(usage=cpu_usage, cores=cores, temperature=temperature.value),
            memory=memory,
            temperature=temperature,
            timestamp=datetime.now(timezone.utc),
        )
    except Exception as exc:
        logger.exception("Error getting server metrics")
        raise CollectionError(f"Failed to collect server metrics: {exc}") from exc


def degraded_snapshot() -> ServerSnapshot:
    """Zero-valued snapshot returned to clients when collection failed."""
    return ServerSnapshot(
        status=ServerState.ERROR,
        error_code=500,
        error_message="Internal Server Error",
        error="Failed to fetch server status",
        uptime=UptimeInfo(percentage=0, duration="N/A"),
        cpu=CpuInfo(usage=0, cores=0, temperature=0),
        memory=MemoryInfo(usage=0, total="0 GB", used="0 GB"),
        temperature=TemperatureInfo(value=0, status=TemperatureState.NORMAL),
        timestamp=datetime.now(timezone.utc),
    )
