from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from app.models.server import TemperatureState

_CRITICAL_TEMP_C = 80.0
_WARNING_TEMP_C = 70.0


def parse_temperature(raw: str) -> float:
    """
    Parse a raw sensor reading such as '+45.0°C' into a float.

    A trailing degree marker and a leading '+' are stripped; ValueError is
    raised for anything that is not a number afterwards.
    """
    value = raw.strip()
    for suffix in ("°C", "C", "°"):
        if value.endswith(suffix):
            value = value[: -len(suffix)]
            break
    return float(value.lstrip("+"))


def temperature_status(value: float) -> TemperatureState:
    if value > _CRITICAL_TEMP_C:
        return TemperatureState.CRITICAL
    if value > _WARNING_TEMP_C:
        return TemperatureState.WARNING
    return TemperatureState.NORMAL


@dataclass(frozen=True)
class SensorProbe:
    """
    One temperature source inside the `sensors` output.

    The probe looks for the first line containing `label` and takes the
    whitespace-separated field at `field_index` as the reading.
    """

    name: str
    label: str
    field_index: int

    def read(self, sensors_output: str) -> Optional[float]:
        for line in sensors_output.splitlines():
            if self.label not in line:
                continue
            fields = line.split()
            try:
                return parse_temperature(fields[self.field_index])
            except (IndexError, ValueError):
                return None
        return None


# Priority order: CPU package, first core, NVMe composite, generic first sensor
SENSOR_PROBES: Tuple[SensorProbe, ...] = (
    SensorProbe(name="cpu_package", label="Package id 0", field_index=3),
    SensorProbe(name="cpu_core", label="Core 0", field_index=2),
    SensorProbe(name="nvme_composite", label="Composite", field_index=1),
    SensorProbe(name="generic", label="temp1", field_index=1),
)


def first_reading(
    sensors_output: str,
    probes: Sequence[SensorProbe] = SENSOR_PROBES,
) -> Optional[Tuple[str, float]]:
    """Return (probe name, value) of the first probe with a reading, or None."""
    for probe in probes:
        value = probe.read(sensors_output)
        if value is not None:
            return probe.name, value
    return None
