import abc
import logging
import subprocess
import time
from pathlib import Path
from typing import List, Tuple

import psutil

logger = logging.getLogger(__name__)

_LOADAVG_PATH = Path("/proc/loadavg")


def run_command(
    args: List[str],
    timeout_seconds: float,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """
    Run an external command and return the completed process.

    Output is decoded as UTF-8 with undecodable bytes replaced. Raises
    RuntimeError if the binary is missing or cannot be executed, the command
    does not finish within timeout_seconds or (with check=True) exits with a
    non-zero code.
    """
    try:
        return subprocess.run(
            args,
            check=check,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout_seconds,
        )
    except FileNotFoundError as exc:
        raise RuntimeError(f"{args[0]} binary not found on host system") from exc
    except OSError as exc:
        raise RuntimeError(f"{args[0]} could not be executed: {exc}") from exc
    except subprocess.TimeoutExpired as exc:
        raise RuntimeError(
            f"{args[0]} did not finish within {timeout_seconds} seconds"
        ) from exc
    except subprocess.CalledProcessError as exc:
        raise RuntimeError(
            f"{' '.join(args)} failed with return code {exc.returncode}: {exc.stderr}"
        ) from exc


class SystemMetricsProvider(abc.ABC):
    """
    Source of the raw numbers the server monitor works with.

    Implementations only fetch values; clamping, formatting and thresholds
    live in app.services.server_monitor.
    """

    @abc.abstractmethod
    def cpu_count(self) -> int:
        ...

    @abc.abstractmethod
    def load_average(self) -> float:
        """1-minute load average; raises OSError/ValueError if unavailable."""

    @abc.abstractmethod
    def fallback_load_average(self) -> float:
        ...

    @abc.abstractmethod
    def memory(self) -> Tuple[int, int]:
        """(total, free) physical memory in bytes."""

    @abc.abstractmethod
    def uptime_seconds(self) -> float:
        ...

    @abc.abstractmethod
    def read_sensors(self) -> str:
        """Raw text output of the hardware sensor tool; RuntimeError on failure."""

    @abc.abstractmethod
    def service_is_active(self, name: str) -> bool:
        """True if the service is running; RuntimeError if the query fails."""

    @abc.abstractmethod
    def service_status(self, name: str) -> str:
        """Free-text status detail of the service; RuntimeError on failure."""


class LocalSystemProvider(SystemMetricsProvider):
    """
    Provider for the local Linux host.

    Uses psutil for cores/memory/boot time, /proc/loadavg for the load average
    and the `sensors` (lm-sensors) and `systemctl` binaries for temperatures
    and service state.
    """

    def __init__(self, timeout_seconds: float = 5.0) -> None:
        self.timeout_seconds = timeout_seconds

    def cpu_count(self) -> int:
        return psutil.cpu_count(logical=True) or 1

    def load_average(self) -> float:
        content = _LOADAVG_PATH.read_text(encoding="utf-8")
        return float(content.split()[0])

    def fallback_load_average(self) -> float:
        return psutil.getloadavg()[0]

    def memory(self) -> Tuple[int, int]:
        vm = psutil.virtual_memory()
        return int(vm.total), int(vm.available)

    def uptime_seconds(self) -> float:
        return max(0.0, time.time() - psutil.boot_time())

    def read_sensors(self) -> str:
        # sensors exits non-zero when a single chip fails, the other readings are still valid
        return run_command(["sensors"], self.timeout_seconds, check=False).stdout

    def service_is_active(self, name: str) -> bool:
        # check=False: a non-zero exit code just means "not active"
        result = run_command(
            ["systemctl", "is-active", "--quiet", name],
            self.timeout_seconds,
            check=False,
        )
        return result.returncode == 0

    def service_status(self, name: str) -> str:
        # systemctl status exits non-zero for stopped units, the text is still valid
        result = run_command(
            ["systemctl", "status", name, "--no-pager"],
            self.timeout_seconds,
            check=False,
        )
        return result.stdout
