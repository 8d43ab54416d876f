from datetime import datetime, timezone

from fastapi.testclient import TestClient

from app.main import app
from app.models.server import (
    CpuInfo,
    MemoryInfo,
    ServerSnapshot,
    ServerState,
    TemperatureInfo,
    TemperatureState,
    UptimeInfo,
)
from app.services import server_monitor

client = TestClient(app)


def _snapshot(**overrides):
    values = dict(
        status=ServerState.ONLINE,
        uptime=UptimeInfo(percentage=42, duration="12d 3h 7m"),
        cpu=CpuInfo(usage=25, cores=8, temperature=55.0),
        memory=MemoryInfo(usage=50, total="8.0 GB", used="4.0 GB"),
        temperature=TemperatureInfo(
            value=55.0, status=TemperatureState.NORMAL, sensor="cpu_package"
        ),
        timestamp=datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return ServerSnapshot(**values)


def test_server_status_endpoint_structure(monkeypatch):
    monkeypatch.setattr(server_monitor, "get_server_snapshot", lambda: _snapshot())

    response = client.get("/api/server-status")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "online"
    assert "errorCode" not in data
    assert "errorMessage" not in data
    assert data["uptime"] == {"percentage": 42, "duration": "12d 3h 7m"}
    assert data["cpu"] == {"usage": 25, "cores": 8, "temperature": 55.0}
    assert data["memory"] == {"usage": 50, "total": "8.0 GB", "used": "4.0 GB"}
    assert data["temperature"]["value"] == 55.0
    assert data["temperature"]["status"] == "normal"
    assert data["temperature"]["sensor"] == "cpu_package"
    assert data["timestamp"].startswith("2026-10-18T12:00:00")


def test_server_status_endpoint_error_fields_use_camel_case(monkeypatch):
    snapshot = _snapshot(
        status=ServerState.ERROR, error_code=502, error_message="Bad Gateway"
    )
    monkeypatch.setattr(server_monitor, "get_server_snapshot", lambda: snapshot)

    response = client.get("/api/server-status")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "error"
    assert data["errorCode"] == 502
    assert data["errorMessage"] == "Bad Gateway"


def test_server_status_endpoint_collector_failure_maps_to_500(monkeypatch):
    def fake_get_server_snapshot():
        raise server_monitor.CollectionError("boom")

    monkeypatch.setattr(server_monitor, "get_server_snapshot", fake_get_server_snapshot)

    response = client.get("/api/server-status")
    assert response.status_code == 500

    data = response.json()
    assert data["status"] == "error"
    assert data["errorCode"] == 500
    assert data["errorMessage"] == "Internal Server Error"
    assert data["error"] == "Failed to fetch server status"
    assert data["uptime"] == {"percentage": 0, "duration": "N/A"}
    assert data["cpu"] == {"usage": 0, "cores": 0, "temperature": 0}
    assert data["memory"] == {"usage": 0, "total": "0 GB", "used": "0 GB"}
    assert data["temperature"] == {"value": 0, "status": "normal"}

    parsed = datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00"))
    assert parsed.tzinfo is not None


def test_health_endpoint():
    response = client.get("/health/")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
