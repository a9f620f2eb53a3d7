from __future__ import annotations

from datetime import date, timedelta

import pytest

from app.models.enums import CropEnum, DeviceCommandEnum, DeviceStatusEnum, SensorSourceEnum, SoilEnum
from app.config import Settings
from app.schemas.sensors import FarmContext
from app.services.sensor_service import DeviceNotFoundError, SensorService, SensorValidationError, demo_reading


def _payload(clock, **overrides: object) -> dict[str, object]:
    values: dict[str, object] = {
        "soil_moisture": 42.0,
        "temperature": 31.5,
        "humidity": 55.0,
        "battery_level": 90.0,
        "timestamp": clock().isoformat(),
    }
    values.update(overrides)
    return values


def test_demo_reading_when_nothing_received(sensor_service: SensorService, clock) -> None:
    first = sensor_service.get_sensor_data()
    assert first.source == SensorSourceEnum.demo
    assert first == demo_reading(clock())
    assert 25.0 <= first.soil_moisture_pct <= 55.0


def test_fallback_order_live_cached_demo(sensor_service: SensorService, clock) -> None:
    result = sensor_service.on_esp32_message("esp-1", _payload(clock))
    assert result.accepted is True
    assert sensor_service.get_sensor_data().source == SensorSourceEnum.live

    clock.advance(minutes=6)
    cached = sensor_service.get_sensor_data()
    assert cached.source == SensorSourceEnum.cached
    assert cached.soil_moisture_pct == 42.0
    assert sensor_service.get_device("esp-1").status == DeviceStatusEnum.disconnected

    clock.advance(hours=6)
    assert sensor_service.get_sensor_data().source == SensorSourceEnum.demo


def test_replayed_or_older_messages_are_ignored(sensor_service: SensorService, clock) -> None:
    sensor_service.on_esp32_message("esp-1", _payload(clock))

    replay = sensor_service.on_esp32_message("esp-1", _payload(clock, soil_moisture=10.0))
    assert replay.accepted is False
    assert replay.reading.soil_moisture_pct == 42.0

    older = (clock() - timedelta(minutes=1)).isoformat()
    assert sensor_service.on_esp32_message("esp-2", _payload(clock, timestamp=older)).accepted is False
    assert sensor_service.get_sensor_data().soil_moisture_pct == 42.0


def test_replay_from_unknown_device_registers_it(sensor_service: SensorService, clock) -> None:
    sensor_service.on_esp32_message("esp-1", _payload(clock))
    older = (clock() - timedelta(minutes=1)).isoformat()

    result = sensor_service.on_esp32_message("esp-2", _payload(clock, timestamp=older, battery_level=12.0))

    assert result.accepted is False
    registered = sensor_service.get_device("esp-2")
    assert registered == result.device
    assert registered.status == DeviceStatusEnum.connected
    assert registered.last_seen == clock()
    assert registered.battery_level is None


def test_far_future_timestamp_rejected(sensor_service: SensorService, clock) -> None:
    next_year = (clock() + timedelta(days=365)).isoformat()
    with pytest.raises(SensorValidationError, match="ahead of server time"):
        sensor_service.on_esp32_message("esp-1", _payload(clock, timestamp=next_year, soil_moisture=90.0))

    result = sensor_service.on_esp32_message("esp-1", _payload(clock))
    assert result.accepted is True
    reading = sensor_service.get_sensor_data()
    assert reading.source == SensorSourceEnum.live
    assert reading.soil_moisture_pct == 42.0


def test_small_clock_skew_tolerated(sensor_service: SensorService, clock) -> None:
    ahead = (clock() + timedelta(minutes=3)).isoformat()
    assert sensor_service.on_esp32_message("esp-1", _payload(clock, timestamp=ahead)).accepted is True


def test_reading_ahead_of_clock_is_never_cached(clock) -> None:
    lenient = Settings(_env_file=None, sensor_max_clock_skew_minutes=24 * 60)
    service = SensorService(settings=lenient, clock=clock)
    ahead = (clock() + timedelta(hours=10)).isoformat()
    service.on_esp32_message("esp-1", _payload(clock, timestamp=ahead))
    service.update_device_status("esp-1", "disconnected")

    assert service.get_sensor_data().source == SensorSourceEnum.demo


def test_newer_message_replaces_reading(sensor_service: SensorService, clock) -> None:
    sensor_service.on_esp32_message("esp-1", _payload(clock))
    clock.advance(seconds=30)
    result = sensor_service.on_esp32_message("esp-1", _payload(clock, soil_moisture=38.5))
    assert result.accepted is True
    assert sensor_service.get_sensor_data().soil_moisture_pct == 38.5


@pytest.mark.parametrize(
    "overrides",
    [
        {"soil_moisture": 120.0},
        {"soil_moisture": -1.0},
        {"temperature": -20.0},
        {"temperature": 75.0},
        {"humidity": 101.0},
        {"battery_level": -5.0},
    ],
)
def test_out_of_range_values_rejected(sensor_service: SensorService, clock, overrides: dict[str, object]) -> None:
    with pytest.raises(SensorValidationError):
        sensor_service.on_esp32_message("esp-1", _payload(clock, **overrides))
    assert sensor_service.get_sensor_data().source == SensorSourceEnum.demo


def test_malformed_payload_rejected(sensor_service: SensorService, clock) -> None:
    payload = _payload(clock)
    del payload["temperature"]
    with pytest.raises(ValueError):
        sensor_service.on_esp32_message("esp-1", payload)

    with pytest.raises(SensorValidationError, match="does not match"):
        sensor_service.on_esp32_message("esp-1", {**_payload(clock), "device_id": "esp-9"})


def test_device_registry_lifecycle(sensor_service: SensorService) -> None:
    device = sensor_service.add_connected_device("esp-1", name="North field", firmware_version="1.2.0")
    assert device.status == DeviceStatusEnum.connected
    assert [d.device_id for d in sensor_service.get_connected_devices()] == ["esp-1"]

    updated = sensor_service.update_device_status("esp-1", "error")
    assert updated.status == DeviceStatusEnum.error
    assert updated.name == "North field"

    sensor_service.remove_device("esp-1")
    assert sensor_service.get_connected_devices() == []

    with pytest.raises(DeviceNotFoundError):
        sensor_service.remove_device("esp-1")
    with pytest.raises(LookupError):
        sensor_service.update_device_status("ghost", "connected")


def test_ingest_keeps_registered_device_metadata(sensor_service: SensorService, clock) -> None:
    sensor_service.add_connected_device("esp-1", name="North field", firmware_version="1.2.0")
    clock.advance(minutes=10)
    assert sensor_service.get_device("esp-1").status == DeviceStatusEnum.disconnected

    result = sensor_service.on_esp32_message("esp-1", _payload(clock))
    assert result.device.status == DeviceStatusEnum.connected
    assert result.device.name == "North field"
    assert result.device.firmware_version == "1.2.0"
    assert result.device.battery_level == 90.0


def test_commands_are_queued(sensor_service: SensorService, clock) -> None:
    with pytest.raises(DeviceNotFoundError):
        sensor_service.send_command_to_esp32("esp-1", "start_irrigation")

    sensor_service.add_connected_device("esp-1")
    sensor_service.add_connected_device("esp-2")
    first = sensor_service.send_command_to_esp32("esp-1", DeviceCommandEnum.start_irrigation, {"duration_min": 20})
    clock.advance(minutes=30)
    sensor_service.send_command_to_esp32("esp-2", "get_status")

    assert first.params == {"duration_min": 20}
    assert [c.device_id for c in sensor_service.get_pending_commands()] == ["esp-1", "esp-2"]
    assert sensor_service.get_pending_commands("esp-1") == [first]

    with pytest.raises(ValueError, match="unsupported"):
        sensor_service.send_command_to_esp32("esp-1", "self_destruct")


def test_outbox_is_capped(clock) -> None:
    service = SensorService(settings=Settings(_env_file=None, command_outbox_limit=10), clock=clock)
    service.add_connected_device("esp-1")
    for seq in range(50):
        service.send_command_to_esp32("esp-1", "get_status", {"seq": seq})

    pending = service.get_pending_commands()
    assert len(pending) == 10
    assert [c.params["seq"] for c in pending] == list(range(40, 50))


def test_outbox_expires_old_commands(sensor_service: SensorService, clock) -> None:
    sensor_service.add_connected_device("esp-1")
    sensor_service.send_command_to_esp32("esp-1", "start_irrigation")
    clock.advance(minutes=45)
    fresh = sensor_service.send_command_to_esp32("esp-1", "stop_irrigation")

    clock.advance(minutes=20)
    assert sensor_service.get_pending_commands("esp-1") == [fresh]

    clock.advance(minutes=60)
    assert sensor_service.get_pending_commands() == []


def test_removing_device_drops_its_commands(sensor_service: SensorService) -> None:
    sensor_service.add_connected_device("esp-1")
    sensor_service.add_connected_device("esp-2")
    sensor_service.send_command_to_esp32("esp-1", "get_status")
    kept = sensor_service.send_command_to_esp32("esp-2", "get_status")

    sensor_service.remove_device("esp-1")

    assert sensor_service.get_pending_commands() == [kept]


def test_sync_status_updates(sensor_service: SensorService, clock) -> None:
    assert sensor_service.get_sync_status().pending_count == 0

    status = sensor_service.update_sync_status(pending_count=3, last_sync_at=clock())
    assert status.pending_count == 3
    assert sensor_service.get_sync_status() == status

    with pytest.raises(ValueError):
        sensor_service.update_sync_status(bogus=1)


def test_default_farm_context(sensor_service: SensorService) -> None:
    context = sensor_service.get_farm_context()
    assert context.crop == CropEnum.wheat
    assert context.soil == SoilEnum.loamy
    assert sensor_service.days_since_sowing() == 45


def test_set_farm_context(sensor_service: SensorService) -> None:
    context = FarmContext(crop="cotton", soil="black", sowing_date=date(2025, 3, 1), plot_size_ha=2.5, farm_id="f-7")
    sensor_service.set_farm_context(context)

    assert sensor_service.get_farm_context() == context
    assert sensor_service.days_since_sowing() == 45
    assert sensor_service.days_since_sowing(today=date(2025, 2, 1)) == 0
