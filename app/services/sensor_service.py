"""Field sensor state: latest reading, device registry, farm context and sync status.

All mutable state lives on one ``SensorService`` instance. Every write swaps
in a new immutable snapshot under a lock, so readers always see a complete
value. Liveness and staleness are timestamp comparisons against the injected
clock; nothing runs in the background.
"""

from __future__ import annotations

import math
import threading
from collections.abc import Callable, Mapping
from datetime import UTC, date, datetime, timedelta
from typing import Any

import structlog
from pydantic import ValidationError

from app.config import Settings, get_settings
from app.models.enums import DeviceCommandEnum, DeviceStatusEnum, SensorSourceEnum
from app.schemas.sensors import (
	DeviceCommand,
	DeviceInfo,
	DevicePayloadIn,
	FarmContext,
	IngestResult,
	SensorReading,
	SyncStatus,
)
from app.services.knowledge_base import resolve_crop, resolve_soil

Clock = Callable[[], datetime]

MOISTURE_RANGE = (0.0, 100.0)
TEMPERATURE_RANGE = (-10.0, 60.0)
HUMIDITY_RANGE = (0.0, 100.0)
BATTERY_RANGE = (0.0, 100.0)

_logger = structlog.get_logger("agriguard.sensors")


class SensorValidationError(ValueError):
	"""Device payload is malformed or outside the physically valid range."""


class DeviceNotFoundError(LookupError):
	pass


def _utc(value: datetime) -> datetime:
	return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def _check_range(field: str, value: float | None, bounds: tuple[float, float]) -> None:
	if value is None:
		return
	low, high = bounds
	if math.isnan(value) or not low <= value <= high:
		raise SensorValidationError(f"{field}={value} outside [{low:g}, {high:g}]")


def demo_reading(now: datetime) -> SensorReading:
	"""Deterministic synthetic reading shaped by month and hour of day."""
	hour, month = now.hour, now.month
	if 4 <= month <= 6:
		base_temp = 35.0
	elif month >= 11 or month <= 2:
		base_temp = 18.0
	elif 7 <= month <= 9:
		base_temp = 28.0
	else:
		base_temp = 25.0
	temperature = round(base_temp + math.sin((hour - 6) * math.pi / 12) * 8, 1)
	# Moisture drains through the day from a morning baseline.
	moisture = max(25.0, round(55.0 - hour / 24 * 15, 1))
	humidity = min(95.0, max(30.0, round(75.0 - (temperature - 25.0) * 2, 1)))
	return SensorReading(
		soil_moisture_pct=moisture,
		temperature=temperature,
		humidity=humidity,
		battery_level=85.0,
		timestamp=now,
		source=SensorSourceEnum.demo,
	)


class SensorService:
	def __init__(self, settings: Settings | None = None, clock: Clock | None = None):
		self.settings = settings or get_settings()
		self._clock = clock or (lambda: datetime.now(UTC))
		self._lock = threading.Lock()
		self._reading: SensorReading | None = None
		self._devices: dict[str, DeviceInfo] = {}
		self._outbox: tuple[DeviceCommand, ...] = ()
		self._sync_status = SyncStatus()
		self._farm_context = FarmContext(
			crop=resolve_crop(self.settings.default_crop),
			soil=resolve_soil(self.settings.default_soil),
			sowing_date=self._now().date() - timedelta(days=self.settings.default_days_since_sowing),
			plot_size_ha=self.settings.default_plot_size_ha,
		)

	def _now(self) -> datetime:
		return _utc(self._clock())

	@property
	def liveness(self) -> timedelta:
		return timedelta(minutes=self.settings.sensor_liveness_minutes)

	@property
	def staleness(self) -> timedelta:
		return timedelta(hours=self.settings.sensor_staleness_hours)

	@property
	def max_clock_skew(self) -> timedelta:
		return timedelta(minutes=self.settings.sensor_max_clock_skew_minutes)

	# ── Readings ────────────────────────────────────────────────────────────

	def get_sensor_data(self) -> SensorReading:
		"""Best available reading: live, then cached, then synthetic demo."""
		now = self._now()
		devices = self._refresh_liveness(now)
		with self._lock:
			reading = self._reading

		if reading is not None:
			age = now - reading.timestamp
			device = devices.get(reading.device_id) if reading.device_id else None
			if device is not None and device.status == DeviceStatusEnum.connected and age < self.liveness:
				return reading.model_copy(update={"source": SensorSourceEnum.live})
			# A timestamp ahead of our clock cannot be aged, so it never counts as fresh.
			if age < timedelta(0):
				_logger.warning("sensor_reading_from_future", device_id=reading.device_id, timestamp=reading.timestamp.isoformat())
			elif age < self.staleness:
				return reading.model_copy(update={"source": SensorSourceEnum.cached})

		_logger.debug("sensor_demo_fallback", has_stale_cache=reading is not None)
		return demo_reading(now)

	def on_esp32_message(self, device_id: str, payload: DevicePayloadIn | Mapping[str, Any]) -> IngestResult:
		"""Validate and apply one device message. Older or replayed timestamps are ignored."""
		if not isinstance(payload, DevicePayloadIn):
			try:
				payload = DevicePayloadIn.model_validate({"device_id": device_id, **payload})
			except ValidationError as exc:
				raise SensorValidationError(f"malformed payload from {device_id}: {exc.error_count()} errors") from exc
		if payload.device_id != device_id:
			raise SensorValidationError(f"payload device {payload.device_id!r} does not match {device_id!r}")

		try:
			_check_range("soil_moisture", payload.soil_moisture, MOISTURE_RANGE)
			_check_range("temperature", payload.temperature, TEMPERATURE_RANGE)
			_check_range("humidity", payload.humidity, HUMIDITY_RANGE)
			_check_range("battery_level", payload.battery_level, BATTERY_RANGE)
			now = self._now()
			timestamp = _utc(payload.timestamp)
			if timestamp > now + self.max_clock_skew:
				raise SensorValidationError(f"timestamp {timestamp.isoformat()} is ahead of server time {now.isoformat()}")
		except SensorValidationError as exc:
			_logger.warning("sensor_message_rejected", device_id=device_id, error=str(exc))
			raise

		with self._lock:
			current = self._reading
			previous = self._devices.get(device_id)
			ignored = current is not None and timestamp <= current.timestamp
			if not ignored:
				current = SensorReading(
					soil_moisture_pct=payload.soil_moisture,
					temperature=payload.temperature,
					humidity=payload.humidity,
					battery_level=payload.battery_level,
					timestamp=timestamp,
					source=SensorSourceEnum.live,
					device_id=device_id,
				)
				self._reading = current
			# Any message is contact from the device, even one carrying an old reading.
			device = DeviceInfo(
				device_id=device_id,
				name=previous.name if previous else device_id,
				status=DeviceStatusEnum.connected,
				last_seen=now,
				battery_level=payload.battery_level if payload.battery_level is not None and not ignored else (previous.battery_level if previous else None),
				firmware_version=previous.firmware_version if previous else None,
			)
			self._devices = {**self._devices, device_id: device}

		if ignored:
			_logger.info("sensor_message_ignored", device_id=device_id, timestamp=timestamp.isoformat())
			return IngestResult(accepted=False, reading=current, device=device, detail="reading is not newer than the cached one")

		_logger.info(
			"sensor_message_accepted",
			device_id=device_id,
			moisture=payload.soil_moisture,
			temperature=payload.temperature,
		)
		return IngestResult(accepted=True, reading=current, device=device)

	# ── Devices ─────────────────────────────────────────────────────────────

	def add_connected_device(
		self,
		device_id: str,
		name: str | None = None,
		battery_level: float | None = None,
		firmware_version: str | None = None,
	) -> DeviceInfo:
		device = DeviceInfo(
			device_id=device_id,
			name=name or device_id,
			status=DeviceStatusEnum.connected,
			last_seen=self._now(),
			battery_level=battery_level,
			firmware_version=firmware_version,
		)
		with self._lock:
			self._devices = {**self._devices, device_id: device}
		_logger.info("device_added", device_id=device_id)
		return device

	def update_device_status(self, device_id: str, status: DeviceStatusEnum | str) -> DeviceInfo:
		status = DeviceStatusEnum(status)
		with self._lock:
			current = self._devices.get(device_id)
			if current is None:
				raise DeviceNotFoundError(f"device not found: {device_id}")
			updated = current.model_copy(update={"status": status, "last_seen": self._now()})
			self._devices = {**self._devices, device_id: updated}
		_logger.info("device_status_changed", device_id=device_id, status=status.value)
		return updated

	def remove_device(self, device_id: str) -> None:
		with self._lock:
			if device_id not in self._devices:
				raise DeviceNotFoundError(f"device not found: {device_id}")
			self._devices = {key: value for key, value in self._devices.items() if key != device_id}
			self._outbox = tuple(item for item in self._outbox if item.device_id != device_id)
		_logger.info("device_removed", device_id=device_id)

	def get_connected_devices(self) -> list[DeviceInfo]:
		return list(self._refresh_liveness(self._now()).values())

	def get_device(self, device_id: str) -> DeviceInfo:
		device = self._refresh_liveness(self._now()).get(device_id)
		if device is None:
			raise DeviceNotFoundError(f"device not found: {device_id}")
		return device

	def _refresh_liveness(self, now: datetime) -> dict[str, DeviceInfo]:
		with self._lock:
			expired = [
				device
				for device in self._devices.values()
				if device.status == DeviceStatusEnum.connected and now - device.last_seen > self.liveness
			]
			if expired:
				updated = dict(self._devices)
				for device in expired:
					updated[device.device_id] = device.model_copy(update={"status": DeviceStatusEnum.disconnected})
				self._devices = updated
			devices = self._devices
		for device in expired:
			_logger.info("device_disconnected", device_id=device.device_id, last_seen=device.last_seen.isoformat())
		return devices

	# ── Commands ────────────────────────────────────────────────────────────

	def send_command_to_esp32(
		self,
		device_id: str,
		command: DeviceCommandEnum | str,
		params: Mapping[str, Any] | None = None,
	) -> DeviceCommand:
		"""Queue a command for the device. No delivery acknowledgement is tracked."""
		try:
			command = DeviceCommandEnum(command)
		except ValueError:
			raise ValueError(f"unsupported device command: {command}") from None
		device = self.get_device(device_id)
		queued = DeviceCommand(device_id=device_id, command=command, params=dict(params or {}), queued_at=self._now())
		with self._lock:
			self._outbox = self._prune_outbox((*self._outbox, queued), queued.queued_at)
		if device.status != DeviceStatusEnum.connected:
			_logger.warning("command_queued_for_offline_device", device_id=device_id, command=command.value)
		else:
			_logger.info("command_queued", device_id=device_id, command=command.value)
		return queued

	def get_pending_commands(self, device_id: str | None = None) -> list[DeviceCommand]:
		now = self._now()
		with self._lock:
			outbox = self._outbox = self._prune_outbox(self._outbox, now)
		return [item for item in outbox if device_id is None or item.device_id == device_id]

	def _prune_outbox(self, outbox: tuple[DeviceCommand, ...], now: datetime) -> tuple[DeviceCommand, ...]:
		"""Drop commands past their time-to-live, then keep only the newest up to the limit. Caller holds the lock."""
		cutoff = now - timedelta(minutes=self.settings.command_ttl_minutes)
		live = tuple(item for item in outbox if item.queued_at >= cutoff)
		limit = self.settings.command_outbox_limit
		kept = live[-limit:] if limit > 0 else ()
		if len(kept) < len(outbox):
			_logger.info("command_outbox_pruned", dropped=len(outbox) - len(kept), remaining=len(kept))
		return kept

	# ── Sync status ─────────────────────────────────────────────────────────

	def get_sync_status(self) -> SyncStatus:
		with self._lock:
			return self._sync_status

	def update_sync_status(self, **changes: Any) -> SyncStatus:
		unknown = set(changes) - set(SyncStatus.model_fields)
		if unknown:
			raise ValueError(f"unknown sync status fields: {sorted(unknown)}")
		with self._lock:
			updated = SyncStatus.model_validate({**self._sync_status.model_dump(), **changes})
			self._sync_status = updated
		return updated

	# ── Farm context ────────────────────────────────────────────────────────

	def get_farm_context(self) -> FarmContext:
		with self._lock:
			return self._farm_context

	def set_farm_context(self, context: FarmContext) -> FarmContext:
		with self._lock:
			self._farm_context = context
		_logger.info("farm_context_set", crop=context.crop.value, soil=context.soil.value, farm_id=context.farm_id)
		return context

	def days_since_sowing(self, context: FarmContext | None = None, today: date | None = None) -> int:
		context = context or self.get_farm_context()
		today = today or self._now().date()
		return max(0, (today - context.sowing_date).days)
