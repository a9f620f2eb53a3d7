"""Pydantic schemas for field sensors, devices, farm context and sync bookkeeping."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import CropEnum, DeviceCommandEnum, DeviceStatusEnum, SensorSourceEnum, SoilEnum


class DevicePayloadIn(BaseModel):
	"""Already-parsed reading as reported by a field controller."""

	device_id: str = Field(min_length=1, max_length=100)
	soil_moisture: float
	temperature: float
	humidity: float | None = None
	timestamp: datetime
	battery_level: float | None = None


class SensorReading(BaseModel):
	model_config = ConfigDict(frozen=True)

	soil_moisture_pct: float = Field(ge=0, le=100)
	temperature: float
	humidity: float | None = None
	battery_level: float | None = None
	timestamp: datetime
	source: SensorSourceEnum
	device_id: str | None = None


class DeviceInfo(BaseModel):
	model_config = ConfigDict(frozen=True)

	device_id: str
	name: str
	status: DeviceStatusEnum
	last_seen: datetime
	battery_level: float | None = None
	firmware_version: str | None = None


class DeviceCreate(BaseModel):
	device_id: str = Field(min_length=1, max_length=100)
	name: str = Field(default="Field sensor", min_length=1, max_length=200)
	battery_level: float | None = Field(default=None, ge=0, le=100)
	firmware_version: str | None = Field(default=None, max_length=50)


class DeviceStatusUpdate(BaseModel):
	status: DeviceStatusEnum


class DeviceCommandRequest(BaseModel):
	command: DeviceCommandEnum
	params: dict[str, Any] = Field(default_factory=dict)


class DeviceCommand(BaseModel):
	"""Queued outbound command. Delivery is never acknowledged."""

	model_config = ConfigDict(frozen=True)

	command_id: uuid.UUID = Field(default_factory=uuid.uuid4)
	device_id: str
	command: DeviceCommandEnum
	params: dict[str, Any] = Field(default_factory=dict)
	queued_at: datetime


class IngestResult(BaseModel):
	accepted: bool
	reading: SensorReading
	device: DeviceInfo
	detail: str | None = None


class FarmContext(BaseModel):
	model_config = ConfigDict(frozen=True)

	crop: CropEnum
	soil: SoilEnum
	sowing_date: date
	plot_size_ha: float = Field(default=1.0, gt=0)
	farm_id: str | None = None


class FarmContextView(BaseModel):
	context: FarmContext
	days_since_sowing: int


class SyncStatus(BaseModel):
	model_config = ConfigDict(frozen=True)

	pending_count: int = Field(default=0, ge=0)
	last_sync_at: datetime | None = None
	last_error: str | None = None


class SyncStatusUpdate(BaseModel):
	pending_count: int | None = Field(default=None, ge=0)
	last_sync_at: datetime | None = None
	last_error: str | None = None
