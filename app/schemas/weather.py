"""Pydantic schemas for weather readings and advisories."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import AdvisoryTypeEnum, SeasonEnum, WeatherSourceEnum
from app.schemas.knowledge import BilingualText


class WeatherReading(BaseModel):
	model_config = ConfigDict(frozen=True)

	temperature: float = Field(ge=-20, le=60)
	humidity: float = Field(default=60.0, ge=0, le=100)
	rainfall_mm: float = Field(default=0.0, ge=0)
	rain_probability_pct: float = Field(default=20.0, ge=0, le=100)
	wind_speed_kmh: float = Field(default=10.0, ge=0)
	cloud_cover_pct: float = Field(default=30.0, ge=0, le=100)
	is_raining: bool = False
	timestamp: datetime
	location: str | None = None


class SeasonalPattern(BaseModel):
	model_config = ConfigDict(frozen=True)

	month: int = Field(ge=1, le=12)
	temp_min: float
	temp_max: float
	humidity: float
	rainfall_mm: float
	rainy_days: int
	season: SeasonEnum


class SeasonInfo(BaseModel):
	season: SeasonEnum
	name: BilingualText
	advice: BilingualText
	suggested_crops: BilingualText


class Advisory(BaseModel):
	type: AdvisoryTypeEnum
	title: BilingualText
	advice: BilingualText
	actions: list[str] = Field(default_factory=list)


class WeatherResult(BaseModel):
	source: WeatherSourceEnum
	data: WeatherReading
	advisory: Advisory
	irrigation_factor: float
	season: SeasonEnum


class WeatherCacheRequest(BaseModel):
	reading: WeatherReading
	farm_key: str = "default"
